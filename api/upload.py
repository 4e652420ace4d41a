# api/upload.py
import asyncio
import logging
import os
import re
import time
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from auth_service.errors import ApiError, bad_request
from auth_service.security import get_current_user

logger = logging.getLogger(__name__)

upload_router = APIRouter(prefix="/upload", tags=["Upload"], dependencies=[Depends(get_current_user)])

ALLOWED_TYPES = re.compile(r"jpeg|jpg|png|gif|webp")


def get_image_host(request: Request):
    image_host = request.app.state.image_host
    if image_host is None:
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "ImageKit is not configured")
    return image_host


def is_allowed_image(filename, content_type):
    extension = os.path.splitext(filename or "")[1].lower()
    return bool(ALLOWED_TYPES.search(extension) and ALLOWED_TYPES.search(content_type or ""))


@upload_router.get("/auth")
def get_auth_parameters(image_host=Depends(get_image_host)):
    return image_host.authentication_parameters()


@upload_router.post("/image")
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    folder: str = Form("/avatars"),
    image_host=Depends(get_image_host),
):
    if image is None or not image.filename:
        raise bad_request("Please provide an image file")
    if not is_allowed_image(image.filename, image.content_type):
        raise bad_request("Only image files are allowed (jpeg, jpg, png, gif, webp)")

    max_bytes = request.app.state.config.MAX_UPLOAD_BYTES
    data = await image.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise bad_request(f"Image must be at most {max_bytes // (1024 * 1024)}MB")

    file_name = f"{int(time.time() * 1000)}_{image.filename}"
    result = await asyncio.to_thread(image_host.upload, data, file_name, folder or "/avatars")
    logger.info("Uploaded %s to %s", result.get("name"), result.get("filePath"))

    return {
        "message": "Image uploaded successfully",
        "url": result.get("url"),
        "fileId": result.get("fileId"),
        "name": result.get("name"),
        "size": result.get("size"),
        "filePath": result.get("filePath"),
        "thumbnailUrl": result.get("thumbnailUrl"),
    }


@upload_router.delete("/{file_id}")
async def delete_image(file_id: str, image_host=Depends(get_image_host)):
    await asyncio.to_thread(image_host.delete, file_id)
    return {"message": "Image deleted successfully"}
