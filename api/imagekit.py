# api/imagekit.py
"""ImageKit image host, injected into the upload routes via ``app.state``."""
import base64

from imagekitio import ImageKit
from imagekitio.models.UploadFileRequestOptions import UploadFileRequestOptions


class ImageKitClient:
    def __init__(self, public_key, private_key, url_endpoint, sdk=None):
        self.sdk = sdk or ImageKit(
            private_key=private_key,
            public_key=public_key,
            url_endpoint=url_endpoint,
        )

    @classmethod
    def from_config(cls, config):
        return cls(
            public_key=config.IMAGEKIT_PUBLIC_KEY,
            private_key=config.IMAGEKIT_PRIVATE_KEY,
            url_endpoint=config.IMAGEKIT_URL_ENDPOINT,
        )

    def upload(self, data, file_name, folder="/", use_unique_file_name=True):
        """Upload raw bytes and return ImageKit's response body (camelCase keys)."""
        result = self.sdk.upload_file(
            file=base64.b64encode(data),
            file_name=file_name,
            options=UploadFileRequestOptions(folder=folder, use_unique_file_name=use_unique_file_name),
        )
        return result.response_metadata.raw

    def delete(self, file_id):
        self.sdk.delete_file(file_id=file_id)

    def authentication_parameters(self, token=None, expire=None):
        """Signature parameters letting a browser upload directly to ImageKit."""
        return self.sdk.get_authentication_parameters(token=token or "", expire=expire or 0)
