# api/main.py
import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth_service.database import create_session_factory
from auth_service.emailer import EmailSender
from auth_service.errors import ApiError
from auth_service.ratelimit import RateLimiter, api_rate_limit, auth_rate_limit
from auth_service.routes import auth_router
from config import Config
from logging_config import setup_logging

from .admin import admin_router
from .examples import example_router
from .imagekit import ImageKitClient
from .products import product_router
from .profile import profile_router
from .push import PushNotifier, push_router
from .upload import upload_router

logger = logging.getLogger(__name__)

def _field_name(loc):
    # ("body", "email") -> "email"; ("query", "page") -> "page"
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "form")]
    return ".".join(parts)

def validation_message(errors):
    missing = []
    other = []
    for error in errors:
        field = _field_name(error.get("loc", ()))
        if error.get("type") in ("missing", "string_too_short") and field:
            missing.append(field)
        else:
            other.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))

    if missing:
        return "Please provide all required fields: " + ", ".join(missing)
    return "; ".join(other) or "Invalid request"

def register_error_handlers(app: FastAPI):
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": validation_message(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(exc)},
        )

def create_app(config_class=Config):
    config_class.validate()
    setup_logging(config_class.LOG_LEVEL, config_class.LOG_TIMEZONE)

    app = FastAPI(title="Storefront Auth Service")
    app.state.config = config_class
    app.state.session_factory = create_session_factory(config_class.DATABASE_URL)

    # External collaborators, built once per application
    app.state.email_sender = EmailSender.from_config(config_class)
    if not config_class.email_enabled():
        logger.warning("⚠️ SendGrid not configured, emails will only be logged.")

    app.state.image_host = None
    if config_class.imagekit_enabled():
        app.state.image_host = ImageKitClient.from_config(config_class)
    else:
        logger.warning("⚠️ ImageKit not configured, upload routes are disabled.")

    app.state.push_notifier = None
    if config_class.push_enabled():
        app.state.push_notifier = PushNotifier.from_config(config_class)
    else:
        logger.error("VAPID keys are missing! Push notifications are disabled.")

    app.state.rate_limiter = RateLimiter.from_config(config_class)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config_class.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the API"}

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "message": "FastAPI backend is running"}

    app.include_router(auth_router, dependencies=[Depends(auth_rate_limit)])
    for router in (profile_router, product_router, example_router, admin_router, upload_router, push_router):
        app.include_router(router, dependencies=[Depends(api_rate_limit)])

    logger.info("✅ Application ready (database: %s)", config_class.DATABASE_URL.split("://", 1)[0])
    return app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:create_app", factory=True, host="127.0.0.1", port=8000, reload=True)
