# config.py - environment driven settings, tune through .env
import os

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(RuntimeError):
    pass


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Security
    AUTH_SECRET_KEY = os.environ.get("AUTH_SECRET_KEY")
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 30))
    OTP_EXPIRE_MINUTES = int(os.environ.get("OTP_EXPIRE_MINUTES", 10))
    MIN_PASSWORD_LENGTH = 6

    # Database (SQLite fallback when DATABASE_URL is missing)
    DATABASE_URL = os.environ.get("DATABASE_URL") or "sqlite:///./db/shop.db"

    # SendGrid
    SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY")
    MAIL_FROM_EMAIL = os.environ.get("MAIL_FROM_EMAIL")
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")

    # ImageKit
    IMAGEKIT_PUBLIC_KEY = os.environ.get("IMAGEKIT_PUBLIC_KEY")
    IMAGEKIT_PRIVATE_KEY = os.environ.get("IMAGEKIT_PRIVATE_KEY")
    IMAGEKIT_URL_ENDPOINT = os.environ.get("IMAGEKIT_URL_ENDPOINT")
    MAX_UPLOAD_BYTES = 5 * 1024 * 1024

    # Web push
    VAPID_PUBLIC_KEY = os.environ.get("VAPID_PUBLIC_KEY")
    VAPID_PRIVATE_KEY = os.environ.get("VAPID_PRIVATE_KEY")
    VAPID_SUBJECT = os.environ.get("VAPID_SUBJECT", "mailto:admin@example.com")

    # HTTP
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
        if origin.strip()
    ]
    AUTH_RATE_LIMIT = os.environ.get("AUTH_RATE_LIMIT", "5/15minutes")
    API_RATE_LIMIT = os.environ.get("API_RATE_LIMIT", "100/15minutes")
    RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", True)

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TIMEZONE = os.environ.get("LOG_TIMEZONE", "UTC")

    @classmethod
    def validate(cls):
        if not cls.AUTH_SECRET_KEY:
            raise ConfigurationError(
                "AUTH_SECRET_KEY is not set. Please configure it in the environment."
            )
        if cls.OTP_EXPIRE_MINUTES <= 0 or cls.ACCESS_TOKEN_EXPIRE_MINUTES <= 0:
            raise ConfigurationError("Token and OTP lifetimes must be positive.")

    @classmethod
    def email_enabled(cls):
        return bool(cls.SENDGRID_API_KEY and cls.MAIL_FROM_EMAIL)

    @classmethod
    def imagekit_enabled(cls):
        return bool(cls.IMAGEKIT_PRIVATE_KEY and cls.IMAGEKIT_PUBLIC_KEY and cls.IMAGEKIT_URL_ENDPOINT)

    @classmethod
    def push_enabled(cls):
        return bool(cls.VAPID_PUBLIC_KEY and cls.VAPID_PRIVATE_KEY)
