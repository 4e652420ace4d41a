# auth_service/errors.py
from fastapi import status


class ApiError(Exception):
    """A failure the client should see as ``{"message": ..., **extra}``."""

    def __init__(self, status_code, message, **extra):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.extra = extra

    def to_dict(self):
        return {"message": self.message, **self.extra}


def bad_request(message, **extra):
    return ApiError(status.HTTP_400_BAD_REQUEST, message, **extra)


def unauthorized(message, **extra):
    return ApiError(status.HTTP_401_UNAUTHORIZED, message, **extra)


def forbidden(message, **extra):
    return ApiError(status.HTTP_403_FORBIDDEN, message, **extra)


def not_found(message, **extra):
    return ApiError(status.HTTP_404_NOT_FOUND, message, **extra)


class EmailDeliveryError(Exception):
    pass
