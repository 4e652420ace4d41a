# auth_service/otp.py
"""One-time code lifecycle shared by email verification and password reset.

A user record carries two independent slots, one per ``PendingAction``.
Issuing a code overwrites whatever sat in that slot; validating a code
clears the slot only on success, so a wrong guess leaves the live code and
its expiry untouched.
"""
import enum
import secrets
from datetime import timedelta

from fastapi import status

from config import Config

from .database import utcnow
from .errors import ApiError

OTP_MIN = 100000
OTP_MAX = 999999


class PendingAction(enum.Enum):
    VERIFICATION = ("otp", "otp_expiry")
    PASSWORD_RESET = ("reset_password_token", "reset_password_expiry")

    @property
    def code_field(self):
        return self.value[0]

    @property
    def expiry_field(self):
        return self.value[1]


class OTPError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "OTP error"

    def __init__(self, message=None):
        super().__init__(self.status_code, message or self.message)


class UserNotFound(OTPError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class AlreadyVerified(OTPError):
    message = "Email already verified"


class InvalidCode(OTPError):
    message = "Invalid OTP"


class Expired(OTPError):
    message = "OTP has expired"


def generate_otp():
    # Uniform over [100000, 999999]
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def issue_code(user, action, expire_minutes=None, now=None):
    """Store a fresh code for ``action`` on ``user`` and return it.

    ``expire_minutes`` defaults to ``Config.OTP_EXPIRE_MINUTES``.

    The caller commits the session.
    """
    now = now or utcnow()
    if expire_minutes is None:
        expire_minutes = Config.OTP_EXPIRE_MINUTES
    code = generate_otp()
    setattr(user, action.code_field, code)
    setattr(user, action.expiry_field, now + timedelta(minutes=expire_minutes))
    return code


def clear_code(user, action):
    setattr(user, action.code_field, None)
    setattr(user, action.expiry_field, None)


def check_code(user, action, submitted, now=None):
    """Validate ``submitted`` against the slot for ``action``.

    Raises ``UserNotFound``, ``AlreadyVerified``, ``InvalidCode`` or
    ``Expired``, in that order. On success the slot is cleared; applying the
    state transition is left to the caller.
    """
    if user is None:
        raise UserNotFound()
    if action is PendingAction.VERIFICATION and user.is_verified:
        raise AlreadyVerified()

    stored = getattr(user, action.code_field)
    if not stored or not secrets.compare_digest(stored.encode(), str(submitted).encode()):
        raise InvalidCode()

    expiry = getattr(user, action.expiry_field)
    now = now or utcnow()
    if expiry is None or now > expiry:
        raise Expired()

    clear_code(user, action)
