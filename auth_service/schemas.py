# auth_service/schemas.py
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated

# Required text: surrounding whitespace ignored, empty counts as missing
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# Passwords keep their whitespace
PasswordStr = Annotated[str, StringConstraints(min_length=1)]


def is_blank(value):
    """True for values that must not overwrite a required column."""
    return value is None or (isinstance(value, str) and not value.strip())


class CamelModel(BaseModel):
    """Accepts camelCase keys from the client as well as snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class EmailData(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower()


class RegisterData(EmailData):
    name: RequiredStr
    password: PasswordStr


class LoginData(EmailData):
    password: PasswordStr


class VerifyOTPData(EmailData):
    otp: RequiredStr


class ResetPasswordData(EmailData):
    otp: RequiredStr
    new_password: PasswordStr


class ChangePasswordData(CamelModel):
    current_password: PasswordStr
    new_password: PasswordStr


# --- Profile ---
class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class DeleteAccountData(CamelModel):
    password: PasswordStr


# --- Admin ---
class AdminUserUpdate(CamelModel):
    role: Optional[Literal["user", "admin"]] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if value else value


class BulkUpdateData(CamelModel):
    user_ids: List[int] = Field(..., min_length=1)
    action: Literal["activate", "deactivate", "verify", "delete"]
