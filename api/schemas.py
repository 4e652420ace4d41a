# api/schemas.py
from typing import Literal, Optional

from pydantic import Field, field_validator

from auth_service.schemas import CamelModel, RequiredStr


class ProductCreate(CamelModel):
    name: RequiredStr
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None
    currency: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def lower_currency(cls, value):
        return value.strip().lower() if value else value


class ProductUpdate(CamelModel):
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None
    currency: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def lower_currency(cls, value):
        return value.strip().lower() if value else value


class ExampleCreate(CamelModel):
    name: RequiredStr
    description: Optional[str] = None
    status: Literal["active", "inactive"] = "active"


class ExampleUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None


class PushKeys(CamelModel):
    p256dh: RequiredStr
    auth: RequiredStr


class PushSubscribe(CamelModel):
    endpoint: RequiredStr
    keys: PushKeys
