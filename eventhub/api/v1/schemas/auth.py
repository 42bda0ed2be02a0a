from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from eventhub.api.v1.schemas.common import SchemaBase
from eventhub.models.user import UserRole


def _normalize_email(value: str) -> str:
    email = value.strip().lower()
    if len(email) > 255:
        raise ValueError("Email must not exceed 255 characters")
    return email


def _clean_name(value: str | None) -> str | None:
    if value is None:
        return None
    name = value.strip()
    if len(name) < 2 or len(name) > 255:
        raise ValueError("Name must be between 2 and 255 characters")
    return name


class RegisterIn(SchemaBase):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    name: str
    role: UserRole = UserRole.USER

    _normalize = field_validator("email", mode="after")(_normalize_email)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required")
        return _clean_name(value)


class LoginIn(SchemaBase):
    email: EmailStr
    password: str = Field(min_length=1)

    _normalize = field_validator("email", mode="after")(_normalize_email)


class ProfileUpdateIn(SchemaBase):
    name: str | None = None
    email: EmailStr | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value):
        return _clean_name(value) if isinstance(value, str) else value

    @field_validator("email", mode="after")
    @classmethod
    def _normalize_optional_email(cls, value: str | None) -> str | None:
        return _normalize_email(value) if value is not None else None

    @model_validator(mode="after")
    def _require_change(self):
        if self.name is None and self.email is None:
            raise ValueError("No fields to update")
        return self


class UserOut(SchemaBase):
    id: UUID
    email: str
    name: str
    role: UserRole
    created_at: datetime
    updated_at: datetime


class UserData(SchemaBase):
    user: UserOut


class AuthData(SchemaBase):
    user: UserOut
    token: str
