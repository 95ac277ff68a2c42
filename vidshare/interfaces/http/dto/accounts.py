# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from vidshare.domain.accounts.entities import AccountProfile

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_.]+$")


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError("missing", "Field cannot be empty", {})
    return value


def _email(value: str) -> str:
    value = _not_blank(value)
    if not _EMAIL_RE.match(value):
        raise PydanticCustomError("email_invalid", "Email address is not valid", {})
    return value


class _RequestDTO(BaseModel):
    model_config = ConfigDict(validate_by_name=True, validate_by_alias=True, str_max_length=256)


class RegisterRequestDTO(_RequestDTO):
    full_name: str = Field(alias="fullName", min_length=1, max_length=128)
    email: str = Field(min_length=3)
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        return _not_blank(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _email(value)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        value = _not_blank(value)
        if not _USERNAME_RE.match(value):
            raise PydanticCustomError(
                "username_invalid_chars",
                "Username may contain only letters, digits, '_' and '.'",
                {"pattern": _USERNAME_RE.pattern},
            )
        return value


class VerifyEmailRequestDTO(_RequestDTO):
    email: str
    code: str = Field(min_length=6, max_length=6)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _email(value)

    @field_validator("code", mode="before")
    @classmethod
    def coerce_code(cls, value: Any) -> Any:
        # Clients send the code as a number as often as a string
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value


class ResendCodeRequestDTO(_RequestDTO):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _email(value)


class LoginRequestDTO(_RequestDTO):
    username: str | None = None
    email: str | None = None
    password: str = Field(min_length=1, max_length=128)

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequestDTO":
        if not (self.username or "").strip() and not (self.email or "").strip():
            raise PydanticCustomError(
                "identifier_missing", "Username or email is required", {}
            )
        return self

    @property
    def identifier(self) -> str:
        return (self.username or "").strip() or (self.email or "").strip()


class ChangePasswordRequestDTO(_RequestDTO):
    old_password: str = Field(alias="oldPassword", min_length=1, max_length=128)
    new_password: str = Field(alias="newPassword", min_length=8, max_length=128)


class RefreshRequestDTO(_RequestDTO):
    refresh_token: str | None = Field(None, alias="refreshToken")


class AccountProfileDTO(BaseModel):
    id: int
    full_name: str = Field(serialization_alias="fullName")
    username: str
    email: str
    avatar: str | None = Field(None, serialization_alias="avatar")
    cover_image: str | None = Field(None, serialization_alias="coverImage")
    is_email_verified: bool = Field(serialization_alias="isEmailVerified")
    created_at: datetime | None = Field(None, serialization_alias="createdAt")

    @classmethod
    def from_profile(cls, profile: AccountProfile) -> "AccountProfileDTO":
        return cls(
            id=profile.id,
            full_name=profile.full_name,
            username=profile.username,
            email=profile.email,
            avatar=profile.avatar_url,
            cover_image=profile.cover_image_url,
            is_email_verified=profile.is_email_verified,
            created_at=profile.created_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ApiResponseDTO(BaseModel):
    success: bool = True
    status_code: int = Field(serialization_alias="statusCode")
    data: Any = None
    message: str = "Success"

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "AccountProfileDTO",
    "ApiResponseDTO",
    "ChangePasswordRequestDTO",
    "LoginRequestDTO",
    "RefreshRequestDTO",
    "RegisterRequestDTO",
    "ResendCodeRequestDTO",
    "VerifyEmailRequestDTO",
]
