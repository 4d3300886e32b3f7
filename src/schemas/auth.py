"""Authentication schemas.

Request models carry the input rules as ``Field`` constraints and
validators. Pydantic reports every failing field at once; the messages for
its built-in error types are mapped to API wording in
``src.services.validation``.
"""

from datetime import datetime
from typing import Any

from pydantic import (
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from src.models.user import AVATAR_MAX_LENGTH, EMAIL_MAX_LENGTH, NAME_MAX_LENGTH

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.lower().strip()
    return value


class UserRegister(BaseModel):
    """User registration request."""

    email: str = Field(..., max_length=EMAIL_MAX_LENGTH, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    name: str | None = Field(None, max_length=NAME_MAX_LENGTH)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not value.strip():
            raise PydanticCustomError("name_blank", "Name must be a non-empty string")
        return value.strip()


class UserLogin(BaseModel):
    """User login request."""

    email: str = Field(..., max_length=EMAIL_MAX_LENGTH, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)


class ProfileUpdate(BaseModel):
    """Partial profile update. Fields absent from the body are left unchanged."""

    name: str | None = Field(None, max_length=NAME_MAX_LENGTH)
    avatar: str | None = Field(None, max_length=AVATAR_MAX_LENGTH)

    @field_validator("name", "avatar", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Only runs for keys present in the body, so null means "sent as null".
        if value is None:
            raise PydanticCustomError("string_type", "Input should be a valid string")
        return value

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise PydanticCustomError("name_blank", "Name cannot be empty")
        return value.strip()

    @field_validator("avatar")
    @classmethod
    def strip_avatar(cls, value: str) -> str:
        return value.strip()

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class PasswordChange(BaseModel):
    """Password change request (``currentPassword``/``newPassword`` on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @model_validator(mode="after")
    def passwords_differ(self) -> "PasswordChange":
        if self.current_password == self.new_password:
            raise PydanticCustomError(
                "password_unchanged",
                "New password must be different from current password",
            )
        return self


class UserResponse(BaseModel):
    """User information response, without the password hash."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: int
    email: str
    name: str | None
    avatar: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
