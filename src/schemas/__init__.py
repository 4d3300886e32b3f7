"""Pydantic schemas for API request/response validation."""

from src.schemas.auth import (
    PasswordChange,
    ProfileUpdate,
    UserLogin,
    UserRegister,
    UserResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "ProfileUpdate",
    "PasswordChange",
    "UserResponse",
]
