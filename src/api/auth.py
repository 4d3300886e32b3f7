"""Authentication API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_auth_service, get_current_claims
from src.schemas.auth import PasswordChange, ProfileUpdate, UserLogin, UserRegister
from src.services.auth import AuthService
from src.services.tokens import TokenClaims

router = APIRouter(prefix="/auth", tags=["auth"])


def _success(message: str | None = None, **data: Any) -> dict[str, Any]:
    response: dict[str, Any] = {"success": True}
    if message is not None:
        response["message"] = message
    if data:
        response["data"] = data
    return response


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    result = service.register(user_data)
    return _success(
        "User registered successfully",
        user=result.user.to_json(),
        token=result.token,
    )


@router.post("/login")
def login(
    credentials: UserLogin,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    result = service.login(credentials)
    return _success("Login successful", user=result.user.to_json(), token=result.token)


@router.get("/me")
def get_me(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Get current user information."""
    user = service.me(claims)
    return _success(user=user.to_json())


@router.put("/profile")
def update_profile(
    update: ProfileUpdate,
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Update name and/or avatar."""
    user = service.update_profile(claims, update)
    return _success("Profile updated successfully", user=user.to_json())


@router.put("/change-password")
def change_password(
    change: PasswordChange,
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Change password. The current token stays valid."""
    service.change_password(claims, change)
    return _success("Password changed successfully")


@router.post("/refresh")
def refresh_token(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Issue a new token for the bearer of a valid one."""
    return _success("Token refreshed successfully", token=service.refresh(claims))


@router.post("/logout")
def logout(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Logout (client should discard token)."""
    service.logout(claims)
    return _success("Logged out successfully")
