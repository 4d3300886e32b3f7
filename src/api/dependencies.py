"""FastAPI dependencies for authentication and database."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import get_db
from src.exceptions import MissingTokenError
from src.services.auth import AuthService
from src.services.password import PasswordHasher
from src.services.tokens import TokenClaims, TokenCodec, TokenConfig

# Missing credentials are reported through MissingTokenError so the body
# matches the rest of the API.
security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_codec() -> TokenCodec:
    """Get the process-wide token codec."""
    return TokenCodec(TokenConfig.from_settings(get_settings()))


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get the process-wide password hasher."""
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenCodec, Depends(get_token_codec)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db, hasher, tokens)


def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenCodec, Depends(get_token_codec)],
) -> TokenClaims:
    """Verify the bearer token and return its claims.

    The user row is not loaded here; operations that need it look it up
    themselves so a vanished account can be reported as 404.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return tokens.verify(credentials.credentials)
