"""Authentication service: registration, login and account operations."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.exceptions import (
    AccountInactiveError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidCurrentPasswordError,
    UserNotFoundError,
)
from src.schemas.auth import (
    PasswordChange,
    ProfileUpdate,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.services.password import PasswordHasher
from src.services.tokens import TokenClaims, TokenCodec
from src.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """A sanitized user together with a freshly issued token."""

    user: UserResponse
    token: str


class AuthService:
    """Service for account and session operations.

    Inputs are expected to have passed ``src.services.validation`` already.
    """

    def __init__(
        self,
        db: Session,
        hasher: PasswordHasher,
        tokens: TokenCodec,
        store: UserStore | None = None,
    ):
        self.db = db
        self.hasher = hasher
        self.tokens = tokens
        self.store = store or UserStore(db)

    def register(self, data: UserRegister) -> AuthResult:
        """Create an account and log it in."""
        if self.store.find_by_email(data.email) is not None:
            raise DuplicateEmailError()

        password_hash = self.hasher.hash(data.password)
        # A concurrent registration can still win the race; the unique index
        # makes create() raise DuplicateEmailError in that case.
        user = self.store.create(data.email, password_hash, data.name)

        logger.info(f"Registered user {user.id}")
        return AuthResult(
            user=UserResponse.model_validate(user),
            token=self.tokens.issue(user.id, user.email),
        )

    def login(self, credentials: UserLogin) -> AuthResult:
        """Check credentials and issue a token.

        Unknown email and wrong password produce the same error. A
        deactivated account is rejected before its password is checked.
        """
        user = self.store.find_by_email(credentials.email)
        if user is None:
            self.hasher.dummy_verify()
            logger.info("Failed login for unknown email")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.info(f"Rejected login for deactivated user {user.id}")
            raise AccountInactiveError()

        if not self.hasher.verify(credentials.password, user.password_hash):
            logger.info(f"Failed login for user {user.id}: wrong password")
            raise InvalidCredentialsError()

        logger.info(f"User {user.id} logged in")
        return AuthResult(
            user=UserResponse.model_validate(user),
            token=self.tokens.issue(user.id, user.email),
        )

    def me(self, claims: TokenClaims) -> UserResponse:
        """Return the account the token was issued for."""
        user = self.store.find_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError()
        return UserResponse.model_validate(user)

    def update_profile(self, claims: TokenClaims, update: ProfileUpdate) -> UserResponse:
        """Apply a partial update of name and/or avatar."""
        user = self.store.update_profile(claims.user_id, update.changes())
        logger.info(f"Updated profile of user {user.id}: {sorted(update.changes())}")
        return UserResponse.model_validate(user)

    def change_password(self, claims: TokenClaims, change: PasswordChange) -> None:
        """Replace the password after checking the current one.

        No new token is issued; existing tokens stay valid until they expire.
        """
        user = self.store.find_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError()

        if not self.hasher.verify(change.current_password, user.password_hash):
            logger.info(f"Password change for user {user.id} rejected: wrong current password")
            raise InvalidCurrentPasswordError()

        self.store.update_password(user.id, self.hasher.hash(change.new_password))
        logger.info(f"Changed password of user {user.id}")

    def refresh(self, claims: TokenClaims) -> str:
        """Issue a new token from a verified token's own claims."""
        return self.tokens.issue(claims.user_id, claims.email)

    def logout(self, claims: TokenClaims) -> None:
        """Acknowledge a logout.

        Tokens are not tracked server-side, so the presented token stays
        valid until it expires; the client is expected to discard it.
        """
        logger.info(f"User {claims.user_id} logged out")
