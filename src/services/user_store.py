"""Persistence for user accounts."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.exceptions import DuplicateEmailError, StoreError, UserNotFoundError
from src.models.user import User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset({"name", "avatar"})


class UserStore:
    """Create, find and update ``User`` rows.

    Email uniqueness is enforced by the database index; a violation on
    insert surfaces as ``DuplicateEmailError``. Other database failures are
    rolled back and raised as ``StoreError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> User | None:
        """Get a user by (normalized) email."""
        try:
            return self.db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            raise self._failure("looking up user by email", e) from e

    def find_by_id(self, user_id: int) -> User | None:
        """Get a user by id."""
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            raise self._failure(f"looking up user {user_id}", e) from e

    def create(self, email: str, password_hash: str, name: str | None = None) -> User:
        """Insert a new user."""
        user = User(email=email, password_hash=password_hash, name=name, is_active=True)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEmailError() from None
        except SQLAlchemyError as e:
            raise self._failure("creating user", e) from e
        self.db.refresh(user)
        return user

    def update_profile(self, user_id: int, changes: dict[str, str | None]) -> User:
        """Apply a partial profile update.

        Only the keys present in ``changes`` are written.
        """
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Not profile fields: {sorted(unknown)}")

        user = self._get(user_id)
        for field, value in changes.items():
            setattr(user, field, value)
        user.touch()
        self._commit(f"updating profile of user {user_id}")
        self.db.refresh(user)
        return user

    def update_password(self, user_id: int, password_hash: str) -> None:
        """Replace the stored password hash."""
        user = self._get(user_id)
        user.password_hash = password_hash
        user.touch()
        self._commit(f"updating password of user {user_id}")

    def _get(self, user_id: int) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._failure(action, e) from e

    def _failure(self, action: str, error: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error(f"Database error while {action}: {error}")
        return StoreError()
