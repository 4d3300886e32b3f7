"""User model."""

from sqlalchemy import Boolean, Column, Integer, String, Text, true

from src.database import Base
from src.models.mixins import TimestampMixin

EMAIL_MAX_LENGTH = 255
NAME_MAX_LENGTH = 50
AVATAR_MAX_LENGTH = 19_000_000


class User(Base, TimestampMixin):
    """User account used for authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(EMAIL_MAX_LENGTH), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(NAME_MAX_LENGTH), nullable=True)
    avatar = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
