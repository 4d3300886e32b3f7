"""Signed, time-limited bearer tokens."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from src.config import Settings
from src.exceptions import TokenExpiredError, TokenInvalidError

DEFAULT_TOKEN_LIFETIME = timedelta(days=7)


@dataclass(frozen=True)
class TokenConfig:
    """Signing configuration, built once at startup."""

    secret: str
    algorithm: str = "HS256"
    lifetime: timedelta = DEFAULT_TOKEN_LIFETIME

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(minutes=settings.jwt_expiration_minutes),
        )


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified token."""

    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenCodec:
    """Issues and verifies HS256 JWTs.

    Expiry is checked against the injected clock rather than by the JWT
    library so that it can be tested at exact instants.
    """

    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] = _utcnow):
        self.config = config
        self._clock = clock

    def issue(self, user_id: int, email: str) -> str:
        """Create a token for the given subject, valid for the configured lifetime."""
        issued_at = int(self._clock().timestamp())
        expires_at = issued_at + int(self.config.lifetime.total_seconds())
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": expires_at,
        }
        return jwt.encode(to_encode, self.config.secret, algorithm=self.config.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify the signature and expiry of a token and return its claims.

        Raises:
            TokenExpiredError: the current time is past the ``exp`` claim.
            TokenInvalidError: bad signature, malformed token or claims.
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise TokenInvalidError() from e

        try:
            user_id = int(payload["sub"])
            email = payload["email"]
            issued_at = int(payload["iat"])
            expires_at = int(payload["exp"])
        except (KeyError, TypeError, ValueError) as e:
            raise TokenInvalidError() from e
        if not isinstance(email, str):
            raise TokenInvalidError()

        if self._clock().timestamp() > expires_at:
            raise TokenExpiredError()

        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(issued_at, UTC),
            expires_at=datetime.fromtimestamp(expires_at, UTC),
        )
