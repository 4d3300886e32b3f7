"""Password hashing and verification."""

from passlib.context import CryptContext

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """One-way bcrypt hashing with a fixed work factor.

    New hashes use ``bcrypt_sha256``: the password is run through
    HMAC-SHA256 before bcrypt, so passwords longer than bcrypt's 72-byte
    input limit are not truncated. Plain ``bcrypt`` hashes still verify.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt_sha256", "bcrypt"],
            deprecated="auto",
            bcrypt_sha256__rounds=rounds,
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash.

        Returns False for a mismatch and for a stored value that is not a
        recognisable bcrypt hash.
        """
        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError):
            return False

    def dummy_verify(self) -> None:
        """Spend the same time as a real verification against no user."""
        self._context.dummy_verify()
