"""Tests for the user store and auth service."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.exceptions import (
    AccountInactiveError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidCurrentPasswordError,
    StoreError,
    UserNotFoundError,
)
from src.main import app
from src.models.user import User
from src.schemas.auth import PasswordChange, ProfileUpdate, UserLogin, UserRegister
from src.services.auth import AuthService
from src.services.password import PasswordHasher
from src.services.tokens import TokenClaims, TokenCodec, TokenConfig
from src.services.user_store import UserStore


def _db_down(*args, **kwargs):
    raise OperationalError("COMMIT", {}, Exception("connection lost"))


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenCodec(TokenConfig(secret="service-test-secret"))


@pytest.fixture
def service(db, hasher, tokens):
    return AuthService(db, hasher, tokens)


@pytest.fixture
def registered(service):
    """Register a user through the service."""
    return service.register(
        UserRegister(email="svc@example.com", password="secret123", name="Svc")
    )


def claims_for(result, tokens):
    return tokens.verify(result.token)


class TestUserStore:
    """Tests for UserStore."""

    def test_create_and_find(self, db):
        store = UserStore(db)
        user = store.create("store@example.com", "hash", "Store")

        assert user.id is not None
        assert user.is_active is True
        assert user.created_at is not None
        assert store.find_by_email("store@example.com").id == user.id
        assert store.find_by_id(user.id).email == "store@example.com"
        assert store.find_by_email("missing@example.com") is None
        assert store.find_by_id(user.id + 1000) is None

    def test_duplicate_email_raises_conflict(self, db):
        """Test the unique index surfaces as DuplicateEmailError."""
        store = UserStore(db)
        store.create("dup@example.com", "hash-1", "First")

        with pytest.raises(DuplicateEmailError):
            store.create("dup@example.com", "hash-2", "Second")

        # Session is usable after the rollback and the first row survives
        users = db.query(User).filter(User.email == "dup@example.com").all()
        assert len(users) == 1
        assert users[0].password_hash == "hash-1"

    def test_update_profile_is_partial(self, db):
        store = UserStore(db)
        user = store.create("partial@example.com", "hash", "Before")
        store.update_profile(user.id, {"avatar": "a.png"})
        first_update = user.updated_at

        updated = store.update_profile(user.id, {"name": "After"})

        assert updated.name == "After"
        assert updated.avatar == "a.png"
        assert updated.updated_at > first_update

    def test_update_profile_rejects_other_fields(self, db):
        store = UserStore(db)
        user = store.create("fields@example.com", "hash")

        with pytest.raises(ValueError):
            store.update_profile(user.id, {"email": "other@example.com"})

    def test_update_missing_user(self, db):
        store = UserStore(db)
        with pytest.raises(UserNotFoundError):
            store.update_profile(999, {"name": "x"})
        with pytest.raises(UserNotFoundError):
            store.update_password(999, "hash")

    def test_update_password(self, db):
        store = UserStore(db)
        user = store.create("pw@example.com", "old-hash")
        before = user.updated_at

        store.update_password(user.id, "new-hash")

        refreshed = store.find_by_id(user.id)
        assert refreshed.password_hash == "new-hash"
        assert refreshed.updated_at > before

    def test_database_failure_becomes_store_error(self, db):
        store = UserStore(db)
        user = store.create("fail@example.com", "hash")

        with patch.object(db, "commit", side_effect=_db_down):
            with pytest.raises(StoreError):
                store.update_profile(user.id, {"name": "x"})


class TestAuthService:
    """Tests for AuthService operations."""

    def test_register_issues_token_for_new_user(self, registered, tokens):
        claims = tokens.verify(registered.token)

        assert claims.user_id == registered.user.id
        assert claims.email == "svc@example.com"
        assert registered.user.name == "Svc"

    def test_register_duplicate(self, service, registered):
        with pytest.raises(DuplicateEmailError):
            service.register(UserRegister(email="svc@example.com", password="other123"))

    def test_register_race_lost_at_insert(self, db, hasher, tokens):
        """Test a duplicate that slips past the lookup is still a conflict."""
        store = UserStore(db)
        store.create("race@example.com", "hash")
        racing_store = MagicMock(wraps=store)
        racing_store.find_by_email.return_value = None
        service = AuthService(db, hasher, tokens, store=racing_store)

        with pytest.raises(DuplicateEmailError):
            service.register(UserRegister(email="race@example.com", password="secret123"))

    def test_login(self, service, registered):
        result = service.login(UserLogin(email="svc@example.com", password="secret123"))
        assert result.user.id == registered.user.id

    def test_login_unknown_email(self, service):
        with pytest.raises(InvalidCredentialsError):
            service.login(UserLogin(email="ghost@example.com", password="secret123"))

    def test_login_unknown_email_spends_hash_time(self, db, tokens):
        """Test unknown emails still run a dummy verification."""
        hasher = MagicMock(spec=PasswordHasher)
        service = AuthService(db, hasher, tokens)

        with pytest.raises(InvalidCredentialsError):
            service.login(UserLogin(email="ghost@example.com", password="secret123"))
        hasher.dummy_verify.assert_called_once()

    def test_login_wrong_password(self, service, registered):
        with pytest.raises(InvalidCredentialsError):
            service.login(UserLogin(email="svc@example.com", password="wrong123"))

    def test_login_inactive(self, db, service, registered):
        user = db.query(User).filter(User.id == registered.user.id).first()
        user.is_active = False
        db.commit()

        with pytest.raises(AccountInactiveError):
            service.login(UserLogin(email="svc@example.com", password="secret123"))

    def test_login_inactive_checked_before_password(self, db, tokens, registered):
        """Test a deactivated account is rejected without verifying the password."""
        user = db.query(User).filter(User.id == registered.user.id).first()
        user.is_active = False
        db.commit()
        hasher = MagicMock(spec=PasswordHasher)
        service = AuthService(db, hasher, tokens)

        with pytest.raises(AccountInactiveError):
            service.login(UserLogin(email="svc@example.com", password="wrong123"))
        hasher.verify.assert_not_called()

    def test_me(self, service, registered, tokens):
        user = service.me(claims_for(registered, tokens))
        assert user.email == "svc@example.com"

    def test_update_profile(self, service, registered, tokens):
        user = service.update_profile(
            claims_for(registered, tokens), ProfileUpdate(avatar="pic.png")
        )
        assert user.avatar == "pic.png"
        assert user.name == "Svc"
        assert user.updated_at > registered.user.updated_at

    def test_change_password(self, service, registered, tokens, hasher, db):
        claims = claims_for(registered, tokens)
        service.change_password(
            claims, PasswordChange(current_password="secret123", new_password="fresh456")
        )

        user = db.query(User).filter(User.id == registered.user.id).first()
        assert hasher.verify("fresh456", user.password_hash)

    def test_change_password_wrong_current(self, service, registered, tokens):
        with pytest.raises(InvalidCurrentPasswordError):
            service.change_password(
                claims_for(registered, tokens),
                PasswordChange(current_password="nope1234", new_password="fresh456"),
            )

    def test_change_password_user_gone(self, service, tokens):
        claims = tokens.verify(tokens.issue(12345, "gone@example.com"))
        with pytest.raises(UserNotFoundError):
            service.change_password(
                claims, PasswordChange(current_password="a123456", new_password="b123456")
            )

    def test_refresh_uses_claims_only(self, db, hasher, tokens):
        """Test refresh does not consult the store."""
        store = MagicMock(spec=UserStore)
        service = AuthService(db, hasher, tokens, store=store)
        claims = TokenClaims(
            user_id=7,
            email="seven@example.com",
            issued_at=MagicMock(),
            expires_at=MagicMock(),
        )

        refreshed = tokens.verify(service.refresh(claims))

        assert refreshed.user_id == 7
        assert refreshed.email == "seven@example.com"
        assert store.method_calls == []


class TestErrorResponses:
    """Tests for how failures are rendered over HTTP."""

    def test_store_failure_is_generic_500(self, client, auth_headers, db):
        with patch.object(db, "commit", side_effect=_db_down):
            response = client.put("/auth/profile", headers=auth_headers, json={"name": "x"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "message": "An unexpected error occurred",
        }

    def test_unclassified_error_is_generic_500(self, client, auth_headers):
        with patch("src.services.auth.AuthService.refresh", side_effect=RuntimeError("boom")):
            with TestClient(app, raise_server_exceptions=False) as raw_client:
                response = raw_client.post("/auth/refresh", headers=auth_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert "boom" not in body["message"]

    def test_expired_token_is_403(self, client, auth_headers):
        from datetime import UTC, datetime, timedelta

        from src.api.dependencies import get_token_codec

        codec = get_token_codec()
        past = TokenCodec(codec.config, clock=lambda: datetime.now(UTC) - timedelta(days=8))
        expired = past.issue(auth_headers.user_id, auth_headers.email)

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == 403
        assert response.json()["error"] == "Token expired"
