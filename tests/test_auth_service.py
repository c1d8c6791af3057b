"""Unit tests for auth/service.py -- registration and login.

Covers:
- Register returns a stable id; same username again -> DuplicateUsername
- Usernames are case-sensitive
- Stored hash is never the plaintext password
- UNIQUE backstop: a racing insert that slips past exists() -> DuplicateUsername
- Other IntegrityErrors propagate; an empty username is a ValueError
- Login: unknown user and wrong password fail with the same error kind
- Login success returns a token whose subject is the registered id
- Plaintext passwords never reach the log output
"""

import logging
import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateUsername, InvalidCredentials
from auth.models import User
from auth.service import authenticate_user, login_user, register_user


class TestRegister:
    def test_register_returns_id_and_persists(self, user_store):
        user_id = register_user(user_store, "alice", "pw1", "alice@example.com", description="Loves ballads")
        assert isinstance(user_id, uuid.UUID)

        stored = user_store.get_by_username("alice")
        assert stored is not None
        assert stored.id == user_id
        assert stored.email == "alice@example.com"
        assert stored.description == "Loves ballads"
        assert stored.created_at

    def test_duplicate_username_rejected(self, user_store):
        first = register_user(user_store, "alice", "pw1", "alice@example.com")
        with pytest.raises(DuplicateUsername):
            register_user(user_store, "alice", "pw2", "other@example.com")
        # First registration is untouched
        assert user_store.get_by_username("alice").id == first

    def test_usernames_are_case_sensitive(self, user_store):
        lower = register_user(user_store, "alice", "pw1", "a@example.com")
        upper = register_user(user_store, "Alice", "pw1", "b@example.com")
        assert lower != upper

    def test_password_stored_as_hash(self, user_store):
        register_user(user_store, "alice", "pw1", "alice@example.com")
        stored = user_store.get_by_username("alice")
        assert stored.password_hash != "pw1"
        assert stored.password_hash.startswith("$2")

    def test_unique_constraint_backstops_race(self, user_store, monkeypatch):
        """Simulate a concurrent registration that committed after exists() said no."""
        user_store.create_user(User(username="alice", email="a@example.com", password_hash="x"))
        monkeypatch.setattr(user_store, "exists", lambda username: False)
        with pytest.raises(DuplicateUsername):
            register_user(user_store, "alice", "pw2", "b@example.com")

    def test_other_constraint_failures_are_not_duplicates(self, user_store):
        # email is NOT NULL; the username is free, so this is not a name clash
        with pytest.raises(IntegrityError):
            register_user(user_store, "alice", "pw1", None)
        assert user_store.exists("alice") is False

    def test_empty_username_rejected(self, user_store):
        with pytest.raises(ValueError, match="username"):
            register_user(user_store, "", "pw1", "nobody@example.com")
        assert user_store.exists("") is False

    def test_password_never_logged(self, user_store, caplog):
        caplog.set_level(logging.DEBUG)
        register_user(user_store, "alice", "s3cret-pw", "alice@example.com")
        with pytest.raises(DuplicateUsername):
            register_user(user_store, "alice", "s3cret-pw", "alice@example.com")
        assert "s3cret-pw" not in caplog.text


class TestLogin:
    def test_unknown_user_and_wrong_password_fail_alike(self, user_store, token_service):
        register_user(user_store, "alice", "pw1", "alice@example.com")

        with pytest.raises(InvalidCredentials) as unknown:
            login_user(user_store, token_service, "bob", "pw1")
        with pytest.raises(InvalidCredentials) as wrong:
            login_user(user_store, token_service, "alice", "pw2")

        assert type(unknown.value) is type(wrong.value)
        assert str(unknown.value) == str(wrong.value)

    def test_success_returns_token_for_user(self, user_store, token_service):
        user_id = register_user(user_store, "alice", "pw1", "alice@example.com")
        result = login_user(user_store, token_service, "alice", "pw1")

        assert result.username == "alice"
        assert result.user_id == user_id
        assert result.expires_in == 7 * 24 * 3600
        identity = token_service.verify(result.token)
        assert identity is not None
        assert identity.user_id == user_id

    def test_authenticate_user_runs_bcrypt_for_unknown_user(self, user_store, monkeypatch):
        calls = []

        def fake_verify(plain, hashed):
            calls.append(hashed)
            return False

        monkeypatch.setattr("auth.service.verify_password", fake_verify)
        assert authenticate_user(user_store, "nobody", "pw") is None
        assert len(calls) == 1
