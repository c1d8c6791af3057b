"""
auth/service.py -- Registration and login orchestration.

register_user() is a check-then-act two-step: exists() then create_user().
Two concurrent registrations for the same username can both pass the check;
the UNIQUE(username) constraint in auth/store.py rejects the second INSERT
and that IntegrityError is reported as DuplicateUsername as well, once a
lookup confirms the username is now taken. Other constraint failures are
re-raised unchanged.

login_user() fails with the same InvalidCredentials for an unknown username
and for a wrong password, and authenticate_user() runs bcrypt in both cases
so the two paths take comparable time.

Neither function ever logs a password or a token.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateUsername, InvalidCredentials
from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenService, hash_password, verify_password

logger = logging.getLogger("ranker.auth")

# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than later ones. Unknown usernames are checked against this hash.
_DUMMY_HASH: str = hash_password("ranker_timing_dummy")


@dataclass(frozen=True)
class LoginResult:
    token: str
    username: str
    user_id: uuid.UUID
    expires_in: int


def register_user(
    store: UserStore,
    username: str,
    password: str,
    email: str,
    profile_pic_url: str | None = None,
    description: str | None = None,
) -> uuid.UUID:
    """Create a new account and return its id.

    Raises DuplicateUsername if the username is already registered and
    ValueError if it is empty.
    """
    if not username:
        raise ValueError("username must not be empty")
    if store.exists(username):
        logger.info("Registration rejected: username %r already taken", username)
        raise DuplicateUsername()

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        profile_pic_url=profile_pic_url,
        description=description,
    )
    try:
        user_id = store.create_user(user)
    except IntegrityError as exc:
        # Only the username constraint means "taken"; anything else propagates.
        if store.get_by_username(username) is None:
            raise
        logger.info("Registration rejected: concurrent insert for username %r", username)
        raise DuplicateUsername() from exc

    logger.info("Registered user %r (%s)", username, user_id)
    return user_id


def authenticate_user(store: UserStore, username: str, password: str) -> User | None:
    """Check a username/password pair with timing equalization.

    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as a real check)
    - Wrong password: bcrypt runs against the real hash

    Returns the User on success, None on any failure.
    """
    user = store.get_by_username(username)
    if user is None:
        # Equalize timing -- do NOT return before running bcrypt
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def login_user(store: UserStore, tokens: TokenService, username: str, password: str) -> LoginResult:
    """Authenticate and mint a bearer token.

    Raises InvalidCredentials for an unknown user and for a wrong password alike.
    """
    user = authenticate_user(store, username, password)
    if user is None or user.id is None:
        logger.info("Login failed for %r", username)
        raise InvalidCredentials()

    token = tokens.issue(user.id, user.username)
    logger.info("Login succeeded for %r", username)
    return LoginResult(
        token=token,
        username=user.username,
        user_id=user.id,
        expires_in=tokens.expires_in,
    )
