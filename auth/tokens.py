"""
auth/tokens.py -- JWT issuance/verification and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub (user id), username, jti,
       iat and exp. Verification returns None on any failure -- the
       dependency layer turns that into Unauthenticated (401). Tokens are
       never stored server-side and never refreshed; a new login is needed
       after expiry.

  Issuer/audience: the iss/aud claims are written when configured, but only
       checked when VALIDATE_ISSUER / VALIDATE_AUDIENCE are enabled. Both
       default to off. This is a known open gap, kept until a deployment
       actually configures them.

  Passwords: bcrypt directly (no passlib wrapper). Each hash carries its own
       salt, so two users with the same password get different hashes.

  Signing key: comes from the Settings object handed to TokenService at
       startup. Settings has already rejected keys shorter than 32 bytes,
       so a TokenService cannot exist with a weak key.

Layer rule: no imports from api/ or rankings/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from auth.models import Identity
from core.config import Settings

logger = logging.getLogger("ranker.auth")

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes. The API layer caps passwords at
    255 characters, and anything past 72 bytes is truncated by bcrypt itself.
    """
    return bcrypt.hashpw(plain.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        # Malformed or non-bcrypt hash in the store
        return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


class TokenService:
    """Issue and verify signed, time-limited identity tokens.

    Usage:
        tokens = TokenService(get_settings())
        token = tokens.issue(user.id, user.username)
        identity = tokens.verify(token)   # Identity or None
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._key = settings.secret_key
        self.lifetime = timedelta(days=settings.token_expire_days)

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds, as reported to clients at login."""
        return int(self.lifetime.total_seconds())

    def issue(self, user_id: uuid.UUID, username: str, issued_at: datetime | None = None) -> str:
        """Encode a signed JWT for the given user.

        Args:
            user_id:   Stored as the sub claim (string form of the UUID).
            username:  Stored as the custom "username" claim.
            issued_at: Defaults to now (UTC). exp is always issued_at + lifetime.
        """
        now = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "username": username,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.lifetime,
        }
        if self._settings.jwt_issuer:
            payload["iss"] = self._settings.jwt_issuer
        if self._settings.jwt_audience:
            payload["aud"] = self._settings.jwt_audience
        return jwt.encode(payload, self._key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> Identity | None:
        """Decode and verify a JWT. Returns the caller's Identity or None on any failure.

        Returning None (rather than raising) keeps the caller simple: any
        invalid, expired, or foreign-signed token is treated as unauthenticated.
        """
        settings = self._settings
        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[_ALGORITHM],
                audience=settings.jwt_audience if settings.validate_audience else None,
                issuer=settings.jwt_issuer if settings.validate_issuer else None,
                options={
                    "verify_aud": settings.validate_audience,
                    # jose skips the aud/iss checks when the claim is absent
                    "require_aud": settings.validate_audience,
                    "require_iss": settings.validate_issuer,
                    "require_exp": True,
                    "require_sub": True,
                    "leeway": 0,
                },
            )
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            return None

        try:
            user_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            logger.debug("Rejected token: malformed sub claim")
            return None
        username = payload.get("username")
        return Identity(user_id=user_id, username=username if isinstance(username, str) else None)
