"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only one auth method exists: an Authorization: Bearer <jwt> header. There is
no cookie and no server-side session -- every request is re-authenticated
from its own token by the TokenService on app.state.

try_get_identity() is the soft variant (returns None on failure).
get_current_identity() wraps it and raises Unauthenticated (401), which the
AuthError handler in api/main.py renders before any business logic runs.

Layer rule: no imports from api/ or rankings/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.errors import Unauthenticated
from auth.models import Identity
from auth.tokens import TokenService

_BEARER_PREFIX = "bearer "


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    # Scheme name is case-insensitive (RFC 7235)
    if auth_header[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = auth_header[len(_BEARER_PREFIX) :].strip()
    return token or None


def try_get_identity(request: Request) -> Identity | None:
    """Verify the request's bearer token. Returns the Identity, or None.

    Never raises -- callers that need a hard 401 should use get_current_identity().
    """
    token = _bearer_token(request)
    if token is None:
        return None
    tokens: TokenService = request.app.state.token_service
    return tokens.verify(token)


def get_current_identity(request: Request) -> Identity:
    """Require authentication. Raises Unauthenticated if the token is missing or invalid.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    identity = try_get_identity(request)
    if identity is None:
        raise Unauthenticated()
    return identity
