"""
auth/errors.py -- Error taxonomy for authentication and authorization.

Each error carries the HTTP status and machine-readable code it maps to.
api/main.py registers a single handler for AuthError that renders the shared
ErrorResponse envelope, so route handlers and services just raise.

Messages are deliberately generic: nothing here distinguishes "no such user"
from "wrong password", or "not found" from "not yours".
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for credential and authorization failures."""

    status_code: int = 400
    code: str = "auth_error"
    message: str = "Request rejected."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class DuplicateUsername(AuthError):
    status_code = 400
    code = "username_taken"
    message = "Username already taken."


class InvalidCredentials(AuthError):
    status_code = 401
    code = "bad_credentials"
    message = "Invalid username or password."


class Unauthenticated(AuthError):
    status_code = 401
    code = "unauthorized"
    message = "Authentication required."


class NotFoundOrForbidden(AuthError):
    """Mutation target is absent or owned by someone else (not distinguished)."""

    status_code = 404
    code = "not_found"
    message = "Ranking not found or access denied."
