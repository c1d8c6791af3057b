"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in rankings/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or rankings/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    password_hash is a bcrypt hash. The raw password never reaches this
    object. id is None before the record is written to the database.
    """

    username: str
    email: str
    password_hash: str
    id: uuid.UUID | None = None
    profile_pic_url: str | None = None
    description: str | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert


@dataclass(frozen=True)
class Identity:
    """The caller proven by a verified bearer token.

    Built from the token alone -- no store lookup -- so each request is
    authenticated independently of any server-side session.
    """

    user_id: uuid.UUID
    username: str | None = None
