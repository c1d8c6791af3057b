"""
rankings/models.py -- Domain dataclasses for ranking records.

Pure data containers with zero logic. Ownership rules live in auth/access.py
and in the WHERE clauses of rankings/store.py.

ranking_string is an opaque, client-owned serialization of the ordering.
Nothing server-side parses or validates its contents.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass
class Ranking:
    """A user's ordered list for one contest year.

    owner_id references the creating User. It is set once on create and
    never changes.
    """

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    year: int
    ranking_string: str
    description: Optional[str] = None
    updated_at: str = ""  # ISO 8601, refreshed by the store on every update


@dataclass
class RankingFields:
    """Writable fields for create and update.

    year is only honoured on create; updates replace name, description and
    ranking_string.
    """

    name: str
    ranking_string: str
    description: Optional[str] = None
    year: Optional[int] = None
