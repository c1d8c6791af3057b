"""
auth/access.py -- Ownership rule for ranking mutations.

The owner id is the only authorization key: a ranking may be updated or
deleted by the user who created it and nobody else. RankingStore.update()
and RankingStore.delete() apply the same rule inside the SQL WHERE clause
(id AND owner_id), so the check and the write are one statement.

Reads are not covered. Any authenticated user may fetch any ranking by id;
only listing is scoped to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from auth.models import Identity

if TYPE_CHECKING:
    from rankings.models import Ranking


def can_modify(ranking: Ranking, identity: Identity) -> bool:
    """Return True if identity owns ranking."""
    return ranking.owner_id == identity.user_id
