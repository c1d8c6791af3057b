"""
rankings/store.py -- SQLAlchemy-backed persistence layer for rankings.

Uses SQLAlchemy Core (not ORM) so the dataclasses in rankings/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Pattern: Repository + Data Mapper. RankingStore is the repository; _row_to_ranking
is the mapper. Route handlers never touch SQL directly.

Ownership:
  update() and delete() match on BOTH id and owner_id in a single statement
  and report whether a row changed. A False result means "absent or not
  yours" -- the two are never told apart. get_by_id() applies no owner
  filter.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = RankingStore(settings.database_url)
    ranking = store.create(owner_id, RankingFields(name="ESC2024", year=2024, ranking_string="..."))
    mine = store.list_by_owner(owner_id)
    store.update(ranking.id, owner_id, RankingFields(name="ESC2024 final", ranking_string="..."))
    store.close()
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from rankings.models import Ranking, RankingFields

logger = logging.getLogger("ranker.rankings")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_rankings = Table(
    "rankings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("owner_id", String(36), nullable=False),  # users.id
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("year", Integer, nullable=False),
    Column("ranking_string", Text, nullable=False),  # opaque client payload
    Column("updated_at", String(32), nullable=False),
    Index("ix_rankings_owner_id", "owner_id"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class RankingStore:
    """Repository for Ranking records, scoped by owner for every write."""

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def create(self, owner_id: uuid.UUID, fields: RankingFields) -> Ranking:
        """Insert a ranking owned by owner_id and return it as stored.

        fields.year is required here; RankingCreate in api/models.py enforces it.
        """
        if fields.year is None:
            raise ValueError("year is required to create a ranking")
        ranking = Ranking(
            id=uuid.uuid4(),
            owner_id=owner_id,
            name=fields.name,
            description=fields.description,
            year=fields.year,
            ranking_string=fields.ranking_string,
            updated_at=_now_iso(),
        )
        with self.engine.connect() as conn:
            conn.execute(
                _rankings.insert().values(
                    id=str(ranking.id),
                    owner_id=str(ranking.owner_id),
                    name=ranking.name,
                    description=ranking.description,
                    year=ranking.year,
                    ranking_string=ranking.ranking_string,
                    updated_at=ranking.updated_at,
                )
            )
            conn.commit()
        return ranking

    def list_by_owner(self, owner_id: uuid.UUID) -> list[Ranking]:
        """Return every ranking owned by owner_id, most recently updated first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _rankings.select()
                .where(_rankings.c.owner_id == str(owner_id))
                .order_by(_rankings.c.updated_at.desc())
            ).fetchall()
        return [_row_to_ranking(r) for r in rows]

    def get_by_id(self, ranking_id: uuid.UUID) -> Optional[Ranking]:
        """Look up a ranking by id regardless of owner. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_rankings.select().where(_rankings.c.id == str(ranking_id))).fetchone()
        return _row_to_ranking(row) if row is not None else None

    def update(self, ranking_id: uuid.UUID, owner_id: uuid.UUID, fields: RankingFields) -> bool:
        """Replace name, description and ranking_string, and refresh updated_at.

        Returns True iff a row matching both ranking_id and owner_id was changed.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _rankings.update()
                .where((_rankings.c.id == str(ranking_id)) & (_rankings.c.owner_id == str(owner_id)))
                .values(
                    name=fields.name,
                    description=fields.description,
                    ranking_string=fields.ranking_string,
                    updated_at=_now_iso(),
                )
            )
            conn.commit()
        changed = result.rowcount > 0
        if not changed:
            logger.info("Update of ranking %s by %s matched no owned row", ranking_id, owner_id)
        return changed

    def delete(self, ranking_id: uuid.UUID, owner_id: uuid.UUID) -> bool:
        """Delete a ranking. Same match semantics as update()."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _rankings.delete().where((_rankings.c.id == str(ranking_id)) & (_rankings.c.owner_id == str(owner_id)))
            )
            conn.commit()
        deleted = result.rowcount > 0
        if not deleted:
            logger.info("Delete of ranking %s by %s matched no owned row", ranking_id, owner_id)
        return deleted

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_ranking(row) -> Ranking:
    return Ranking(
        id=uuid.UUID(row.id),
        owner_id=uuid.UUID(row.owner_id),
        name=row.name,
        description=row.description,
        year=row.year,
        ranking_string=row.ranking_string,
        updated_at=row.updated_at,
    )
