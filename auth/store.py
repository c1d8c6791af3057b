"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as rankings/store.py).
UserStore is the repository; _row_to_user is the mapper.
Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(username) is the backstop for the check-then-insert race in
  register_user(): two concurrent registrations can both pass exists(), but
  only one INSERT succeeds. The loser gets IntegrityError.

Layer rule: no imports from api/ or rankings/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, exists, select
from sqlalchemy.engine import Engine

from auth.models import User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False),
    Column("password_hash", Text, nullable=False),
    Column("profile_pic_url", Text),
    Column("description", Text),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore(settings.database_url)
        if not store.exists("alice"):
            user_id = store.create_user(User(username="alice", email=..., password_hash=...))
        user = store.get_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def exists(self, username: str) -> bool:
        """Return True if a user with this exact username (case-sensitive) exists."""
        with self.engine.connect() as conn:
            return bool(conn.execute(select(exists().where(_users.c.username == username))).scalar())

    def create_user(self, user: User) -> uuid.UUID:
        """Insert a new user and return its assigned id.

        Raises sqlalchemy.exc.IntegrityError if the username already exists
        or a required column is missing. Callers look the username up again
        before treating it as a duplicate (concurrent insert).
        """
        user_id = user.id or uuid.uuid4()
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=str(user_id),
                    username=user.username,
                    email=user.email,
                    password_hash=user.password_hash,
                    profile_pic_url=user.profile_pic_url,
                    description=user.description,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        return user_id

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=uuid.UUID(row.id),
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        profile_pic_url=row.profile_pic_url,
        description=row.description,
        created_at=row.created_at,
    )
