"""
core/database.py -- Relational schema and engine factory for TaskBoard.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in auth/models.py and
tasks/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change, not a rewrite.

Both tables live on one MetaData because tasks.user_id references users.id
with ON DELETE CASCADE -- the foreign key can only be declared when the two
tables share a database. UserStore and TaskStore are handed the same Engine.

SQLite notes:
  PRAGMA foreign_keys is OFF by default in SQLite and is per-connection, so it
  is switched on in a connect listener. Without it the cascade never fires.
  WAL mode lets readers proceed while a write is in flight.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),  # UUID4
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(10), nullable=False, server_default="user"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", String(36), primary_key=True),  # UUID4
    Column("title", String(255), nullable=False),
    Column("description", Text),
    Column("due_date", String(32)),  # ISO 8601
    Column("status", String(20), nullable=False, server_default="todo"),
    Column(
        "user_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Index("ix_tasks_user_id", "user_id"),
    Index("ix_tasks_created_at", "created_at"),
)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable foreign keys and WAL journal mode on every new SQLite connection.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def make_engine(db_url: str) -> Engine:
    """Create an Engine for db_url with the SQLite connection hooks installed."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def init_schema(engine: Engine) -> None:
    """Create missing tables. Idempotent -- safe to call on every startup."""
    metadata.create_all(engine)


def now_iso() -> str:
    """Current UTC time as a fixed-width ISO 8601 string.

    timespec="microseconds" keeps every value the same width, so lexical
    order in the created_at column equals chronological order.
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
