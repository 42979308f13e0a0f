"""
core/database.py -- Engine factory for the relational store.

One Engine (and therefore one connection pool) is created per process by the
API lifespan or the CLI, then handed to every store constructor. Stores never
create or dispose engines themselves; whoever called create_db_engine() owns
the lifecycle and calls engine.dispose() on shutdown.

Any SQLAlchemy URL works (sqlite:///..., postgresql+psycopg://...). SQLite
gets two per-connection tweaks: check_same_thread=False because FastAPI runs
sync handlers in a threadpool, and WAL journal mode.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

logger = logging.getLogger("portfolio.database")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Build the pooled Engine shared by AdminStore and ContactStore."""
    connect_args: dict = {}
    is_sqlite = db_url.startswith("sqlite")
    if is_sqlite:
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)
    if is_sqlite:
        event.listen(engine, "connect", _set_wal_mode)
    logger.info("Database engine created (dialect=%s)", engine.dialect.name)
    return engine
