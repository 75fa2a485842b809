# backend/certifyone/database.py
"""
Database configuration for certifyone.

The only durable state is a handful of named slots (see apps/storage), so a
single engine is enough. SQLite is the default; any SQLAlchemy URL works.

Key goals:
- One place that reads the connection URL from the environment.
- SQLite (file or in-memory) usable from the FastAPI worker thread.
- `SessionLocal` for code that wants a plain session.
"""

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# -------------------------------------------------------------------
# CONFIG FROM ENV
# -------------------------------------------------------------------
#
#   CERTIFYONE_DATABASE_URL  (preferred)
#   DATABASE_URL             (fallback)
#
# Example value:
#   sqlite+pysqlite:///./certifyone.db
# -------------------------------------------------------------------

DEFAULT_DB_URL = "sqlite+pysqlite:///./certifyone.db"

DB_URL = os.getenv("CERTIFYONE_DATABASE_URL") or os.getenv("DATABASE_URL") or DEFAULT_DB_URL

POOL_PRE_PING = os.getenv("DB_POOL_PRE_PING", "true").lower() in {"1", "true", "yes", "on"}


def build_engine(url: str) -> Engine:
    """
    Create an engine for `url`.

    SQLite connections are shared across threads; an in-memory database
    additionally needs a single static connection or every checkout would
    see an empty database.
    """
    kwargs = {"future": True, "pool_pre_ping": POOL_PRE_PING}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=bind,
        future=True,
    )


# -------------------------------------------------------------------
# ENGINE / SESSIONS
# -------------------------------------------------------------------

engine = build_engine(DB_URL)
SessionLocal = build_session_factory(engine)

# Declarative base for all models
Base = declarative_base()

