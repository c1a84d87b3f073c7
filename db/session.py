# db/session.py
from __future__ import annotations

import os
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from common.config_loader import load_env_files

# Load secrets if present (won't override variables already set by the platform)
load_env_files()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./bookings.sqlite3"

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def make_engine(url: Optional[str] = None) -> AsyncEngine:
    url = url or os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
    kwargs = {"echo": bool(os.getenv("SQL_ECHO")), "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        # no pooled reuse across event loops
        kwargs["poolclass"] = NullPool
    return create_async_engine(url, **kwargs)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = make_engine()
    return _engine


def Session() -> AsyncSession:
    """Default session factory bound to DATABASE_URL (lazily created)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(get_engine())
    return _session_factory()

