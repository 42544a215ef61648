"""Database utilities - engine, session and migrations."""

from src.authhub.core.db.engine import dispose_engine, get_engine
from src.authhub.core.db.migrations import run_migrations_sync
from src.authhub.core.db.session import get_session

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
    "run_migrations_sync",
]
