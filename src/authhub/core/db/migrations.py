"""Alembic runner shared by deployment scripts and the integration tests."""

from alembic.config import Config

from alembic import command


def run_migrations_sync(revision: str = "head") -> None:
    """Upgrade the database to ``revision`` using the root ``alembic.ini``.

    Alembic is synchronous; async callers run this in a worker thread.
    """
    command.upgrade(Config("alembic.ini"), revision)
