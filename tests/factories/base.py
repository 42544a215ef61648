"""Shared polyfactory configuration for the SQLModel tables."""

from uuid import uuid7

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from src.authhub.models.base import utc_now

__all__ = ["BaseFactory", "generate_uuid7", "utc_now"]


def generate_uuid7():
    return uuid7()


class BaseFactory(SQLAlchemyFactory):
    """Base factory for all tables.

    Foreign keys and relationships are never generated. Tests wire rows to
    their tenancy and user explicitly.
    """

    __is_base_factory__ = True
    __set_relationships__ = False
    __set_foreign_keys__ = False
