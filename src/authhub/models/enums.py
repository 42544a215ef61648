"""Shared enums for models."""

from enum import Enum


class OAuthFlowType(str, Enum):
    """Kind of OAuth attempt recorded in the outer state."""

    AUTHENTICATE = "authenticate"
    LINK = "link"


class ContactChannelType(str, Enum):
    """Contact channel kinds a project user can own."""

    EMAIL = "email"
