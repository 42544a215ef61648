"""Request context management for API layer."""

from src.authhub.api.context.cookies import (
    EXPIRED_COOKIES_STATE_KEY,
    RequestCookieStore,
    expire_deleted_cookies,
    get_expired_cookies,
)

__all__ = [
    "EXPIRED_COOKIES_STATE_KEY",
    "RequestCookieStore",
    "expire_deleted_cookies",
    "get_expired_cookies",
]
