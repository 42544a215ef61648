"""API dependencies - re-exports for convenient imports."""

from src.authhub.api.dependencies.auth import AccessTokenClaimsDep, CurrentUser
from src.authhub.api.dependencies.db import DBSession, get_db_session
from src.authhub.api.dependencies.services import (
    OAuthCallbackServiceDep,
    OAuthServerDep,
    TenancyServiceDep,
    TokenServiceDep,
    UserServiceDep,
)

__all__ = [
    # Auth
    "AccessTokenClaimsDep",
    "CurrentUser",
    # DB
    "DBSession",
    "get_db_session",
    # Services
    "OAuthCallbackServiceDep",
    "OAuthServerDep",
    "TenancyServiceDep",
    "TokenServiceDep",
    "UserServiceDep",
]
