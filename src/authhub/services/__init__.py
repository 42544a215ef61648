"""Business logic services."""

from src.authhub.services.account_resolution import AccountDecision, resolve_account
from src.authhub.services.oauth_callback_service import OAuthCallbackService
from src.authhub.services.oauth_server import OAuthAuthorizationServer
from src.authhub.services.tenancy_service import TenancyService
from src.authhub.services.token_service import AuthTokens, TokenService
from src.authhub.services.user_service import UserService

__all__ = [
    "AccountDecision",
    "AuthTokens",
    "OAuthAuthorizationServer",
    "OAuthCallbackService",
    "TenancyService",
    "TokenService",
    "UserService",
    "resolve_account",
]
