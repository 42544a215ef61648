from src.authhub.schemas.oauth import (
    AuthenticatedUser,
    AuthorizeRequest,
    CallbackRedirect,
    CallbackResult,
    OAuthTokenSet,
    OAuthUserInfo,
    OuterOAuthInfo,
    TokenResponse,
)
from src.authhub.schemas.tenancy import OAuthProviderConfigRead, TenancyConfig
from src.authhub.schemas.user import AdminUserCreate, OAuthAccountCreate, UserRead

__all__ = [
    # OAuth
    "AuthenticatedUser",
    "AuthorizeRequest",
    "CallbackRedirect",
    "CallbackResult",
    "OAuthTokenSet",
    "OAuthUserInfo",
    "OuterOAuthInfo",
    "TokenResponse",
    # Tenancy
    "OAuthProviderConfigRead",
    "TenancyConfig",
    # User
    "AdminUserCreate",
    "OAuthAccountCreate",
    "UserRead",
]
