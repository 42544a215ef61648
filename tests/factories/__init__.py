"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import TenancyFactory, ProjectUserFactory, ...
"""

from tests.factories.auth import RefreshTokenFactory, generate_token_hash
from tests.factories.base import BaseFactory, generate_uuid7, utc_now
from tests.factories.oauth import (
    AuthorizationCodeFactory,
    OAuthAccountFactory,
    OAuthOuterInfoFactory,
)
from tests.factories.tenancy import (
    TRUSTED_DOMAIN,
    OAuthProviderConfigFactory,
    ProjectFactory,
    TenancyFactory,
)
from tests.factories.user import ContactChannelFactory, ProjectUserFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid7",
    "utc_now",
    # Tenancy
    "TRUSTED_DOMAIN",
    "OAuthProviderConfigFactory",
    "ProjectFactory",
    "TenancyFactory",
    # Users
    "ContactChannelFactory",
    "ProjectUserFactory",
    # OAuth
    "AuthorizationCodeFactory",
    "OAuthAccountFactory",
    "OAuthOuterInfoFactory",
    # Sessions
    "RefreshTokenFactory",
    "generate_token_hash",
]
