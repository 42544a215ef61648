"""Model exports.

Import from here: `from src.authhub.models import ProjectUser, Tenancy`
"""

from src.authhub.models.auth import ProjectUserRefreshToken
from src.authhub.models.enums import ContactChannelType, OAuthFlowType
from src.authhub.models.oauth import (
    OAuthAccessToken,
    OAuthAuthorizationCode,
    OAuthOuterInfo,
    OAuthToken,
    ProjectUserOAuthAccount,
)
from src.authhub.models.project import OAuthProviderConfig, Project, Tenancy
from src.authhub.models.user import ContactChannel, ProjectUser

__all__ = [
    # Enums
    "ContactChannelType",
    "OAuthFlowType",
    # Tenancy
    "OAuthProviderConfig",
    "Project",
    "Tenancy",
    # Users
    "ContactChannel",
    "ProjectUser",
    # OAuth
    "OAuthAccessToken",
    "OAuthAuthorizationCode",
    "OAuthOuterInfo",
    "OAuthToken",
    "ProjectUserOAuthAccount",
    # Sessions
    "ProjectUserRefreshToken",
]
