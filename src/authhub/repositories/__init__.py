"""Repository layer - data access abstraction."""

from src.authhub.repositories.base import BaseRepository
from src.authhub.repositories.oauth import (
    AuthorizationCodeRepository,
    OAuthAccountRepository,
    OuterInfoRepository,
    ProviderTokenRepository,
)
from src.authhub.repositories.tenancy import ProjectRepository, TenancyRepository
from src.authhub.repositories.token import RefreshTokenRepository
from src.authhub.repositories.user import ContactChannelRepository, ProjectUserRepository

__all__ = [
    # Base
    "BaseRepository",
    # Tenancy
    "ProjectRepository",
    "TenancyRepository",
    # Users
    "ContactChannelRepository",
    "ProjectUserRepository",
    # OAuth
    "AuthorizationCodeRepository",
    "OAuthAccountRepository",
    "OuterInfoRepository",
    "ProviderTokenRepository",
    # Sessions
    "RefreshTokenRepository",
]
