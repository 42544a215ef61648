"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.authhub.api.dependencies.db import DBSession
from src.authhub.repositories import (
    AuthorizationCodeRepository,
    ContactChannelRepository,
    OAuthAccountRepository,
    OuterInfoRepository,
    ProjectUserRepository,
    ProviderTokenRepository,
    RefreshTokenRepository,
    TenancyRepository,
)


def get_tenancy_repository(session: DBSession) -> TenancyRepository:
    return TenancyRepository(session)


def get_user_repository(session: DBSession) -> ProjectUserRepository:
    return ProjectUserRepository(session)


def get_contact_channel_repository(session: DBSession) -> ContactChannelRepository:
    return ContactChannelRepository(session)


def get_oauth_account_repository(session: DBSession) -> OAuthAccountRepository:
    return OAuthAccountRepository(session)


def get_outer_info_repository(session: DBSession) -> OuterInfoRepository:
    return OuterInfoRepository(session)


def get_provider_token_repository(session: DBSession) -> ProviderTokenRepository:
    return ProviderTokenRepository(session)


def get_authorization_code_repository(session: DBSession) -> AuthorizationCodeRepository:
    return AuthorizationCodeRepository(session)


def get_refresh_token_repository(session: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


# Type aliases for dependency injection
TenancyRepo = Annotated[TenancyRepository, Depends(get_tenancy_repository)]
UserRepo = Annotated[ProjectUserRepository, Depends(get_user_repository)]
ContactChannelRepo = Annotated[ContactChannelRepository, Depends(get_contact_channel_repository)]
OAuthAccountRepo = Annotated[OAuthAccountRepository, Depends(get_oauth_account_repository)]
OuterInfoRepo = Annotated[OuterInfoRepository, Depends(get_outer_info_repository)]
ProviderTokenRepo = Annotated[ProviderTokenRepository, Depends(get_provider_token_repository)]
AuthorizationCodeRepo = Annotated[
    AuthorizationCodeRepository, Depends(get_authorization_code_repository)
]
RefreshTokenRepo = Annotated[RefreshTokenRepository, Depends(get_refresh_token_repository)]
