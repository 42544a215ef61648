"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.authhub.api.dependencies.db import DBSession
from src.authhub.api.dependencies.repositories import (
    AuthorizationCodeRepo,
    ContactChannelRepo,
    OAuthAccountRepo,
    OuterInfoRepo,
    ProviderTokenRepo,
    RefreshTokenRepo,
    TenancyRepo,
    UserRepo,
)
from src.authhub.services import (
    OAuthAuthorizationServer,
    OAuthCallbackService,
    TenancyService,
    TokenService,
    UserService,
)


def get_tenancy_service(tenancy_repo: TenancyRepo) -> TenancyService:
    return TenancyService(tenancy_repo)


TenancyServiceDep = Annotated[TenancyService, Depends(get_tenancy_service)]


def get_user_service(
    user_repo: UserRepo,
    channel_repo: ContactChannelRepo,
    account_repo: OAuthAccountRepo,
) -> UserService:
    return UserService(user_repo, channel_repo, account_repo)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]


def get_token_service(refresh_repo: RefreshTokenRepo, session: DBSession) -> TokenService:
    return TokenService(refresh_repo, session)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def get_oauth_server(
    code_repo: AuthorizationCodeRepo,
    tenancy_service: TenancyServiceDep,
    token_service: TokenServiceDep,
    session: DBSession,
) -> OAuthAuthorizationServer:
    return OAuthAuthorizationServer(code_repo, tenancy_service, token_service, session)


OAuthServerDep = Annotated[OAuthAuthorizationServer, Depends(get_oauth_server)]


def get_oauth_callback_service(
    session: DBSession,
    outer_info_repo: OuterInfoRepo,
    user_repo: UserRepo,
    channel_repo: ContactChannelRepo,
    account_repo: OAuthAccountRepo,
    provider_token_repo: ProviderTokenRepo,
    tenancy_service: TenancyServiceDep,
    user_service: UserServiceDep,
    oauth_server: OAuthServerDep,
) -> OAuthCallbackService:
    """Get the callback orchestrator with all collaborators on one session."""
    return OAuthCallbackService(
        session,
        outer_info_repo,
        user_repo,
        channel_repo,
        account_repo,
        provider_token_repo,
        tenancy_service,
        user_service,
        oauth_server,
    )


OAuthCallbackServiceDep = Annotated[OAuthCallbackService, Depends(get_oauth_callback_service)]
