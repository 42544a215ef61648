"""OAuth callback orchestration.

Runs a provider callback through the flow:

    cookie check -> outer state claimed -> tenancy resolved -> not expired
    -> provider found -> provider exchange -> link pre-check
    -> authorization (link / sign in / sign up) -> redirect

Known errors raised after the tenancy is resolved are redirected to the outer
state's ``errorRedirectUrl`` when the tenancy trusts it, and re-raised
otherwise.
"""

from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.authhub.core.errors import (
    InvalidClientError,
    InvalidScopeError,
    InvariantViolation,
    KnownError,
    OAuthConnectionAlreadyConnectedToAnotherUser,
    RedirectUrlNotWhitelisted,
    SignUpNotEnabled,
    StatusError,
)
from src.authhub.core.logging import bind_tenancy_context, bind_user_context, get_logger
from src.authhub.models import (
    OAuthAccessToken,
    OAuthFlowType,
    OAuthToken,
    ProjectUserOAuthAccount,
)
from src.authhub.models.base import utc_now
from src.authhub.providers import OAuthProvider, get_provider
from src.authhub.repositories import (
    ContactChannelRepository,
    OAuthAccountRepository,
    OuterInfoRepository,
    ProjectUserRepository,
    ProviderTokenRepository,
)
from src.authhub.schemas.oauth import (
    AuthenticatedUser,
    AuthorizeRequest,
    CallbackRedirect,
    CallbackResult,
    OuterOAuthInfo,
)
from src.authhub.schemas.tenancy import OAuthProviderConfigRead, TenancyConfig
from src.authhub.schemas.user import AdminUserCreate, OAuthAccountCreate
from src.authhub.services.account_resolution import AccountDecision, resolve_account
from src.authhub.services.oauth_flow import (
    CookieStore,
    check_inner_cookie,
    check_link_target,
    check_not_expired,
    find_enabled_provider,
    merge_scopes,
    parse_outer_info,
    redirect_or_raise,
    require_link_user,
    require_outer_record,
)
from src.authhub.services.oauth_server import OAuthAuthorizationServer
from src.authhub.services.tenancy_service import TenancyService
from src.authhub.services.user_service import UserService

logger = get_logger(__name__)

# One retry: after a conflict the competing rows are visible and resolution
# turns into a sign-in or a link.
MAX_AUTHORIZATION_ATTEMPTS = 2


class OAuthCallbackService:
    """Handles the provider callback for one request."""

    def __init__(
        self,
        session: AsyncSession,
        outer_info_repo: OuterInfoRepository,
        user_repo: ProjectUserRepository,
        channel_repo: ContactChannelRepository,
        account_repo: OAuthAccountRepository,
        provider_token_repo: ProviderTokenRepository,
        tenancy_service: TenancyService,
        user_service: UserService,
        oauth_server: OAuthAuthorizationServer,
        provider_factory: Callable[[OAuthProviderConfigRead], OAuthProvider] = get_provider,
    ):
        self.session = session
        self.outer_info_repo = outer_info_repo
        self.user_repo = user_repo
        self.channel_repo = channel_repo
        self.account_repo = account_repo
        self.provider_token_repo = provider_token_repo
        self.tenancy_service = tenancy_service
        self.user_service = user_service
        self.oauth_server = oauth_server
        self.provider_factory = provider_factory

    async def handle_callback(
        self,
        *,
        provider_id: str,
        inner_state: str,
        params: Mapping[str, Any],
        cookies: CookieStore,
    ) -> CallbackRedirect:
        """Complete an OAuth sign-in or link.

        Args:
            provider_id: Provider id from the callback URL.
            inner_state: The callback's ``state`` parameter.
            params: Query and body parameters of the callback, merged.
            cookies: Request cookies. The inner cookie is deleted on every path.

        Returns:
            A 307 redirect, either to the client's ``redirect_uri`` with an
            authorization code or to a trusted ``errorRedirectUrl``.

        Raises:
            StatusError: Missing inner cookie or unknown/replayed outer state.
            InvariantViolation: Corrupt outer state or missing tenancy.
            KnownError: A flow error with no trusted redirect target.
        """
        check_inner_cookie(cookies, inner_state)

        try:
            claimed = await self.outer_info_repo.claim(inner_state)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        record = require_outer_record(claimed)
        outer_info = parse_outer_info(record)

        tenancy = await self.tenancy_service.get_tenancy(outer_info.tenancy_id)
        if tenancy is None:
            raise InvariantViolation(
                "Tenancy in outer info not found; has it been deleted?",
                tenancy_id=str(outer_info.tenancy_id),
            )
        bind_tenancy_context(tenancy.id, tenancy.project_id, tenancy.branch_id)

        try:
            check_not_expired(record.expires_at, utc_now())
            redirect = await self._complete(provider_id, params, inner_state, outer_info, tenancy)
            await self.session.commit()
        except KnownError as error:
            await self.session.rollback()
            logger.info(
                "OAuth callback failed",
                error_code=error.error_code,
                flow_type=outer_info.type.value,
                provider_id=provider_id,
            )
            return redirect_or_raise(error, tenancy, outer_info.error_redirect_url)
        except Exception:
            await self.session.rollback()
            raise

        return redirect

    async def _complete(
        self,
        provider_id: str,
        params: Mapping[str, Any],
        inner_state: str,
        outer_info: OuterOAuthInfo,
        tenancy: TenancyConfig,
    ) -> CallbackRedirect:
        provider_config = find_enabled_provider(tenancy, provider_id)
        provider = self.provider_factory(provider_config)

        # OAuthProviderAccessDenied reaches the error boundary and is only
        # redirected to the errorRedirectUrl fixed when the flow began.
        callback = await provider.get_callback(
            code_verifier=outer_info.inner_code_verifier,
            state=inner_state,
            callback_params=params,
        )

        if outer_info.type == OAuthFlowType.LINK:
            project_user_id = require_link_user(outer_info)
            user = await self.user_repo.get_in_tenancy(tenancy.id, project_user_id)
            if user is None:
                raise InvariantViolation("User not found", user_id=str(project_user_id))
            accounts = await self.account_repo.list_for_user(tenancy.id, project_user_id)
            check_link_target(accounts, provider_config.id, callback.user_info.account_id)

        authorize_request = AuthorizeRequest(
            client_id=str(tenancy.project_id),
            client_secret=outer_info.publishable_client_key,
            redirect_uri=outer_info.redirect_uri,
            state=outer_info.state,
            scope=outer_info.scope,
            grant_type=outer_info.grant_type,
            code_challenge=outer_info.code_challenge,
            code_challenge_method=outer_info.code_challenge_method,
            response_type=outer_info.response_type,
        )
        authenticate = partial(
            self._authenticate, tenancy, provider_config, provider, outer_info, callback
        )
        try:
            return await self.oauth_server.authorize(authorize_request, tenancy, authenticate)
        except InvalidClientError as e:
            if e.parameter == "redirect_uri":
                raise RedirectUrlNotWhitelisted() from e
            raise
        except InvalidScopeError as e:
            logger.error(
                "A client requested an invalid scope",
                scopes=authorize_request.scope,
                tenancy_id=str(tenancy.id),
                error=e.description,
            )
            raise StatusError(
                StatusError.BAD_REQUEST,
                "Invalid scope requested. Please check the scopes you are requesting.",
            ) from e

    async def _authenticate(
        self,
        tenancy: TenancyConfig,
        provider_config: OAuthProviderConfigRead,
        provider: OAuthProvider,
        outer_info: OuterOAuthInfo,
        callback: CallbackResult,
    ) -> AuthenticatedUser:
        """Resolve the identity to a user, then store the provider tokens once."""
        for attempt in range(1, MAX_AUTHORIZATION_ATTEMPTS + 1):
            try:
                async with self.session.begin_nested():
                    user = await self._resolve_and_apply(
                        tenancy, provider_config, outer_info, callback
                    )
                break
            except IntegrityError:
                if attempt == MAX_AUTHORIZATION_ATTEMPTS:
                    raise
                logger.warning(
                    "Concurrent OAuth callback conflicted, resolving again",
                    provider_id=provider_config.id,
                    attempt=attempt,
                )

        self._store_tokens(tenancy, provider_config, provider, outer_info, callback)
        bind_user_context(user.id, callback.user_info.email)
        return user

    async def _resolve_and_apply(
        self,
        tenancy: TenancyConfig,
        provider_config: OAuthProviderConfigRead,
        outer_info: OuterOAuthInfo,
        callback: CallbackResult,
    ) -> AuthenticatedUser:
        user_info = callback.user_info
        existing = await self.account_repo.get_by_provider_account(
            tenancy.id, provider_config.id, user_info.account_id
        )

        email_used_for_auth_elsewhere = False
        if (
            outer_info.type == OAuthFlowType.AUTHENTICATE
            and existing is None
            and tenancy.sign_up_enabled
            and user_info.email
        ):
            channel = await self.channel_repo.get_auth_channel(tenancy.id, user_info.email)
            email_used_for_auth_elsewhere = channel is not None

        decision = resolve_account(
            flow_type=outer_info.type,
            existing_account_user_id=existing.project_user_id if existing else None,
            project_user_id=outer_info.project_user_id,
            sign_up_enabled=tenancy.sign_up_enabled,
            email=user_info.email,
            email_used_for_auth_elsewhere=email_used_for_auth_elsewhere,
        )
        logger.info(
            "OAuth account resolved",
            decision=decision.value,
            provider_id=provider_config.id,
        )

        if decision == AccountDecision.REJECT_ALREADY_LINKED:
            raise OAuthConnectionAlreadyConnectedToAnotherUser()
        if decision == AccountDecision.REJECT_SIGN_UP_DISABLED:
            raise SignUpNotEnabled()

        if decision == AccountDecision.LINK:
            project_user_id = require_link_user(outer_info)
            if existing is None:
                self.account_repo.add(
                    ProjectUserOAuthAccount(
                        tenancy_id=tenancy.id,
                        oauth_provider_config_id=provider_config.id,
                        provider_account_id=user_info.account_id,
                        project_user_id=project_user_id,
                        email=user_info.email,
                    )
                )
                await self.account_repo.flush()
            return AuthenticatedUser(
                id=project_user_id,
                new_user=False,
                after_callback_redirect_url=outer_info.after_callback_redirect_url,
            )

        if decision == AccountDecision.SIGN_IN and existing is not None:
            return AuthenticatedUser(
                id=existing.project_user_id,
                new_user=False,
                after_callback_redirect_url=outer_info.after_callback_redirect_url,
            )

        if not decision.creates_user:
            raise InvariantViolation("Unhandled account decision", decision=decision.value)

        new_user = await self.user_service.admin_create(
            tenancy,
            AdminUserCreate(
                display_name=user_info.display_name,
                profile_image_url=user_info.profile_image_url,
                primary_email=user_info.email,
                primary_email_verified=user_info.email_verified,
                primary_email_auth_enabled=decision == AccountDecision.SIGN_UP_WITH_EMAIL_AUTH,
                oauth_providers=[
                    OAuthAccountCreate(
                        id=provider_config.id,
                        account_id=user_info.account_id,
                        email=user_info.email,
                    )
                ],
            ),
        )
        return AuthenticatedUser(
            id=new_user.id,
            new_user=True,
            after_callback_redirect_url=outer_info.after_callback_redirect_url,
        )

    def _store_tokens(
        self,
        tenancy: TenancyConfig,
        provider_config: OAuthProviderConfigRead,
        provider: OAuthProvider,
        outer_info: OuterOAuthInfo,
        callback: CallbackResult,
    ) -> None:
        """Append the provider's latest tokens. Called once per successful callback."""
        token_set = callback.token_set
        scopes = merge_scopes(provider.scope, outer_info.provider_scope)
        if token_set.refresh_token:
            self.provider_token_repo.add_refresh_token(
                OAuthToken(
                    tenancy_id=tenancy.id,
                    oauth_provider_config_id=provider_config.id,
                    provider_account_id=callback.user_info.account_id,
                    refresh_token=token_set.refresh_token,
                    scopes=scopes,
                )
            )
        self.provider_token_repo.add_access_token(
            OAuthAccessToken(
                tenancy_id=tenancy.id,
                oauth_provider_config_id=provider_config.id,
                provider_account_id=callback.user_info.account_id,
                access_token=token_set.access_token,
                scopes=scopes,
                expires_at=token_set.access_token_expired_at,
            )
        )
