"""Internal OAuth 2.0 authorization server for tenant clients.

After a provider callback, AuthHub acts as the authorization server of the
tenant's own client: it issues a short-lived authorization code to the
client's ``redirect_uri`` and later exchanges it (with PKCE) for AuthHub
session tokens.
"""

import hmac
from base64 import urlsafe_b64encode
from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from hashlib import sha256
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.authhub.core.config import get_settings
from src.authhub.core.errors import (
    InvalidClientError,
    InvalidGrantError,
    InvalidRequestError,
    InvalidScopeError,
    UnsupportedGrantTypeError,
    UnsupportedResponseTypeError,
)
from src.authhub.core.logging import get_logger
from src.authhub.core.security import (
    add_query_params,
    generate_secure_random_string,
    hash_token,
    validate_redirect_url,
)
from src.authhub.models import OAuthAuthorizationCode
from src.authhub.models.base import utc_now
from src.authhub.repositories import AuthorizationCodeRepository
from src.authhub.schemas.oauth import (
    AuthenticatedUser,
    AuthorizeRequest,
    CallbackRedirect,
    TokenResponse,
)
from src.authhub.schemas.tenancy import TenancyConfig
from src.authhub.services.oauth_flow import redirect_to
from src.authhub.services.tenancy_service import TenancyService
from src.authhub.services.token_service import TokenService

logger = get_logger(__name__)

CODE_CHALLENGE_METHODS = ("S256", "plain")


def verify_code_challenge(code_verifier: str, code_challenge: str, method: str) -> bool:
    """Check a PKCE verifier (RFC 7636) against the stored challenge."""
    if method == "S256":
        digest = sha256(code_verifier.encode("ascii")).digest()
        expected = urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    else:
        expected = code_verifier
    return hmac.compare_digest(expected, code_challenge)


def check_client(tenancy: TenancyConfig, client_id: str | None, client_secret: str | None) -> None:
    """The client id is the project id; the secret is the publishable client key."""
    if client_id != str(tenancy.project_id) or not hmac.compare_digest(
        client_secret or "", tenancy.publishable_client_key
    ):
        raise InvalidClientError("Invalid client: client is invalid")


class OAuthAuthorizationServer:
    def __init__(
        self,
        code_repo: AuthorizationCodeRepository,
        tenancy_service: TenancyService,
        token_service: TokenService,
        session: AsyncSession,
    ):
        self.code_repo = code_repo
        self.tenancy_service = tenancy_service
        self.token_service = token_service
        self.session = session

    async def authorize(
        self,
        request: AuthorizeRequest,
        tenancy: TenancyConfig,
        authenticate: Callable[[], Awaitable[AuthenticatedUser]],
    ) -> CallbackRedirect:
        """Validate the authorization request, authenticate, and issue a code.

        The request is fully validated before ``authenticate`` runs, so an
        invalid client or scope never creates users or federated accounts.
        The code row is added to the session but not committed.
        """
        settings = get_settings()

        check_client(tenancy, request.client_id, request.client_secret)
        if not validate_redirect_url(request.redirect_uri, tenancy.domains, tenancy.allow_localhost):
            raise InvalidClientError(
                "Invalid client: `redirect_uri` does not match client value",
                parameter="redirect_uri",
            )
        if request.response_type != "code":
            raise UnsupportedResponseTypeError(
                "Unsupported response type: `response_type` is not supported",
                parameter="response_type",
            )
        requested = request.scope.split()
        if any(scope not in settings.oauth_supported_scopes for scope in requested):
            raise InvalidScopeError("Invalid scope: Requested scope is invalid", parameter="scope")
        code_challenge_method = request.code_challenge_method or "plain"
        if request.code_challenge and code_challenge_method not in CODE_CHALLENGE_METHODS:
            raise InvalidRequestError(
                "Invalid parameter: `code_challenge_method`",
                parameter="code_challenge_method",
            )

        user = await authenticate()

        code = generate_secure_random_string()
        self.code_repo.add(
            OAuthAuthorizationCode(
                tenancy_id=tenancy.id,
                project_user_id=user.id,
                code_hash=hash_token(code),
                redirect_uri=request.redirect_uri,
                scope=request.scope or None,
                code_challenge=request.code_challenge or None,
                code_challenge_method=code_challenge_method if request.code_challenge else None,
                is_new_user=user.new_user,
                after_callback_redirect_url=user.after_callback_redirect_url,
                expires_at=utc_now()
                + timedelta(minutes=settings.authorization_code_expire_minutes),
            )
        )
        logger.info("Authorization code issued", user_id=str(user.id), new_user=user.new_user)
        return redirect_to(
            add_query_params(request.redirect_uri, {"code": code, "state": request.state})
        )

    async def exchange_token(self, form: Mapping[str, str]) -> TokenResponse:
        """Token endpoint (``authorization_code`` and ``refresh_token`` grants)."""
        grant_type = form.get("grant_type")
        if not grant_type:
            raise InvalidRequestError("Missing parameter: `grant_type`", parameter="grant_type")
        if grant_type == "authorization_code":
            return await self._exchange_authorization_code(form)
        if grant_type == "refresh_token":
            return await self._exchange_refresh_token(form)
        raise UnsupportedGrantTypeError("Unsupported grant type: `grant_type` is invalid")

    async def _exchange_authorization_code(self, form: Mapping[str, str]) -> TokenResponse:
        code = form.get("code")
        if not code:
            raise InvalidRequestError("Missing parameter: `code`", parameter="code")

        try:
            record = await self.code_repo.consume(hash_token(code))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        if record is None:
            raise InvalidGrantError("Invalid grant: authorization code is invalid")

        tenancy = await self.tenancy_service.get_tenancy(record.tenancy_id)
        if tenancy is None:
            raise InvalidGrantError("Invalid grant: authorization code is invalid")
        check_client(tenancy, form.get("client_id"), form.get("client_secret"))

        if form.get("redirect_uri") != record.redirect_uri:
            raise InvalidGrantError("Invalid grant: `redirect_uri` is invalid")
        if record.code_challenge:
            code_verifier = form.get("code_verifier")
            if not code_verifier:
                raise InvalidGrantError("Missing parameter: `code_verifier`")
            if not verify_code_challenge(
                code_verifier, record.code_challenge, record.code_challenge_method or "plain"
            ):
                raise InvalidGrantError("Invalid grant: code verifier is invalid")

        tokens = await self.token_service.create_auth_tokens(tenancy, record.project_user_id)
        return TokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=get_settings().access_token_expire_minutes * 60,
            is_new_user=record.is_new_user,
            after_callback_redirect_url=record.after_callback_redirect_url,
        )

    async def _exchange_refresh_token(self, form: Mapping[str, str]) -> TokenResponse:
        refresh_token = form.get("refresh_token")
        if not refresh_token:
            raise InvalidRequestError(
                "Missing parameter: `refresh_token`", parameter="refresh_token"
            )
        try:
            project_id = UUID(form.get("client_id") or "")
        except ValueError as e:
            raise InvalidClientError("Invalid client: client is invalid") from e

        tenancy = await self.tenancy_service.get_tenancy_by_project(
            project_id, form.get("branch_id") or "main"
        )
        if tenancy is None:
            raise InvalidClientError("Invalid client: client is invalid")
        check_client(tenancy, form.get("client_id"), form.get("client_secret"))

        access_token = await self.token_service.refresh_access_token(tenancy, refresh_token)
        return TokenResponse(
            access_token=access_token,
            expires_in=get_settings().access_token_expire_minutes * 60,
        )
