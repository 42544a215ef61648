"""Provider adapter: one client class driven by per-provider strategy records."""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any
from urllib.parse import urlencode

import httpx

from src.authhub.core.config import get_settings
from src.authhub.core.errors import OAuthProviderAccessDenied, ProviderCallbackError
from src.authhub.core.logging import get_logger
from src.authhub.models.base import utc_now
from src.authhub.schemas.oauth import CallbackResult, OAuthTokenSet, OAuthUserInfo

logger = get_logger(__name__)

UserInfoFetcher = Callable[[httpx.AsyncClient, str], Awaitable[OAuthUserInfo]]


@dataclass(frozen=True)
class ProviderSpec:
    """Everything that differs between providers."""

    type: str
    authorization_endpoint: str
    token_endpoint: str
    default_scope: str
    fetch_user_info: UserInfoFetcher
    extra_authorize_params: Mapping[str, str] = field(default_factory=dict)


class OAuthProvider:
    """OAuth 2.0 client for one configured provider on one tenancy."""

    def __init__(
        self,
        spec: ProviderSpec,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.spec = spec
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._transport = transport

    @property
    def scope(self) -> str:
        return self.spec.default_scope

    def authorization_url(
        self, *, state: str, code_challenge: str, extra_scope: str | None = None
    ) -> str:
        """Build the provider consent URL for a PKCE (S256) authorization request."""
        scope = " ".join(s for s in (self.spec.default_scope, extra_scope) if s)
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": scope,
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
            **self.spec.extra_authorize_params,
        }
        return f"{self.spec.authorization_endpoint}?{urlencode(params)}"

    async def get_callback(
        self,
        *,
        code_verifier: str,
        state: str,
        callback_params: Mapping[str, Any],
    ) -> CallbackResult:
        """Exchange the callback's code for tokens and fetch the user's identity.

        Raises:
            OAuthProviderAccessDenied: The user declined consent at the provider.
            ProviderCallbackError: Any other provider failure.
        """
        error = callback_params.get("error")
        if error == "access_denied":
            raise OAuthProviderAccessDenied(
                details={"description": callback_params.get("error_description")}
                if callback_params.get("error_description")
                else None
            )
        if error:
            raise ProviderCallbackError(f"{self.spec.type} returned error {error!r}")
        if callback_params.get("state") != state:
            raise ProviderCallbackError(f"{self.spec.type} callback state mismatch")
        code = callback_params.get("code")
        if not code:
            raise ProviderCallbackError(f"{self.spec.type} callback is missing the code")

        settings = get_settings()
        try:
            async with httpx.AsyncClient(
                timeout=settings.oauth_provider_timeout_seconds,
                transport=self._transport,
            ) as client:
                token_set = await self._exchange_code(client, code, code_verifier)
                user_info = await self.spec.fetch_user_info(client, token_set.access_token)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning(
                "OAuth provider exchange failed",
                provider_type=self.spec.type,
                error=str(e),
            )
            raise ProviderCallbackError(f"{self.spec.type} exchange failed: {e}") from e

        return CallbackResult(user_info=user_info, token_set=token_set)

    async def _exchange_code(
        self, client: httpx.AsyncClient, code: str, code_verifier: str
    ) -> OAuthTokenSet:
        response = await client.post(
            self.spec.token_endpoint,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code_verifier": code_verifier,
            },
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        payload = response.json()
        # GitHub reports failures with a 200 and an "error" field
        if "error" in payload:
            raise ValueError(f"token endpoint returned error {payload['error']!r}")

        expires_in = payload.get("expires_in")
        return OAuthTokenSet(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            access_token_expired_at=utc_now() + timedelta(seconds=int(expires_in))
            if expires_in
            else None,
        )
