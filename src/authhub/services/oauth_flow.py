"""Transitions of the OAuth callback state machine.

Each function takes the current state plus its inputs and either returns the
next piece of state or raises a typed error. None of them touch the database
or the network; ``OAuthCallbackService`` composes them with persistence.
"""

import json
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from pydantic import ValidationError

from src.authhub.core.config import get_settings
from src.authhub.core.errors import (
    InvariantViolation,
    KnownError,
    OAuthProviderNotFoundOrNotEnabled,
    OuterOAuthTimeout,
    StatusError,
    UserAlreadyConnectedToAnotherOAuthConnection,
)
from src.authhub.core.security import add_query_params, validate_redirect_url
from src.authhub.models import OAuthOuterInfo, ProjectUserOAuthAccount
from src.authhub.schemas.oauth import CallbackRedirect, OuterOAuthInfo
from src.authhub.schemas.tenancy import OAuthProviderConfigRead, TenancyConfig

INNER_COOKIE_VALUE = "true"


class CookieStore(Protocol):
    """Request-scoped cookie access."""

    def get(self, name: str) -> str | None: ...

    def delete(self, name: str) -> None: ...


def inner_cookie_name(inner_state: str) -> str:
    return f"{get_settings().oauth_inner_cookie_prefix}{inner_state}"


def check_inner_cookie(cookies: CookieStore, inner_state: str) -> None:
    """Consume the inner cookie. It is deleted whether or not it is valid."""
    name = inner_cookie_name(inner_state)
    value = cookies.get(name)
    cookies.delete(name)
    if value != INNER_COOKIE_VALUE:
        raise StatusError(
            StatusError.BAD_REQUEST,
            "Inner OAuth cookie not found. This is likely because you refreshed the page "
            "during the OAuth sign in process. Please try signing in again",
        )


def require_outer_record(record: OAuthOuterInfo | None) -> OAuthOuterInfo:
    """A missing record means an unknown, or already used, inner state."""
    if record is None:
        raise StatusError(
            StatusError.BAD_REQUEST, "Invalid OAuth cookie. Please try signing in again."
        )
    return record


def parse_outer_info(record: OAuthOuterInfo) -> OuterOAuthInfo:
    try:
        return OuterOAuthInfo.model_validate(record.info)
    except ValidationError as e:
        raise InvariantViolation(
            "Invalid outer info", outer_info_id=str(record.id), errors=e.error_count()
        ) from e


def check_not_expired(expires_at: datetime, now: datetime) -> None:
    if expires_at < now:
        raise OuterOAuthTimeout()


def find_enabled_provider(tenancy: TenancyConfig, provider_id: str) -> OAuthProviderConfigRead:
    provider = tenancy.find_provider(provider_id)
    if provider is None or not provider.enabled:
        raise OAuthProviderNotFoundOrNotEnabled()
    return provider


def require_link_user(outer_info: OuterOAuthInfo) -> UUID:
    if outer_info.project_user_id is None:
        raise InvariantViolation("projectUserId not found in outer info for a link flow")
    return outer_info.project_user_id


def check_link_target(
    user_accounts: Iterable[ProjectUserOAuthAccount],
    provider_id: str,
    provider_account_id: str,
) -> None:
    """A user can be linked to at most one account per provider."""
    for account in user_accounts:
        if (
            account.oauth_provider_config_id == provider_id
            and account.provider_account_id != provider_account_id
        ):
            raise UserAlreadyConnectedToAnotherOAuthConnection()


def merge_scopes(*scopes: str | None) -> list[str]:
    """Split space-separated scope strings and de-duplicate, keeping first-seen order."""
    merged: dict[str, None] = {}
    for scope in scopes:
        for item in (scope or "").split():
            merged[item] = None
    return list(merged)


def build_error_redirect(error: KnownError, error_redirect_url: str) -> CallbackRedirect:
    location = add_query_params(
        error_redirect_url,
        {
            "errorCode": error.error_code,
            "message": error.message,
            "details": json.dumps(error.details or {}),
        },
    )
    return redirect_to(location)


def redirect_or_raise(
    error: KnownError, tenancy: TenancyConfig, error_redirect_url: str | None
) -> CallbackRedirect:
    """Redirect the error to the caller, or re-raise it if the URL is not trusted."""
    if not error_redirect_url or not validate_redirect_url(
        error_redirect_url, tenancy.domains, tenancy.allow_localhost
    ):
        raise error
    return build_error_redirect(error, error_redirect_url)


def redirect_to(location: str, body: dict | None = None) -> CallbackRedirect:
    return CallbackRedirect(body=body or {}, headers={"Location": [location]})
