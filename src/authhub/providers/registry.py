"""Provider dispatch by configured type."""

import httpx

from src.authhub.core.config import get_settings
from src.authhub.core.errors import InvariantViolation
from src.authhub.providers.base import OAuthProvider
from src.authhub.providers.specs import PROVIDER_SPECS
from src.authhub.schemas.tenancy import OAuthProviderConfigRead


def provider_redirect_uri(provider_id: str) -> str:
    return f"{get_settings().api_url}/api/v1/auth/oauth/callback/{provider_id}"


def get_provider(
    config: OAuthProviderConfigRead,
    transport: httpx.AsyncBaseTransport | None = None,
) -> OAuthProvider:
    """Build the provider client for a tenancy's provider config."""
    spec = PROVIDER_SPECS.get(config.type)
    if spec is None:
        raise InvariantViolation("Unknown OAuth provider type", type=config.type, id=config.id)
    return OAuthProvider(
        spec,
        client_id=config.client_id,
        client_secret=config.client_secret,
        redirect_uri=provider_redirect_uri(config.id),
        transport=transport,
    )
