"""Third-party OAuth provider adapters."""

from src.authhub.providers.base import OAuthProvider, ProviderSpec
from src.authhub.providers.registry import get_provider, provider_redirect_uri
from src.authhub.providers.specs import PROVIDER_SPECS

__all__ = [
    "PROVIDER_SPECS",
    "OAuthProvider",
    "ProviderSpec",
    "get_provider",
    "provider_redirect_uri",
]
