"""Security utilities - token codec and redirect validation.

Re-exports all security-related functions for convenience.
"""

from src.authhub.core.security.redirect_urls import (
    add_query_params,
    is_localhost,
    validate_redirect_url,
)
from src.authhub.core.security.tokens import (
    ACCESS_TOKEN_ROLE,
    JWT_ISSUER,
    AccessTokenClaims,
    decode_access_token,
    generate_secure_random_string,
    hash_token,
    sign_access_token,
)

__all__ = [
    # Tokens
    "ACCESS_TOKEN_ROLE",
    "JWT_ISSUER",
    "AccessTokenClaims",
    "decode_access_token",
    "generate_secure_random_string",
    "hash_token",
    "sign_access_token",
    # Redirects
    "add_query_params",
    "is_localhost",
    "validate_redirect_url",
]
