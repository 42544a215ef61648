"""OAuth flow state and federated account factories."""

import secrets
from datetime import timedelta

from polyfactory import Use

from src.authhub.models import (
    OAuthAuthorizationCode,
    OAuthOuterInfo,
    ProjectUserOAuthAccount,
)
from tests.factories.base import BaseFactory, generate_uuid7, utc_now


class OAuthOuterInfoFactory(BaseFactory):
    """Factory for generating OAuthOuterInfo test data.

    ``info`` must be set explicitly; see ``tests.fakes.outer_info_document``.
    """

    __model__ = OAuthOuterInfo

    id = Use(generate_uuid7)
    inner_state = Use(lambda: secrets.token_urlsafe(16))
    info = Use(dict)
    expires_at = Use(lambda: utc_now() + timedelta(minutes=10))
    consumed_at = None
    created_at = Use(utc_now)

    @classmethod
    def expired(cls, **kwargs):
        """Create an outer state whose flow has timed out."""
        return cls.build(expires_at=utc_now() - timedelta(minutes=1), **kwargs)


class OAuthAccountFactory(BaseFactory):
    """Factory for generating ProjectUserOAuthAccount test data."""

    __model__ = ProjectUserOAuthAccount

    id = Use(generate_uuid7)
    tenancy_id = None  # Required FK - must be set explicitly
    project_user_id = None  # Required FK - must be set explicitly
    oauth_provider_config_id = "google"
    provider_account_id = Use(lambda: str(secrets.randbelow(10**12)))
    email = None
    created_at = Use(utc_now)


class AuthorizationCodeFactory(BaseFactory):
    """Factory for generating OAuthAuthorizationCode test data."""

    __model__ = OAuthAuthorizationCode

    id = Use(generate_uuid7)
    tenancy_id = None  # Required FK - must be set explicitly
    project_user_id = None  # Required FK - must be set explicitly
    code_hash = Use(lambda: secrets.token_hex(32))
    redirect_uri = "https://app.example.com/callback"
    scope = "legacy"
    code_challenge = None
    code_challenge_method = None
    is_new_user = False
    after_callback_redirect_url = None
    expires_at = Use(lambda: utc_now() + timedelta(minutes=3))
    created_at = Use(utc_now)

    @classmethod
    def expired(cls, **kwargs):
        """Create a code past its lifetime."""
        return cls.build(expires_at=utc_now() - timedelta(seconds=1), **kwargs)
