"""Project, tenancy and provider config factories."""

import secrets

from polyfactory import Use

from src.authhub.models import OAuthProviderConfig, Project, Tenancy
from tests.factories.base import BaseFactory, generate_uuid7, utc_now

TRUSTED_DOMAIN = "https://app.example.com"


class ProjectFactory(BaseFactory):
    """Factory for generating Project test data."""

    __model__ = Project

    id = Use(generate_uuid7)
    display_name = Use(lambda: f"Test Project {generate_uuid7().hex[-8:]}")
    created_at = Use(utc_now)


class TenancyFactory(BaseFactory):
    """Factory for generating Tenancy test data."""

    __model__ = Tenancy

    id = Use(generate_uuid7)
    project_id = None  # Required FK - must be set explicitly
    branch_id = "main"
    sign_up_enabled = True
    allow_localhost = False
    domains = Use(lambda: [TRUSTED_DOMAIN])
    publishable_client_key = Use(lambda: f"pck_{secrets.token_hex(16)}")
    created_at = Use(utc_now)

    @classmethod
    def sign_up_disabled(cls, **kwargs):
        """Create a tenancy that does not accept new users."""
        return cls.build(sign_up_enabled=False, **kwargs)


class OAuthProviderConfigFactory(BaseFactory):
    """Factory for generating OAuthProviderConfig test data."""

    __model__ = OAuthProviderConfig

    id = Use(generate_uuid7)
    tenancy_id = None  # Required FK - must be set explicitly
    provider_id = "google"
    type = "google"
    enabled = True
    client_id = "google-client-id"
    client_secret = "google-client-secret"
    created_at = Use(utc_now)

    @classmethod
    def disabled(cls, **kwargs):
        """Create a provider config that is switched off."""
        return cls.build(enabled=False, **kwargs)
