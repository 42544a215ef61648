from uuid import UUID

from pydantic import BaseModel


class OAuthProviderConfigRead(BaseModel):
    id: str
    type: str
    enabled: bool
    client_id: str
    client_secret: str


class TenancyConfig(BaseModel):
    """A tenancy with the configuration the OAuth flow depends on."""

    id: UUID
    project_id: UUID
    branch_id: str
    sign_up_enabled: bool
    allow_localhost: bool
    domains: list[str]
    publishable_client_key: str
    oauth_providers: list[OAuthProviderConfigRead]

    def find_provider(self, provider_id: str) -> OAuthProviderConfigRead | None:
        return next((p for p in self.oauth_providers if p.id == provider_id), None)
