"""Tenancy service - resolves a tenancy and its auth configuration."""

from uuid import UUID

from src.authhub.models import Tenancy
from src.authhub.repositories import TenancyRepository
from src.authhub.schemas.tenancy import OAuthProviderConfigRead, TenancyConfig


class TenancyService:
    def __init__(self, tenancy_repo: TenancyRepository):
        self.tenancy_repo = tenancy_repo

    async def get_tenancy(self, tenancy_id: UUID) -> TenancyConfig | None:
        tenancy = await self.tenancy_repo.get_by_id(tenancy_id)
        if tenancy is None:
            return None
        return await self._to_config(tenancy)

    async def get_tenancy_by_project(
        self, project_id: UUID, branch_id: str = "main"
    ) -> TenancyConfig | None:
        tenancy = await self.tenancy_repo.get_by_project_and_branch(project_id, branch_id)
        if tenancy is None:
            return None
        return await self._to_config(tenancy)

    async def _to_config(self, tenancy: Tenancy) -> TenancyConfig:
        providers = await self.tenancy_repo.list_provider_configs(tenancy.id)
        return TenancyConfig(
            id=tenancy.id,
            project_id=tenancy.project_id,
            branch_id=tenancy.branch_id,
            sign_up_enabled=tenancy.sign_up_enabled,
            allow_localhost=tenancy.allow_localhost,
            domains=list(tenancy.domains),
            publishable_client_key=tenancy.publishable_client_key,
            oauth_providers=[
                OAuthProviderConfigRead(
                    id=p.provider_id,
                    type=p.type,
                    enabled=p.enabled,
                    client_id=p.client_id,
                    client_secret=p.client_secret,
                )
                for p in providers
            ],
        )
