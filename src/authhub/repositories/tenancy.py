"""Repositories for Tenancy and OAuthProviderConfig entities."""

from uuid import UUID

from sqlmodel import select

from src.authhub.models import OAuthProviderConfig, Project, Tenancy
from src.authhub.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    model = Project


class TenancyRepository(BaseRepository[Tenancy]):
    """Repository for Tenancy entity."""

    model = Tenancy

    async def list_provider_configs(self, tenancy_id: UUID) -> list[OAuthProviderConfig]:
        """Get every OAuth provider configured on a tenancy, enabled or not."""
        result = await self.session.execute(
            select(OAuthProviderConfig)
            .where(OAuthProviderConfig.tenancy_id == tenancy_id)
            .order_by(OAuthProviderConfig.provider_id)
        )
        return list(result.scalars().all())

    async def get_by_project_and_branch(
        self, project_id: UUID, branch_id: str = "main"
    ) -> Tenancy | None:
        result = await self.session.execute(
            select(Tenancy).where(
                Tenancy.project_id == project_id,
                Tenancy.branch_id == branch_id,
            )
        )
        return result.scalar_one_or_none()
