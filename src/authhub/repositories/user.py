"""Repositories for ProjectUser and ContactChannel entities."""

from uuid import UUID

from sqlmodel import select

from src.authhub.models import ContactChannel, ContactChannelType, ProjectUser
from src.authhub.repositories.base import BaseRepository


class ProjectUserRepository(BaseRepository[ProjectUser]):
    """Repository for ProjectUser entity. Lookups are always tenancy-scoped."""

    model = ProjectUser

    async def get_in_tenancy(self, tenancy_id: UUID, user_id: UUID) -> ProjectUser | None:
        result = await self.session.execute(
            select(ProjectUser).where(
                ProjectUser.id == user_id,
                ProjectUser.tenancy_id == tenancy_id,
            )
        )
        return result.scalar_one_or_none()


class ContactChannelRepository(BaseRepository[ContactChannel]):
    """Repository for ContactChannel entity."""

    model = ContactChannel

    async def get_auth_channel(
        self,
        tenancy_id: UUID,
        value: str,
        type: ContactChannelType = ContactChannelType.EMAIL,
    ) -> ContactChannel | None:
        """Get the channel that currently authenticates with ``value``, if any."""
        result = await self.session.execute(
            select(ContactChannel).where(
                ContactChannel.tenancy_id == tenancy_id,
                ContactChannel.type == type.value,
                ContactChannel.value == value,
                ContactChannel.used_for_auth == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    async def get_primary_for_user(
        self, tenancy_id: UUID, user_id: UUID
    ) -> ContactChannel | None:
        result = await self.session.execute(
            select(ContactChannel).where(
                ContactChannel.tenancy_id == tenancy_id,
                ContactChannel.project_user_id == user_id,
                ContactChannel.is_primary == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()
