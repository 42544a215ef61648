"""Repository for ProjectUserRefreshToken entity."""

from uuid import UUID

from sqlmodel import select

from src.authhub.models import ProjectUserRefreshToken
from src.authhub.models.base import utc_now
from src.authhub.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[ProjectUserRefreshToken]):
    """Repository for session refresh tokens."""

    model = ProjectUserRefreshToken

    async def get_valid_by_hash_and_tenancy(
        self, token_hash: str, tenancy_id: UUID
    ) -> ProjectUserRefreshToken | None:
        """Get a non-expired refresh token by hash, scoped to tenancy.

        Args:
            token_hash: The hashed token to look up
            tenancy_id: The tenancy ID to scope the search
        """
        result = await self.session.execute(
            select(ProjectUserRefreshToken).where(
                ProjectUserRefreshToken.refresh_token_hash == token_hash,
                ProjectUserRefreshToken.tenancy_id == tenancy_id,
                ProjectUserRefreshToken.expires_at > utc_now(),
            )
        )
        return result.scalar_one_or_none()
