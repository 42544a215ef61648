"""Repositories for OAuth flow state, federated accounts and provider tokens."""

from uuid import UUID

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.authhub.models import (
    OAuthAccessToken,
    OAuthAuthorizationCode,
    OAuthOuterInfo,
    OAuthToken,
    ProjectUserOAuthAccount,
)
from src.authhub.models.base import utc_now
from src.authhub.repositories.base import BaseRepository


class OuterInfoRepository(BaseRepository[OAuthOuterInfo]):
    """Outer-state store."""

    model = OAuthOuterInfo

    async def claim(self, inner_state: str) -> OAuthOuterInfo | None:
        """Mark the outer state as consumed and return it.

        Returns None if the state does not exist or was already claimed, so
        only one of two racing callbacks can proceed. Expiry is not checked
        here; the caller reports it as a redirectable error.
        """
        stmt = (
            update(OAuthOuterInfo)
            .where(OAuthOuterInfo.inner_state == inner_state)  # type: ignore[arg-type]
            .where(OAuthOuterInfo.consumed_at.is_(None))  # type: ignore[union-attr]
            .values(consumed_at=utc_now())
            .returning(OAuthOuterInfo)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class OAuthAccountRepository(BaseRepository[ProjectUserOAuthAccount]):
    """Repository for federated accounts."""

    model = ProjectUserOAuthAccount

    async def get_by_provider_account(
        self,
        tenancy_id: UUID,
        provider_config_id: str,
        provider_account_id: str,
    ) -> ProjectUserOAuthAccount | None:
        """Get the federated account for a provider identity (unique per tenancy)."""
        result = await self.session.execute(
            select(ProjectUserOAuthAccount).where(
                ProjectUserOAuthAccount.tenancy_id == tenancy_id,
                ProjectUserOAuthAccount.oauth_provider_config_id == provider_config_id,
                ProjectUserOAuthAccount.provider_account_id == provider_account_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self, tenancy_id: UUID, user_id: UUID
    ) -> list[ProjectUserOAuthAccount]:
        result = await self.session.execute(
            select(ProjectUserOAuthAccount).where(
                ProjectUserOAuthAccount.tenancy_id == tenancy_id,
                ProjectUserOAuthAccount.project_user_id == user_id,
            )
        )
        return list(result.scalars().all())


class ProviderTokenRepository:
    """Append-only store for provider access and refresh tokens."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def add_refresh_token(self, token: OAuthToken) -> None:
        self.session.add(token)

    def add_access_token(self, token: OAuthAccessToken) -> None:
        self.session.add(token)


class AuthorizationCodeRepository(BaseRepository[OAuthAuthorizationCode]):
    """Repository for authorization codes issued to tenant clients."""

    model = OAuthAuthorizationCode

    async def consume(self, code_hash: str) -> OAuthAuthorizationCode | None:
        """Delete the code and return it. A code can be consumed at most once.

        Expired codes are consumed too, and reported as missing.
        """
        stmt = (
            delete(OAuthAuthorizationCode)
            .where(OAuthAuthorizationCode.code_hash == code_hash)  # type: ignore[arg-type]
            .returning(OAuthAuthorizationCode)
        )
        result = await self.session.execute(stmt)
        code = result.scalar_one_or_none()
        if code is None or code.expires_at <= utc_now():
            return None
        return code
