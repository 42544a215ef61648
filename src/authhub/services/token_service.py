"""Session token issuance - refresh token records and signed access tokens."""

from datetime import timedelta
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.authhub.core.config import get_settings
from src.authhub.core.errors import RefreshTokenNotFoundOrExpired
from src.authhub.core.logging import get_logger
from src.authhub.core.security import generate_secure_random_string, hash_token, sign_access_token
from src.authhub.models import ProjectUserRefreshToken
from src.authhub.models.base import utc_now
from src.authhub.repositories import RefreshTokenRepository
from src.authhub.schemas.tenancy import TenancyConfig

logger = get_logger(__name__)


class AuthTokens(BaseModel):
    access_token: str
    refresh_token: str


class TokenService:
    """Creates sessions for project users.

    Every call to ``create_auth_tokens`` creates a new session (refresh token
    row), so a user can hold several concurrent sessions.
    """

    def __init__(self, refresh_repo: RefreshTokenRepository, session: AsyncSession):
        self.refresh_repo = refresh_repo
        self.session = session

    def generate_access_token(
        self, tenancy: TenancyConfig, user_id: UUID, refresh_token_id: UUID
    ) -> str:
        logger.info(
            "session_activity",
            project_id=str(tenancy.project_id),
            branch_id=tenancy.branch_id,
            user_id=str(user_id),
            session_id=str(refresh_token_id),
        )
        return sign_access_token(
            project_id=tenancy.project_id,
            branch_id=tenancy.branch_id,
            user_id=user_id,
            refresh_token_id=refresh_token_id,
        )

    async def create_auth_tokens(
        self,
        tenancy: TenancyConfig,
        user_id: UUID,
        *,
        is_impersonation: bool = False,
        expires_in: timedelta | None = None,
    ) -> AuthTokens:
        """Create a refresh token record and an access token bound to it."""
        settings = get_settings()
        if expires_in is None:
            expires_in = timedelta(days=settings.refresh_token_expire_days)

        refresh_token = generate_secure_random_string()
        record = ProjectUserRefreshToken(
            tenancy_id=tenancy.id,
            project_user_id=user_id,
            refresh_token_hash=hash_token(refresh_token),
            expires_at=utc_now() + expires_in,
            is_impersonation=is_impersonation,
        )
        try:
            self.refresh_repo.add(record)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return AuthTokens(
            access_token=self.generate_access_token(tenancy, user_id, record.id),
            refresh_token=refresh_token,
        )

    async def refresh_access_token(self, tenancy: TenancyConfig, refresh_token: str) -> str:
        """Mint a new access token for the session behind ``refresh_token``.

        Raises:
            RefreshTokenNotFoundOrExpired: No live session in this tenancy.
        """
        record = await self.refresh_repo.get_valid_by_hash_and_tenancy(
            hash_token(refresh_token), tenancy.id
        )
        if record is None:
            raise RefreshTokenNotFoundOrExpired()
        return self.generate_access_token(tenancy, record.project_user_id, record.id)
