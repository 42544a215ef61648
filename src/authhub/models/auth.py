"""Session models."""

from datetime import datetime
from uuid import UUID, uuid7

from sqlmodel import Field, SQLModel

from src.authhub.models.base import utc_now


class ProjectUserRefreshToken(SQLModel, table=True):
    """Refresh token backing one session. Its id is the access token's refreshTokenId."""

    __tablename__ = "project_user_refresh_tokens"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    project_user_id: UUID = Field(foreign_key="public.project_users.id", index=True)
    refresh_token_hash: str = Field(max_length=255, unique=True, index=True)
    expires_at: datetime
    is_impersonation: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
