"""OAuth flow and federated identity models."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid7

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.authhub.models.base import utc_now


class OAuthOuterInfo(SQLModel, table=True):
    """Server-side record of a pending OAuth attempt, keyed by the inner state."""

    __tablename__ = "oauth_outer_infos"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    inner_state: str = Field(max_length=255, unique=True, index=True)
    info: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    expires_at: datetime = Field(index=True)
    consumed_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class ProjectUserOAuthAccount(SQLModel, table=True):
    """Binding between a project user and a third-party provider identity."""

    __tablename__ = "project_user_oauth_accounts"
    __table_args__ = (
        UniqueConstraint(
            "tenancy_id",
            "oauth_provider_config_id",
            "provider_account_id",
            name="uq_project_user_oauth_accounts_identity",
        ),
        {"schema": "public"},
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    oauth_provider_config_id: str = Field(max_length=50)
    provider_account_id: str = Field(max_length=255)
    project_user_id: UUID = Field(foreign_key="public.project_users.id", index=True)
    email: str | None = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now)


class OAuthToken(SQLModel, table=True):
    """Provider refresh token. Append-only."""

    __tablename__ = "oauth_tokens"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    oauth_provider_config_id: str = Field(max_length=50)
    provider_account_id: str = Field(max_length=255, index=True)
    refresh_token: str
    scopes: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now)


class OAuthAccessToken(SQLModel, table=True):
    """Provider access token. Append-only."""

    __tablename__ = "oauth_access_tokens"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    oauth_provider_config_id: str = Field(max_length=50)
    provider_account_id: str = Field(max_length=255, index=True)
    access_token: str
    scopes: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    expires_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class OAuthAuthorizationCode(SQLModel, table=True):
    """Single-use authorization code handed to the tenant's client after a callback."""

    __tablename__ = "oauth_authorization_codes"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    project_user_id: UUID = Field(foreign_key="public.project_users.id", index=True)
    code_hash: str = Field(max_length=255, unique=True, index=True)
    redirect_uri: str = Field(max_length=2048)
    scope: str | None = Field(default=None, max_length=1024)
    code_challenge: str | None = Field(default=None, max_length=255)
    code_challenge_method: str | None = Field(default=None, max_length=10)
    is_new_user: bool = Field(default=False)
    after_callback_redirect_url: str | None = Field(default=None, max_length=2048)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)
