"""Project and tenancy models - the isolation boundary."""

from datetime import datetime
from uuid import UUID, uuid7

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.authhub.models.base import utc_now


class Project(SQLModel, table=True):
    """Root project. Its id is the OAuth client_id and the access token audience."""

    __tablename__ = "projects"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    display_name: str = Field(max_length=100)
    created_at: datetime = Field(default_factory=utc_now)


class Tenancy(SQLModel, table=True):
    """A project branch, owning its own auth configuration."""

    __tablename__ = "tenancies"
    __table_args__ = (
        UniqueConstraint("project_id", "branch_id", name="uq_tenancies_project_branch"),
        {"schema": "public"},
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    project_id: UUID = Field(foreign_key="public.projects.id", index=True)
    branch_id: str = Field(default="main", max_length=100)
    sign_up_enabled: bool = Field(default=True)
    allow_localhost: bool = Field(default=False)
    domains: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    publishable_client_key: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utc_now)


class OAuthProviderConfig(SQLModel, table=True):
    """Third-party OAuth provider enabled on a tenancy."""

    __tablename__ = "oauth_provider_configs"
    __table_args__ = (
        UniqueConstraint("tenancy_id", "provider_id", name="uq_oauth_provider_configs_tenancy"),
        {"schema": "public"},
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    provider_id: str = Field(max_length=50)
    type: str = Field(max_length=50)
    enabled: bool = Field(default=True)
    client_id: str = Field(max_length=255)
    client_secret: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utc_now)
