"""Project user models - scoped to a tenancy."""

from datetime import datetime
from uuid import UUID, uuid7

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from src.authhub.models.base import utc_now
from src.authhub.models.enums import ContactChannelType


class ProjectUser(SQLModel, table=True):
    """End user of a tenant's application."""

    __tablename__ = "project_users"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    display_name: str | None = Field(default=None, max_length=255)
    profile_image_url: str | None = Field(default=None, max_length=2048)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ContactChannel(SQLModel, table=True):
    """Email address (or other channel) owned by a project user.

    ``used_for_auth`` is either True or NULL. NULLs are distinct in unique
    constraints, so at most one channel per value can authenticate in a tenancy.
    """

    __tablename__ = "contact_channels"
    __table_args__ = (
        UniqueConstraint(
            "tenancy_id",
            "type",
            "value",
            "used_for_auth",
            name="uq_contact_channels_auth_value",
        ),
        {"schema": "public"},
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    tenancy_id: UUID = Field(foreign_key="public.tenancies.id", index=True)
    project_user_id: UUID = Field(foreign_key="public.project_users.id", index=True)
    type: str = Field(default=ContactChannelType.EMAIL.value, max_length=20)
    value: str = Field(max_length=255, index=True)
    is_primary: bool = Field(default=False)
    is_verified: bool = Field(default=False)
    used_for_auth: bool | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
