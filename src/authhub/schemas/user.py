from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class OAuthAccountCreate(BaseModel):
    id: str = Field(description="Provider id from the tenancy config")
    account_id: str
    email: str | None = None


class AdminUserCreate(BaseModel):
    display_name: str | None = Field(None, max_length=255)
    profile_image_url: str | None = Field(None, max_length=2048)
    primary_email: str | None = Field(None, max_length=255)
    primary_email_verified: bool = False
    primary_email_auth_enabled: bool = False
    oauth_providers: list[OAuthAccountCreate] = Field(default_factory=list)


class UserRead(BaseModel):
    id: UUID
    display_name: str | None
    profile_image_url: str | None
    primary_email: str | None = None
    primary_email_verified: bool = False
    primary_email_auth_enabled: bool = False
    oauth_providers: list[str] = Field(default_factory=list)
    created_at: datetime
