"""OAuth flow schemas."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.authhub.models.enums import OAuthFlowType


class OuterOAuthInfo(BaseModel):
    """Document stored in ``OAuthOuterInfo.info`` when a sign-in or link flow begins.

    Field names follow the camelCase keys written by the flow starter.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tenancy_id: UUID = Field(alias="tenancyId")
    publishable_client_key: str = Field(alias="publishableClientKey")
    inner_code_verifier: str = Field(alias="innerCodeVerifier")
    redirect_uri: str = Field(alias="redirectUri")
    scope: str
    state: str
    grant_type: str = Field(alias="grantType")
    code_challenge: str = Field(alias="codeChallenge")
    code_challenge_method: str = Field(alias="codeChallengeMethod")
    response_type: str = Field(alias="responseType")
    type: OAuthFlowType
    project_user_id: UUID | None = Field(default=None, alias="projectUserId")
    provider_scope: str | None = Field(default=None, alias="providerScope")
    error_redirect_url: str | None = Field(default=None, alias="errorRedirectUrl")
    after_callback_redirect_url: str | None = Field(
        default=None, alias="afterCallbackRedirectUrl"
    )

    @model_validator(mode="after")
    def check_link_has_user(self) -> "OuterOAuthInfo":
        if self.type == OAuthFlowType.LINK and self.project_user_id is None:
            raise ValueError("projectUserId is required for link flows")
        return self


class OAuthUserInfo(BaseModel):
    """Identity reported by a provider, normalized across variants."""

    account_id: str
    email: str | None = None
    email_verified: bool = False
    display_name: str | None = None
    profile_image_url: str | None = None


class OAuthTokenSet(BaseModel):
    """Tokens returned by a provider's token endpoint."""

    access_token: str
    refresh_token: str | None = None
    access_token_expired_at: datetime | None = None


class CallbackResult(BaseModel):
    user_info: OAuthUserInfo
    token_set: OAuthTokenSet


class AuthorizeRequest(BaseModel):
    """Authorization request replayed from the outer state."""

    client_id: str
    client_secret: str
    redirect_uri: str
    state: str
    scope: str
    grant_type: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    response_type: str


class AuthenticatedUser(BaseModel):
    """Result of the linking/sign-up step."""

    id: UUID
    new_user: bool
    after_callback_redirect_url: str | None = None


class CallbackRedirect(BaseModel):
    """Description of the callback's redirect response."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: Literal[307] = Field(default=307, alias="statusCode")
    body_type: Literal["json"] = Field(default="json", alias="bodyType")
    body: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def location(self) -> str:
        return self.headers["Location"][0]


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int
    is_new_user: bool | None = None
    after_callback_redirect_url: str | None = None
