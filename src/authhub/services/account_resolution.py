"""Decide what an incoming federated identity means for a tenancy.

The decision depends only on its inputs, so every branch of the linking and
sign-up policy can be tested without a database.
"""

from enum import StrEnum
from uuid import UUID

from src.authhub.core.errors import InvariantViolation
from src.authhub.models.enums import OAuthFlowType


class AccountDecision(StrEnum):
    REJECT_ALREADY_LINKED = "reject_already_linked"
    REJECT_SIGN_UP_DISABLED = "reject_sign_up_disabled"
    LINK = "link"
    SIGN_IN = "sign_in"
    SIGN_UP_WITH_EMAIL_AUTH = "sign_up_with_email_auth"
    SIGN_UP_WITHOUT_EMAIL_AUTH = "sign_up_without_email_auth"

    @property
    def creates_user(self) -> bool:
        return self in (
            AccountDecision.SIGN_UP_WITH_EMAIL_AUTH,
            AccountDecision.SIGN_UP_WITHOUT_EMAIL_AUTH,
        )


def resolve_account(
    *,
    flow_type: OAuthFlowType,
    existing_account_user_id: UUID | None,
    project_user_id: UUID | None,
    sign_up_enabled: bool,
    email: str | None,
    email_used_for_auth_elsewhere: bool,
) -> AccountDecision:
    """Choose how to handle a provider identity.

    Args:
        flow_type: Whether the user is signing in or linking to a signed-in user.
        existing_account_user_id: Owner of the federated account for this
            (tenancy, provider, provider account id), if one exists.
        project_user_id: The signed-in user for link flows.
        sign_up_enabled: Tenancy sign-up policy.
        email: Email reported by the provider.
        email_used_for_auth_elsewhere: Whether another user already signs in
            with ``email``. The new user is then created without email auth,
            so the address cannot be used to take over the existing account.
    """
    if flow_type == OAuthFlowType.LINK:
        if project_user_id is None:
            raise InvariantViolation("projectUserId missing when linking to a signed-in user")
        if existing_account_user_id is not None and existing_account_user_id != project_user_id:
            return AccountDecision.REJECT_ALREADY_LINKED
        return AccountDecision.LINK

    if existing_account_user_id is not None:
        return AccountDecision.SIGN_IN

    if not sign_up_enabled:
        return AccountDecision.REJECT_SIGN_UP_DISABLED

    if email and not email_used_for_auth_elsewhere:
        return AccountDecision.SIGN_UP_WITH_EMAIL_AUTH
    return AccountDecision.SIGN_UP_WITHOUT_EMAIL_AUTH
