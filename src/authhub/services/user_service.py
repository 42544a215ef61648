"""Project user service."""

from uuid import UUID

from src.authhub.core.errors import StatusError
from src.authhub.core.logging import get_logger
from src.authhub.models import (
    ContactChannel,
    ContactChannelType,
    ProjectUser,
    ProjectUserOAuthAccount,
)
from src.authhub.repositories import (
    ContactChannelRepository,
    OAuthAccountRepository,
    ProjectUserRepository,
)
from src.authhub.schemas.tenancy import TenancyConfig
from src.authhub.schemas.user import AdminUserCreate, UserRead

logger = get_logger(__name__)


class UserService:
    def __init__(
        self,
        user_repo: ProjectUserRepository,
        channel_repo: ContactChannelRepository,
        account_repo: OAuthAccountRepository,
    ):
        self.user_repo = user_repo
        self.channel_repo = channel_repo
        self.account_repo = account_repo

    async def admin_create(self, tenancy: TenancyConfig, data: AdminUserCreate) -> ProjectUser:
        """Create a user with its primary email and federated accounts.

        Rows are flushed but not committed, so the caller's transaction (or
        savepoint) decides whether the user survives. A unique-constraint
        conflict surfaces here as ``IntegrityError``.
        """
        for account in data.oauth_providers:
            if tenancy.find_provider(account.id) is None:
                raise StatusError(
                    StatusError.BAD_REQUEST, f"OAuth provider {account.id} not found"
                )

        user = ProjectUser(
            tenancy_id=tenancy.id,
            display_name=data.display_name,
            profile_image_url=data.profile_image_url,
        )
        self.user_repo.add(user)

        if data.primary_email:
            self.channel_repo.add(
                ContactChannel(
                    tenancy_id=tenancy.id,
                    project_user_id=user.id,
                    type=ContactChannelType.EMAIL.value,
                    value=data.primary_email,
                    is_primary=True,
                    is_verified=data.primary_email_verified,
                    used_for_auth=True if data.primary_email_auth_enabled else None,
                )
            )

        for account in data.oauth_providers:
            self.account_repo.add(
                ProjectUserOAuthAccount(
                    tenancy_id=tenancy.id,
                    oauth_provider_config_id=account.id,
                    provider_account_id=account.account_id,
                    project_user_id=user.id,
                    email=account.email,
                )
            )

        await self.user_repo.flush()
        logger.info(
            "Project user created",
            user_id=str(user.id),
            primary_email_auth_enabled=data.primary_email_auth_enabled,
            oauth_providers=[a.id for a in data.oauth_providers],
        )
        return user

    async def get_user(self, tenancy_id: UUID, user_id: UUID) -> UserRead | None:
        user = await self.user_repo.get_in_tenancy(tenancy_id, user_id)
        if user is None:
            return None
        channel = await self.channel_repo.get_primary_for_user(tenancy_id, user_id)
        accounts = await self.account_repo.list_for_user(tenancy_id, user_id)
        return UserRead(
            id=user.id,
            display_name=user.display_name,
            profile_image_url=user.profile_image_url,
            primary_email=channel.value if channel else None,
            primary_email_verified=channel.is_verified if channel else False,
            primary_email_auth_enabled=bool(channel and channel.used_for_auth),
            oauth_providers=[a.oauth_provider_config_id for a in accounts],
            created_at=user.created_at,
        )
