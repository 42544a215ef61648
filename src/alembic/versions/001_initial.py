"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # 1. Projects and tenancies
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tenancies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("branch_id", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("sign_up_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("allow_localhost", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("domains", sa.JSON(), nullable=False),
        sa.Column(
            "publishable_client_key", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "branch_id", name="uq_tenancies_project_branch"),
    )
    op.create_index("ix_tenancies_project_id", "tenancies", ["project_id"], unique=False)

    op.create_table(
        "oauth_provider_configs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenancy_id", sa.Uuid(), nullable=False),
        sa.Column("provider_id", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("type", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("client_id", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("client_secret", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenancy_id", "provider_id", name="uq_oauth_provider_configs_tenancy"
        ),
    )
    op.create_index(
        "ix_oauth_provider_configs_tenancy_id",
        "oauth_provider_configs",
        ["tenancy_id"],
        unique=False,
    )

    # 2. Users and contact channels
    op.create_table(
        "project_users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenancy_id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column(
            "profile_image_url", sqlmodel.sql.sqltypes.AutoString(length=2048), nullable=True
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_project_users_tenancy_id", "project_users", ["tenancy_id"], unique=False)

    op.create_table(
        "contact_channels",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenancy_id", sa.Uuid(), nullable=False),
        sa.Column("project_user_id", sa.Uuid(), nullable=False),
        sa.Column("type", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column("value", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        # TRUE or NULL: NULLs never collide in the unique constraint below
        sa.Column("used_for_auth", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["project_user_id"], ["project_users.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenancy_id", "type", "value", "used_for_auth", name="uq_contact_channels_auth_value"
        ),
        sa.CheckConstraint("used_for_auth IS NULL OR used_for_auth", name="ck_used_for_auth_true"),
    )
    op.create_index(
        "ix_contact_channels_tenancy_id", "contact_channels", ["tenancy_id"], unique=False
    )
    op.create_index(
        "ix_contact_channels_project_user_id",
        "contact_channels",
        ["project_user_id"],
        unique=False,
    )
    op.create_index("ix_contact_channels_value", "contact_channels", ["value"], unique=False)

    # 3. Federated accounts and provider tokens
    op.create_table(
        "project_user_oauth_accounts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenancy_id", sa.Uuid(), nullable=False),
        sa.Column(
            "oauth_provider_config_id", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False
        ),
        sa.Column(
            "provider_account_id", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False
        ),
        sa.Column("project_user_id", sa.Uuid(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["project_user_id"], ["project_users.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenancy_id",
            "oauth_provider_config_id",
            "provider_account_id",
            name="uq_project_user_oauth_accounts_identity",
        ),
    )
    op.create_index(
        "ix_project_user_oauth_accounts_tenancy_id",
        "project_user_oauth_accounts",
        ["tenancy_id"],
        unique=False,
    )
    op.create_index(
        "ix_project_user_oauth_accounts_project_user_id",
        "project_user_oauth_accounts",
        ["project_user_id"],
        unique=False,
    )

    for table, token_column in (
        ("oauth_tokens", "refresh_token"),
        ("oauth_access_tokens", "access_token"),
    ):
        columns = [
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("tenancy_id", sa.Uuid(), nullable=False),
            sa.Column(
                "oauth_provider_config_id",
                sqlmodel.sql.sqltypes.AutoString(length=50),
                nullable=False,
            ),
            sa.Column(
                "provider_account_id", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False
            ),
            sa.Column(token_column, sqlmodel.sql.sqltypes.AutoString(), nullable=False),
            sa.Column("scopes", sa.JSON(), nullable=False),
        ]
        if table == "oauth_access_tokens":
            columns.append(sa.Column("expires_at", sa.DateTime(), nullable=True))
        op.create_table(
            table,
            *columns,
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table}_tenancy_id", table, ["tenancy_id"], unique=False)
        op.create_index(
            f"ix_{table}_provider_account_id", table, ["provider_account_id"], unique=False
        )

    # 4. OAuth flow state
    op.create_table(
        "oauth_outer_infos",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("inner_state", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("info", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("consumed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_oauth_outer_infos_inner_state", "oauth_outer_infos", ["inner_state"], unique=True
    )
    op.create_index(
        "ix_oauth_outer_infos_expires_at", "oauth_outer_infos", ["expires_at"], unique=False
    )

    op.create_table(
        "oauth_authorization_codes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenancy_id", sa.Uuid(), nullable=False),
        sa.Column("project_user_id", sa.Uuid(), nullable=False),
        sa.Column("code_hash", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("redirect_uri", sqlmodel.sql.sqltypes.AutoString(length=2048), nullable=False),
        sa.Column("scope", sqlmodel.sql.sqltypes.AutoString(length=1024), nullable=True),
        sa.Column("code_challenge", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column(
            "code_challenge_method", sqlmodel.sql.sqltypes.AutoString(length=10), nullable=True
        ),
        sa.Column("is_new_user", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "after_callback_redirect_url",
            sqlmodel.sql.sqltypes.AutoString(length=2048),
            nullable=True,
        ),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["project_user_id"], ["project_users.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_oauth_authorization_codes_code_hash",
        "oauth_authorization_codes",
        ["code_hash"],
        unique=True,
    )
    op.create_index(
        "ix_oauth_authorization_codes_tenancy_id",
        "oauth_authorization_codes",
        ["tenancy_id"],
        unique=False,
    )
    op.create_index(
        "ix_oauth_authorization_codes_project_user_id",
        "oauth_authorization_codes",
        ["project_user_id"],
        unique=False,
    )

    # 5. Sessions
    op.create_table(
        "project_user_refresh_tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenancy_id", sa.Uuid(), nullable=False),
        sa.Column("project_user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "refresh_token_hash", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False
        ),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column(
            "is_impersonation", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["project_user_id"], ["project_users.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_project_user_refresh_tokens_refresh_token_hash",
        "project_user_refresh_tokens",
        ["refresh_token_hash"],
        unique=True,
    )
    op.create_index(
        "ix_project_user_refresh_tokens_tenancy_id",
        "project_user_refresh_tokens",
        ["tenancy_id"],
        unique=False,
    )
    op.create_index(
        "ix_project_user_refresh_tokens_project_user_id",
        "project_user_refresh_tokens",
        ["project_user_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_table("project_user_refresh_tokens")
    op.drop_table("oauth_authorization_codes")
    op.drop_table("oauth_outer_infos")
    op.drop_table("oauth_access_tokens")
    op.drop_table("oauth_tokens")
    op.drop_table("project_user_oauth_accounts")
    op.drop_table("contact_channels")
    op.drop_table("project_users")
    op.drop_table("oauth_provider_configs")
    op.drop_table("tenancies")
    op.drop_table("projects")
