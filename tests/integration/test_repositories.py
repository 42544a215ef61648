"""Repository behavior that only a real database can show.

Covers the atomic claim of outer OAuth state, single-use authorization codes
and the uniqueness rules that back account resolution.
"""

import asyncio

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.authhub.repositories import (
    AuthorizationCodeRepository,
    ContactChannelRepository,
    OuterInfoRepository,
)
from tests.factories import (
    AuthorizationCodeFactory,
    ContactChannelFactory,
    OAuthAccountFactory,
    OAuthOuterInfoFactory,
    ProjectUserFactory,
)
from tests.utils import cleanup_outer_infos

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


@pytest.fixture
async def outer_info(engine: AsyncEngine, db_session: AsyncSession):
    record = OAuthOuterInfoFactory.build(info={"tenancyId": "placeholder"})
    db_session.add(record)
    await db_session.commit()

    yield record

    async with engine.connect() as conn:
        await cleanup_outer_infos(conn, [record.inner_state])
        await conn.commit()


@pytest.fixture
async def user(db_session: AsyncSession, db_tenancy):
    user = ProjectUserFactory.build(tenancy_id=db_tenancy.id)
    db_session.add(user)
    await db_session.commit()
    return user


class TestOuterInfoClaim:
    async def test_claim_marks_consumed(self, db_session, outer_info):
        repo = OuterInfoRepository(db_session)

        claimed = await repo.claim(outer_info.inner_state)
        await db_session.commit()

        assert claimed is not None
        assert claimed.id == outer_info.id
        assert claimed.consumed_at is not None
        assert await repo.claim(outer_info.inner_state) is None

    async def test_unknown_state(self, db_session):
        assert await OuterInfoRepository(db_session).claim("no-such-state") is None

    async def test_concurrent_claims_have_one_winner(self, engine, outer_info):
        async def claim():
            async with AsyncSession(engine, expire_on_commit=False) as session:
                record = await OuterInfoRepository(session).claim(outer_info.inner_state)
                await session.commit()
                return record

        results = await asyncio.gather(claim(), claim())

        assert len([r for r in results if r is not None]) == 1


class TestAuthorizationCodeConsume:
    async def test_code_is_consumed_once(self, db_session, db_tenancy, user):
        code = AuthorizationCodeFactory.build(tenancy_id=db_tenancy.id, project_user_id=user.id)
        db_session.add(code)
        await db_session.commit()
        repo = AuthorizationCodeRepository(db_session)

        first = await repo.consume(code.code_hash)
        await db_session.commit()
        second = await repo.consume(code.code_hash)

        assert first is not None
        assert first.project_user_id == user.id
        assert second is None

    async def test_expired_code_is_deleted_and_reported_missing(
        self, db_session, db_tenancy, user
    ):
        code = AuthorizationCodeFactory.expired(tenancy_id=db_tenancy.id, project_user_id=user.id)
        db_session.add(code)
        await db_session.commit()
        repo = AuthorizationCodeRepository(db_session)

        assert await repo.consume(code.code_hash) is None
        await db_session.commit()
        assert await repo.get_by_id(code.id) is None


class TestUniqueness:
    async def test_one_auth_channel_per_value(self, db_session, db_tenancy, user):
        other = ProjectUserFactory.build(tenancy_id=db_tenancy.id)
        db_session.add(other)
        await db_session.flush()
        db_session.add(
            ContactChannelFactory.build(
                tenancy_id=db_tenancy.id, project_user_id=user.id, value="ada@example.com"
            )
        )
        await db_session.commit()

        db_session.add(
            ContactChannelFactory.build(
                tenancy_id=db_tenancy.id, project_user_id=other.id, value="ada@example.com"
            )
        )
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()

    async def test_non_auth_channels_may_share_a_value(self, db_session, db_tenancy, user):
        other = ProjectUserFactory.build(tenancy_id=db_tenancy.id)
        db_session.add(other)
        await db_session.flush()
        db_session.add_all(
            [
                ContactChannelFactory.build(
                    tenancy_id=db_tenancy.id, project_user_id=user.id, value="ada@example.com"
                ),
                ContactChannelFactory.not_for_auth(
                    tenancy_id=db_tenancy.id, project_user_id=other.id, value="ada@example.com"
                ),
                ContactChannelFactory.not_for_auth(
                    tenancy_id=db_tenancy.id, project_user_id=user.id, value="ada@example.com"
                ),
            ]
        )
        await db_session.commit()

        channel = await ContactChannelRepository(db_session).get_auth_channel(
            db_tenancy.id, "ada@example.com"
        )
        assert channel is not None
        assert channel.project_user_id == user.id

    async def test_provider_identity_is_unique_per_tenancy(self, db_session, db_tenancy, user):
        db_session.add(
            OAuthAccountFactory.build(
                tenancy_id=db_tenancy.id, project_user_id=user.id, provider_account_id="1"
            )
        )
        await db_session.commit()

        db_session.add(
            OAuthAccountFactory.build(
                tenancy_id=db_tenancy.id, project_user_id=user.id, provider_account_id="1"
            )
        )
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()
