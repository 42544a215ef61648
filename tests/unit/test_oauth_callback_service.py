"""Tests for the OAuth callback orchestration (src/authhub/services/oauth_callback_service.py).

Runs the real services against in-memory repositories and a mocked Google.
"""

from functools import partial
from urllib.parse import parse_qs, urlsplit

import pytest

from src.authhub.core.errors import (
    InvariantViolation,
    OAuthConnectionAlreadyConnectedToAnotherUser,
    ProviderCallbackError,
    RedirectUrlNotWhitelisted,
    SignUpNotEnabled,
    StatusError,
)
from src.authhub.core.security import hash_token
from src.authhub.models import (
    ContactChannel,
    OAuthAccessToken,
    OAuthAuthorizationCode,
    OAuthToken,
    ProjectUser,
    ProjectUserOAuthAccount,
)
from src.authhub.providers import get_provider
from src.authhub.services.oauth_flow import INNER_COOKIE_VALUE, inner_cookie_name
from tests.factories import (
    ContactChannelFactory,
    OAuthAccountFactory,
    OAuthOuterInfoFactory,
    ProjectUserFactory,
)
from tests.fakes import FakeCookieStore, FakeGoogle, outer_info_document

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _providers(google_config):
    """Every test runs against a tenancy with Google enabled."""


def _start_flow(session, tenancy, expired: bool = False, **info_overrides):
    factory = OAuthOuterInfoFactory.expired if expired else OAuthOuterInfoFactory.build
    record = factory(info=outer_info_document(tenancy, **info_overrides))
    session.seed(record)
    return record


async def _callback(services, record, *, params=None, cookies=None, provider_id="google"):
    if cookies is None:
        cookies = FakeCookieStore({inner_cookie_name(record.inner_state): INNER_COOKIE_VALUE})
    if params is None:
        params = {"state": record.inner_state, "code": "provider-code"}
    return await services.callback_service.handle_callback(
        provider_id=provider_id,
        inner_state=record.inner_state,
        params=params,
        cookies=cookies,
    )


def _query(location: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(location).query)


class TestSignUp:
    async def test_new_identity_creates_user_and_issues_code(self, services, session, tenancy):
        record = _start_flow(session, tenancy)

        redirect = await _callback(services, record)

        assert redirect.status_code == 307
        assert redirect.location.startswith("https://app.example.com/callback?")
        query = _query(redirect.location)
        assert query["state"] == ["client-state"]

        users = session.all(ProjectUser)
        assert len(users) == 1
        [channel] = session.all(ContactChannel)
        assert channel.value == "ada@example.com"
        assert channel.used_for_auth is True
        assert channel.is_verified is True
        [account] = session.all(ProjectUserOAuthAccount)
        assert account.project_user_id == users[0].id
        assert account.provider_account_id == "google-account-1"

        [code] = session.all(OAuthAuthorizationCode)
        assert code.code_hash == hash_token(query["code"][0])
        assert code.is_new_user is True
        assert code.after_callback_redirect_url == "https://app.example.com/welcome"
        assert session.uncommitted == []

    async def test_email_already_used_for_auth_creates_user_without_email_auth(
        self, services, session, tenancy
    ):
        other = ProjectUserFactory.build(tenancy_id=tenancy.id)
        session.seed(
            other,
            ContactChannelFactory.build(
                tenancy_id=tenancy.id, project_user_id=other.id, value="ada@example.com"
            ),
        )
        record = _start_flow(session, tenancy)

        await _callback(services, record)

        new_channel = next(
            c for c in session.all(ContactChannel) if c.project_user_id != other.id
        )
        assert new_channel.value == "ada@example.com"
        assert new_channel.used_for_auth is None
        assert len(session.all(ProjectUser)) == 2

    async def test_sign_up_disabled_redirects_to_error_url(self, services, session, tenancy):
        tenancy.sign_up_enabled = False
        record = _start_flow(session, tenancy)

        redirect = await _callback(services, record)

        assert redirect.location.startswith("https://app.example.com/error?")
        assert _query(redirect.location)["errorCode"] == [SignUpNotEnabled.error_code]
        assert session.all(ProjectUser) == []
        assert session.all(OAuthAccessToken) == []

    async def test_sign_up_disabled_without_trusted_error_url_raises(
        self, services, session, tenancy
    ):
        tenancy.sign_up_enabled = False
        record = _start_flow(session, tenancy, error_redirect_url="https://evil.com/error")

        with pytest.raises(SignUpNotEnabled):
            await _callback(services, record)


class TestProviderTokens:
    async def test_tokens_stored_exactly_once_for_new_user(self, services, session, tenancy):
        record = _start_flow(session, tenancy, provider_scope="drive.readonly email")

        await _callback(services, record)

        [access_token] = session.all(OAuthAccessToken)
        [refresh_token] = session.all(OAuthToken)
        assert access_token.access_token == "google-access-token"
        assert access_token.scopes == ["openid", "email", "profile", "drive.readonly"]
        assert refresh_token.refresh_token == "google-refresh-token"
        assert refresh_token.scopes == access_token.scopes

    async def test_tokens_stored_exactly_once_for_existing_account(
        self, services, session, tenancy
    ):
        user = ProjectUserFactory.build(tenancy_id=tenancy.id)
        session.seed(
            user,
            OAuthAccountFactory.build(
                tenancy_id=tenancy.id,
                project_user_id=user.id,
                provider_account_id="google-account-1",
            ),
        )
        record = _start_flow(session, tenancy)

        await _callback(services, record)

        assert len(session.all(OAuthAccessToken)) == 1
        assert len(session.all(OAuthToken)) == 1

    async def test_no_refresh_token_row_without_refresh_token(self, services, session, tenancy):
        services.callback_service.provider_factory = partial(
            get_provider, transport=FakeGoogle(refresh_token=None).transport
        )
        record = _start_flow(session, tenancy)

        await _callback(services, record)

        assert len(session.all(OAuthAccessToken)) == 1
        assert session.all(OAuthToken) == []


class TestSignIn:
    async def test_existing_identity_signs_in(self, services, session, tenancy):
        user = ProjectUserFactory.build(tenancy_id=tenancy.id)
        session.seed(
            user,
            OAuthAccountFactory.build(
                tenancy_id=tenancy.id,
                project_user_id=user.id,
                provider_account_id="google-account-1",
            ),
        )
        record = _start_flow(session, tenancy)

        await _callback(services, record)

        [code] = session.all(OAuthAuthorizationCode)
        assert code.project_user_id == user.id
        assert code.is_new_user is False
        assert session.all(ProjectUser) == [user]


class TestLink:
    async def test_links_identity_to_signed_in_user(self, services, session, tenancy):
        user = ProjectUserFactory.build(tenancy_id=tenancy.id)
        session.seed(user)
        record = _start_flow(session, tenancy, flow_type="link", project_user_id=user.id)

        await _callback(services, record)

        [account] = session.all(ProjectUserOAuthAccount)
        assert account.project_user_id == user.id
        assert account.provider_account_id == "google-account-1"
        [code] = session.all(OAuthAuthorizationCode)
        assert code.project_user_id == user.id
        assert code.is_new_user is False

    async def test_relinking_an_owned_identity_adds_nothing(self, services, session, tenancy):
        user = ProjectUserFactory.build(tenancy_id=tenancy.id)
        account = OAuthAccountFactory.build(
            tenancy_id=tenancy.id, project_user_id=user.id, provider_account_id="google-account-1"
        )
        session.seed(user, account)
        record = _start_flow(session, tenancy, flow_type="link", project_user_id=user.id)

        redirect = await _callback(services, record)

        assert "code" in _query(redirect.location)
        assert session.all(ProjectUserOAuthAccount) == [account]
        assert len(session.all(OAuthAccessToken)) == 1
        assert len(session.all(OAuthToken)) == 1
        [code] = session.all(OAuthAuthorizationCode)
        assert code.project_user_id == user.id

    async def test_identity_owned_by_another_user(self, services, session, tenancy):
        owner = ProjectUserFactory.build(tenancy_id=tenancy.id)
        user = ProjectUserFactory.build(tenancy_id=tenancy.id)
        session.seed(
            owner,
            user,
            OAuthAccountFactory.build(
                tenancy_id=tenancy.id,
                project_user_id=owner.id,
                provider_account_id="google-account-1",
            ),
        )
        record = _start_flow(session, tenancy, flow_type="link", project_user_id=user.id)

        redirect = await _callback(services, record)

        assert _query(redirect.location)["errorCode"] == [
            OAuthConnectionAlreadyConnectedToAnotherUser.error_code
        ]
        assert session.all(OAuthAccessToken) == []

    async def test_user_already_linked_to_another_identity(self, services, session, tenancy):
        user = ProjectUserFactory.build(tenancy_id=tenancy.id)
        session.seed(
            user,
            OAuthAccountFactory.build(
                tenancy_id=tenancy.id, project_user_id=user.id, provider_account_id="other"
            ),
        )
        record = _start_flow(session, tenancy, flow_type="link", project_user_id=user.id)

        redirect = await _callback(services, record)

        assert _query(redirect.location)["errorCode"] == [
            "USER_ALREADY_CONNECTED_TO_ANOTHER_OAUTH_CONNECTION"
        ]

    async def test_link_to_missing_user_is_an_invariant_violation(
        self, services, session, tenancy
    ):
        record = _start_flow(
            session, tenancy, flow_type="link", project_user_id=ProjectUserFactory.build().id
        )

        with pytest.raises(InvariantViolation):
            await _callback(services, record)
        assert session.rollbacks == 1


class TestStateChecks:
    async def test_missing_cookie_is_rejected_before_claiming(self, services, session, tenancy):
        record = _start_flow(session, tenancy)

        with pytest.raises(StatusError):
            await _callback(services, record, cookies=FakeCookieStore())

        assert record.consumed_at is None

    async def test_replay_is_rejected(self, services, session, tenancy, google):
        record = _start_flow(session, tenancy)
        await _callback(services, record)

        with pytest.raises(StatusError) as exc_info:
            await _callback(services, record)

        assert exc_info.value.message == "Invalid OAuth cookie. Please try signing in again."
        assert len(google.token_requests) == 1

    async def test_unknown_state_is_rejected(self, services, session, tenancy):
        record = OAuthOuterInfoFactory.build(info=outer_info_document(tenancy))

        with pytest.raises(StatusError):
            await _callback(services, record)

    async def test_expired_flow_redirects_without_exchange(
        self, services, session, tenancy, google
    ):
        record = _start_flow(session, tenancy, expired=True)

        redirect = await _callback(services, record)

        assert _query(redirect.location)["errorCode"] == ["OUTER_OAUTH_TIMEOUT"]
        assert google.token_requests == []

    async def test_disabled_provider(self, services, session, tenancy, google_config):
        google_config.enabled = False
        record = _start_flow(session, tenancy)

        redirect = await _callback(services, record)

        assert _query(redirect.location)["errorCode"] == [
            "OAUTH_PROVIDER_NOT_FOUND_OR_NOT_ENABLED"
        ]

    async def test_missing_tenancy_is_an_invariant_violation(self, services, session, tenancy):
        record = _start_flow(session, tenancy)
        session.rows.remove(tenancy)

        with pytest.raises(InvariantViolation):
            await _callback(services, record)


class TestProviderOutcomes:
    async def test_access_denied_redirects_with_error_code(self, services, session, tenancy):
        record = _start_flow(session, tenancy)

        redirect = await _callback(
            services,
            record,
            params={"state": record.inner_state, "error": "access_denied"},
        )

        query = _query(redirect.location)
        assert redirect.location.startswith("https://app.example.com/error?")
        assert query["errorCode"] == ["OAUTH_PROVIDER_ACCESS_DENIED"]
        assert session.all(ProjectUser) == []

    async def test_provider_failure_propagates(self, services, session, tenancy):
        record = _start_flow(session, tenancy)

        with pytest.raises(ProviderCallbackError):
            await _callback(
                services, record, params={"state": "tampered", "code": "provider-code"}
            )


class TestAuthorizationRequest:
    async def test_untrusted_redirect_uri(self, services, session, tenancy):
        record = _start_flow(session, tenancy, redirect_uri="https://evil.com/callback")

        redirect = await _callback(services, record)

        assert _query(redirect.location)["errorCode"] == [RedirectUrlNotWhitelisted.error_code]
        assert session.all(ProjectUser) == []

    async def test_invalid_scope_is_a_bad_request_and_creates_nothing(
        self, services, session, tenancy
    ):
        record = _start_flow(session, tenancy, scope="legacy admin")

        with pytest.raises(StatusError) as exc_info:
            await _callback(services, record)

        assert exc_info.value.status_code == 400
        assert "Invalid scope requested" in exc_info.value.message
        assert session.all(ProjectUser) == []
        assert session.all(OAuthAccessToken) == []


class TestConcurrentCallbacks:
    async def test_identity_created_concurrently_signs_in(self, services, session, tenancy):
        competitor = ProjectUserFactory.build(tenancy_id=tenancy.id)

        def concurrent_sign_up(s):
            s.seed(
                competitor,
                OAuthAccountFactory.build(
                    tenancy_id=tenancy.id,
                    project_user_id=competitor.id,
                    provider_account_id="google-account-1",
                ),
            )

        session.before_flush = concurrent_sign_up
        record = _start_flow(session, tenancy)

        await _callback(services, record)

        assert session.all(ProjectUser) == [competitor]
        assert len(session.all(ProjectUserOAuthAccount)) == 1
        [code] = session.all(OAuthAuthorizationCode)
        assert code.project_user_id == competitor.id
        assert code.is_new_user is False
        assert len(session.all(OAuthAccessToken)) == 1

    async def test_email_claimed_concurrently_signs_up_without_email_auth(
        self, services, session, tenancy
    ):
        competitor = ProjectUserFactory.build(tenancy_id=tenancy.id)

        def concurrent_email_claim(s):
            s.seed(
                competitor,
                ContactChannelFactory.build(
                    tenancy_id=tenancy.id,
                    project_user_id=competitor.id,
                    value="ada@example.com",
                ),
            )

        session.before_flush = concurrent_email_claim
        record = _start_flow(session, tenancy)

        await _callback(services, record)

        new_user = next(u for u in session.all(ProjectUser) if u.id != competitor.id)
        [channel] = [c for c in session.all(ContactChannel) if c.project_user_id == new_user.id]
        assert channel.used_for_auth is None
        assert len(session.all(OAuthAccessToken)) == 1

    async def test_identity_linked_concurrently_links_once(self, services, session, tenancy):
        user = ProjectUserFactory.build(tenancy_id=tenancy.id)
        session.seed(user)
        competing = OAuthAccountFactory.build(
            tenancy_id=tenancy.id, project_user_id=user.id, provider_account_id="google-account-1"
        )

        def concurrent_link(s):
            s.seed(competing)

        session.before_flush = concurrent_link
        record = _start_flow(session, tenancy, flow_type="link", project_user_id=user.id)

        redirect = await _callback(services, record)

        assert "code" in _query(redirect.location)
        assert session.all(ProjectUserOAuthAccount) == [competing]
        [code] = session.all(OAuthAuthorizationCode)
        assert code.project_user_id == user.id
        assert code.is_new_user is False
        assert len(session.all(OAuthAccessToken)) == 1
        assert len(session.all(OAuthToken)) == 1
