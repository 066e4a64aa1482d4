"""Tests for one-time cross-domain handoff codes."""

import asyncio
from datetime import timedelta

import pytest

from src.sso_bridge.core.exceptions import (
    CodeAlreadyUsed,
    CodeExpired,
    CodeNotFound,
    NotAMember,
    UserNotFound,
)
from src.sso_bridge.core.security import hash_token
from src.sso_bridge.models.base import utc_now
from src.sso_bridge.schemas.sso import ProviderTokens
from src.sso_bridge.services import CrossDomainHandoff, IdentityResolver
from tests.factories import TenantFactory, UserFactory
from tests.fakes import (
    FakeSession,
    InMemoryHandoffStore,
    InMemoryMembershipRepository,
    InMemoryUserRepository,
)

pytestmark = pytest.mark.unit


class Clock:
    def __init__(self):
        self.now = utc_now()

    def __call__(self):
        return self.now


@pytest.fixture
def acme():
    return TenantFactory.build(id="acme")


@pytest.fixture
def other():
    return TenantFactory.build(id="other")


@pytest.fixture
def user():
    return UserFactory.build()


@pytest.fixture
def memberships(user, acme) -> InMemoryMembershipRepository:
    return InMemoryMembershipRepository((user.id, acme.id))


@pytest.fixture
def store() -> InMemoryHandoffStore:
    return InMemoryHandoffStore()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def handoff(store, session, user, memberships, clock) -> CrossDomainHandoff:
    return CrossDomainHandoff(
        store,
        session,
        IdentityResolver(InMemoryUserRepository(user)),
        memberships,
        ttl_seconds=90,
        clock=clock,
    )


class TestIssue:
    """Tests for code creation."""

    async def test_only_hash_is_stored(self, handoff, store, session, user, acme):
        code = await handoff.issue(user, acme, "/patients")

        assert code not in store.records
        record = store.records[hash_token(code)]
        assert record.user_id == user.id
        assert record.tenant_id == "acme"
        assert record.target_path == "/patients"
        assert session.commits == 1

    async def test_code_is_long_and_unique(self, handoff, user, acme):
        codes = {await handoff.issue(user, acme, "/dashboard") for _ in range(20)}
        assert len(codes) == 20
        assert all(len(code) >= 43 for code in codes)

    async def test_expiry_uses_ttl(self, handoff, store, user, acme, clock):
        code = await handoff.issue(user, acme, "/dashboard")
        assert store.records[hash_token(code)].expires_at == clock.now + timedelta(seconds=90)

    @pytest.mark.parametrize("target", ["//evil.test/", "https://evil.test/", "dashboard"])
    async def test_unsafe_target_replaced(self, handoff, store, user, acme, target):
        code = await handoff.issue(user, acme, target)
        assert store.records[hash_token(code)].target_path == "/dashboard"

    async def test_provider_tokens_stored(self, handoff, store, user, acme):
        tokens = ProviderTokens(access_token="at", refresh_token="rt", id_token="idt")
        code = await handoff.issue(user, acme, "/dashboard", tokens)
        record = store.records[hash_token(code)]
        assert (record.provider_access_token, record.provider_id_token) == ("at", "idt")


class TestExpiredCodeSweep:
    """Tests for the cleanup that runs whenever a new code is issued."""

    async def test_unredeemed_tokens_scrubbed(self, handoff, store, user, acme, clock):
        tokens = ProviderTokens(access_token="at", refresh_token="rt", id_token="idt")
        stale = await handoff.issue(user, acme, "/dashboard", tokens)
        clock.now += timedelta(seconds=91)

        await handoff.issue(user, acme, "/dashboard")

        record = store.records[hash_token(stale)]
        assert record.provider_access_token is None
        assert record.provider_refresh_token is None
        assert record.provider_id_token is None

    async def test_live_code_keeps_tokens(self, handoff, store, user, acme):
        live = await handoff.issue(user, acme, "/dashboard", ProviderTokens(access_token="at"))
        await handoff.issue(user, acme, "/dashboard")
        assert store.records[hash_token(live)].provider_access_token == "at"

    async def test_scrubbed_code_still_reported_expired(self, handoff, user, acme, clock):
        stale = await handoff.issue(user, acme, "/dashboard", ProviderTokens(access_token="at"))
        clock.now += timedelta(seconds=91)
        await handoff.issue(user, acme, "/dashboard")

        with pytest.raises(CodeExpired):
            await handoff.redeem(stale, acme)

    async def test_rows_past_retention_deleted(self, handoff, store, user, acme, clock):
        stale = await handoff.issue(user, acme, "/dashboard")
        clock.now += timedelta(hours=25)

        fresh = await handoff.issue(user, acme, "/dashboard")

        assert hash_token(stale) not in store.records
        assert hash_token(fresh) in store.records
        with pytest.raises(CodeNotFound):
            await handoff.redeem(stale, acme)


class TestRedeem:
    """Tests for single-use, tenant-bound redemption."""

    async def test_success(self, handoff, user, acme):
        code = await handoff.issue(user, acme, "/patients")
        redemption = await handoff.redeem(code, acme)

        assert redemption.user.id == user.id
        assert redemption.tenant is acme
        assert redemption.target_path == "/patients"

    async def test_tokens_carried_then_scrubbed(self, handoff, store, user, acme):
        code = await handoff.issue(user, acme, "/dashboard", ProviderTokens(access_token="at"))
        redemption = await handoff.redeem(code, acme)

        assert redemption.tokens.access_token == "at"
        assert store.records[hash_token(code)].provider_access_token is None

    async def test_second_redeem_fails(self, handoff, user, acme):
        code = await handoff.issue(user, acme, "/dashboard")
        await handoff.redeem(code, acme)
        with pytest.raises(CodeAlreadyUsed):
            await handoff.redeem(code, acme)

    async def test_concurrent_redeems_single_winner(self, handoff, user, acme):
        code = await handoff.issue(user, acme, "/dashboard")
        results = await asyncio.gather(
            *(handoff.redeem(code, acme) for _ in range(10)), return_exceptions=True
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(winners) == 1
        assert all(isinstance(r, CodeAlreadyUsed) for r in results if isinstance(r, Exception))

    async def test_expired(self, handoff, user, acme, clock):
        code = await handoff.issue(user, acme, "/dashboard")
        clock.now += timedelta(seconds=91)
        with pytest.raises(CodeExpired):
            await handoff.redeem(code, acme)

    async def test_wrong_tenant_does_not_consume(self, handoff, store, user, acme, other):
        """A code minted for one tenant neither works on nor burns via another."""
        code = await handoff.issue(user, acme, "/dashboard")
        with pytest.raises(CodeNotFound):
            await handoff.redeem(code, other)

        assert store.records[hash_token(code)].consumed_at is None
        assert (await handoff.redeem(code, acme)).user.id == user.id

    @pytest.mark.parametrize("code", [None, "", "never-issued"])
    async def test_unknown_code(self, handoff, acme, code):
        with pytest.raises(CodeNotFound):
            await handoff.redeem(code, acme)

    async def test_failure_rolls_back(self, handoff, session, acme):
        with pytest.raises(CodeNotFound):
            await handoff.redeem("never-issued", acme)
        assert session.rollbacks == 1

    async def test_membership_revoked_before_redeem(
        self, handoff, store, memberships, user, acme
    ):
        code = await handoff.issue(user, acme, "/dashboard")
        memberships.revoke(user.id, acme.id)

        with pytest.raises(NotAMember):
            await handoff.redeem(code, acme)
        # Still consumed: the code cannot be retried after access returns
        assert store.records[hash_token(code)].consumed_at is not None

    async def test_user_deactivated_before_redeem(self, handoff, user, acme):
        code = await handoff.issue(user, acme, "/dashboard")
        user.is_active = False
        with pytest.raises(UserNotFound):
            await handoff.redeem(code, acme)
