"""End-to-end SSO flow through the application, with in-memory stores.

Database-backed collaborators are swapped for fakes through dependency
overrides and the middleware lookup seams; everything else is the real app.
"""

from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.sso_bridge.api.dependencies.services import get_callback_processor, get_handoff
from src.sso_bridge.core.exceptions import CodeExpired, NotAMember
from src.sso_bridge.core.security import StateCodec
from src.sso_bridge.core.tenant_context import TenantContextSwitcher
from src.sso_bridge.main import create_app
from src.sso_bridge.services import CallbackProcessor, CrossDomainHandoff, IdentityResolver
from tests.factories import TenantFactory, TenantUserFactory, UserFactory
from tests.fakes import (
    FakeSession,
    IdPStub,
    InMemoryHandoffStore,
    InMemoryMembershipRepository,
    InMemoryTenantRepository,
    InMemoryTenantSchemas,
    InMemoryUserRepository,
    make_id_token,
    token_response,
)

pytestmark = pytest.mark.unit


class Practice:
    def __init__(self, settings):
        self.acme = TenantFactory.build(id="acme", domain="acme.test", name="Acme Dental")
        self.user = UserFactory.build(email="ada@example.com", external_subject_id="kc-ada")
        self.tenants = InMemoryTenantRepository(self.acme)
        self.memberships = InMemoryMembershipRepository((self.user.id, self.acme.id))
        self.schemas = InMemoryTenantSchemas()
        self.schemas.put(self.acme, TenantUserFactory.build(email=self.user.email))
        self.idp = IdPStub()
        self.idp.token = token_response(id_token=make_id_token(settings, sub="kc-ada"))
        self.idp.userinfo = {"sub": "kc-ada"}
        self.settings = settings

        identity = IdentityResolver(InMemoryUserRepository(self.user))
        self.handoff = CrossDomainHandoff(
            InMemoryHandoffStore(), FakeSession(), identity, self.memberships
        )
        self.idp_client = self.idp.client(settings)
        self.processor = CallbackProcessor(
            idp=self.idp_client,
            state_codec=StateCodec.from_settings(settings),
            tenant_repo=self.tenants,
            identity=identity,
            membership_repo=self.memberships,
            switcher=TenantContextSwitcher(session_factory=self.schemas.session_factory),
            handoff=self.handoff,
            tenant_user_repo_factory=self.schemas.repo_factory,
        )

    async def has_access(self, email: str, tenant_id: str) -> bool:
        return email == self.user.email and await self.memberships.exists(
            self.user.id, tenant_id
        )


@pytest.fixture
def practice(settings) -> Practice:
    return Practice(settings)


@pytest.fixture
def app(practice: Practice, monkeypatch, mock_redis_unavailable) -> FastAPI:
    monkeypatch.setattr(
        "src.sso_bridge.api.middlewares.tenant_resolution.lookup_tenant_by_domain",
        practice.tenants.get_by_domain,
    )
    monkeypatch.setattr(
        "src.sso_bridge.api.middlewares.access_guard.check_tenant_access", practice.has_access
    )
    app = create_app(identity_provider=practice.idp_client)
    app.dependency_overrides[get_handoff] = lambda: practice.handoff
    app.dependency_overrides[get_callback_processor] = lambda: practice.processor
    return app


@pytest.fixture
async def browser(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://acme.test") as c:
        yield c


def _location(response) -> tuple[str, str, dict[str, list[str]]]:
    parts = urlsplit(response.headers["location"])
    return parts.netloc, parts.path, parse_qs(parts.query)


async def sign_in(browser: AsyncClient) -> None:
    start = await browser.get("/auth/sso/redirect")
    _, _, idp_query = _location(start)
    callback = await browser.get(
        "http://sso.test/auth/sso/callback",
        params={"code": "auth-code", "state": idp_query["state"][0]},
    )
    redeem = await browser.get(callback.headers["location"])
    assert redeem.status_code == 302


class TestSignIn:
    async def test_redirect_to_identity_provider(self, browser: AsyncClient):
        response = await browser.get("/auth/sso/redirect")

        host, path, query = _location(response)
        assert response.status_code == 302
        assert (host, path) == ("idp.test", "/realms/practices/protocol/openid-connect/auth")
        assert query["redirect_uri"] == ["http://sso.test/auth/sso/callback"]
        assert response.headers["Cache-Control"].startswith("no-store")

    async def test_redirect_from_central_domain_refused(self, browser: AsyncClient):
        response = await browser.get("http://sso.test/auth/sso/redirect")
        host, path, query = _location(response)
        assert (host, path) == ("sso.test", "/login")
        assert query["error"] == ["configuration_error"]

    async def test_full_flow(self, browser: AsyncClient):
        start = await browser.get("/auth/sso/redirect")
        state = _location(start)[2]["state"][0]

        callback = await browser.get(
            "http://sso.test/auth/sso/callback", params={"code": "auth-code", "state": state}
        )
        host, path, query = _location(callback)
        assert (host, path) == ("acme.test", "/sso/start")
        assert "tenant_session" not in callback.headers.get("set-cookie", "")

        redeem = await browser.get(callback.headers["location"])
        assert redeem.status_code == 302
        assert redeem.headers["location"] == "/dashboard"
        assert "tenant_session" in browser.cookies

        dashboard = await browser.get("/dashboard")
        assert dashboard.json() == {"tenant_name": "Acme Dental", "email": "ada@example.com"}

        session = await browser.get("/api/v1/session")
        assert session.json()["tenant_id"] == "acme"
        assert "provider_access_token" not in session.text

    async def test_code_cannot_be_replayed(self, browser: AsyncClient):
        start = await browser.get("/auth/sso/redirect")
        callback = await browser.get(
            "http://sso.test/auth/sso/callback",
            params={"code": "auth-code", "state": _location(start)[2]["state"][0]},
        )
        await browser.get(callback.headers["location"])
        browser.cookies.clear()

        replay = await browser.get(callback.headers["location"])
        host, path, query = _location(replay)
        assert (host, path) == ("acme.test", "/login")
        assert query["error"] == ["code_already_used"]
        assert "tenant_session" not in browser.cookies

    async def test_bad_code(self, browser: AsyncClient):
        response = await browser.get("/sso/start", params={"code": "made-up"})
        assert _location(response)[2]["error"] == ["code_not_found"]

    async def test_dashboard_requires_session(self, browser: AsyncClient):
        response = await browser.get("/dashboard")
        assert response.status_code == 302
        assert response.headers["location"] == "/login"

    async def test_session_endpoint_requires_session(self, browser: AsyncClient):
        response = await browser.get("/api/v1/session")
        assert response.status_code == 401


class TestLoginPage:
    async def test_tenant_login_page(self, browser: AsyncClient):
        response = await browser.get("/login", params={"error": "code_expired"})
        assert response.json()["tenant_name"] == "Acme Dental"
        assert response.json()["sso_start_url"] == "/auth/sso/redirect"
        assert response.json()["error"] == "code_expired"
        assert response.json()["message"] == CodeExpired.user_message

    async def test_message_param_not_reflected(self, browser: AsyncClient):
        """Text in the query never reaches the page; only the registered message does."""
        forged = "Your account is locked. Call 555-0100 to unlock it."
        response = await browser.get(
            "/login", params={"error": "not_a_member", "message": forged}
        )
        assert forged not in response.text
        assert response.json()["message"] == NotAMember.user_message

    async def test_unknown_error_code_ignored(self, browser: AsyncClient):
        response = await browser.get("/login", params={"error": "call_555_0100"})
        assert response.json()["error"] is None
        assert response.json()["message"] is None

    async def test_central_login_page(self, browser: AsyncClient):
        response = await browser.get("http://sso.test/login")
        assert response.json()["sso_start_url"] is None


class TestLogout:
    async def test_requires_csrf(self, browser: AsyncClient):
        await sign_in(browser)
        response = await browser.post("/logout")
        assert response.status_code == 403

    async def test_logout_ends_both_sessions(self, browser: AsyncClient, practice: Practice):
        await sign_in(browser)
        response = await browser.post(
            "/logout", headers={"X-CSRF-Token": browser.cookies["XSRF-TOKEN"]}
        )

        host, path, query = _location(response)
        assert response.status_code == 303
        assert path.endswith("/protocol/openid-connect/logout")
        assert query["post_logout_redirect_uri"] == ["http://acme.test/logged-out"]
        assert "id_token_hint" in query
        assert (await browser.get("/api/v1/session")).status_code == 401

    async def test_logged_out_landing(self, browser: AsyncClient):
        response = await browser.get("/logged-out")
        host, path, _ = _location(response)
        assert (host, path) == ("acme.test", "/login")


class TestMembershipRevocation:
    async def test_revoked_after_sign_in(self, browser: AsyncClient, practice: Practice):
        await sign_in(browser)
        practice.memberships.revoke(practice.user.id, practice.acme.id)

        response = await browser.get("/api/v1/session")
        assert response.status_code == 403
