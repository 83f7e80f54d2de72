"""
Shared test fixtures and helpers for the mc-bearer test suite.

Provides canned upstream responses for each hop of the exchange so unit
and integration tests describe the same vendor behaviour.
"""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
import structlog

from mc_bearer.domain.models import BootstrapData, Credentials, FederationTokenSet, SecurityGrant

POST_URL = "https://login.live.com/ppsecure/post.srf?contextid=ABC123&bk=1700000000"
DESKTOP_URL = "https://login.live.com/oauth20_desktop.srf"
LIVE_AUTHORIZE_PREFIX = "https://login.live.com/oauth20_authorize.srf"

LOGIN_PAGE_HTML = (
    "<html><body>"
    '<form><input type="hidden" name="PPFT" id="i0327" value="ppft-token-value"/></form>'
    "<script>var ServerData = {sFTTag:'<input/>',urlPost:'" + POST_URL + "',iMaxStackForKnockoutAsyncComponents:20};"
    "</script></body></html>"
)


def desktop_redirect(fragment: str) -> httpx.Response:
    """302 to the desktop redirect page carrying `fragment`."""
    return httpx.Response(302, headers={"Location": f"{DESKTOP_URL}?lc=1033#{fragment}"})


def xbl_body(token: str = "xbl-token", user_hash: str = "uhs-1234") -> dict:
    return {
        "IssueInstant": "2026-10-19T12:00:00.0000000Z",
        "NotAfter": "2026-11-02T12:00:00.0000000Z",
        "Token": token,
        "DisplayClaims": {"xui": [{"uhs": user_hash}]},
    }


def xsts_body(token: str = "xsts-token", user_hash: str = "uhs-1234") -> dict:
    return {
        "IssueInstant": "2026-10-19T12:00:00.0000000Z",
        "NotAfter": "2026-10-20T04:00:00.0000000Z",
        "Token": token,
        "DisplayClaims": {"xui": [{"uhs": user_hash}]},
    }


def minecraft_body(access_token: str = "mc-bearer") -> dict:
    return {
        "username": "00000000-0000-0000-0000-000000000000",
        "roles": [],
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": 86400,
    }


@pytest.fixture(autouse=True)
def _captured_structlog() -> Iterator[None]:
    """Route log events to memory; loggers are never cached across tests."""
    structlog.configure(
        processors=[structlog.processors.add_log_level],
        logger_factory=structlog.testing.CapturingLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials(identity="steve@example.com", secret="hunter2")


@pytest.fixture()
def bootstrap_data() -> BootstrapData:
    return BootstrapData(csrf_value="ppft-token-value", post_url=POST_URL)


@pytest.fixture()
def token_set() -> FederationTokenSet:
    return FederationTokenSet(token="xbl-token", user_hash="uhs-1234")


@pytest.fixture()
def grant() -> SecurityGrant:
    return SecurityGrant(user_hash="uhs-1234", security_token="xsts-token")


@pytest.fixture()
def client() -> Iterator[httpx.Client]:
    """A client configured like a real pipeline session."""
    with httpx.Client(timeout=5, follow_redirects=True) as http_client:
        yield http_client
