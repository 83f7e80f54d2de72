"""
Unit tests for the Microsoft login adapters — bootstrap and credential exchange.

Uses respx to mock httpx HTTP calls (never makes real HTTP requests).

Test categories:
  - Bootstrap: page scraped → BootstrapData; broken page → PARSE_FAILURE
  - Credential exchange: redirect fragment → access token
  - Classification: wrong password, 2FA, protocol drift, transport errors
  - Fragment parsing: order independent, first '=' only
"""

from __future__ import annotations

from unittest.mock import MagicMock
from urllib.parse import parse_qs

import httpx
import respx

from mc_bearer.adapters.live_login import (
    LiveCredentialExchanger,
    LiveSessionBootstrapper,
    parse_fragment,
)
from mc_bearer.domain.models import BootstrapData, Credentials
from mc_bearer.railway import ErrorCode, Result, ResultAssertions
from tests.conftest import (
    DESKTOP_URL,
    LIVE_AUTHORIZE_PREFIX,
    LOGIN_PAGE_HTML,
    POST_URL,
    desktop_redirect,
)

POST_PREFIX = "https://login.live.com/ppsecure/post.srf"


# ═══════════════════════════════════════════════════════════════════════
# Fragment parsing
# ═══════════════════════════════════════════════════════════════════════


class TestParseFragment:
    def test_key_position_does_not_matter(self) -> None:
        assert parse_fragment("a=1&access_token=T&b=2")["access_token"] == "T"
        assert parse_fragment("access_token=T&a=1&b=2")["access_token"] == "T"
        assert parse_fragment("a=1&b=2&access_token=T")["access_token"] == "T"

    def test_splits_on_first_equals_only(self) -> None:
        assert parse_fragment("access_token=abc==&x=1")["access_token"] == "abc=="

    def test_pair_without_value(self) -> None:
        assert parse_fragment("flag&access_token=T") == {"flag": "", "access_token": "T"}

    def test_empty_fragment(self) -> None:
        assert parse_fragment("") == {}

    def test_is_idempotent(self) -> None:
        fragment = "a=1&access_token=T&b=2"
        assert parse_fragment(fragment) == parse_fragment(fragment)

    def test_first_occurrence_wins(self) -> None:
        assert parse_fragment("access_token=one&access_token=two")["access_token"] == "one"

    def test_values_decoded_after_split(self) -> None:
        assert parse_fragment("access_token=abc%26def&token_type=bearer") == {
            "access_token": "abc&def",
            "token_type": "bearer",
        }


# ═══════════════════════════════════════════════════════════════════════
# Session bootstrap
# ═══════════════════════════════════════════════════════════════════════


class TestBootstrap:
    """
    GIVEN the authorize page
    WHEN bootstrap is called
    THEN the PPFT value and urlPost are scraped from it.
    """

    @respx.mock
    def test_returns_bootstrap_data(self, client: httpx.Client) -> None:
        route = respx.get(url__startswith=LIVE_AUTHORIZE_PREFIX).mock(
            return_value=httpx.Response(200, text=LOGIN_PAGE_HTML)
        )
        data = ResultAssertions.assert_success(LiveSessionBootstrapper(client).bootstrap())
        assert data == BootstrapData(csrf_value="ppft-token-value", post_url=POST_URL)
        request = route.calls.last.request
        assert request.url.params["client_id"] == "000000004C12AE6F"
        assert request.url.params["response_type"] == "token"
        assert request.url.params["scope"] == "service::user.auth.xboxlive.com::MBI_SSL"

    @respx.mock
    def test_rate_limited_page_is_parse_failure_with_status(self, client: httpx.Client) -> None:
        """
        GIVEN the authorize endpoint answers 429 with an error page
        WHEN bootstrap is called
        THEN it returns Failure(PARSE_FAILURE) carrying status 429.
        """
        respx.get(url__startswith=LIVE_AUTHORIZE_PREFIX).mock(
            return_value=httpx.Response(429, text="<html>Too Many Requests</html>")
        )
        error = ResultAssertions.assert_failure(
            LiveSessionBootstrapper(client).bootstrap(), ErrorCode.PARSE_FAILURE
        )
        assert error.status == 429

    @respx.mock
    def test_timeout_is_transport_failure(self, client: httpx.Client) -> None:
        respx.get(url__startswith=LIVE_AUTHORIZE_PREFIX).mock(
            side_effect=httpx.ConnectTimeout("timed out")
        )
        result = LiveSessionBootstrapper(client).bootstrap()
        ResultAssertions.assert_failure(result, ErrorCode.TRANSPORT_FAILURE)

    @respx.mock
    def test_delegates_to_injected_scraper(self, client: httpx.Client) -> None:
        respx.get(url__startswith=LIVE_AUTHORIZE_PREFIX).mock(
            return_value=httpx.Response(200, text="<custom markup>")
        )
        scraper = MagicMock()
        scraper.extract.return_value = Result.success(
            BootstrapData(csrf_value="c", post_url="https://p.example/post")
        )
        data = ResultAssertions.assert_success(LiveSessionBootstrapper(client, scraper).bootstrap())
        scraper.extract.assert_called_once_with("<custom markup>")
        assert data.post_url == "https://p.example/post"


# ═══════════════════════════════════════════════════════════════════════
# Credential exchange
# ═══════════════════════════════════════════════════════════════════════


class TestCredentialExchangeSuccess:
    """
    GIVEN valid credentials
    WHEN the post URL redirects to the desktop page with access_token in the fragment
    THEN exchange returns Success(access_token).
    """

    @respx.mock
    def test_returns_access_token_from_fragment(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        respx.post(url__startswith=POST_PREFIX).mock(
            return_value=desktop_redirect("access_token=EwAoA-token&token_type=bearer&expires_in=86400")
        )
        respx.get(url__startswith=DESKTOP_URL).mock(return_value=httpx.Response(200, text="ok"))

        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)

        ResultAssertions.assert_success_value(result, "EwAoA-token")

    @respx.mock
    def test_encoded_ampersand_stays_in_token(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        """
        GIVEN a redirect fragment whose token contains %26
        WHEN exchange is called
        THEN the whole decoded token is returned, not the part before '&'.
        """
        respx.post(url__startswith=POST_PREFIX).mock(
            return_value=desktop_redirect("access_token=abc%26def&token_type=bearer")
        )
        respx.get(url__startswith=DESKTOP_URL).mock(return_value=httpx.Response(200, text="ok"))

        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)

        ResultAssertions.assert_success_value(result, "abc&def")

    @respx.mock
    def test_posts_login_form(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        route = respx.post(url__startswith=POST_PREFIX).mock(
            return_value=desktop_redirect("access_token=T")
        )
        respx.get(url__startswith=DESKTOP_URL).mock(return_value=httpx.Response(200))

        LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)

        request = route.calls.last.request
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        form = parse_qs(request.content.decode())
        assert form == {
            "login": ["steve@example.com"],
            "loginfmt": ["steve@example.com"],
            "passwd": ["hunter2"],
            "PPFT": ["ppft-token-value"],
        }

    @respx.mock
    def test_sends_cookies_from_bootstrap(
        self, client: httpx.Client, credentials: Credentials
    ) -> None:
        """
        GIVEN the login page sets a session cookie
        WHEN the credentials are posted on the same client
        THEN the cookie accompanies the POST.
        """
        respx.get(url__startswith=LIVE_AUTHORIZE_PREFIX).mock(
            return_value=httpx.Response(
                200,
                text=LOGIN_PAGE_HTML,
                headers={"Set-Cookie": "MSPOK=session-cookie; path=/"},
            )
        )
        route = respx.post(url__startswith=POST_PREFIX).mock(
            return_value=desktop_redirect("access_token=T")
        )
        respx.get(url__startswith=DESKTOP_URL).mock(return_value=httpx.Response(200))

        bootstrap = LiveSessionBootstrapper(client).bootstrap().value()
        LiveCredentialExchanger(client).exchange(credentials, bootstrap)

        assert "MSPOK=session-cookie" in route.calls.last.request.headers["cookie"]


class TestCredentialExchangeClassification:
    """
    GIVEN the login does not yield a token
    WHEN exchange is called
    THEN the failure kind says why.
    """

    @respx.mock
    def test_sign_in_page_again_is_invalid_credentials(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        respx.post(url__startswith=POST_PREFIX).mock(
            return_value=httpx.Response(200, text="<title>Sign in to your Microsoft account</title>")
        )
        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)
        ResultAssertions.assert_failure(result, ErrorCode.INVALID_CREDENTIALS)

    @respx.mock
    def test_two_factor_marker(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        respx.post(url__startswith=POST_PREFIX).mock(
            return_value=httpx.Response(200, text="<p>2FA is enabled but not supported yet!</p>")
        )
        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)
        ResultAssertions.assert_failure(result, ErrorCode.UNSUPPORTED_TWO_FACTOR)
        ResultAssertions.assert_failure_message_contains(result, "account.live.com/activity")

    @respx.mock
    def test_redirect_without_token_is_unexpected_response(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        """
        GIVEN a redirect whose fragment has no access_token and a body without error markers
        WHEN exchange is called
        THEN it returns Failure(UNEXPECTED_RESPONSE).
        """
        respx.post(url__startswith=POST_PREFIX).mock(
            return_value=desktop_redirect("error=access_denied&error_description=denied")
        )
        respx.get(url__startswith=DESKTOP_URL).mock(return_value=httpx.Response(200, text="ok"))
        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)
        ResultAssertions.assert_failure(result, ErrorCode.UNEXPECTED_RESPONSE)

    @respx.mock
    def test_sign_in_text_after_redirect_is_not_invalid_credentials(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        """The invalid-credentials rule only applies when no redirect happened."""
        respx.post(url__startswith=POST_PREFIX).mock(return_value=desktop_redirect("state=1"))
        respx.get(url__startswith=DESKTOP_URL).mock(
            return_value=httpx.Response(200, text="Sign in to continue")
        )
        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)
        ResultAssertions.assert_failure(result, ErrorCode.UNEXPECTED_RESPONSE)

    @respx.mock
    def test_server_error_is_transport_failure(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        respx.post(url__startswith=POST_PREFIX).mock(return_value=httpx.Response(503))
        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)
        error = ResultAssertions.assert_failure(result, ErrorCode.TRANSPORT_FAILURE)
        assert error.status == 503

    @respx.mock
    def test_timeout_is_transport_failure(
        self, client: httpx.Client, credentials: Credentials, bootstrap_data: BootstrapData
    ) -> None:
        respx.post(url__startswith=POST_PREFIX).mock(side_effect=httpx.ReadTimeout("slow"))
        result = LiveCredentialExchanger(client).exchange(credentials, bootstrap_data)
        error = ResultAssertions.assert_failure(result, ErrorCode.TRANSPORT_FAILURE)
        assert error.status is None
