"""
Microsoft account login adapters — session bootstrap and credential exchange.

Implements the SessionBootstrapper and CredentialExchanger ports on top of
a run-scoped httpx.Client.

  1. GET the oauth20_authorize page → PPFT + urlPost (via a PageScraper)
  2. POST login/loginfmt/passwd/PPFT to urlPost, follow redirects, and read
     access_token from the fragment of the final URL

The cookies set by step 1 must accompany step 2, which is why both hops
share the same client and nothing else does.
"""

from __future__ import annotations

from dataclasses import replace
from urllib.parse import unquote, urlsplit

import httpx
import structlog

from mc_bearer.adapters.http_session import send
from mc_bearer.adapters.scraper import RegexPageScraper
from mc_bearer.domain.models import BootstrapData, Credentials
from mc_bearer.domain.ports import PageScraper
from mc_bearer.endpoints import LIVE_AUTHORIZE_URL, TWO_FACTOR_HELP_URL
from mc_bearer.railway import ErrorCode, Result

log = structlog.get_logger()

SIGN_IN_MARKER = "Sign in to"
TWO_FACTOR_MARKER = "2FA is enabled but not supported yet!"


def parse_fragment(fragment: str) -> dict[str, str]:
    """
    Split a URL fragment into key/value pairs.

    Pairs are separated by '&' and split on the first '=' only, so padded
    values such as "abc==" survive. Values are percent-decoded after the
    split. The first occurrence of a key wins.
    """
    params: dict[str, str] = {}
    for pair in fragment.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params.setdefault(key, unquote(value))
    return params


class LiveSessionBootstrapper:
    """
    Fetch the interactive login page and scrape its session values.

    Implements the SessionBootstrapper port. A page without both values is
    a PARSE_FAILURE and is never retried: a changed layout fails the same
    way every time, and a rate-limit page only gets worse.
    """

    def __init__(self, client: httpx.Client, scraper: PageScraper | None = None) -> None:
        self._client = client
        self._scraper = scraper or RegexPageScraper()

    def bootstrap(self) -> Result[BootstrapData]:
        return send(lambda: self._client.get(LIVE_AUTHORIZE_URL), "Login page").flat_map(
            self._scrape
        )

    def _scrape(self, response: httpx.Response) -> Result[BootstrapData]:
        result = self._scraper.extract(response.text)
        if not response.is_success:
            result = result.map_failure(lambda err: replace(err, status=response.status_code))
        return result.peek(
            lambda data: log.info("bootstrap.completed", post_host=httpx.URL(data.post_url).host)
        )


class LiveCredentialExchanger:
    """
    Submit the account credentials and recover the Microsoft access token.

    Implements the CredentialExchanger port. Only the final URL after
    redirects matters: success puts access_token in its fragment, while a
    rejected login re-serves the form at the same post URL.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def exchange(self, credentials: Credentials, bootstrap: BootstrapData) -> Result[str]:
        form = {
            "login": credentials.identity,
            "loginfmt": credentials.identity,
            "passwd": credentials.secret,
            "PPFT": bootstrap.csrf_value,
        }
        return send(
            lambda: self._client.post(bootstrap.post_url, data=form),
            "Credential exchange",
        ).flat_map(lambda response: self._read_access_token(response, bootstrap.post_url))

    def _read_access_token(self, response: httpx.Response, post_url: str) -> Result[str]:
        if not response.is_success:
            return Result.failure(
                ErrorCode.TRANSPORT_FAILURE,
                f"Credential exchange returned status {response.status_code}",
                status=response.status_code,
            )

        # URL.fragment is already percent-decoded; split the raw form.
        raw_fragment = urlsplit(str(response.url)).fragment
        access_token = parse_fragment(raw_fragment).get("access_token")
        if access_token:
            log.info("credentials.exchanged", redirects=len(response.history))
            return Result.success(access_token)

        body = response.text
        if TWO_FACTOR_MARKER in body:
            return Result.failure(
                ErrorCode.UNSUPPORTED_TWO_FACTOR,
                f"Two-factor authentication is enabled; disable it at {TWO_FACTOR_HELP_URL}",
            )
        if response.url == httpx.URL(post_url) and SIGN_IN_MARKER in body:
            return Result.failure(ErrorCode.INVALID_CREDENTIALS, "Incorrect credentials")

        log.error(
            "credentials.unexpected_redirect",
            final_host=response.url.host,
            final_path=response.url.path,
            redirects=len(response.history),
        )
        return Result.failure(
            ErrorCode.UNEXPECTED_RESPONSE,
            "Login redirect carried no access_token",
        )
