"""
Xbox Live adapters — user authentication (XBL) and XSTS authorization.

Implements the FederationExchanger port via httpx.

  a. POST user/authenticate with the RPS ticket → Token + DisplayClaims.xui[0].uhs
  b. POST xsts/authorize with that Token → XSTS Token for the Minecraft
     relying party; 401 bodies carry an XErr code that says why

Missing fields on a 200 are reported, never defaulted.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from mc_bearer.adapters.http_session import json_body, lookup, require_status, require_text, send
from mc_bearer.domain.models import FederationTokenSet, SecurityGrant
from mc_bearer.endpoints import (
    MINECRAFT_RELYING_PARTY,
    XBL_AUTHENTICATE_URL,
    XBL_RELYING_PARTY,
    XBL_SITE_NAME,
    XSTS_AUTHORIZE_URL,
    XSTS_SANDBOX_ID,
)
from mc_bearer.railway import ErrorCode, PipelineStage, Result

log = structlog.get_logger()

XERR_NO_XBOX_ACCOUNT = 2148916233
XERR_CHILD_ACCOUNT = 2148916238

_XERR_CODES: dict[int, ErrorCode] = {
    XERR_NO_XBOX_ACCOUNT: ErrorCode.ACCOUNT_NOT_GAME_LINKED,
    XERR_CHILD_ACCOUNT: ErrorCode.ACCOUNT_IS_MINOR,
}

_XERR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.ACCOUNT_NOT_GAME_LINKED: (
        "The account has no Xbox profile; sign up for one (or log in once at "
        "minecraft.net) before trying again"
    ),
    ErrorCode.ACCOUNT_IS_MINOR: (
        "The account belongs to a minor and must be added to a Microsoft family "
        "by an adult before it can sign in"
    ),
    ErrorCode.AUTHORIZATION_REJECTED: "XSTS rejected the authorization request",
}

_JSON_HEADERS = {"Accept": "application/json"}


def classify_xerr(xerr: Any) -> ErrorCode:
    """
    Map an XSTS XErr value to a failure kind.

    Total: anything that is not one of the two known codes, including a
    missing or non-numeric value, is AUTHORIZATION_REJECTED.
    """
    try:
        code = int(xerr)
    except (TypeError, ValueError):
        return ErrorCode.AUTHORIZATION_REJECTED
    return _XERR_CODES.get(code, ErrorCode.AUTHORIZATION_REJECTED)


class XboxLiveFederationExchanger:
    """
    Trade a Microsoft access token for an XSTS grant scoped to Minecraft.

    Implements the FederationExchanger port. Both calls reuse the run's
    client; neither is retried.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def exchange(self, access_token: str) -> Result[SecurityGrant]:
        return (
            self.acquire_federation_token(access_token)
            .at_hop(PipelineStage.FEDERATION_TOKEN)
            .flat_map(
                lambda token_set: self.acquire_security_token(token_set).at_hop(
                    PipelineStage.SECURITY_TOKEN
                )
            )
        )

    def acquire_federation_token(self, access_token: str) -> Result[FederationTokenSet]:
        """
        Authenticate the RPS ticket with Xbox Live.

        Returns the XBL token and the user hash; any status but 200 is a
        TRANSPORT_FAILURE carrying that status.
        """
        payload = {
            "Properties": {
                "AuthMethod": "RPS",
                "SiteName": XBL_SITE_NAME,
                "RpsTicket": access_token,
            },
            "RelyingParty": XBL_RELYING_PARTY,
            "TokenType": "JWT",
        }
        return (
            send(
                lambda: self._client.post(XBL_AUTHENTICATE_URL, json=payload, headers=_JSON_HEADERS),
                "XBL authentication",
            )
            .flat_map(lambda response: require_status(response, "XBL authentication"))
            .flat_map(lambda response: json_body(response, "XBL authentication"))
            .flat_map(self._read_token_set)
            .peek(lambda _: log.info("xbl.authenticated"))
        )

    def acquire_security_token(self, token_set: FederationTokenSet) -> Result[SecurityGrant]:
        """
        Authorize the XBL token against the Minecraft relying party.

        Status-driven: 200 yields the token, 401 is classified by XErr,
        anything else is a TRANSPORT_FAILURE.
        """
        payload = {
            "Properties": {
                "SandboxId": XSTS_SANDBOX_ID,
                "UserTokens": [token_set.token],
            },
            "RelyingParty": MINECRAFT_RELYING_PARTY,
            "TokenType": "JWT",
        }
        return send(
            lambda: self._client.post(XSTS_AUTHORIZE_URL, json=payload, headers=_JSON_HEADERS),
            "XSTS authorization",
        ).flat_map(lambda response: self._read_security_token(response, token_set.user_hash))

    @staticmethod
    def _read_token_set(body: dict[str, Any]) -> Result[FederationTokenSet]:
        return require_text(body, "Token", description="XBL authentication").flat_map(
            lambda token: require_text(
                body, "DisplayClaims", "xui", 0, "uhs", description="XBL authentication"
            ).map(lambda user_hash: FederationTokenSet(token=token, user_hash=user_hash))
        )

    @staticmethod
    def _read_security_token(response: httpx.Response, user_hash: str) -> Result[SecurityGrant]:
        if response.status_code == 401:
            return _rejection(response)
        return (
            require_status(response, "XSTS authorization")
            .flat_map(lambda ok: json_body(ok, "XSTS authorization"))
            .flat_map(lambda body: require_text(body, "Token", description="XSTS authorization"))
            .map(lambda token: SecurityGrant(user_hash=user_hash, security_token=token))
            .peek(lambda _: log.info("xsts.authorized"))
        )


def _rejection(response: httpx.Response) -> Result[SecurityGrant]:
    xerr = (
        json_body(response, "XSTS authorization")
        .flat_map(lambda body: Result.from_optional(lookup(body, "XErr"), "XSTS 401 has no XErr"))
        .get_or_else(None)
    )
    code = classify_xerr(xerr)
    log.warning("xsts.rejected", xerr=xerr, reason=code.value)
    return Result.failure(code, _XERR_MESSAGES[code], status=response.status_code)
