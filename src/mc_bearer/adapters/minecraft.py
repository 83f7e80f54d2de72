"""
Minecraft services adapter — the terminal hop of the exchange.

Implements the BearerExchanger port: POST the XBL3.0 identity token to
login_with_xbox and return the access_token from the JSON body.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from mc_bearer.adapters.http_session import json_body, require_status, require_text, send
from mc_bearer.domain.models import SecurityGrant
from mc_bearer.endpoints import MINECRAFT_LOGIN_URL
from mc_bearer.railway import Result

log = structlog.get_logger()


class MinecraftBearerExchanger:
    """Exchange an XSTS grant for the Minecraft services bearer token."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def exchange(self, grant: SecurityGrant) -> Result[str]:
        payload: dict[str, Any] = {"identityToken": grant.identity_token}
        return (
            send(
                lambda: self._client.post(MINECRAFT_LOGIN_URL, json=payload),
                "Minecraft login",
            )
            .flat_map(lambda response: require_status(response, "Minecraft login"))
            .flat_map(lambda response: json_body(response, "Minecraft login"))
            .flat_map(lambda body: require_text(body, "access_token", description="Minecraft login"))
            .peek(lambda _: log.info("minecraft.bearer_acquired"))
        )
