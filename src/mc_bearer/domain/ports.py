"""
Ports — Protocol-based interfaces for the pipeline hops.

These define WHAT each hop needs (contracts) without specifying HOW it's
done. Following hexagonal architecture:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters satisfy the
contract simply by implementing the methods — no inheritance.

Exchange flow:
  1. SessionBootstrapper   → BootstrapData (scraped via a PageScraper)
  2. CredentialExchanger   → Microsoft access token
  3. FederationExchanger   → XBL token + user hash → XSTS SecurityGrant
  4. BearerExchanger       → Minecraft bearer token
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mc_bearer.domain.models import (
    BootstrapData,
    Credentials,
    FederationTokenSet,
    SecurityGrant,
)
from mc_bearer.railway.result import Result


@runtime_checkable
class PageScraper(Protocol):
    """
    Port: pull the PPFT value and urlPost target out of the login page.

    Kept separate from the bootstrapper so the extraction strategy can be
    swapped when the vendor markup changes, without touching the pipeline.
    """

    def extract(self, html: str) -> Result[BootstrapData]: ...


@runtime_checkable
class SessionBootstrapper(Protocol):
    """Port: fetch the interactive login page and scrape its session values."""

    def bootstrap(self) -> Result[BootstrapData]: ...


@runtime_checkable
class CredentialExchanger(Protocol):
    """
    Port: submit identity and secret, return the Microsoft access token.

    The token is read from the fragment of the final redirect URL.
    """

    def exchange(self, credentials: Credentials, bootstrap: BootstrapData) -> Result[str]: ...


@runtime_checkable
class FederationExchanger(Protocol):
    """
    Port: Xbox Live user authentication followed by XSTS authorization.

    Two sequential calls; exchange() chains them.
    """

    def acquire_federation_token(self, access_token: str) -> Result[FederationTokenSet]: ...

    def acquire_security_token(self, token_set: FederationTokenSet) -> Result[SecurityGrant]: ...

    def exchange(self, access_token: str) -> Result[SecurityGrant]: ...


@runtime_checkable
class BearerExchanger(Protocol):
    """Port: trade the XBL3.0 identity token for a Minecraft bearer token."""

    def exchange(self, grant: SecurityGrant) -> Result[str]: ...
