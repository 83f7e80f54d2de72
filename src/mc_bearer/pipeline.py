"""
Pipeline — the ROP chain from account credentials to a Minecraft bearer token.

The hops are connected via flat_map, forming a railway:

  bootstrap()
    → exchange(credentials, bootstrap_data)      access token
      → federation.exchange(access_token)        XBL token + uhs → XSTS grant
        → bearer.exchange(grant)                 bearer token

Each hop returns Result[T]. Failures short-circuit automatically, so a
failed hop means no later request is ever issued, and every failure is
tagged with the hop it came from.
"""

from __future__ import annotations

from mc_bearer.adapters.http_session import open_session
from mc_bearer.adapters.live_login import LiveCredentialExchanger, LiveSessionBootstrapper
from mc_bearer.adapters.minecraft import MinecraftBearerExchanger
from mc_bearer.adapters.xbox_live import XboxLiveFederationExchanger
from mc_bearer.domain.models import Credentials
from mc_bearer.domain.ports import (
    BearerExchanger,
    CredentialExchanger,
    FederationExchanger,
    PageScraper,
    SessionBootstrapper,
)
from mc_bearer.railway import PipelineStage, Result


def run_pipeline(
    credentials: Credentials,
    bootstrapper: SessionBootstrapper,
    credential_exchanger: CredentialExchanger,
    federation_exchanger: FederationExchanger,
    bearer_exchanger: BearerExchanger,
) -> Result[str]:
    """
    Execute the four hops in order.

    Returns Result[str] with the bearer token on success, or the failure of
    the first hop that did not succeed.
    """
    return (
        bootstrapper.bootstrap()
        .at_hop(PipelineStage.BOOTSTRAP)
        .flat_map(
            lambda bootstrap: credential_exchanger.exchange(credentials, bootstrap).at_hop(
                PipelineStage.CREDENTIAL_EXCHANGE
            )
        )
        # The federation adapter tags its two sub-hops itself.
        .flat_map(
            lambda access_token: federation_exchanger.exchange(access_token).at_hop(
                PipelineStage.FEDERATION_TOKEN
            )
        )
        .flat_map(lambda grant: bearer_exchanger.exchange(grant).at_hop(PipelineStage.SERVICE_BEARER))
    )


def acquire_bearer_token(
    credentials: Credentials,
    scraper: PageScraper | None = None,
) -> Result[str]:
    """
    Run the whole exchange for one account on a fresh HTTP session.

    The session (and its cookie jar) is opened here and closed on every
    exit path; it is never shared with another run.
    """
    with open_session() as client:
        return run_pipeline(
            credentials,
            bootstrapper=LiveSessionBootstrapper(client, scraper),
            credential_exchanger=LiveCredentialExchanger(client),
            federation_exchanger=XboxLiveFederationExchanger(client),
            bearer_exchanger=MinecraftBearerExchanger(client),
        )
