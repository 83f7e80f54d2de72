"""
Fixed vendor endpoints and identifiers for the Microsoft → Xbox → Minecraft chain.

These are protocol constants, not configuration: the client id, scope and
relying parties are what the services expect for this flow.
"""

from __future__ import annotations

LIVE_CLIENT_ID = "000000004C12AE6F"
LIVE_REDIRECT_URI = "https://login.live.com/oauth20_desktop.srf"
LIVE_SCOPE = "service::user.auth.xboxlive.com::MBI_SSL"

# The query string is sent unencoded, exactly as the desktop client does.
LIVE_AUTHORIZE_URL = (
    "https://login.live.com/oauth20_authorize.srf"
    f"?client_id={LIVE_CLIENT_ID}"
    f"&redirect_uri={LIVE_REDIRECT_URI}"
    f"&scope={LIVE_SCOPE}"
    "&display=touch&response_type=token&locale=en"
)

XBL_AUTHENTICATE_URL = "https://user.auth.xboxlive.com/user/authenticate"
XBL_SITE_NAME = "user.auth.xboxlive.com"
XBL_RELYING_PARTY = "http://auth.xboxlive.com"

XSTS_AUTHORIZE_URL = "https://xsts.auth.xboxlive.com/xsts/authorize"
XSTS_SANDBOX_ID = "RETAIL"
MINECRAFT_RELYING_PARTY = "rp://api.minecraftservices.com/"

MINECRAFT_LOGIN_URL = "https://api.minecraftservices.com/authentication/login_with_xbox"

TWO_FACTOR_HELP_URL = "https://account.live.com/activity"
