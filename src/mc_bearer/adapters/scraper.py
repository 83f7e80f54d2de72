"""
Regex page scraper — implements the PageScraper port.

The login page is HTML with the two session values embedded in markup and
inline script. The first occurrence of each pattern wins.
"""

from __future__ import annotations

import re

import structlog

from mc_bearer.domain.models import BootstrapData
from mc_bearer.railway import ErrorCode, Result

log = structlog.get_logger()

PPFT_PATTERN = re.compile(r'value="(.+?)"')
URL_POST_PATTERN = re.compile(r"urlPost:'(.+?)'")


class RegexPageScraper:
    """Extract PPFT and urlPost with the patterns the desktop flow relies on."""

    def __init__(
        self,
        csrf_pattern: re.Pattern[str] = PPFT_PATTERN,
        post_url_pattern: re.Pattern[str] = URL_POST_PATTERN,
    ) -> None:
        self._csrf_pattern = csrf_pattern
        self._post_url_pattern = post_url_pattern

    def extract(self, html: str) -> Result[BootstrapData]:
        csrf_match = self._csrf_pattern.search(html)
        post_url_match = self._post_url_pattern.search(html)
        if csrf_match is None or post_url_match is None:
            # Rate-limit and error pages land here as well as markup changes.
            log.error(
                "bootstrap.parse_failed",
                csrf_found=csrf_match is not None,
                post_url_found=post_url_match is not None,
                body_length=len(html),
            )
            return Result.failure(ErrorCode.PARSE_FAILURE, "unable to parse login page")
        return Result.success(
            BootstrapData(
                csrf_value=csrf_match.group(1),
                post_url=post_url_match.group(1),
            )
        )
