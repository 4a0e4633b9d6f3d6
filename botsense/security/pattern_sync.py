"""
Remote pattern sync.

Fetches a pattern snapshot from the patterns API and hands it to the
registry. Every failure is returned as an error string on SyncResult; the
previous snapshot stays authoritative. There is no retry or scheduling
here; callers decide when to sync again.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .pattern_registry import PatternRegistry
from .settings import DetectorSettings

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of a pattern sync."""
    is_success: bool
    version: Optional[str] = None
    pattern_count: int = 0
    referrer_count: int = 0
    error: Optional[str] = None

    def __str__(self) -> str:
        if self.is_success:
            return f"SYNCED: v{self.version} ({self.pattern_count} patterns)"
        return f"FAILED: {self.error}"

    def to_dict(self) -> dict:
        return {
            "success": self.is_success,
            "version": self.version,
            "patternCount": self.pattern_count,
            "referrerCount": self.referrer_count,
            "error": self.error,
        }


def _failure(message: str) -> SyncResult:
    logger.warning(f"Pattern sync failed: {message}")
    return SyncResult(is_success=False, error=message)


class PatternSyncClient:
    def __init__(
        self,
        registry: PatternRegistry,
        settings: DetectorSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.registry = registry
        self.settings = settings
        self._transport = transport
        self._headers = {
            "Content-Type": "application/json",
            "x-api-key": settings.api_key,
        }

    async def sync(self) -> SyncResult:
        """Fetch the remote snapshot and replace the registry with it."""
        if not self.settings.has_api_key:
            return _failure("No API key set for pattern sync")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.sync_timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    self.settings.patterns_endpoint, headers=self._headers
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return _failure(f"Error syncing patterns: {e}")

        if not response.is_success:
            return _failure(
                f"Pattern sync HTTP error {response.status_code}: {response.reason_phrase}"
            )

        try:
            payload = response.json()
        except ValueError:
            return _failure("Invalid pattern response format")

        update = self.registry.replace(payload)
        if not update.is_applied:
            return _failure(update.details or "Invalid pattern response format")

        logger.info(
            f"Synced {update.pattern_count} patterns and "
            f"{update.referrer_count} AI referrers (v{update.version})"
        )
        return SyncResult(
            is_success=True,
            version=update.version,
            pattern_count=update.pattern_count,
            referrer_count=update.referrer_count,
        )
