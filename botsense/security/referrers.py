"""
AI platform referrer classification.

A referrer from chat.openai.com or claude.ai means a human followed a link
out of an AI assistant's UI. These visits are reported, never blocked, and
never counted as bots.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from .pattern_registry import PatternRegistry, ReferrerEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferrerMatch:
    """An AI platform identified from a referrer."""
    entry: ReferrerEntry
    matched_fragment: str
    hostname: str

    @property
    def is_bot(self) -> bool:
        return False

    @property
    def referrer_id(self) -> str:
        return self.entry.id

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def company(self) -> Optional[str]:
        return self.entry.company


def extract_hostname(referrer: str) -> str:
    """
    Get the lowercased hostname of an absolute URL.

    Anything that does not parse as a URL is returned lowercased as-is, so
    bare domains like "claude.ai" still match. A URL with a scheme but no
    host (mailto:, data:) has an empty hostname.
    """
    try:
        parsed = urlparse(referrer)
        if parsed.scheme:
            return (parsed.hostname or "").lower()
    except ValueError:
        pass
    logger.debug(f"Referrer is not an absolute URL, using raw value: {referrer[:150]}")
    return referrer.lower()


class ReferrerClassifier:
    """Matches referrers against the registry's AI referrer entries."""

    def __init__(self, registry: PatternRegistry):
        self._registry = registry

    def classify_referrer(self, referrer: Optional[str]) -> Optional[ReferrerMatch]:
        """
        Identify the AI platform a referrer belongs to.

        Returns:
            ReferrerMatch for the first entry (in registry order) with a
            fragment contained in the hostname, or None
        """
        if not referrer:
            return None

        hostname = extract_hostname(referrer)
        for entry in self._registry.snapshot.referrers:
            for fragment in entry.domain_fragments:
                if fragment in hostname:
                    logger.debug(f"AI referrer matched: id={entry.id} fragment={fragment}")
                    return ReferrerMatch(entry=entry, matched_fragment=fragment, hostname=hostname)
        return None
