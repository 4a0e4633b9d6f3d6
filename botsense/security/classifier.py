"""
User-agent classification against the pattern registry.

Two entry points share one matching model:
- classify(): Detailed result, ranks every match by specificity
- is_bot(): Boolean only, returns on the first match in priority order

Matching Order:
1. Curated patterns (named agents). If any match, fallback is ignored.
2. Fallback patterns (generic third-party list).
3. Plain substring check for "scraper", "crawler" or "spider".

Confidence Tiers:
- 1.0: Nothing matched (or empty input)
- 0.9: Exactly one pattern matched in the deciding group
- 0.7: Several patterns matched, or only the substring check fired
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .agent_patterns import AgentCategory
from .pattern_registry import CompiledPattern, Pattern, PatternRegistry
from .specificity import specificity_score

logger = logging.getLogger(__name__)

CONFIDENCE_NONE = 1.0
CONFIDENCE_SINGLE = 0.9
CONFIDENCE_AMBIGUOUS = 0.7

SCRAPER_KEYWORDS: tuple[str, ...] = ("scraper", "crawler", "spider")

GENERIC_SCRAPER = Pattern(
    signature="",
    name="generic-scraper",
    category=AgentCategory.SCRAPER.value,
    subcategory="Data Collection Tools",
    intent="DataCollection",
    curated=False,
)


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying a user agent."""
    is_bot: bool
    category: str = AgentCategory.UNKNOWN.value
    name: Optional[str] = None
    company: Optional[str] = None
    confidence: float = CONFIDENCE_NONE
    matched_signature: Optional[str] = None
    pattern: Optional[Pattern] = None

    def __bool__(self) -> bool:
        """Allow `if result:` to check is_bot."""
        return self.is_bot

    def to_dict(self) -> dict:
        return {
            "isBot": self.is_bot,
            "category": self.category,
            "name": self.name,
            "company": self.company,
            "confidence": self.confidence,
            "matchedSignature": self.matched_signature,
        }


NOT_A_BOT = ClassificationResult(is_bot=False)


def _truncate(user_agent: str, limit: int = 150) -> str:
    return user_agent if len(user_agent) <= limit else f"{user_agent[:limit]}..."


def _matches(group: tuple[CompiledPattern, ...], user_agent: str) -> list[Pattern]:
    return [c.pattern for c in group if c.regex.search(user_agent)]


def _best_match(candidates: list[Pattern]) -> ClassificationResult:
    """Pick the most specific candidate; ties keep registry order."""
    ranked = sorted(candidates, key=lambda p: specificity_score(p.signature), reverse=True)
    best = ranked[0]
    return ClassificationResult(
        is_bot=True,
        category=best.category,
        name=best.name,
        company=best.company,
        confidence=CONFIDENCE_SINGLE if len(candidates) == 1 else CONFIDENCE_AMBIGUOUS,
        matched_signature=best.signature,
        pattern=best,
    )


def _has_scraper_keyword(user_agent: str) -> bool:
    ua_lower = user_agent.lower()
    return any(keyword in ua_lower for keyword in SCRAPER_KEYWORDS)


class AgentClassifier:
    """Classifies user agents using the registry's current snapshot."""

    def __init__(self, registry: PatternRegistry):
        self._registry = registry

    def classify(self, user_agent: Optional[str]) -> ClassificationResult:
        """
        Classify a user agent.

        Args:
            user_agent: The User-Agent header (may be empty or None)

        Returns:
            ClassificationResult for the most specific matching pattern
        """
        if not user_agent:
            return NOT_A_BOT

        snapshot = self._registry.snapshot

        for group_name, group in (("curated", snapshot.curated), ("fallback", snapshot.fallback)):
            candidates = _matches(group, user_agent)
            if candidates:
                result = _best_match(candidates)
                logger.debug(
                    f"Classified {group_name}: name={result.name} "
                    f"candidates={len(candidates)} ua={_truncate(user_agent)}"
                )
                return result

        if _has_scraper_keyword(user_agent):
            return ClassificationResult(
                is_bot=True,
                category=GENERIC_SCRAPER.category,
                name=GENERIC_SCRAPER.name,
                confidence=CONFIDENCE_AMBIGUOUS,
                pattern=GENERIC_SCRAPER,
            )

        return NOT_A_BOT

    def match(self, user_agent: Optional[str]) -> Optional[Pattern]:
        """Return the first matching pattern in priority order, or None."""
        if not user_agent:
            return None
        for compiled in self._registry.snapshot.compiled:
            if compiled.regex.search(user_agent):
                return compiled.pattern
        if _has_scraper_keyword(user_agent):
            return GENERIC_SCRAPER
        return None

    def is_bot(self, user_agent: Optional[str]) -> bool:
        """Fast boolean check; stops at the first match."""
        return self.match(user_agent) is not None
