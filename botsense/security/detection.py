"""
Detection facade: one decision per request.

Combines user-agent classification, AI referrer classification and the
allow/block rules.

Decision Order:
- Bot match on the user agent: source "bot", blocked per rules. The referrer
  is not consulted.
- AI platform referrer: source "ai_referrer", never a bot, never blocked.
- Neither: source "none".

Usage:
    from botsense.security.detection import AgentDetector

    detector = AgentDetector(registry, settings.rule_set())
    result = detector.detect(user_agent, referrer)

    if result.should_block:
        return JSONResponse(status_code=403, content={"error": "Forbidden"})
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .agent_patterns import SourceType
from .classifier import AgentClassifier, ClassificationResult
from .pattern_registry import Pattern, PatternRegistry, ReferrerEntry
from .referrers import ReferrerClassifier, ReferrerMatch
from .rules import RuleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotInfo:
    """Taxonomy of the pattern a bot detection matched."""
    pattern: str
    type: str
    category: str
    subcategory: str
    company: Optional[str]
    is_compliant: bool
    is_ai_model_trainer: bool
    intent: str
    url: Optional[str] = None

    @classmethod
    def from_pattern(cls, pattern: Pattern) -> "BotInfo":
        return cls(
            pattern=pattern.signature,
            type=pattern.name,
            category=pattern.category,
            subcategory=pattern.subcategory,
            company=pattern.company,
            is_compliant=pattern.is_compliant,
            is_ai_model_trainer=pattern.is_ai_model_trainer,
            intent=pattern.intent,
            url=pattern.documentation_url,
        )

    def to_dict(self) -> dict:
        return {
            "pattern": self.pattern,
            "type": self.type,
            "category": self.category,
            "subcategory": self.subcategory,
            "company": self.company,
            "isCompliant": self.is_compliant,
            "isAiModelTrainer": self.is_ai_model_trainer,
            "intent": self.intent,
            "url": self.url,
        }


@dataclass(frozen=True)
class DetectionResult:
    """Combined outcome for one request."""
    is_bot: bool
    should_block: bool
    source_type: SourceType
    matched_pattern: Optional[str] = None
    info: Union[BotInfo, ReferrerEntry, None] = None
    confidence: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "isBot": self.is_bot,
            "shouldBlock": self.should_block,
            "sourceType": self.source_type.value,
            "matchedPattern": self.matched_pattern,
            "info": self.info.to_dict() if self.info else None,
            "confidence": self.confidence,
        }


NO_DETECTION = DetectionResult(is_bot=False, should_block=False, source_type=SourceType.NONE)


class AgentDetector:
    """
    Detection context: one registry, one rule set.

    Build one per configuration and pass it to whatever needs it
    (middleware, routes). Several detectors may share a registry.
    """

    def __init__(self, registry: Optional[PatternRegistry] = None, rules: Optional[RuleSet] = None):
        self.registry = registry or PatternRegistry()
        self.rules = rules or RuleSet()
        self.classifier = AgentClassifier(self.registry)
        self.referrer_classifier = ReferrerClassifier(self.registry)

    def classify(self, user_agent: Optional[str]) -> ClassificationResult:
        return self.classifier.classify(user_agent)

    def is_bot(self, user_agent: Optional[str]) -> bool:
        return self.classifier.is_bot(user_agent)

    def classify_referrer(self, referrer: Optional[str]) -> Optional[ReferrerMatch]:
        return self.referrer_classifier.classify_referrer(referrer)

    def detect_bot(self, user_agent: Optional[str]) -> DetectionResult:
        """Bot detection with the block verdict applied."""
        classification = self.classify(user_agent)
        if not classification.is_bot or classification.pattern is None:
            return NO_DETECTION

        pattern = classification.pattern
        should_block = self.rules.should_block(pattern)
        logger.debug(
            f"Bot detected: type={pattern.name} category={pattern.category} "
            f"company={pattern.company} should_block={should_block}"
        )
        return DetectionResult(
            is_bot=True,
            should_block=should_block,
            source_type=SourceType.BOT,
            matched_pattern=classification.matched_signature,
            info=BotInfo.from_pattern(pattern),
            confidence=classification.confidence,
        )

    def detect_ai_referrer(self, referrer: Optional[str]) -> DetectionResult:
        """AI referrer detection; matches are never blocked."""
        match = self.classify_referrer(referrer)
        if match is None:
            return NO_DETECTION
        return DetectionResult(
            is_bot=False,
            should_block=False,
            source_type=SourceType.AI_REFERRER,
            matched_pattern=match.matched_fragment,
            info=match.entry,
        )

    def detect(self, user_agent: Optional[str], referrer: Optional[str] = None) -> DetectionResult:
        """
        Detect a request by user agent, then by referrer.

        Args:
            user_agent: The User-Agent header
            referrer: The Referer header, if any

        Returns:
            DetectionResult; source "bot" wins over "ai_referrer"
        """
        bot_result = self.detect_bot(user_agent)
        if bot_result.is_bot:
            return bot_result

        if referrer:
            referrer_result = self.detect_ai_referrer(referrer)
            if referrer_result.source_type == SourceType.AI_REFERRER:
                return referrer_result

        return NO_DETECTION

    def get_patterns(self) -> list[Pattern]:
        return self.registry.get_patterns()

    def get_referrers(self) -> list[ReferrerEntry]:
        return self.registry.get_referrers()

    @property
    def version(self) -> str:
        return self.registry.version
