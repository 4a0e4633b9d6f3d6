"""Agent detection engine for botsense."""

from botsense.security.agent_patterns import AgentCategory, SourceType, build_default_snapshot
from botsense.security.classifier import AgentClassifier, ClassificationResult
from botsense.security.collector import CollectorClient, CollectorEvent, create_event
from botsense.security.detection import AgentDetector, BotInfo, DetectionResult
from botsense.security.middleware import AgentDetectionMiddleware
from botsense.security.pattern_registry import (
    Pattern,
    PatternRegistry,
    ReferrerEntry,
    RegistryUpdate,
)
from botsense.security.pattern_sync import PatternSyncClient, SyncResult
from botsense.security.referrers import ReferrerClassifier, ReferrerMatch
from botsense.security.rules import RuleSet, should_block
from botsense.security.settings import DetectorSettings
from botsense.security.specificity import specificity_score

__all__ = [
    "AgentCategory",
    "SourceType",
    "build_default_snapshot",
    "AgentClassifier",
    "ClassificationResult",
    "CollectorClient",
    "CollectorEvent",
    "create_event",
    "AgentDetector",
    "BotInfo",
    "DetectionResult",
    "AgentDetectionMiddleware",
    "Pattern",
    "PatternRegistry",
    "ReferrerEntry",
    "RegistryUpdate",
    "PatternSyncClient",
    "SyncResult",
    "ReferrerClassifier",
    "ReferrerMatch",
    "RuleSet",
    "should_block",
    "DetectorSettings",
    "specificity_score",
]
