"""Tests for the combined detection facade."""

import pytest

from botsense.security.agent_patterns import SourceType
from botsense.security.detection import AgentDetector, BotInfo
from botsense.security.pattern_registry import PatternRegistry, ReferrerEntry
from botsense.security.rules import RuleSet
from tests._agents import CHATGPT_USER_UA, CHROME_UA, CLAUDEBOT_UA, GPTBOT_UA, make_payload


# ── Bot detection ───────────────────────────────────────────────────


def test_gptbot_is_detected_but_not_blocked_by_default(detector):
    result = detector.detect(GPTBOT_UA)
    assert result.is_bot is True
    assert result.should_block is False
    assert result.source_type == SourceType.BOT
    assert result.matched_pattern == r"GPTBot\/[0-9]"
    assert isinstance(result.info, BotInfo)
    assert result.info.category == "AI Crawler"
    assert result.info.company == "OpenAI"
    assert result.confidence == 0.9


def test_gptbot_blocked_when_blocking_model_trainers(trainer_blocking_detector):
    result = trainer_blocking_detector.detect(GPTBOT_UA)
    assert result.is_bot is True
    assert result.should_block is True


def test_pattern_allow_overrides_model_trainer_switch(registry):
    rules = RuleSet.from_lists(
        custom_allows=[r"pattern:GPTBot\/[0-9]"],
        block_ai_model_trainers=True,
    )
    result = AgentDetector(registry, rules).detect(GPTBOT_UA)
    assert result.is_bot is True
    assert result.should_block is False


def test_pattern_allow_overrides_category_block(registry):
    rules = RuleSet.from_lists(
        custom_allows=[r"pattern:GPTBot\/[0-9]"],
        custom_blocks=["category:AI Crawler"],
    )
    detector = AgentDetector(registry, rules)
    assert detector.detect(GPTBOT_UA).should_block is False
    assert detector.detect(CLAUDEBOT_UA).should_block is True


def test_model_trainer_switch_leaves_assistants_alone(trainer_blocking_detector):
    assert trainer_blocking_detector.detect(CLAUDEBOT_UA).should_block is True
    result = trainer_blocking_detector.detect(CHATGPT_USER_UA)
    assert result.is_bot is True
    assert result.should_block is False


def test_generic_scraper_can_be_blocked_by_category(registry):
    detector = AgentDetector(registry, RuleSet.from_lists(custom_blocks=["category:Scraper"]))
    result = detector.detect("Mozilla/5.0 (compatible; DataScraper/2.0)")
    assert result.is_bot is True
    assert result.should_block is True
    assert result.matched_pattern is None
    assert result.info.type == "generic-scraper"


# ── Referrer detection ──────────────────────────────────────────────


def test_ai_referrer_when_no_bot(detector):
    result = detector.detect(CHROME_UA, "https://chat.openai.com/c/1")
    assert result.is_bot is False
    assert result.should_block is False
    assert result.source_type == SourceType.AI_REFERRER
    assert isinstance(result.info, ReferrerEntry)
    assert result.info.name == "ChatGPT"


def test_ai_referrer_is_never_blocked(registry):
    rules = RuleSet.from_lists(
        custom_blocks=["category:Unknown", "category:AI Agent"],
        block_ai_model_trainers=True,
    )
    result = AgentDetector(registry, rules).detect(CHROME_UA, "https://claude.ai/chat")
    assert result.source_type == SourceType.AI_REFERRER
    assert result.should_block is False


def test_bot_takes_priority_over_referrer(detector):
    result = detector.detect(GPTBOT_UA, "https://chat.openai.com/c/1")
    assert result.source_type == SourceType.BOT
    assert result.is_bot is True


# ── Negative results ────────────────────────────────────────────────


@pytest.mark.parametrize("referrer", [None, "", "https://www.google.com/"])
def test_browser_without_ai_referrer(detector, referrer):
    result = detector.detect(CHROME_UA, referrer)
    assert result.source_type == SourceType.NONE
    assert result.is_bot is False
    assert result.should_block is False
    assert result.info is None


def test_empty_user_agent(detector):
    result = detector.detect("")
    assert result.source_type == SourceType.NONE
    assert result.is_bot is False


# ── Shared registry and accessors ───────────────────────────────────


def test_detectors_share_a_registry_with_different_rules(registry):
    lenient = AgentDetector(registry, RuleSet())
    strict = AgentDetector(registry, RuleSet(block_ai_model_trainers=True))
    assert lenient.detect(GPTBOT_UA).should_block is False
    assert strict.detect(GPTBOT_UA).should_block is True

    registry.replace(make_payload([{"pattern": "OnlyBot", "isAiModelTrainer": True}]))
    assert lenient.detect(GPTBOT_UA).is_bot is False
    assert strict.detect("OnlyBot/1").should_block is True


def test_accessors(detector):
    assert detector.version == "1.0.0"
    assert detector.get_patterns() == detector.registry.get_patterns()
    assert detector.get_referrers() == detector.registry.get_referrers()
    assert detector.is_bot(GPTBOT_UA) is True
    assert detector.classify_referrer("https://claude.ai/").name == "Claude"


def test_default_detector_builds_its_own_registry():
    detector = AgentDetector()
    assert isinstance(detector.registry, PatternRegistry)
    assert detector.detect(GPTBOT_UA).should_block is False


def test_to_dict(detector):
    data = detector.detect(GPTBOT_UA).to_dict()
    assert data["isBot"] is True
    assert data["shouldBlock"] is False
    assert data["sourceType"] == "bot"
    assert data["info"]["type"] == "gptbot"
    assert data["info"]["isAiModelTrainer"] is True
