"""Tests for user-agent classification."""

import pytest

from botsense.security.classifier import AgentClassifier
from botsense.security.pattern_registry import PatternRegistry
from tests._agents import (
    BINGBOT_UA,
    CHATGPT_USER_UA,
    CHROME_UA,
    CLAUDEBOT_UA,
    FIREFOX_UA,
    GOOGLEBOT_UA,
    GPTBOT_UA,
    make_payload,
)


@pytest.fixture
def classifier(registry):
    return AgentClassifier(registry)


# ── Empty input ─────────────────────────────────────────────────────


@pytest.mark.parametrize("user_agent", ["", None])
def test_empty_user_agent_is_unknown(classifier, user_agent):
    result = classifier.classify(user_agent)
    assert result.is_bot is False
    assert result.category == "Unknown"
    assert result.confidence == 1.0
    assert classifier.is_bot(user_agent) is False


# ── Curated matches ─────────────────────────────────────────────────


@pytest.mark.parametrize(
    "user_agent, name, category, company",
    [
        (GPTBOT_UA, "gptbot", "AI Crawler", "OpenAI"),
        (CHATGPT_USER_UA, "chatgpt-user", "AI Agent", "OpenAI"),
        (CLAUDEBOT_UA, "claude-bot", "AI Crawler", "Anthropic"),
        (GOOGLEBOT_UA, "googlebot", "Search Crawler", "Google"),
        (BINGBOT_UA, "bingbot", "Search Crawler", "Microsoft"),
    ],
)
def test_single_curated_match(classifier, user_agent, name, category, company):
    result = classifier.classify(user_agent)
    assert result.is_bot is True
    assert result.name == name
    assert result.category == category
    assert result.company == company
    assert result.confidence == 0.9


def test_curated_match_hides_fallback(classifier):
    # "Googlebot" also contains the generic "bot"
    result = classifier.classify(GOOGLEBOT_UA)
    assert result.matched_signature == r"Googlebot\/[0-9]"
    assert result.confidence == 0.9


def test_multiple_curated_matches_pick_most_specific(classifier):
    ua = "Mozilla/5.0 (compatible; GPTBot/1.0; ChatGPT-User/1.0)"
    result = classifier.classify(ua)
    assert result.confidence == 0.7
    assert result.name == "chatgpt-user"
    assert result.matched_signature == r"ChatGPT-User\/[0-9]"


def test_matching_is_case_insensitive(classifier):
    result = classifier.classify("mozilla/5.0 (compatible; gptbot/1.0)")
    assert result.name == "gptbot"


# ── Fallback matches ────────────────────────────────────────────────


def test_single_fallback_match(classifier):
    result = classifier.classify("curl/8.4.0")
    assert result.is_bot is True
    assert result.name == "curl"
    assert result.category == "Scraper"
    assert result.confidence == 0.9


def test_multiple_fallback_matches(classifier):
    result = classifier.classify("Mozilla/5.0 (compatible; MyBotCrawler/1.0)")
    assert result.is_bot is True
    assert result.confidence == 0.7
    # "crawler" (-1) outranks "bot" (-9)
    assert result.matched_signature == "crawler"


# ── Substring fallback ──────────────────────────────────────────────


def test_scraper_keyword_without_pattern_match(classifier):
    result = classifier.classify("Mozilla/5.0 (compatible; DataScraper/2.0)")
    assert result.is_bot is True
    assert result.category == "Scraper"
    assert result.name == "generic-scraper"
    assert result.confidence == 0.7
    assert result.matched_signature is None


def test_scraper_keyword_applies_when_registry_has_no_match():
    registry = PatternRegistry()
    registry.replace(make_payload([{"pattern": "OnlyThisBot"}]))
    classifier = AgentClassifier(registry)
    assert classifier.classify("site-spider/1.0").name == "generic-scraper"
    assert classifier.classify("SomeCrawler").name == "generic-scraper"


# ── Browsers ────────────────────────────────────────────────────────


@pytest.mark.parametrize("user_agent", [CHROME_UA, FIREFOX_UA])
def test_browsers_are_not_bots(classifier, user_agent):
    result = classifier.classify(user_agent)
    assert result.is_bot is False
    assert result.category == "Unknown"
    assert result.confidence == 1.0
    assert not result


# ── Fail-soft compilation ───────────────────────────────────────────


def test_malformed_pattern_is_skipped():
    registry = PatternRegistry()
    registry.replace(make_payload([
        {"pattern": "([unclosed", "type": "broken"},
        {"pattern": "GoodBot", "type": "good"},
    ]))
    classifier = AgentClassifier(registry)

    result = classifier.classify("GoodBot/1.0 ([unclosed")
    assert result.name == "good"
    assert result.confidence == 0.9
    assert classifier.is_bot("GoodBot/1.0") is True


def test_replacement_takes_effect_immediately():
    registry = PatternRegistry()
    classifier = AgentClassifier(registry)
    assert classifier.classify(GPTBOT_UA).name == "gptbot"

    registry.replace(make_payload([{"pattern": "GPTBot", "type": "renamed"}]))
    assert classifier.classify(GPTBOT_UA).name == "renamed"


# ── Fast path ───────────────────────────────────────────────────────


def test_match_returns_first_in_priority_order(classifier):
    ua = "Mozilla/5.0 (compatible; GPTBot/1.0; ChatGPT-User/1.0)"
    # ChatGPT-User is listed before GPTBot in the bundled set
    assert classifier.match(ua).name == "chatgpt-user"


@pytest.mark.parametrize(
    "user_agent",
    [
        GPTBOT_UA,
        GOOGLEBOT_UA,
        CHROME_UA,
        FIREFOX_UA,
        "curl/8.4.0",
        "Mozilla/5.0 (compatible; DataScraper/2.0)",
        "",
    ],
)
def test_is_bot_agrees_with_classify(classifier, user_agent):
    assert classifier.is_bot(user_agent) == classifier.classify(user_agent).is_bot


def test_to_dict(classifier):
    data = classifier.classify(GPTBOT_UA).to_dict()
    assert data == {
        "isBot": True,
        "category": "AI Crawler",
        "name": "gptbot",
        "company": "OpenAI",
        "confidence": 0.9,
        "matchedSignature": r"GPTBot\/[0-9]",
    }
