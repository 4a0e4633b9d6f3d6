"""
Bundled agent patterns for user-agent and referrer classification.

This module defines:
- AgentCategory: Top-level taxonomy for automated traffic
- SourceType: What kind of signal produced a detection
- CURATED_PATTERNS: Hand-authored signatures for named agents and companies
- FALLBACK_PATTERNS: Generic signatures from a third-party crawler list
- AI_REFERRERS: Hostname fragments of AI platforms whose users click through
- build_default_snapshot(): Merges the above into the wire-format snapshot

Pattern Note:
    Signatures are regular expressions matched case-insensitively. They are
    kept in the same shape the remote pattern API serves so the bundled set
    and a synced set go through one parser.
"""

from enum import Enum
from typing import Any


class AgentCategory(str, Enum):
    """Top-level categories of automated traffic."""
    AI_AGENT = "AI Agent"  # ChatGPT, Claude, etc. fetching on a user's behalf
    AI_ASSISTANT = "AI Assistant"  # AI tools used through an approved interface
    SEARCH_CRAWLER = "Search Crawler"  # Google, Bing, etc.
    AI_CRAWLER = "AI Crawler"  # Model-training crawlers
    SCRAPER = "Scraper"  # Generic scrapers and unauthorized crawlers
    OTHER_BOT = "Other Bot"  # Monitoring, previews, HTTP libraries
    UNKNOWN = "Unknown"  # Unclassified or human traffic


class SourceType(str, Enum):
    """Which signal a detection came from."""
    BOT = "bot"
    AI_REFERRER = "ai_referrer"
    NONE = "none"


DEFAULT_VERSION = "1.0.0"
DEFAULT_SUBCATEGORY = "Unclassified"
DEFAULT_TYPE = "unknown"
DEFAULT_INTENT = "unknown"

# =============================================================================
# CURATED PATTERNS (Named agents, evaluated first)
# =============================================================================

CURATED_PATTERNS: list[dict[str, Any]] = [
    # AI Assistants (user-initiated requests, not model trainers)
    {
        "pattern": r"ChatGPT-User\/[0-9]",
        "url": "https://platform.openai.com/docs/bots",
        "type": "chatgpt-user",
        "category": "AI Agent",
        "subcategory": "AI Assistants",
        "company": "OpenAI",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "UserQuery",
        "instances": [
            "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko); compatible; ChatGPT-User/1.0; +https://openai.com/bot",
        ],
    },
    {
        "pattern": r"Perplexity-User\/[0-9]",
        "url": "https://docs.perplexity.ai/guides/bots",
        "type": "perplexity-user",
        "category": "AI Agent",
        "subcategory": "AI Assistants",
        "company": "Perplexity AI",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "UserQuery",
        "instances": [
            "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko; compatible; Perplexity-User/1.0; +https://perplexity.ai/perplexity-user)",
        ],
    },
    {
        "pattern": r"Gemini-User\/[0-9]",
        "url": "https://ai.google.dev/gemini-api/docs/bots",
        "type": "gemini-user",
        "category": "AI Agent",
        "subcategory": "AI Assistants",
        "company": "Google",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "UserQuery",
    },
    {
        "pattern": r"Claude-User\/[0-9]",
        "url": "https://support.anthropic.com/en/articles/8896518-does-anthropic-crawl-data-from-the-web-and-how-can-site-owners-block-the-crawler",
        "type": "claude-user",
        "category": "AI Agent",
        "subcategory": "AI Assistants",
        "company": "Anthropic",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "UserQuery",
        "instances": [
            "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko); compatible; Claude-User/1.0; +https://anthropic.com/claude",
        ],
    },
    # AI search indexers (retrieval for answers, not training)
    {
        "pattern": r"OAI-SearchBot\/[0-9]",
        "url": "https://platform.openai.com/docs/bots",
        "type": "oai-searchbot",
        "category": "AI Agent",
        "subcategory": "AI Search Crawlers",
        "company": "OpenAI",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "Search",
    },
    {
        "pattern": r"Claude-SearchBot\/[0-9]",
        "url": "https://support.anthropic.com/en/articles/8896518-does-anthropic-crawl-data-from-the-web-and-how-can-site-owners-block-the-crawler",
        "type": "claude-searchbot",
        "category": "AI Agent",
        "subcategory": "AI Search Crawlers",
        "company": "Anthropic",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "Search",
    },
    {
        "pattern": r"PerplexityBot\/[0-9]",
        "url": "https://docs.perplexity.ai/guides/bots",
        "type": "perplexitybot",
        "category": "AI Agent",
        "subcategory": "AI Search Crawlers",
        "company": "Perplexity AI",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "Search",
    },
    # Search engines
    {
        "pattern": r"Googlebot\/[0-9]",
        "url": "https://developers.google.com/search/docs/crawling-indexing/googlebot",
        "type": "googlebot",
        "category": "Search Crawler",
        "subcategory": "Search Engines",
        "company": "Google",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "Search",
        "instances": [
            "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
        ],
    },
    {
        "pattern": r"bingbot\/[0-9]",
        "url": "https://www.bing.com/webmasters/help/which-crawlers-does-bing-use-8c184ec0",
        "type": "bingbot",
        "category": "Search Crawler",
        "subcategory": "Search Engines",
        "company": "Microsoft",
        "isCompliant": True,
        "isAiModelTrainer": False,
        "intent": "Search",
        "instances": [
            "Mozilla/5.0 (compatible; bingbot/2.0; +http://www.bing.com/bingbot.htm)",
        ],
    },
    # AI Model Training Crawlers (can be blocked with block_ai_model_trainers)
    {
        "pattern": r"CCBot\/[0-9]",
        "url": "https://commoncrawl.org/ccbot",
        "type": "ccbot",
        "category": "AI Crawler",
        "subcategory": "Model Training Crawlers",
        "company": "Common Crawl",
        "isCompliant": True,
        "isAiModelTrainer": True,
        "intent": "DataCollection",
    },
    {
        "pattern": r"ClaudeBot\/[0-9]",
        "url": "https://support.anthropic.com/en/articles/8896518-does-anthropic-crawl-data-from-the-web-and-how-can-site-owners-block-the-crawler",
        "type": "claude-bot",
        "category": "AI Crawler",
        "subcategory": "Model Training Crawlers",
        "company": "Anthropic",
        "isCompliant": True,
        "isAiModelTrainer": True,
        "intent": "DataCollection",
        "instances": [
            "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko); compatible; ClaudeBot/1.0; +claudebot@anthropic.com",
        ],
    },
    {
        "pattern": r"GPTBot\/[0-9]",
        "url": "https://platform.openai.com/docs/gptbot",
        "type": "gptbot",
        "category": "AI Crawler",
        "subcategory": "Model Training Crawlers",
        "company": "OpenAI",
        "isCompliant": True,
        "isAiModelTrainer": True,
        "intent": "DataCollection",
        "instances": [
            "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko); compatible; GPTBot/1.1; +https://openai.com/gptbot",
        ],
    },
    {
        "pattern": r"meta-externalagent\/[0-9]",
        "url": "https://developers.facebook.com/docs/sharing/webmasters/crawler",
        "type": "meta-externalagent",
        "category": "AI Crawler",
        "subcategory": "Model Training Crawlers",
        "company": "Meta",
        "isCompliant": True,
        "isAiModelTrainer": True,
        "intent": "DataCollection",
    },
    {
        "pattern": r"Applebot-Extended\/[0-9]",
        "url": "https://support.apple.com/en-us/119829",
        "type": "applebot-extended",
        "category": "AI Crawler",
        "subcategory": "Model Training Crawlers",
        "company": "Apple",
        "isCompliant": True,
        "isAiModelTrainer": True,
        "intent": "DataCollection",
    },
    {
        "pattern": r"Bytespider",
        "url": None,
        "type": "bytespider",
        "category": "AI Crawler",
        "subcategory": "Model Training Crawlers",
        "company": "ByteDance",
        "isCompliant": False,
        "isAiModelTrainer": True,
        "intent": "DataCollection",
    },
    {
        "pattern": r"Amazonbot\/[0-9]",
        "url": "https://developer.amazon.com/amazonbot",
        "type": "amazonbot",
        "category": "AI Crawler",
        "subcategory": "Model Training Crawlers",
        "company": "Amazon",
        "isCompliant": True,
        "isAiModelTrainer": True,
        "intent": "DataCollection",
    },
]

# =============================================================================
# FALLBACK PATTERNS (Third-party crawler list, evaluated only if nothing
# curated matches)
# =============================================================================

# Only signature, name, category and company are listed here; the remaining
# taxonomy fields are derived in build_default_snapshot()
FALLBACK_PATTERNS: list[dict[str, Any]] = [
    # Duplicates of curated signatures are dropped on merge
    {"pattern": r"Googlebot\/[0-9]", "category": "Search Crawler", "company": "Google"},
    {"pattern": r"bingbot", "category": "Search Crawler", "company": "Microsoft"},
    {"pattern": r"Applebot", "category": "Search Crawler", "company": "Apple"},
    {"pattern": r"DuckDuckBot", "category": "Search Crawler", "company": "DuckDuckGo"},
    {"pattern": r"YandexBot", "category": "Search Crawler", "company": "Yandex"},
    {"pattern": r"Baiduspider", "category": "Search Crawler", "company": "Baidu"},
    {"pattern": r"facebookexternalhit", "category": "Other Bot", "company": "Meta"},
    {"pattern": r"Twitterbot", "category": "Other Bot", "company": "X"},
    {"pattern": r"LinkedInBot", "category": "Other Bot", "company": "LinkedIn"},
    {"pattern": r"Slackbot", "category": "Other Bot", "company": "Slack"},
    {"pattern": r"Discordbot", "category": "Other Bot", "company": "Discord"},
    {"pattern": r"AhrefsBot", "category": "Other Bot", "company": "Ahrefs"},
    {"pattern": r"SemrushBot", "category": "Other Bot", "company": "Semrush"},
    {"pattern": r"MJ12bot", "category": "Other Bot", "company": "Majestic"},
    {"pattern": r"UptimeRobot", "category": "Other Bot", "company": "UptimeRobot"},
    {"pattern": r"archive\.org_bot", "category": "Other Bot", "company": "Internet Archive"},
    {"pattern": r"HeadlessChrome", "category": "Scraper", "company": None},
    {"pattern": r"python-requests", "category": "Scraper", "company": None},
    {"pattern": r"python-urllib", "category": "Scraper", "company": None},
    {"pattern": r"Go-http-client", "category": "Scraper", "company": None},
    {"pattern": r"curl\/", "category": "Scraper", "company": None},
    {"pattern": r"[wW]get\/", "category": "Scraper", "company": None},
    {"pattern": r"Scrapy", "category": "Scraper", "company": None},
    {"pattern": r"bot", "category": "Other Bot", "company": None},
    {"pattern": r"crawler", "category": "Other Bot", "company": None},
    {"pattern": r"spider", "category": "Other Bot", "company": None},
]

# =============================================================================
# AI REFERRERS (Humans arriving from an AI platform's UI)
# =============================================================================

AI_REFERRERS: list[dict[str, Any]] = [
    {
        "id": "chatgpt",
        "name": "ChatGPT",
        "company": "OpenAI",
        "url": "https://chat.openai.com",
        "patterns": ["chat.openai.com", "chatgpt.com"],
        "description": "Traffic from ChatGPT users clicking on links",
    },
    {
        "id": "claude",
        "name": "Claude",
        "company": "Anthropic",
        "url": "https://claude.ai",
        "patterns": ["claude.ai"],
        "description": "Traffic from Claude users clicking on links",
    },
    {
        "id": "perplexity",
        "name": "Perplexity",
        "company": "Perplexity AI",
        "url": "https://perplexity.ai",
        "patterns": ["perplexity.ai"],
        "description": "Traffic from Perplexity users clicking on links",
    },
    {
        "id": "gemini",
        "name": "Gemini",
        "company": "Google",
        "url": "https://gemini.google.com",
        "patterns": ["gemini.google.com", "bard.google.com"],
        "description": "Traffic from Gemini users clicking on links",
    },
    {
        "id": "copilot",
        "name": "Microsoft Copilot",
        "company": "Microsoft",
        "url": "https://copilot.microsoft.com/",
        "patterns": ["copilot.microsoft.com", "bing.com/chat"],
        "description": "Traffic from Microsoft Copilot users clicking on links",
    },
]

# =============================================================================
# TAXONOMY DERIVATION (for fallback entries)
# =============================================================================

CATEGORY_SUBCATEGORIES: dict[str, str] = {
    AgentCategory.AI_AGENT.value: "AI Assistants",
    AgentCategory.AI_ASSISTANT.value: "AI Assistants",
    AgentCategory.SEARCH_CRAWLER.value: "Search Engines",
    AgentCategory.AI_CRAWLER.value: "Model Training Crawlers",
    AgentCategory.SCRAPER.value: "Data Collection Tools",
    AgentCategory.OTHER_BOT.value: DEFAULT_SUBCATEGORY,
    AgentCategory.UNKNOWN.value: DEFAULT_SUBCATEGORY,
}

AGENT_INTENTS: dict[str, str] = {
    "chatgpt": "UserQuery",
    "claude": "UserQuery",
    "claude-user": "UserQuery",
    "perplexity": "UserQuery",
    "perplexity-user": "UserQuery",
    "googlebot": "Search",
    "bingbot": "Search",
    "claude-searchbot": "Search",
    "generic-scraper": "DataCollection",
}


def get_subcategory(category: str) -> str:
    """Map a category to its default subcategory."""
    return CATEGORY_SUBCATEGORIES.get(category, DEFAULT_SUBCATEGORY)


def get_intent(category: str, name: str) -> str:
    """
    Guess the intent of an agent from its name, then its category.

    Returns one of UserQuery, Search, DataCollection or "unknown".
    """
    intent = AGENT_INTENTS.get(name.lower())
    if intent:
        return intent
    if category in (AgentCategory.AI_AGENT, AgentCategory.AI_ASSISTANT):
        return "UserQuery"
    if category == AgentCategory.SEARCH_CRAWLER:
        return "Search"
    if category == AgentCategory.SCRAPER:
        return "DataCollection"
    return DEFAULT_INTENT


def _fallback_type(signature: str) -> str:
    """Derive a type name from a raw signature (e.g. "curl\\/" -> "curl")."""
    return signature.split("\\/")[0].replace("\\", "").lower()


def build_default_snapshot() -> dict[str, Any]:
    """
    Build the bundled snapshot in the remote API's wire format.

    Curated entries come first, then fallback entries with derived taxonomy.
    Signatures are unique; the first occurrence wins.
    """
    seen: set[str] = set()
    patterns: list[dict[str, Any]] = []

    for entry in CURATED_PATTERNS:
        if entry["pattern"] in seen:
            continue
        seen.add(entry["pattern"])
        patterns.append({**entry, "curated": True})

    for entry in FALLBACK_PATTERNS:
        signature = entry["pattern"]
        if signature in seen:
            continue
        seen.add(signature)
        name = _fallback_type(signature)
        category = entry.get("category") or AgentCategory.UNKNOWN.value
        patterns.append({
            "pattern": signature,
            "url": None,
            "type": name,
            "category": category,
            "subcategory": get_subcategory(category),
            "company": entry.get("company"),
            "isCompliant": "bot" in name or "crawler" in name,
            "isAiModelTrainer": False,
            "intent": get_intent(category, name),
            "curated": False,
        })

    return {
        "version": DEFAULT_VERSION,
        "patterns": patterns,
        "aiReferrers": [dict(referrer) for referrer in AI_REFERRERS],
    }
