"""
Specificity scoring for agent signatures.

When several signatures match one user agent, the most specific one wins.
The score is a heuristic: literal characters count for, wildcards count
against, and well-known brand names and version markers count extra.
Scores only order candidates within one classification call.
"""

import re

LITERAL_CHAR = re.compile(r"[A-Za-z0-9]")
WILDCARD_CHARS = frozenset(".*+?")
VERSION_MARKER = r"\/[0-9]"

BRAND_MARKERS: tuple[str, ...] = (
    "ChatGPT",
    "Claude",
    "Perplexity",
    "Googlebot",
    "bingbot",
    "GPTBot",
    "OAI-",
)

GENERIC_WORDS: frozenset[str] = frozenset({"bot", "crawler", "spider"})

LITERAL_WEIGHT = 2
WILDCARD_PENALTY = 3
VERSION_BONUS = 5
BRAND_BONUS = 10
GENERIC_PENALTY = 15


def specificity_score(signature: str) -> int:
    """
    Score how specific a raw signature is.

    Examples:
        >>> specificity_score(r"GPTBot\\/[0-9]")
        31
        >>> specificity_score("bot")
        -9
    """
    score = len(LITERAL_CHAR.findall(signature)) * LITERAL_WEIGHT
    score -= sum(1 for char in signature if char in WILDCARD_CHARS) * WILDCARD_PENALTY

    if VERSION_MARKER in signature:
        score += VERSION_BONUS

    if any(brand in signature for brand in BRAND_MARKERS):
        score += BRAND_BONUS

    if signature.lower() in GENERIC_WORDS:
        score -= GENERIC_PENALTY

    return score
