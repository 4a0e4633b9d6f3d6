"""
Allow/block rule resolution for detected agents.

Directives are strings at four granularities:
- pattern:<signature>
- category:<category>
- subcategory:<category>:<subcategory>
- type:<category>:<subcategory>:<type>

Precedence (first decisive rule wins):
1. Pattern allow
2. Category, subcategory or type allow
3. Pattern block
4. Category, subcategory or type block
5. block_ai_model_trainers and the pattern trains AI models
6. Otherwise allow

Allows outrank blocks at every level, so a broad block can carry
exceptions. The model-trainer switch is the weakest rule.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .pattern_registry import Pattern

PATTERN_PREFIX = "pattern"
CATEGORY_PREFIX = "category"
SUBCATEGORY_PREFIX = "subcategory"
TYPE_PREFIX = "type"


def pattern_directive(pattern: Pattern) -> str:
    return f"{PATTERN_PREFIX}:{pattern.signature}"


def scope_directives(pattern: Pattern) -> tuple[str, str, str]:
    """The category, subcategory and type directives that cover a pattern."""
    return (
        f"{CATEGORY_PREFIX}:{pattern.category}",
        f"{SUBCATEGORY_PREFIX}:{pattern.category}:{pattern.subcategory}",
        f"{TYPE_PREFIX}:{pattern.category}:{pattern.subcategory}:{pattern.name}",
    )


def parse_directives(raw: Iterable[str]) -> frozenset[str]:
    """Normalize directive strings (strip whitespace, drop blanks)."""
    return frozenset(d.strip() for d in raw if d and d.strip())


@dataclass(frozen=True)
class RuleSet:
    """Immutable allow/block configuration."""
    allows: frozenset[str] = frozenset()
    blocks: frozenset[str] = frozenset()
    block_ai_model_trainers: bool = False

    @classmethod
    def from_lists(
        cls,
        custom_allows: Iterable[str] = (),
        custom_blocks: Iterable[str] = (),
        block_ai_model_trainers: bool = False,
    ) -> "RuleSet":
        return cls(
            allows=parse_directives(custom_allows),
            blocks=parse_directives(custom_blocks),
            block_ai_model_trainers=block_ai_model_trainers,
        )

    def should_block(self, pattern: Pattern) -> bool:
        return should_block(pattern, self.allows, self.blocks, self.block_ai_model_trainers)


def should_block(
    pattern: Pattern,
    allows: frozenset[str] | set[str],
    blocks: frozenset[str] | set[str],
    block_ai_model_trainers: bool = False,
) -> bool:
    """Decide whether traffic matching `pattern` is blocked."""
    exact = pattern_directive(pattern)
    scopes = scope_directives(pattern)

    if exact in allows:
        return False
    if any(scope in allows for scope in scopes):
        return False
    if exact in blocks:
        return True
    if any(scope in blocks for scope in scopes):
        return True
    if block_ai_model_trainers and pattern.is_ai_model_trainer:
        return True
    return False
