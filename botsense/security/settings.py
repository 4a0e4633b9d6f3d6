"""Detector configuration from environment variables."""

import os
from dataclasses import dataclass, replace

from .rules import RuleSet

DEFAULT_COLLECT_ENDPOINT = "https://www.spyglasses.io/api/collect"
DEFAULT_PATTERNS_ENDPOINT = "https://www.spyglasses.io/api/patterns"
DEFAULT_EXCLUDE_PATHS = ("/static", "/health", "/favicon.ico")

TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


def _env_list(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class DetectorSettings:
    api_key: str = ""
    debug: bool = False
    block_ai_model_trainers: bool = False
    custom_blocks: tuple[str, ...] = ()
    custom_allows: tuple[str, ...] = ()
    collect_endpoint: str = DEFAULT_COLLECT_ENDPOINT
    patterns_endpoint: str = DEFAULT_PATTERNS_ENDPOINT
    auto_sync: bool = True
    sync_timeout: float = 10.0
    exclude_paths: tuple[str, ...] = DEFAULT_EXCLUDE_PATHS

    @classmethod
    def from_env(cls) -> "DetectorSettings":
        return cls(
            api_key=os.getenv("BOTSENSE_API_KEY", ""),
            debug=_env_bool("BOTSENSE_DEBUG", False),
            block_ai_model_trainers=_env_bool("BOTSENSE_BLOCK_AI_MODEL_TRAINERS", False),
            custom_blocks=_env_list("BOTSENSE_CUSTOM_BLOCKS"),
            custom_allows=_env_list("BOTSENSE_CUSTOM_ALLOWS"),
            collect_endpoint=os.getenv("BOTSENSE_COLLECT_ENDPOINT", DEFAULT_COLLECT_ENDPOINT),
            patterns_endpoint=os.getenv("BOTSENSE_PATTERNS_ENDPOINT", DEFAULT_PATTERNS_ENDPOINT),
            auto_sync=_env_bool("BOTSENSE_AUTO_SYNC", True),
            sync_timeout=_env_float("BOTSENSE_SYNC_TIMEOUT", 10.0),
            exclude_paths=_env_list("BOTSENSE_EXCLUDE_PATHS", DEFAULT_EXCLUDE_PATHS),
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def rule_set(self) -> RuleSet:
        return RuleSet.from_lists(
            custom_allows=self.custom_allows,
            custom_blocks=self.custom_blocks,
            block_ai_model_trainers=self.block_ai_model_trainers,
        )

    def with_overrides(self, **changes) -> "DetectorSettings":
        """Return a copy with some fields changed."""
        for key in ("custom_blocks", "custom_allows", "exclude_paths"):
            if key in changes:
                changes[key] = tuple(changes[key])
        return replace(self, **changes)
