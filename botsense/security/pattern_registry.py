"""
Versioned registry of agent patterns and AI referrers.

The registry holds one immutable RegistrySnapshot at a time. A snapshot is
built (parsed, deduplicated and compiled) before it is published, and
replacing it is a single reference swap, so readers always see either the
old or the new registry in full.

Usage:
    from botsense.security.pattern_registry import PatternRegistry

    registry = PatternRegistry()
    update = registry.replace(payload_from_api)
    if not update.is_applied:
        logger.warning(update.details)
"""

import logging
import re
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from .agent_patterns import (
    DEFAULT_INTENT,
    DEFAULT_SUBCATEGORY,
    DEFAULT_TYPE,
    DEFAULT_VERSION,
    AgentCategory,
    build_default_snapshot,
)

logger = logging.getLogger(__name__)


class SnapshotFormatError(ValueError):
    """Raised when a snapshot payload does not have the expected shape."""


@dataclass(frozen=True)
class Pattern:
    """A user-agent signature with its taxonomy."""
    signature: str
    name: str = DEFAULT_TYPE
    category: str = AgentCategory.UNKNOWN.value
    subcategory: str = DEFAULT_SUBCATEGORY
    company: Optional[str] = None
    is_compliant: bool = False
    is_ai_model_trainer: bool = False
    intent: str = DEFAULT_INTENT
    documentation_url: Optional[str] = None
    sample_instances: tuple[str, ...] = ()
    curated: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pattern":
        """Parse one entry of the wire-format `patterns` array."""
        if not isinstance(data, Mapping):
            raise SnapshotFormatError(f"Pattern entry is not an object: {data!r}")
        signature = data.get("pattern")
        if not isinstance(signature, str) or not signature:
            raise SnapshotFormatError(f"Pattern entry has no signature: {data!r}")
        curated = data.get("curated")
        if curated is None:
            curated = True
        elif not isinstance(curated, bool):
            raise SnapshotFormatError(f"Pattern {signature} has a non-boolean curated flag")
        instances = data.get("instances") or ()
        if not isinstance(instances, (list, tuple)):
            raise SnapshotFormatError(f"Pattern {signature} has invalid instances")
        return cls(
            signature=signature,
            name=data.get("type") or DEFAULT_TYPE,
            category=data.get("category") or AgentCategory.UNKNOWN.value,
            subcategory=data.get("subcategory") or DEFAULT_SUBCATEGORY,
            company=data.get("company"),
            is_compliant=bool(data.get("isCompliant")),
            is_ai_model_trainer=bool(data.get("isAiModelTrainer")),
            intent=data.get("intent") or DEFAULT_INTENT,
            documentation_url=data.get("url"),
            sample_instances=tuple(str(i) for i in instances),
            curated=curated,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the wire format."""
        return {
            "pattern": self.signature,
            "url": self.documentation_url,
            "type": self.name,
            "category": self.category,
            "subcategory": self.subcategory,
            "company": self.company,
            "isCompliant": self.is_compliant,
            "isAiModelTrainer": self.is_ai_model_trainer,
            "intent": self.intent,
            "instances": list(self.sample_instances),
            "curated": self.curated,
        }


@dataclass(frozen=True)
class ReferrerEntry:
    """An AI platform identified by hostname fragments of its referrer."""
    id: str
    name: str
    company: Optional[str] = None
    domain_fragments: tuple[str, ...] = ()
    documentation_url: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReferrerEntry":
        """Parse one entry of the wire-format `aiReferrers` array."""
        if not isinstance(data, Mapping):
            raise SnapshotFormatError(f"Referrer entry is not an object: {data!r}")
        fragments = data.get("patterns")
        if not isinstance(fragments, (list, tuple)):
            raise SnapshotFormatError(f"Referrer {data.get('id')!r} has no patterns list")
        name = str(data.get("name") or data.get("id") or "unknown")
        return cls(
            id=str(data.get("id") or name.lower()),
            name=name,
            company=data.get("company"),
            domain_fragments=tuple(str(f).lower() for f in fragments if f),
            documentation_url=data.get("url"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "company": self.company,
            "url": self.documentation_url,
            "patterns": list(self.domain_fragments),
            "description": self.description,
        }


@dataclass(frozen=True)
class CompiledPattern:
    """A pattern paired with its compiled regex."""
    pattern: Pattern
    regex: re.Pattern[str]


@dataclass(frozen=True)
class RegistrySnapshot:
    """
    An immutable, fully compiled registry state.

    `patterns` keeps every accepted entry in priority order (curated first).
    `curated` and `fallback` hold only the entries whose signature compiled.
    """
    version: str
    patterns: tuple[Pattern, ...]
    referrers: tuple[ReferrerEntry, ...]
    curated: tuple[CompiledPattern, ...] = ()
    fallback: tuple[CompiledPattern, ...] = ()
    invalid_signatures: tuple[str, ...] = ()

    @property
    def compiled(self) -> tuple[CompiledPattern, ...]:
        """All evaluable patterns in priority order."""
        return self.curated + self.fallback

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "patterns": [p.to_dict() for p in self.patterns],
            "aiReferrers": [r.to_dict() for r in self.referrers],
        }


def compile_signature(signature: str) -> Optional[re.Pattern[str]]:
    """Compile a signature case-insensitively, or return None if it is malformed."""
    try:
        return re.compile(signature, re.IGNORECASE)
    except (re.error, OverflowError, RecursionError) as e:
        logger.warning(f"Skipping malformed pattern {signature!r}: {e}")
        return None


def parse_snapshot(payload: Any) -> RegistrySnapshot:
    """
    Validate, deduplicate and compile a wire-format snapshot.

    Raises:
        SnapshotFormatError: If the payload or any entry is malformed. A bad
            regex is not a format error; it is skipped at evaluation time.
    """
    if not isinstance(payload, Mapping):
        raise SnapshotFormatError("Invalid pattern response format")

    raw_patterns = payload.get("patterns")
    if not isinstance(raw_patterns, list):
        raise SnapshotFormatError("Invalid pattern response format")

    raw_referrers = payload.get("aiReferrers")
    if raw_referrers is None:
        raw_referrers = []
    elif not isinstance(raw_referrers, list):
        raise SnapshotFormatError("Invalid AI referrer format")

    seen: set[str] = set()
    curated: list[Pattern] = []
    fallback: list[Pattern] = []
    for entry in raw_patterns:
        pattern = Pattern.from_dict(entry)
        if pattern.signature in seen:
            continue
        seen.add(pattern.signature)
        (curated if pattern.curated else fallback).append(pattern)

    referrers = tuple(ReferrerEntry.from_dict(entry) for entry in raw_referrers)

    compiled: dict[str, list[CompiledPattern]] = {"curated": [], "fallback": []}
    invalid: list[str] = []
    for group, members in (("curated", curated), ("fallback", fallback)):
        for pattern in members:
            regex = compile_signature(pattern.signature)
            if regex is None:
                invalid.append(pattern.signature)
                continue
            compiled[group].append(CompiledPattern(pattern=pattern, regex=regex))

    version = payload.get("version") or DEFAULT_VERSION
    return RegistrySnapshot(
        version=str(version),
        patterns=tuple(curated + fallback),
        referrers=referrers,
        curated=tuple(compiled["curated"]),
        fallback=tuple(compiled["fallback"]),
        invalid_signatures=tuple(invalid),
    )


@dataclass
class RegistryUpdate:
    """Result of a registry replacement."""
    is_applied: bool
    version: Optional[str] = None
    pattern_count: int = 0
    referrer_count: int = 0
    details: Optional[str] = None

    def __str__(self) -> str:
        if self.is_applied:
            return f"APPLIED: v{self.version} ({self.pattern_count} patterns, {self.referrer_count} referrers)"
        return f"REJECTED: {self.details}"


@dataclass
class PatternRegistry:
    """
    Holds the current snapshot; swaps it atomically on replace().

    Readers call `snapshot` once per operation and work on that reference.
    Writers are serialized by a lock.
    """

    default_snapshot: Optional[Mapping[str, Any]] = None
    last_sync: float = field(default=0.0, init=False)
    _snapshot: RegistrySnapshot = field(init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        """Initialize with the given or bundled default snapshot."""
        self.load(self.default_snapshot or build_default_snapshot())

    def load(self, default_snapshot: Mapping[str, Any]) -> None:
        """
        Install a trusted default snapshot.

        Never fails: an unusable snapshot falls back to the bundled set.
        """
        try:
            snapshot = parse_snapshot(default_snapshot)
        except SnapshotFormatError as e:
            logger.warning(f"Invalid default snapshot, using bundled patterns: {e}")
            snapshot = parse_snapshot(build_default_snapshot())
        with self._lock:
            self._snapshot = snapshot
        logger.info(
            f"Loaded patterns: version={snapshot.version} "
            f"curated={len(snapshot.curated)} fallback={len(snapshot.fallback)} "
            f"referrers={len(snapshot.referrers)}"
        )

    def replace(self, payload: Any) -> RegistryUpdate:
        """
        Replace the whole registry with a remote payload.

        All-or-nothing: a malformed payload leaves the current snapshot in
        place and is reported in the returned RegistryUpdate.
        """
        try:
            snapshot = parse_snapshot(payload)
        except SnapshotFormatError as e:
            logger.warning(f"Rejected pattern snapshot: {e}")
            return RegistryUpdate(is_applied=False, details=str(e))

        with self._lock:
            self._snapshot = snapshot
            self.last_sync = time.time()

        logger.info(
            f"Replaced patterns: version={snapshot.version} "
            f"patterns={len(snapshot.patterns)} referrers={len(snapshot.referrers)}"
        )
        return RegistryUpdate(
            is_applied=True,
            version=snapshot.version,
            pattern_count=len(snapshot.patterns),
            referrer_count=len(snapshot.referrers),
        )

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    @property
    def version(self) -> str:
        return self._snapshot.version

    def get_patterns(self) -> list[Pattern]:
        """Get a copy of the current patterns in priority order."""
        return list(self._snapshot.patterns)

    def get_referrers(self) -> list[ReferrerEntry]:
        """Get a copy of the current AI referrers."""
        return list(self._snapshot.referrers)

    def export(self) -> dict[str, Any]:
        """Export the current snapshot in the wire format."""
        return self._snapshot.to_dict()

    def stats(self) -> dict:
        """Get statistics about the loaded snapshot."""
        snapshot = self._snapshot
        return {
            "version": snapshot.version,
            "curated": len(snapshot.curated),
            "fallback": len(snapshot.fallback),
            "invalid": len(snapshot.invalid_signatures),
            "referrers": len(snapshot.referrers),
            "last_sync": self.last_sync,
        }
