"""Detection Event Collector Client"""

import asyncio
import json
import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from .agent_patterns import SourceType
from .detection import BotInfo, DetectionResult
from .pattern_registry import ReferrerEntry
from .settings import DetectorSettings

logger = logging.getLogger(__name__)


@dataclass
class CollectorEvent:
    url: str
    user_agent: str
    request_method: str
    request_path: str
    response_status: int
    response_time_ms: float
    timestamp: str
    headers: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    request_query: str | None = None
    referrer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def build_metadata(detection: DetectionResult) -> dict[str, Any]:
    metadata: dict[str, Any] = {"was_blocked": detection.should_block}
    if detection.source_type == SourceType.BOT and isinstance(detection.info, BotInfo):
        info = detection.info
        metadata.update(
            agent_type=info.type,
            agent_category=info.category,
            agent_subcategory=info.subcategory,
            company=info.company,
            is_compliant=info.is_compliant,
            intent=info.intent,
            confidence=detection.confidence,
            detection_method="pattern_match",
        )
    elif detection.source_type == SourceType.AI_REFERRER and isinstance(detection.info, ReferrerEntry):
        info = detection.info
        metadata.update(
            source_type=SourceType.AI_REFERRER.value,
            referrer_id=info.id,
            referrer_name=info.name,
            company=info.company,
        )
    return metadata


def create_event(
    detection: DetectionResult,
    *,
    url: str,
    method: str,
    path: str,
    user_agent: str,
    query: str | None = None,
    referrer: str | None = None,
    ip: str | None = None,
    headers: dict[str, str] | None = None,
    response_status: int | None = None,
    response_time_ms: float = 0.0,
) -> CollectorEvent:
    return CollectorEvent(
        url=url,
        user_agent=user_agent,
        ip_address=ip,
        request_method=method,
        request_path=path,
        request_query=query or None,
        referrer=referrer or None,
        response_status=response_status or (403 if detection.should_block else 200),
        response_time_ms=response_time_ms,
        headers=headers or {},
        timestamp=datetime.now(timezone.utc).isoformat(),
        metadata=build_metadata(detection),
    )


class CollectorClient:
    def __init__(
        self,
        settings: DetectorSettings,
        batch_size: int = 1,
        flush_interval: float = 10.0,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.api_key
        self.collect_endpoint = settings.collect_endpoint
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self.timeout = timeout
        self._transport = transport
        self._buffer: list[dict] = []
        self._last_flush = time.time()
        self._flush_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self.events_sent = 0
        self.events_failed = 0
        self._headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
        }

    @property
    def is_enabled(self) -> bool:
        return bool(self.api_key)

    async def log_event(self, detection: DetectionResult, event: CollectorEvent) -> None:
        if not self.is_enabled or detection.source_type == SourceType.NONE:
            return
        self._buffer.append(event.to_dict())
        should_flush = (
            len(self._buffer) >= self.batch_size
            or time.time() - self._last_flush >= self.flush_interval
        )
        if should_flush:
            task = asyncio.create_task(self._safe_flush())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _safe_flush(self) -> None:
        try:
            await self.flush()
        except Exception as e:
            logger.debug(f"Collector flush failed: {e}")

    async def flush(self) -> None:
        if not self._buffer or not self.is_enabled:
            return
        async with self._flush_lock:
            if not self._buffer:
                return
            events = self._buffer
            self._buffer = []
            self._last_flush = time.time()
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                for event in events:
                    await self._send(client, event)

    async def _send(self, client: httpx.AsyncClient, event: dict) -> None:
        try:
            response = await client.post(
                self.collect_endpoint, headers=self._headers, content=json.dumps(event)
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.events_failed += 1
            logger.debug(f"Collector request failed: {e}")
            return
        if response.is_success:
            self.events_sent += 1
        else:
            self.events_failed += 1
            logger.debug(f"Collector rejected event: status={response.status_code}")

    async def stop(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.flush()
