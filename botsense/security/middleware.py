"""Agent Detection Middleware"""

import logging
import time
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .agent_patterns import SourceType
from .collector import CollectorClient, create_event
from .detection import AgentDetector, DetectionResult
from .settings import DEFAULT_EXCLUDE_PATHS

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    cf_ip = request.headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def get_referrer(request: Request) -> str:
    return request.headers.get("Referer") or request.headers.get("Referrer") or ""


class AgentDetectionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        detector: AgentDetector,
        collector: Optional[CollectorClient] = None,
        exclude_paths: tuple[str, ...] = DEFAULT_EXCLUDE_PATHS,
    ):
        super().__init__(app)
        self.detector = detector
        self.collector = collector
        self.exclude_paths = tuple(exclude_paths)

    def is_excluded(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.exclude_paths)

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if self.is_excluded(path):
            return await call_next(request)

        start_time = time.perf_counter()
        user_agent = request.headers.get("User-Agent", "")
        referrer = get_referrer(request)
        detection = self.detector.detect(user_agent, referrer)
        request.state.agent_detection = detection

        if detection.should_block:
            logger.info(
                f"Blocked agent: pattern={detection.matched_pattern} "
                f"ip={get_client_ip(request)} path={path}"
            )
            await self._log(request, detection, user_agent, referrer, 403, start_time)
            return JSONResponse(status_code=403, content={"error": "Forbidden"})

        response = await call_next(request)
        if detection.source_type != SourceType.NONE:
            await self._log(request, detection, user_agent, referrer, response.status_code, start_time)
        return response

    async def _log(
        self,
        request: Request,
        detection: DetectionResult,
        user_agent: str,
        referrer: str,
        status: int,
        start_time: float,
    ) -> None:
        if self.collector is None:
            return
        query = str(request.query_params)
        event = create_event(
            detection,
            url=str(request.url),
            method=request.method,
            path=request.url.path,
            query=query[:500] if query else None,
            user_agent=user_agent[:500],
            referrer=referrer[:500] if referrer else None,
            ip=get_client_ip(request),
            headers=dict(request.headers),
            response_status=status,
            response_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        await self.collector.log_event(detection, event)
