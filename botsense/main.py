import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from botsense.routes import agents
from botsense.security.collector import CollectorClient
from botsense.security.detection import AgentDetector
from botsense.security.middleware import AgentDetectionMiddleware
from botsense.security.pattern_registry import PatternRegistry
from botsense.security.pattern_sync import PatternSyncClient
from botsense.security.settings import DetectorSettings

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[DetectorSettings] = None,
    registry: Optional[PatternRegistry] = None,
) -> FastAPI:
    settings = settings or DetectorSettings.from_env()
    logging.getLogger("botsense").setLevel(logging.DEBUG if settings.debug else logging.INFO)

    detector = AgentDetector(registry or PatternRegistry(), settings.rule_set())
    sync_client = PatternSyncClient(detector.registry, settings)
    collector = CollectorClient(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup sync; failures keep the bundled patterns
        if settings.auto_sync and settings.has_api_key:
            result = await sync_client.sync()
            logger.info(f"Startup pattern sync: {result}")
        yield
        await collector.stop()

    app = FastAPI(
        title="botsense",
        description="Classify and control AI agent and crawler traffic",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.detector = detector
    app.state.sync_client = sync_client
    app.state.collector = collector

    app.add_middleware(
        AgentDetectionMiddleware,
        detector=detector,
        collector=collector,
        exclude_paths=settings.exclude_paths,
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "patterns_version": detector.version}

    # Include routes
    app.include_router(agents.router)
    return app


app = create_app()
