"""
Agent routes for botsense.
Exposes the loaded patterns, ad-hoc detection and manual pattern sync.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from botsense.security.detection import AgentDetector
from botsense.security.pattern_sync import PatternSyncClient

router = APIRouter(prefix="/api/agents", tags=["agents"])


def get_detector(request: Request) -> AgentDetector:
    """Dependency that provides the app's detector."""
    return request.app.state.detector


def get_sync_client(request: Request) -> PatternSyncClient:
    return request.app.state.sync_client


@router.get("/patterns")
async def patterns(detector: AgentDetector = Depends(get_detector)):
    """
    Current pattern snapshot in the pattern API's format.
    Integrations use this to mirror the patterns this instance enforces.
    """
    response = JSONResponse(content=detector.registry.export())
    response.headers["Cache-Control"] = "public, max-age=3600"
    return response


@router.get("/detect")
async def detect(
    request: Request,
    user_agent: Optional[str] = None,
    referrer: Optional[str] = None,
    detector: AgentDetector = Depends(get_detector),
):
    """Run detection on the given values (defaults to this request's headers)."""
    if user_agent is None:
        user_agent = request.headers.get("User-Agent", "")
    result = detector.detect(user_agent, referrer)
    classification = detector.classify(user_agent)
    return {
        "detection": result.to_dict(),
        "classification": classification.to_dict(),
    }


@router.post("/sync")
async def sync(
    x_api_key: str = Header(default=""),
    sync_client: PatternSyncClient = Depends(get_sync_client),
):
    """Pull the latest patterns from the pattern API."""
    if not sync_client.settings.has_api_key or x_api_key != sync_client.settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    result = await sync_client.sync()
    if not result.is_success:
        return JSONResponse(status_code=502, content=result.to_dict())
    return result.to_dict()
