"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction / process supervisors
  - The dashboard client, to check API connectivity

Reports which AI mode the Gemini client is in, so callers can tell live
forecasts from canned ones.
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from kenydrive.ai.gemini_client import gemini_client
from kenydrive.core.config import API_VERSION, settings
from kenydrive.services.dashboard import dashboard_controller

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str       # Always "ok" if the API process is alive
    version: str
    ai_mode: str      # "mock" | "live"
    polling: bool     # dashboard refresh timer running
    environment: str


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check() -> HealthResponse:
    """Liveness status of the API. Always 200 while the process is alive."""
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        ai_mode="mock" if gemini_client.mock_mode else "live",
        polling=dashboard_controller.mounted,
        environment=settings.environment,
    )
