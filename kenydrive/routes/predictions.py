"""
predictions.py — Direct access to the prediction fetcher.

Routes:
  GET /api/v1/regions      — the eight selectable Nairobi regions
  GET /api/v1/predictions  — one Gemini forecast for ?region= (not stored)

Unlike the dashboard routes, /predictions never touches the dashboard
state: it is a stateless one-shot call, useful for comparing regions.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from kenydrive.core.rate_limit import limiter
from kenydrive.models.demand import PredictionBundle, RegionOption
from kenydrive.services.dashboard import DashboardController, get_dashboard
from kenydrive.services.prediction_fetcher import get_peak_hour_predictions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["predictions"])


@router.get("/regions", response_model=list[RegionOption])
async def list_regions(dashboard: DashboardController = Depends(get_dashboard)):
    """Selector entries, with the dashboard's current region flagged."""
    return dashboard.regions()


@router.get("/predictions", response_model=PredictionBundle)
@limiter.limit("30/minute")
async def get_predictions(
    request: Request,
    # Free text on purpose: any Nairobi-area name can be forecast here.
    region: str = Query(default="Nairobi Central", min_length=2, max_length=100),
):
    """
    Hotspots, hourly demand, grounding sources and a short strategy.

    AI failures never surface as errors: the fallback bundle is returned
    instead (see prediction_fetcher).
    """
    return await get_peak_hour_predictions(region)
