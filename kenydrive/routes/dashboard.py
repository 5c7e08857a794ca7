"""
dashboard.py — The driver's dashboard view.

Routes:
  GET  /api/v1/dashboard                  — current state snapshot
  POST /api/v1/dashboard/refresh          — refresh now (awaits the fetch)
  PUT  /api/v1/dashboard/region           — switch region (triggers one fetch)
  POST /api/v1/dashboard/status/toggle    — flip online / offline
  PUT  /api/v1/dashboard/status/platform  — Uber | Bolt | Both
  GET  /api/v1/dashboard/chart            — plotly figure JSON
  GET  /api/v1/dashboard/chart.html       — embeddable chart fragment

State lives in the DashboardController singleton, mounted by the app
lifespan; the 15-minute polling runs there, not here.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse

from kenydrive.core.rate_limit import limiter
from kenydrive.models.demand import (
    DashboardState,
    DriverStatus,
    PlatformSelectRequest,
    RegionSelectRequest,
)
from kenydrive.services.chart_renderer import chart_to_html, chart_to_json
from kenydrive.services.dashboard import DashboardController, get_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardState)
async def get_dashboard_state(dashboard: DashboardController = Depends(get_dashboard)):
    return dashboard.state()


@router.post("/refresh", response_model=DashboardState)
@limiter.limit("10/minute")
async def refresh_dashboard(
    request: Request,
    dashboard: DashboardController = Depends(get_dashboard),
):
    """Re-run the forecast for the selected region and return the new state."""
    return await dashboard.refresh()


@router.put("/region", response_model=DashboardState)
async def select_region(
    payload: RegionSelectRequest,
    dashboard: DashboardController = Depends(get_dashboard),
):
    """
    Switch the selected region.

    While the dashboard is mounted this restarts the polling timer, whose
    first tick is the fresh fetch; the response is returned right away with
    loading=true. Selecting the current region is a no-op.
    """
    try:
        await dashboard.select_region(payload.region)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return dashboard.state()


@router.post("/status/toggle", response_model=DriverStatus)
async def toggle_status(dashboard: DashboardController = Depends(get_dashboard)):
    return dashboard.toggle_online()


@router.put("/status/platform", response_model=DriverStatus)
async def set_platform(
    payload: PlatformSelectRequest,
    dashboard: DashboardController = Depends(get_dashboard),
):
    return dashboard.set_platform(payload.platform)


@router.get("/chart")
async def get_chart(dashboard: DashboardController = Depends(get_dashboard)):
    """Plotly figure spec for the hourly predictions currently shown."""
    return chart_to_json(dashboard.bundle.hourly_predictions)


@router.get("/chart.html", response_class=HTMLResponse)
async def get_chart_html(dashboard: DashboardController = Depends(get_dashboard)):
    return chart_to_html(dashboard.bundle.hourly_predictions)
