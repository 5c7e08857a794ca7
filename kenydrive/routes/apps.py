"""
apps.py — Launch the Uber Driver / Bolt Driver apps.

Route:
  POST /api/v1/apps/{app}/open — app is "uber" or "bolt"

Returns the LaunchPlan (deep link, web fallback, delay) with 202 and runs
the launch itself in the background: deep link first, fallback URL
fallback_delay_ms later regardless of outcome. Remote clients can ignore
the server-side launch and follow the plan themselves.
"""

import logging
from enum import Enum

from fastapi import APIRouter, BackgroundTasks, Depends

from kenydrive.models.demand import LaunchPlan, Platform
from kenydrive.services.dashboard import DashboardController, get_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/apps", tags=["apps"])


class DriverApp(str, Enum):
    UBER = "uber"
    BOLT = "bolt"


_PLATFORMS: dict[DriverApp, Platform] = {
    DriverApp.UBER: Platform.UBER,
    DriverApp.BOLT: Platform.BOLT,
}


@router.post("/{app}/open", response_model=LaunchPlan, status_code=202)
async def open_driver_app(
    app: DriverApp,
    background_tasks: BackgroundTasks,
    dashboard: DashboardController = Depends(get_dashboard),
):
    platform = _PLATFORMS[app]
    plan = dashboard.plan_launch(platform)
    background_tasks.add_task(dashboard.open_external_app, platform)
    logger.info("Launch requested for %s", platform.value)
    return plan
