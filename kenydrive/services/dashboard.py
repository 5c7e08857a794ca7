"""
DashboardController — the single in-process dashboard view.

Holds what the driver sees (loading flag, selected region, the last
prediction bundle, local driver status) and drives the refresh cycle:

  mount()          → refresh now, then every settings.refresh_interval_minutes
  select_region()  → restart the timer (its first tick is the fresh fetch)
  refresh()        → one fetcher call; result applied if not stale
  unmount()        → cancel the timer; in-flight fetches are left to finish

Overlapping fetches
───────────────────
Timer ticks, manual refreshes and region switches can overlap. Each refresh
takes a monotonically increasing sequence number; a result is only applied
if no later-issued request has already been applied, so an older response
completing late never overwrites a newer one. `loading` stays True while
any fetch is in flight.
"""

import asyncio
import logging
import webbrowser
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from kenydrive.core.config import settings
from kenydrive.models.demand import (
    NAIROBI_REGIONS,
    DashboardState,
    DriverStatus,
    LaunchPlan,
    Platform,
    PredictionBundle,
    RegionOption,
    short_region_label,
)
from kenydrive.services import prediction_fetcher
from kenydrive.services.deep_links import Opener, launch_plan, open_app
from kenydrive.services.polling import PollingTimer, Sleep

logger = logging.getLogger(__name__)

LOADING_SUMMARY = "Analyzing Nairobi traffic patterns..."

Fetcher = Callable[[str], Awaitable[PredictionBundle]]


class DashboardController:
    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        opener: Optional[Opener] = None,
        region: Optional[str] = None,
        refresh_interval_seconds: Optional[float] = None,
        fallback_delay_ms: Optional[int] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        region = region or settings.default_region
        if region not in NAIROBI_REGIONS:
            raise ValueError(f"Unknown region: {region!r}")

        self._fetcher = fetcher or prediction_fetcher.get_peak_hour_predictions
        self._opener = opener or webbrowser.open_new_tab
        self._interval = (
            refresh_interval_seconds
            if refresh_interval_seconds is not None
            else settings.refresh_interval_minutes * 60
        )
        self._fallback_delay_ms = (
            fallback_delay_ms if fallback_delay_ms is not None else settings.deep_link_fallback_delay_ms
        )
        self._sleep = sleep

        self._region = region
        self._status = DriverStatus(current_location=region)
        self._bundle = PredictionBundle()
        self._last_updated: Optional[datetime] = None
        self._loading = True

        self._in_flight = 0
        self._issued_seq = 0
        self._applied_seq = 0
        self._pending: set[asyncio.Task] = set()
        self._timer: Optional[PollingTimer] = None

    # ── Read side ─────────────────────────────────────────────────────────────

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def selected_region(self) -> str:
        return self._region

    @property
    def status(self) -> DriverStatus:
        return self._status

    @property
    def bundle(self) -> PredictionBundle:
        return self._bundle

    @property
    def mounted(self) -> bool:
        return self._timer is not None

    def state(self) -> DashboardState:
        return DashboardState(
            loading=self._loading,
            selected_region=self._region,
            hotspots=self._bundle.hotspots,
            hourly_predictions=self._bundle.hourly_predictions,
            sources=self._bundle.sources,
            summary=LOADING_SUMMARY if self._loading else self._bundle.summary,
            status=self._status,
            last_updated=self._last_updated,
        )

    def regions(self) -> list[RegionOption]:
        return [
            RegionOption(name=r, label=short_region_label(r), selected=r == self._region)
            for r in NAIROBI_REGIONS
        ]

    # ── Refresh cycle ─────────────────────────────────────────────────────────

    async def refresh(self) -> DashboardState:
        """Fetch predictions for the current region and apply them unless stale."""
        self._issued_seq += 1
        seq = self._issued_seq
        region = self._region

        self._in_flight += 1
        self._loading = True
        try:
            bundle = await self._fetcher(region)
        except Exception as exc:
            # The fetcher masks AI failures itself; anything here is unexpected.
            logger.error("Error fetching dashboard data for %s: %s", region, exc)
        else:
            self._apply(seq, region, bundle)
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._loading = False
        return self.state()

    def _apply(self, seq: int, region: str, bundle: PredictionBundle) -> None:
        if seq < self._applied_seq:
            logger.info(
                "Discarding stale result #%d for %s (already showing #%d)",
                seq, region, self._applied_seq,
            )
            return
        self._applied_seq = seq
        self._bundle = bundle
        self._last_updated = datetime.now(tz=timezone.utc)

    def trigger_refresh(self) -> asyncio.Task:
        """Start a refresh in the background (used by the polling timer)."""
        self._loading = True
        task = asyncio.create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for every background refresh started so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def mount(self) -> None:
        if self._timer is not None:
            return
        self._timer = PollingTimer(
            self.trigger_refresh, self._interval, sleep=self._sleep, name="dashboard-refresh"
        )
        self._timer.start()

    async def unmount(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            await timer.stop()

    # ── User actions ──────────────────────────────────────────────────────────

    async def select_region(self, region: str) -> bool:
        """
        Switch region. Returns False when *region* is already selected.

        Raises:
            ValueError: *region* is not one of NAIROBI_REGIONS.
        """
        if region not in NAIROBI_REGIONS:
            raise ValueError(f"Unknown region: {region!r}")
        if region == self._region:
            return False

        self._region = region
        logger.info("Region switched to %s", region)
        if self._timer is not None:
            await self.unmount()
            await self.mount()
        return True

    def toggle_online(self) -> DriverStatus:
        self._status = self._status.model_copy(update={"is_online": not self._status.is_online})
        return self._status

    def set_platform(self, platform: Platform) -> DriverStatus:
        self._status = self._status.model_copy(update={"platform": platform})
        return self._status

    def plan_launch(self, platform: Platform) -> LaunchPlan:
        return launch_plan(platform, self._fallback_delay_ms)

    async def open_external_app(self, platform: Platform) -> LaunchPlan:
        plan = self.plan_launch(platform)
        await open_app(plan, self._opener)
        return plan


# Module-level singleton — mounted by the app lifespan
dashboard_controller = DashboardController()


def get_dashboard() -> DashboardController:
    """FastAPI dependency; tests override it with their own controller."""
    return dashboard_controller
