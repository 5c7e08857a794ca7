"""
deep_links.py — Open the Uber / Bolt driver apps.

A custom-scheme deep link is opened first. After a short fixed delay the
platform's HTTPS portal is opened as well, whether or not the app launched:
there is no way to detect a successful deep-link launch from here.
"""

import asyncio
import logging
import webbrowser
from typing import Awaitable, Callable

from kenydrive.models.demand import LaunchPlan, Platform

logger = logging.getLogger(__name__)

Opener = Callable[[str], object]
Sleep = Callable[[float], Awaitable[None]]

# platform → (deep link, web fallback)
APP_LINKS: dict[Platform, tuple[str, str]] = {
    Platform.UBER: ("uberdriver://", "https://drivers.uber.com"),
    Platform.BOLT: ("bolt-driver://", "https://partners.bolt.eu"),
}


def launch_plan(platform: Platform, fallback_delay_ms: int) -> LaunchPlan:
    """Raises KeyError for Platform.BOTH, which has no single app."""
    deep_link, fallback_url = APP_LINKS[platform]
    return LaunchPlan(
        platform=platform,
        deep_link=deep_link,
        fallback_url=fallback_url,
        fallback_delay_ms=fallback_delay_ms,
    )


async def open_app(
    plan: LaunchPlan,
    opener: Opener = webbrowser.open_new_tab,
    sleep: Sleep = asyncio.sleep,
) -> None:
    # webbrowser may block while it spawns a browser process.
    await asyncio.to_thread(opener, plan.deep_link)
    await sleep(plan.fallback_delay_ms / 1000)
    await asyncio.to_thread(opener, plan.fallback_url)
    logger.info("Opened %s app (%s, then %s)", plan.platform.value, plan.deep_link, plan.fallback_url)
