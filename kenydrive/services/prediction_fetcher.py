"""
prediction_fetcher.py — One Gemini call per refresh cycle → PredictionBundle.

Flow:
  1. build_prompt()            — region + fixed sub-area catalogue + JSON shape
  2. gemini_client.generate_with_search() — JSON mode + Google Search grounding
  3. strip_markdown_fences()   — drop ```json / ``` artifacts, then json.loads
  4. _clean_sources()          — keep non-empty {title, uri} citations
  5. any failure in 2–4        → log + build_fallback_bundle()

Fields missing from an otherwise valid response default to empty lists
(and the default summary); only transport errors, malformed JSON and
shape validation errors trigger the fallback. No retries, no timeout
beyond the SDK default.
"""

import json
import logging
import random
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError

from kenydrive.ai.gemini_client import gemini_client
from kenydrive.models.demand import (
    Coordinates,
    DemandLevel,
    GroundingSource,
    Hotspot,
    Prediction,
    PredictionBundle,
)

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Strategic positioning suggested in high-traffic commuter belts."
FALLBACK_SUMMARY = "High morning commuter demand detected along Thika Road and Waiyaki Way."

# Number of synthetic hours in the fallback forecast, starting at the current hour.
FALLBACK_HOURS = 12
FALLBACK_SCORE_MIN = 60
FALLBACK_SCORE_MAX = 99  # inclusive; scores land in [60, 100)

_FENCE_RE = re.compile(r"```json|```")

_PROMPT_TEMPLATE = """\
Act as an expert data analyst for ridesharing in Kenya. Analyze current and historical ride-sharing demand patterns for {region} and the greater Nairobi Metropolitan Area.

Focus Areas Include:
- Business Hubs: CBD, Upper Hill, Westlands (GTC, Delta Corner), Kilimani.
- High-Value Residential: Lavington, Karen, Runda, Gigiri (UN/Embassy traffic).
- Transit & Commuter Belts: Thika Road (Garden City/TRM), Ngong Road, Mombasa Road (JKIA/Syokimau), Waiyaki Way (Kangemi/Mountain View).
- Nightlife/Entertainment: Sarit Centre, Adife, Electric Avenue, Lang'ata Road, Village Market.
- Surrounding Towns: Ruaka, Kikuyu, Ruiru, Ngong, Ongata Rongai.

Identify specific "Hotspots" (precise parking areas) where drivers should wait to minimize dead mileage.
Consider current local time, traffic patterns (Nairobi Expressway impact), and potential events found via search.

Return exactly valid JSON:
{{
  "hotspots": [
    {{
      "area": "Area Name (e.g., Sarit Centre, Westlands)",
      "demandLevel": "Peak" | "High" | "Medium" | "Low",
      "estimatedEarnings": "Ksh 800 - 1200 / hr",
      "waitTime": 5,
      "coordinates": {{"lat": -1.26, "lng": 36.80}},
      "description": "Specific parking tip (e.g., Park near the Mall exit for quick pickups)."
    }}
  ],
  "hourlyPredictions": [
    {{"hour": "8 AM", "demandScore": 85}}
  ],
  "summary": "Short 1-2 sentence strategy for this specific region right now."
}}"""

_FALLBACK_HOTSPOTS: list[Hotspot] = [
    Hotspot(
        area="Westlands (GTC/Sarit)",
        demand_level=DemandLevel.PEAK,
        estimated_earnings="Ksh 900/hr",
        wait_time=4,
        coordinates=Coordinates(lat=-1.264, lng=36.804),
        description="Intense demand from corporate offices and mall shoppers.",
    ),
    Hotspot(
        area="JKIA (International Arrivals)",
        demand_level=DemandLevel.HIGH,
        estimated_earnings="Ksh 1500/trip",
        wait_time=15,
        coordinates=Coordinates(lat=-1.333, lng=36.927),
        description="Flight schedule indicates upcoming arrivals. Wait at the holding area.",
    ),
    Hotspot(
        area="Kilimani (Yaya Centre)",
        demand_level=DemandLevel.HIGH,
        estimated_earnings="Ksh 700/hr",
        wait_time=8,
        coordinates=Coordinates(lat=-1.292, lng=36.789),
        description="Steady residential and nightlife demand.",
    ),
]


def build_prompt(region: str) -> str:
    return _PROMPT_TEMPLATE.format(region=region)


def strip_markdown_fences(text: str) -> str:
    """Remove ```json / ``` markers anywhere in the text and trim whitespace."""
    return _FENCE_RE.sub("", text).strip()


def parse_prediction_payload(text: str) -> dict[str, Any]:
    """
    Parse the model's (possibly fenced) JSON answer.

    Raises:
        json.JSONDecodeError: the text is not JSON after fence removal.
        ValueError: the top level is not a JSON object.
    """
    data = json.loads(strip_markdown_fences(text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _clean_sources(entries: list[Any]) -> list[GroundingSource]:
    sources: list[GroundingSource] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        title = str(entry.get("title") or "").strip()
        uri = str(entry.get("uri") or "").strip()
        if not title and not uri:
            continue
        sources.append(GroundingSource(title=title, uri=uri))
    return sources


def build_bundle(data: dict[str, Any], citations: Optional[list[Any]] = None) -> PredictionBundle:
    """
    Turn a parsed payload plus grounding citations into a PredictionBundle.

    Missing keys default to empty lists / DEFAULT_SUMMARY. Malformed entries
    raise pydantic.ValidationError.
    """
    return PredictionBundle(
        hotspots=data.get("hotspots") or [],
        hourly_predictions=data.get("hourlyPredictions") or [],
        sources=_clean_sources(list(citations or []) + list(data.get("sources") or [])),
        summary=data.get("summary") or DEFAULT_SUMMARY,
    )


def build_fallback_bundle(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> PredictionBundle:
    """Static Nairobi payload used whenever the live call cannot be used."""
    now = now or datetime.now()
    rng = rng or random.Random()

    predictions = [
        Prediction(
            hour=f"{(now.hour + i) % 24}:00",
            demand_score=rng.randint(FALLBACK_SCORE_MIN, FALLBACK_SCORE_MAX),
        )
        for i in range(FALLBACK_HOURS)
    ]
    return PredictionBundle(
        hotspots=[spot.model_copy(deep=True) for spot in _FALLBACK_HOTSPOTS],
        hourly_predictions=predictions,
        sources=[],
        summary=FALLBACK_SUMMARY,
    )


async def get_peak_hour_predictions(region: str = "Nairobi Central") -> PredictionBundle:
    """
    Fetch hotspots, hourly demand and a short strategy for *region*.

    Never raises for AI-side problems: transport errors, malformed JSON and
    unexpected shapes are logged and masked by the fallback bundle.
    """
    try:
        result = await gemini_client.generate_with_search(
            build_prompt(region), response_key="peak_predictions"
        )
        data = parse_prediction_payload(result.text)
        bundle = build_bundle(data, result.citations)
    except (json.JSONDecodeError, ValueError, ValidationError) as exc:
        logger.error("Failed to parse Gemini response for %s: %s", region, exc)
        return build_fallback_bundle()
    except Exception as exc:
        logger.error("Gemini prediction request failed for %s: %s", region, exc)
        return build_fallback_bundle()

    logger.info(
        "Predictions for %s: %d hotspots, %d hours, %d sources",
        region, len(bundle.hotspots), len(bundle.hourly_predictions), len(bundle.sources),
    )
    return bundle
