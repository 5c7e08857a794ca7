"""
GeminiClient — Async wrapper around the Google Gen AI SDK (google-genai).

One model is used (settings.gemini_model, Flash by default): the demand
forecast is a single low-latency call per refresh cycle.

Supports two runtime modes (set via AI_MOCK_MODE env var):
  - MOCK mode (default): returns deterministic canned responses.
    Use for tests and local dev without API keys.
  - REAL mode: makes actual Gemini API calls with Google Search grounding.
    Requires GEMINI_API_KEY to be set.

Extension pattern: add new mock response keys to _MOCK_RESPONSES and
reference them in generate_with_search() calls via the response_key parameter.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from google import genai
from google.genai import types

from kenydrive.core.config import settings

logger = logging.getLogger(__name__)


class GeminiModel(str, Enum):
    FLASH = "gemini-2.5-flash"


# Enables live web search grounding on the request.
_SEARCH_TOOL = types.Tool(google_search=types.GoogleSearch())

# Canned responses for mock mode.
# Keys map to response_key arguments in generate_with_search() calls.
_MOCK_RESPONSES: dict[str, str] = {
    "default": (
        "[MOCK] This is a placeholder Gemini response. "
        "Set AI_MOCK_MODE=false and provide GEMINI_API_KEY for real responses."
    ),
    # Fenced on purpose: the live model often wraps JSON in markdown.
    "peak_predictions": (
        "```json\n"
        '{"hotspots": ['
        '{"area": "Sarit Centre, Westlands", "demandLevel": "Peak", '
        '"estimatedEarnings": "Ksh 900 - 1300 / hr", "waitTime": 4, '
        '"coordinates": {"lat": -1.2609, "lng": 36.8024}, '
        '"description": "[MOCK] Park near the Karuna Road exit for quick mall pickups."}, '
        '{"area": "Upper Hill (Britam Tower)", "demandLevel": "High", '
        '"estimatedEarnings": "Ksh 800 - 1100 / hr", "waitTime": 6, '
        '"coordinates": {"lat": -1.2990, "lng": 36.8150}, '
        '"description": "[MOCK] Office close-out traffic heading to Ngong Road."}, '
        '{"area": "Garden City Mall, Thika Road", "demandLevel": "Medium", '
        '"estimatedEarnings": "Ksh 600 - 850 / hr", "waitTime": 10, '
        '"coordinates": {"lat": -1.2325, "lng": 36.8785}, '
        '"description": "[MOCK] Wait at the matatu-free lane by the cinema entrance."}'
        "], "
        '"hourlyPredictions": ['
        '{"hour": "6 AM", "demandScore": 62}, {"hour": "7 AM", "demandScore": 88}, '
        '{"hour": "8 AM", "demandScore": 95}, {"hour": "9 AM", "demandScore": 71}, '
        '{"hour": "10 AM", "demandScore": 55}, {"hour": "11 AM", "demandScore": 58}, '
        '{"hour": "12 PM", "demandScore": 66}, {"hour": "1 PM", "demandScore": 64}, '
        '{"hour": "2 PM", "demandScore": 52}, {"hour": "3 PM", "demandScore": 60}, '
        '{"hour": "4 PM", "demandScore": 78}, {"hour": "5 PM", "demandScore": 97}'
        "], "
        '"summary": "[MOCK] Evening peak building in Westlands; stage near Sarit before 5 PM."}\n'
        "```"
    ),
}

# Grounding citations returned alongside mock responses.
_MOCK_CITATIONS: dict[str, list[dict[str, str]]] = {
    "peak_predictions": [
        {"title": "Nairobi Expressway traffic update", "uri": "https://example.com/expressway"},
        {"title": "KCAA arrivals schedule", "uri": "https://example.com/jkia-arrivals"},
    ],
}


@dataclass
class GroundedText:
    """Model text plus whatever web citations the search tool attached."""

    text: str
    citations: list[dict[str, str]] = field(default_factory=list)


def _grounding_citations(response: Any) -> list[dict[str, str]]:
    """
    Pull ``{title, uri}`` pairs out of candidates[0].grounding_metadata.

    Chunks without a ``web`` entry are skipped here; empty titles/URIs are
    passed through and filtered by the caller.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    citations: list[dict[str, str]] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if not web:
            continue
        citations.append({
            "title": getattr(web, "title", "") or "",
            "uri": getattr(web, "uri", "") or "",
        })
    return citations


class GeminiClient:
    """
    Central Gemini interface for the dashboard.

    Don't instantiate per-request; use the module-level `gemini_client`
    singleton.
    """

    def __init__(self) -> None:
        self.mock_mode = settings.ai_mock_mode
        self.model_name = settings.gemini_model or GeminiModel.FLASH.value

        if not self.mock_mode:
            if not settings.gemini_api_key:
                logger.warning(
                    "GEMINI_API_KEY not set — falling back to mock mode. "
                    "Set AI_MOCK_MODE=true to silence this warning."
                )
                self.mock_mode = True
            else:
                self._client = genai.Client(api_key=settings.gemini_api_key)

        if self.mock_mode:
            logger.info("GeminiClient initialised in MOCK mode")
        else:
            logger.info("GeminiClient initialised in REAL mode (model: %s)", self.model_name)

    async def generate_with_search(
        self,
        prompt: str,
        response_key: str = "default",
    ) -> GroundedText:
        """
        JSON-mode generation with Google Search grounding enabled.

        Returns the raw text (which may still carry markdown fences) and the
        web citations from the grounding metadata.

        Raises:
            Exception: Propagates Gemini SDK errors in real mode.
        """
        if self.mock_mode:
            return GroundedText(
                text=_MOCK_RESPONSES.get(response_key, _MOCK_RESPONSES["default"]),
                citations=list(_MOCK_CITATIONS.get(response_key, [])),
            )

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    tools=[_SEARCH_TOOL],
                    response_mime_type="application/json",
                ),
            )
            return GroundedText(text=response.text or "", citations=_grounding_citations(response))
        except Exception as exc:
            logger.error("Gemini grounded call failed (model=%s): %s", self.model_name, exc)
            raise


# Module-level singleton — import and use this everywhere
gemini_client = GeminiClient()
