"""
demand.py — Pydantic models for the demand dashboard.

Wire shape
──────────
The Gemini prompt asks for camelCase JSON (``demandLevel``, ``waitTime``,
``hourlyPredictions`` ...), and the dashboard client reads the same keys.
Every model therefore derives from CamelModel: attributes are snake_case in
Python, aliases are camelCase on the wire, and either form is accepted on
input.

Nothing here is persisted. Each fetch cycle replaces the whole bundle.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

# The eight selectable regions, in selector order. The first one is the default.
NAIROBI_REGIONS: list[str] = [
    "Nairobi Central (CBD/Upper Hill)",
    "Westlands & Kilimani",
    "Lang'ata & Karen",
    "Mombasa Road & Syokimau",
    "Thika Road (Ruaraka/Ruiru)",
    "Ruaka & Gigiri",
    "Eastlands (Donholm/Embakasi)",
    "Waiyaki Way (Kikuyu/Kangemi)",
]


def short_region_label(region: str) -> str:
    """Selector label: the region name without its parenthesised sub-areas."""
    return region.split(" (")[0]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DemandLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    PEAK = "Peak"


class Platform(str, Enum):
    UBER = "Uber"
    BOLT = "Bolt"
    BOTH = "Both"


class Coordinates(CamelModel):
    lat: float
    lng: float


class Hotspot(CamelModel):
    """A parking area with favourable ride demand right now."""

    # The model sometimes answers "Ksh 900/hr" and sometimes a bare number.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    area: str
    demand_level: DemandLevel
    estimated_earnings: str = ""
    wait_time: int                 # minutes
    coordinates: Coordinates
    description: str = ""

    @field_validator("demand_level", mode="before")
    @classmethod
    def _normalise_level(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @computed_field(alias="zoneTone")
    @property
    def zone_tone(self) -> str:
        """Badge tone used by the hotspot card: peak | high | normal."""
        if self.demand_level is DemandLevel.PEAK:
            return "peak"
        if self.demand_level is DemandLevel.HIGH:
            return "high"
        return "normal"


class Prediction(CamelModel):
    hour: str            # display label, e.g. "8 AM" or "14:00"
    demand_score: float  # unitless, unbounded


class GroundingSource(CamelModel):
    title: str = ""
    uri: str = ""


class DriverStatus(CamelModel):
    """Local-only driver state. Never sent to the AI service."""

    is_online: bool = False
    current_location: str = NAIROBI_REGIONS[0]
    platform: Platform = Platform.BOTH


class PredictionBundle(CamelModel):
    """Everything one fetch cycle produces."""

    hotspots: list[Hotspot] = Field(default_factory=list)
    hourly_predictions: list[Prediction] = Field(default_factory=list)
    sources: list[GroundingSource] = Field(default_factory=list)
    summary: str = ""


class DashboardState(CamelModel):
    """Snapshot served by GET /api/v1/dashboard."""

    loading: bool
    selected_region: str
    hotspots: list[Hotspot]
    hourly_predictions: list[Prediction]
    sources: list[GroundingSource]
    summary: str
    status: DriverStatus
    last_updated: Optional[datetime] = None


class RegionOption(CamelModel):
    name: str
    label: str      # short selector label
    selected: bool


class LaunchPlan(CamelModel):
    """How to open a driver app: deep link first, web fallback after a delay."""

    platform: Platform
    deep_link: str
    fallback_url: str
    fallback_delay_ms: int


class RegionSelectRequest(CamelModel):
    region: str = Field(..., min_length=1, max_length=100)


class PlatformSelectRequest(CamelModel):
    platform: Platform
