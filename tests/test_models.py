"""Tests for the demand models' wire shape and normalisation."""

import pytest
from pydantic import ValidationError

from kenydrive.models.demand import (
    NAIROBI_REGIONS,
    DemandLevel,
    DriverStatus,
    Hotspot,
    Platform,
    short_region_label,
)

_HOTSPOT = {
    "area": "Yaya Centre",
    "demandLevel": "Peak",
    "estimatedEarnings": "Ksh 700/hr",
    "waitTime": 8,
    "coordinates": {"lat": -1.292, "lng": 36.789},
    "description": "Nightlife pickups.",
}


class TestHotspot:
    def test_parses_camel_case(self):
        spot = Hotspot.model_validate(_HOTSPOT)
        assert spot.demand_level is DemandLevel.PEAK
        assert spot.wait_time == 8
        assert spot.coordinates.lng == 36.789

    def test_dumps_camel_case_with_zone_tone(self):
        data = Hotspot.model_validate(_HOTSPOT).model_dump(by_alias=True, mode="json")
        assert data["demandLevel"] == "Peak"
        assert data["waitTime"] == 8
        assert data["zoneTone"] == "peak"

    @pytest.mark.parametrize(
        "level, tone",
        [("Peak", "peak"), ("High", "high"), ("Medium", "normal"), ("Low", "normal")],
    )
    def test_zone_tone(self, level, tone):
        spot = Hotspot.model_validate(dict(_HOTSPOT, demandLevel=level))
        assert spot.zone_tone == tone

    def test_demand_level_case_normalised(self):
        spot = Hotspot.model_validate(dict(_HOTSPOT, demandLevel=" high "))
        assert spot.demand_level is DemandLevel.HIGH

    def test_numeric_earnings_coerced_to_text(self):
        spot = Hotspot.model_validate(dict(_HOTSPOT, estimatedEarnings=950))
        assert spot.estimated_earnings == "950"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError):
            Hotspot.model_validate(dict(_HOTSPOT, demandLevel="Extreme"))

    def test_missing_coordinates_rejected(self):
        data = dict(_HOTSPOT)
        del data["coordinates"]
        with pytest.raises(ValidationError):
            Hotspot.model_validate(data)

    def test_free_text_fields_default_to_empty(self):
        data = {k: v for k, v in _HOTSPOT.items() if k not in ("description", "estimatedEarnings")}
        spot = Hotspot.model_validate(data)
        assert spot.description == ""
        assert spot.estimated_earnings == ""


class TestDriverStatus:
    def test_defaults(self):
        status = DriverStatus()
        assert status.is_online is False
        assert status.platform is Platform.BOTH
        assert status.current_location == NAIROBI_REGIONS[0]

    def test_wire_shape(self):
        assert DriverStatus().model_dump(by_alias=True, mode="json") == {
            "isOnline": False,
            "currentLocation": NAIROBI_REGIONS[0],
            "platform": "Both",
        }


class TestRegions:
    def test_eight_fixed_regions(self):
        assert len(NAIROBI_REGIONS) == 8
        assert len(set(NAIROBI_REGIONS)) == 8

    @pytest.mark.parametrize(
        "region, label",
        [
            ("Nairobi Central (CBD/Upper Hill)", "Nairobi Central"),
            ("Westlands & Kilimani", "Westlands & Kilimani"),
            ("Waiyaki Way (Kikuyu/Kangemi)", "Waiyaki Way"),
        ],
    )
    def test_short_label(self, region, label):
        assert short_region_label(region) == label
