"""
Tests for Location Format Normalisation

Tests covering:
1. Legacy detection
2. Legacy -> current migration (region derived, radius dropped)
3. Unknown city fallback
4. Current-format defaults and singular localAuthority
5. Idempotence
6. Malformed input
"""

from __future__ import annotations

import pytest

from core.errors import ValidationError
from core.locations import (
    UNKNOWN_REGION,
    Location,
    ensure_current_location_format,
    is_legacy_location,
)
from core.models import PreferenceData


# =============================================================================
# Legacy Detection
# =============================================================================


class TestIsLegacyLocation:
    """is_legacy_location()"""

    def test_areas_without_region_is_legacy(self):
        assert is_legacy_location({"city": "Leeds", "areas": ["Headingley"]})

    def test_radius_without_region_is_legacy(self):
        assert is_legacy_location({"city": "Leeds", "radius": 5})

    def test_region_present_is_current(self):
        assert not is_legacy_location({"city": "Leeds", "region": "North East & Yorkshire", "areas": []})

    def test_no_areas_or_radius_is_current(self):
        assert not is_legacy_location({"city": "Leeds", "localAuthorities": ["Leeds"]})

    def test_non_dict_is_not_legacy(self):
        assert not is_legacy_location("Leeds")


# =============================================================================
# Migration
# =============================================================================


class TestLegacyMigration:
    """Legacy records are converted on read."""

    def test_canterbury_migrates_to_south_east(self):
        result = ensure_current_location_format([
            {"city": "Canterbury", "areas": ["Canterbury City"], "radius": 10},
        ])

        assert len(result) == 1
        location = result[0]
        assert location.region == "South East"
        assert location.city == "Canterbury"
        assert location.local_authorities == ("Canterbury City",)
        assert location.id  # generated

        assert location.to_dict() == {
            "id": location.id,
            "region": "South East",
            "city": "Canterbury",
            "localAuthorities": ["Canterbury City"],
        }

    def test_radius_is_dropped(self):
        result = ensure_current_location_format([{"city": "Canterbury", "radius": 10}])
        assert "radius" not in result[0].to_dict()

    def test_unknown_city_gets_unknown_region(self):
        """An unknown city is not an error."""
        result = ensure_current_location_format([{"city": "Nowheresville", "areas": []}])

        assert result[0].region == UNKNOWN_REGION
        assert result[0].local_authorities == ()

    def test_existing_id_is_kept(self):
        result = ensure_current_location_format([{"id": "loc-1", "city": "Leeds", "areas": []}])
        assert result[0].id == "loc-1"

    def test_generated_ids_are_unique(self):
        result = ensure_current_location_format([
            {"city": "Leeds", "areas": []},
            {"city": "Leeds", "areas": []},
        ])
        assert result[0].id != result[1].id

    def test_order_is_preserved(self):
        result = ensure_current_location_format([
            {"city": "Leeds", "radius": 3},
            {"city": "Canterbury", "radius": 10},
        ])
        assert [loc.city for loc in result] == ["Leeds", "Canterbury"]

    def test_one_legacy_element_migrates_the_whole_list(self):
        result = ensure_current_location_format([
            {"id": "loc-1", "region": "South East", "city": "Manchester", "localAuthorities": ["Salford"]},
            {"city": "Canterbury", "areas": ["Canterbury"], "radius": 10},
        ])

        # Current-format fields on the first element are re-derived
        assert result[0].id == "loc-1"
        assert result[0].region == "North West"
        assert result[0].local_authorities == ()
        assert result[1].region == "South East"
        assert result[1].local_authorities == ("Canterbury",)

    def test_current_list_keeps_its_fields(self):
        result = ensure_current_location_format([
            {"id": "loc-2", "region": "North West", "city": "Greater Manchester", "localAuthorities": ["Salford"]},
        ])

        assert result[0].id == "loc-2"
        assert result[0].local_authorities == ("Salford",)


# =============================================================================
# Current Format
# =============================================================================


class TestCurrentFormat:
    """Current-format records get missing fields defaulted."""

    def test_empty_input(self):
        assert ensure_current_location_format([]) == []
        assert ensure_current_location_format(None) == []

    def test_current_record_is_unchanged(self):
        raw = {
            "id": "loc-1",
            "region": "North West",
            "city": "Greater Manchester",
            "localAuthorities": ["Salford", "Trafford"],
        }
        result = ensure_current_location_format([raw])
        assert result[0].to_dict() == raw

    def test_missing_fields_are_defaulted(self):
        result = ensure_current_location_format([{"city": "Greater Manchester"}])

        location = result[0]
        assert location.id
        assert location.region == "North West"
        assert location.local_authorities == ()
        assert location.covers_all_areas

    def test_singular_local_authority_is_folded(self):
        result = ensure_current_location_format([
            {"city": "Greater Manchester", "region": "North West", "localAuthority": "Salford"},
        ])
        assert result[0].local_authorities == ("Salford",)

    def test_location_objects_pass_through(self):
        location = Location(id="loc-1", region="London", city="Central London")
        assert ensure_current_location_format([location]) == [location]


# =============================================================================
# Idempotence
# =============================================================================


class TestIdempotence:
    """Normalising twice gives the same result as normalising once."""

    @pytest.mark.parametrize("raw", [
        [{"city": "Canterbury", "areas": ["Canterbury City"], "radius": 10}],
        [{"city": "Nowheresville", "areas": []}],
        [{"city": "Greater Manchester"}],
        [
            {"city": "Leeds", "radius": 3},
            {"id": "x", "region": "London", "city": "East London", "localAuthorities": ["Hackney"]},
        ],
    ])
    def test_normalise_twice(self, raw):
        once = ensure_current_location_format(raw)
        twice = ensure_current_location_format([loc.to_dict() for loc in once])
        assert twice == once

    def test_normalise_objects_twice(self):
        once = ensure_current_location_format([{"city": "Leeds", "areas": ["Leeds"]}])
        assert ensure_current_location_format(once) == once


# =============================================================================
# Malformed Input
# =============================================================================


class TestMalformedLocations:
    """Bad records fail fast with a field name."""

    def test_non_dict_element(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_current_location_format(["Leeds"])
        assert exc_info.value.field == "locations[0]"

    def test_missing_city(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_current_location_format([{"city": "Leeds"}, {"areas": ["x"]}])
        assert exc_info.value.field == "locations[1].city"

    def test_blank_city(self):
        with pytest.raises(ValidationError):
            ensure_current_location_format([{"city": "   ", "radius": 5}])


# =============================================================================
# Read Path
# =============================================================================


class TestPreferenceDataReadPath:
    """Stored preference data is normalised when read."""

    def test_legacy_locations_normalised_on_read(self):
        data = PreferenceData.from_dict({
            "budget": {"min": 500, "max": 1500},
            "bedrooms": {"min": 1, "max": 2},
            "property_types": ["flat"],
            "locations": [{"city": "Canterbury", "areas": ["Canterbury City"], "radius": 10}],
        })

        assert data.locations[0].region == "South East"
        assert data.to_dict()["locations"][0]["localAuthorities"] == ["Canterbury City"]

    def test_camel_case_keys_accepted(self):
        data = PreferenceData.from_dict({
            "budget": {"min": 500, "max": 1500},
            "bedrooms": {"min": 1, "max": 2},
            "propertyTypes": ["flat"],
            "locations": [],
        })
        assert data.property_types == ["flat"]
