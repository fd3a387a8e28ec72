"""
Preference Validation - Rules for Saving Investor Preferences

Validates the body of a preferences save before anything is written.
Fails on the first problem with a ValidationError naming the field.
Nothing is defaulted that the investor did not choose, apart from
notification_enabled (on unless explicitly false) and properties_managing
(0 when absent).
"""

from __future__ import annotations

from datetime import date
from typing import Any

from core.errors import ValidationError
from core.locations import ensure_current_location_format
from core.models import OperatorType, PropertyType


VALID_OPERATOR_TYPES = [ot.value for ot in OperatorType]
VALID_PROPERTY_TYPES = [pt.value for pt in PropertyType]


# =============================================================================
# Field Validators
# =============================================================================


def _require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field_name, f"{field_name} must be a number")
    return value


def validate_budget(raw: Any) -> dict:
    """Budget in pounds per month: 0 <= min < max."""
    if not isinstance(raw, dict):
        raise ValidationError("preference_data.budget", "budget with min and max is required")

    low = _require_number(raw.get("min"), "preference_data.budget.min")
    high = _require_number(raw.get("max"), "preference_data.budget.max")

    if low < 0:
        raise ValidationError("preference_data.budget.min", "budget.min cannot be negative")
    if low >= high:
        raise ValidationError("preference_data.budget", "budget.min must be less than budget.max")
    return {"min": low, "max": high}


def validate_bedrooms(raw: Any) -> dict:
    """Whole-number bedroom range: 0 <= min <= max. 0 means studio."""
    if not isinstance(raw, dict):
        raise ValidationError("preference_data.bedrooms", "bedrooms with min and max is required")

    bounds = {}
    for key in ("min", "max"):
        field_name = f"preference_data.bedrooms.{key}"
        value = _require_number(raw.get(key), field_name)
        if not float(value).is_integer():
            raise ValidationError(field_name, f"bedrooms.{key} must be a whole number")
        bounds[key] = int(value)

    if bounds["min"] < 0:
        raise ValidationError("preference_data.bedrooms.min", "bedrooms.min cannot be negative")
    if bounds["min"] > bounds["max"]:
        raise ValidationError("preference_data.bedrooms", "bedrooms.min cannot exceed bedrooms.max")
    return bounds


def validate_property_types(raw: Any) -> list[str]:
    """Non-empty list of known property types, lower-cased, duplicates dropped."""
    if not isinstance(raw, list) or not raw:
        raise ValidationError("preference_data.property_types", "At least one property type is required")

    types: list[str] = []
    for value in raw:
        normalised = str(value).lower().strip().replace("_", "-")
        if normalised not in VALID_PROPERTY_TYPES:
            raise ValidationError("preference_data.property_types", f"Invalid property type: {value}")
        if normalised not in types:
            types.append(normalised)
    return types


def validate_locations(raw: Any) -> list[dict]:
    """
    Validate and normalise submitted locations.

    Each location needs a city and at least one non-blank local authority.
    A singular localAuthority is folded into localAuthorities. An empty
    list is allowed (onboarding was skipped).
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("preference_data.locations", "locations must be a list")

    cleaned: list[dict] = []
    for index, loc in enumerate(raw):
        field_name = f"preference_data.locations[{index}]"
        if not isinstance(loc, dict):
            raise ValidationError(field_name, "Location must be an object")

        city = loc.get("city")
        if not isinstance(city, str) or not city.strip():
            raise ValidationError(f"{field_name}.city", "Invalid location: city is required")

        authorities = loc.get("localAuthorities")
        if not isinstance(authorities, list):
            if loc.get("localAuthority"):
                authorities = [loc["localAuthority"]]
            else:
                raise ValidationError(
                    f"{field_name}.localAuthorities",
                    "Invalid location: localAuthorities required",
                )

        authorities = [str(a).strip() for a in authorities if a and str(a).strip()]
        if not authorities:
            raise ValidationError(
                f"{field_name}.localAuthorities",
                "Invalid location: at least one local authority required",
            )

        entry = {k: v for k, v in loc.items() if k not in ("localAuthority", "areas", "radius")}
        entry["city"] = city.strip()
        entry["localAuthorities"] = authorities
        cleaned.append(entry)

    # Fill in id and region
    return [location.to_dict() for location in ensure_current_location_format(cleaned)]


def validate_availability(raw: Any) -> dict:
    """Availability flags: immediate and/or an ISO available_from date."""
    if raw is None:
        return {"immediate": False}
    if not isinstance(raw, dict):
        raise ValidationError("preference_data.availability", "availability must be an object")

    availability: dict[str, Any] = {"immediate": bool(raw.get("immediate", False))}
    available_from = raw.get("available_from", raw.get("availableFrom"))
    if available_from:
        try:
            parsed = date.fromisoformat(available_from)
        except (TypeError, ValueError):
            raise ValidationError(
                "preference_data.availability.available_from",
                "available_from must be an ISO date",
            )
        availability["available_from"] = parsed.isoformat()
    return availability


# =============================================================================
# Payload Validation
# =============================================================================


def validate_preference_data(raw: Any) -> dict[str, Any]:
    """Validate preference_data and return it in stored (snake_case) form."""
    if not isinstance(raw, dict) or not raw:
        raise ValidationError("preference_data", "preference_data is required")

    additional = raw.get("additional_preferences", raw.get("additionalPreferences")) or []
    if isinstance(additional, str):
        additional = [additional]
    if not isinstance(additional, list):
        raise ValidationError(
            "preference_data.additional_preferences",
            "additional_preferences must be a list",
        )

    return {
        "budget": validate_budget(raw.get("budget")),
        "bedrooms": validate_bedrooms(raw.get("bedrooms")),
        "property_types": validate_property_types(
            raw.get("property_types", raw.get("propertyTypes"))
        ),
        "locations": validate_locations(raw.get("locations")),
        "additional_preferences": [str(a) for a in additional if str(a).strip()],
        "availability": validate_availability(raw.get("availability")),
    }


def validate_preference_payload(body: Any) -> dict[str, Any]:
    """
    Validate a preferences save request body.

    Args:
        body: Parsed JSON body

    Returns:
        Dict with operator_type, operator_type_other, properties_managing,
        preference_data and notification_enabled, ready to upsert

    Raises:
        ValidationError: On the first invalid field
    """
    if not isinstance(body, dict):
        raise ValidationError("body", "Request body must be a JSON object")

    operator_type = body.get("operator_type")
    if not operator_type or body.get("preference_data") is None:
        raise ValidationError(
            "operator_type" if not operator_type else "preference_data",
            "operator_type and preference_data are required",
        )
    if operator_type not in VALID_OPERATOR_TYPES:
        raise ValidationError("operator_type", "Invalid operator_type")

    operator_type_other = body.get("operator_type_other")
    if operator_type == OperatorType.OTHER.value:
        if not isinstance(operator_type_other, str) or not operator_type_other.strip():
            raise ValidationError(
                "operator_type_other",
                'operator_type_other is required when operator_type is "other"',
            )
        operator_type_other = operator_type_other.strip()
    else:
        operator_type_other = None

    managing = body.get("properties_managing") or 0
    if isinstance(managing, bool) or not isinstance(managing, int) or managing < 0:
        raise ValidationError("properties_managing", "properties_managing must be a non-negative whole number")

    return {
        "operator_type": operator_type,
        "operator_type_other": operator_type_other,
        "properties_managing": managing,
        "preference_data": validate_preference_data(body.get("preference_data")),
        "notification_enabled": body.get("notification_enabled") is not False,
    }
