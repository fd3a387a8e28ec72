"""
Data models for the matching service.

Records arrive from the data store as plain dicts (the persisted JSON).
The from_record() constructors are the read boundary: they coerce types,
normalise legacy locations, and raise ValidationError for records the
matcher cannot use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from core.errors import ValidationError
from core.locations import Location, ensure_current_location_format
from utils.formatting import pence_to_pounds


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp. Naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date or timestamp into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    timestamp = parse_timestamp(value)
    return timestamp.date() if timestamp else None


# =============================================================================
# Enums
# =============================================================================


class PropertyType(Enum):
    """Listing property type. Unrecognised values fall into OTHER."""

    FLAT = "flat"
    HOUSE = "house"
    STUDIO = "studio"
    APARTMENT = "apartment"
    TERRACED = "terraced"
    SEMI_DETACHED = "semi-detached"
    DETACHED = "detached"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "PropertyType":
        """Convert string to PropertyType, case-insensitive."""
        normalised = (value or "").lower().strip().replace("_", "-")
        if normalised == "semi detached":
            normalised = "semi-detached"
        for member in cls:
            if member.value == normalised:
                return member
        return cls.OTHER


class PropertyStatus(Enum):
    """Listing lifecycle status. Only ACTIVE listings are matchable."""

    DRAFT = "draft"
    ACTIVE = "active"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class Availability(Enum):
    """Occupancy of a listing."""

    VACANT = "vacant"
    TENANTED = "tenanted"


class OperatorType(Enum):
    """What kind of operator the investor is."""

    SA_OPERATOR = "sa_operator"
    SUPPORTED_LIVING = "supported_living"
    SOCIAL_HOUSING = "social_housing"
    OTHER = "other"


# =============================================================================
# Property
# =============================================================================


@dataclass
class Property:
    """A rental listing, as read by the matcher."""

    id: str
    city: str
    monthly_rent: Optional[int]  # pence
    bedrooms: int = 0
    property_type: PropertyType = PropertyType.OTHER
    status: PropertyStatus = PropertyStatus.ACTIVE
    availability: Availability = Availability.VACANT
    address: str = ""
    postcode: str = ""
    local_authority: Optional[str] = None
    created_at: Optional[datetime] = None
    photos: list = field(default_factory=list)

    @property
    def rent_pounds(self) -> float:
        """Monthly rent in pounds."""
        return pence_to_pounds(self.monthly_rent)

    @property
    def is_matchable(self) -> bool:
        return self.status == PropertyStatus.ACTIVE

    @property
    def sort_timestamp(self) -> datetime:
        return self.created_at or EPOCH

    @staticmethod
    def _text_field(record: dict[str, Any], key: str, property_id: str) -> str:
        value = record.get(key)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValidationError(key, f"Property {property_id or '?'} has a non-text {key}")
        return value

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Property":
        """
        Build a Property from a stored row.

        Raises:
            ValidationError: If city or monthly_rent is missing or unusable, or
                a text or list field holds the wrong type
        """
        property_id = str(record.get("id") or "")

        city = record.get("city")
        if not isinstance(city, str) or not city.strip():
            raise ValidationError("city", f"Property {property_id or '?'} has no city")

        rent = record.get("monthly_rent")
        if rent is None or rent == "":
            raise ValidationError("monthly_rent", f"Property {property_id or '?'} has no monthly rent")
        try:
            monthly_rent = int(rent)
        except (TypeError, ValueError):
            raise ValidationError(
                "monthly_rent", f"Property {property_id or '?'} has an invalid monthly rent"
            )

        try:
            bedrooms = int(record.get("bedrooms") or 0)
        except (TypeError, ValueError):
            bedrooms = 0

        text = {
            key: cls._text_field(record, key, property_id)
            for key in (
                "property_type",
                "status",
                "availability",
                "address",
                "postcode",
                "local_authority",
            )
        }

        photos = record.get("photos") or []
        if not isinstance(photos, (list, tuple)):
            raise ValidationError("photos", f"Property {property_id or '?'} has malformed photos")

        try:
            status = PropertyStatus((text["status"] or "draft").lower())
        except ValueError:
            status = PropertyStatus.DRAFT

        try:
            availability = Availability((text["availability"] or "vacant").lower())
        except ValueError:
            availability = Availability.VACANT

        return cls(
            id=property_id,
            city=city.strip(),
            monthly_rent=monthly_rent,
            bedrooms=max(0, bedrooms),
            property_type=PropertyType.from_string(text["property_type"]),
            status=status,
            availability=availability,
            address=text["address"],
            postcode=text["postcode"],
            local_authority=text["local_authority"] or None,
            created_at=parse_timestamp(record.get("created_at")),
            photos=list(photos),
        )


# =============================================================================
# Investor Preferences
# =============================================================================


@dataclass(frozen=True)
class NumericRange:
    """Inclusive min/max range."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class AvailabilityWindow:
    """When the investor can take a property."""

    immediate: bool = False
    available_from: Optional[date] = None

    @property
    def is_armed(self) -> bool:
        """Exactly one of immediate / a concrete date is set."""
        return self.immediate != (self.available_from is not None)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"immediate": self.immediate}
        if self.available_from is not None:
            data["available_from"] = self.available_from.isoformat()
        return data


def _read(data: dict, snake: str, camel: str) -> Any:
    if snake in data:
        return data[snake]
    return data.get(camel)


def _parse_range(value: Any, field_name: str) -> Optional[NumericRange]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError(field_name, f"{field_name} must have min and max")
    try:
        return NumericRange(min=float(value["min"]), max=float(value["max"]))
    except (KeyError, TypeError, ValueError):
        raise ValidationError(field_name, f"{field_name} must have numeric min and max")


@dataclass
class PreferenceData:
    """
    The investor's matching criteria (preference_data JSON).

    budget and bedrooms are Optional only so that malformed stored rows can
    be represented; the scorer rejects them.
    """

    budget: Optional[NumericRange]
    bedrooms: Optional[NumericRange]
    property_types: list[str] = field(default_factory=list)
    locations: list[Location] = field(default_factory=list)
    additional_preferences: list[str] = field(default_factory=list)
    availability: Optional[AvailabilityWindow] = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "PreferenceData":
        """Read stored preference data, normalising legacy locations."""
        if not isinstance(data, dict):
            raise ValidationError("preference_data", "preference_data must be an object")

        availability = None
        raw_availability = data.get("availability")
        if isinstance(raw_availability, dict):
            availability = AvailabilityWindow(
                immediate=bool(raw_availability.get("immediate", False)),
                available_from=parse_date(_read(raw_availability, "available_from", "availableFrom")),
            )

        additional = _read(data, "additional_preferences", "additionalPreferences") or []
        if isinstance(additional, str):
            additional = [additional] if additional.strip() else []

        return cls(
            budget=_parse_range(data.get("budget"), "budget"),
            bedrooms=_parse_range(data.get("bedrooms"), "bedrooms"),
            property_types=[str(t) for t in (_read(data, "property_types", "propertyTypes") or [])],
            locations=ensure_current_location_format(data.get("locations") or []),
            additional_preferences=[str(a) for a in additional],
            availability=availability,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "budget": self.budget.to_dict() if self.budget else None,
            "bedrooms": self.bedrooms.to_dict() if self.bedrooms else None,
            "property_types": list(self.property_types),
            "locations": [loc.to_dict() for loc in self.locations],
            "additional_preferences": list(self.additional_preferences),
        }
        if self.availability is not None:
            data["availability"] = self.availability.to_dict()
        return data


@dataclass
class InvestorPreference:
    """One investor's preference record (at most one per investor)."""

    investor_id: str
    operator_type: OperatorType
    preference_data: PreferenceData
    operator_type_other: Optional[str] = None
    properties_managing: int = 0
    notification_enabled: bool = True
    is_active: bool = True
    updated_at: Optional[datetime] = None
    id: Optional[str] = None

    @property
    def properties_managing_bucket(self) -> str:
        """Display bucket for the number of properties managed."""
        count = self.properties_managing
        if count <= 0:
            return "0"
        if count <= 5:
            return "1-5"
        if count <= 10:
            return "6-10"
        if count <= 20:
            return "11-20"
        return "21+"

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "InvestorPreference":
        """Build from a stored investor_preferences row."""
        try:
            operator_type = OperatorType(record.get("operator_type") or "other")
        except ValueError:
            operator_type = OperatorType.OTHER

        try:
            managing = int(record.get("properties_managing") or 0)
        except (TypeError, ValueError):
            managing = 0

        return cls(
            id=record.get("id"),
            investor_id=str(record["investor_id"]),
            operator_type=operator_type,
            operator_type_other=record.get("operator_type_other"),
            properties_managing=max(0, managing),
            preference_data=PreferenceData.from_dict(record.get("preference_data")),
            notification_enabled=record.get("notification_enabled") is not False,
            is_active=record.get("is_active") is not False,
            updated_at=parse_timestamp(record.get("updated_at")),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialise to a storable row."""
        return {
            "id": self.id,
            "investor_id": self.investor_id,
            "operator_type": self.operator_type.value,
            "operator_type_other": self.operator_type_other,
            "properties_managing": self.properties_managing,
            "preference_data": self.preference_data.to_dict(),
            "notification_enabled": self.notification_enabled,
            "is_active": self.is_active,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


# =============================================================================
# Match Results
# =============================================================================


@dataclass(frozen=True)
class MatchResult:
    """Score of one property against one preference. Never persisted."""

    property_id: str
    score: int  # 0-100
    reasons: tuple[str, ...]
    breakdown: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "property_id": self.property_id,
            "score": self.score,
            "reasons": list(self.reasons),
            "breakdown": dict(self.breakdown),
        }
