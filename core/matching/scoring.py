"""
Property match scoring.

Scores one property against one investor's preferences on a 0-100 scale.

Scoring methodology:
- Location (50%): preferred city, narrowed to local authorities if given
- Price (30%): monthly rent against the budget; only overspend is penalised
- Bedrooms (15%): 25 points lost per bedroom outside the range
- Type (5%): categorical, exact match only

Each factor is a pure function returning a SubScore. Factors with nothing to
compare against (no locations, no property types) score a neutral 100 and
contribute no reason.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from core.errors import ValidationError
from core.locations import (
    GENERIC_LONDON_NAMES,
    Location,
    canonical_local_authority,
    expand_area_to_authorities,
    infer_london_borough,
    is_local_authority,
)
from core.models import (
    InvestorPreference,
    MatchResult,
    NumericRange,
    PreferenceData,
    Property,
)


# Partial credit when the city matches but the property's area is unknown
UNCONFIRMED_AREA_SCORE = 60.0

# Price falls to zero at this fraction over budget
PRICE_ZERO_OVER_BUDGET = 0.5

BEDROOM_PENALTY_PER_ROOM = 25.0

NEUTRAL_SCORE = 100.0


@dataclass(frozen=True)
class SubScore:
    """One factor's score (0-100) and its explanation."""

    score: float
    reason: Optional[str] = None


# =============================================================================
# Location
# =============================================================================


def resolve_local_authority(prop: Property) -> Optional[str]:
    """
    Work out which local authority a property sits in.

    Order:
    1. The listing's own local_authority tag
    2. The listing city, when it is itself an authority name ("Salford")
    3. London postcode district inference

    Generic "London" / "Greater London" never identifies a borough.
    """
    tagged = (prop.local_authority or "").strip()
    if tagged and tagged.lower() not in GENERIC_LONDON_NAMES:
        return canonical_local_authority(tagged) or tagged

    city = (prop.city or "").strip()
    if city.lower() not in GENERIC_LONDON_NAMES and is_local_authority(city):
        return canonical_local_authority(city)

    return infer_london_borough(prop.postcode)


def _location_covers(location: Location, city_key: str, authority_key: Optional[str]) -> bool:
    location_key = location.city.strip().lower()
    if location_key == city_key:
        return True
    # A sub-region or region also covers the authorities inside it
    covered = expand_area_to_authorities(location.city)
    return city_key in covered or (authority_key is not None and authority_key in covered)


def _requested_authorities(location: Location) -> set[str]:
    requested: set[str] = set()
    for area in location.local_authorities:
        requested.update(expand_area_to_authorities(area))
    return requested


def location_score(prop: Property, locations: Iterable[Location]) -> SubScore:
    """
    Location sub-score: the best match over all preferred locations.

    - No locations                          -> 100 (neutral)
    - City not covered by any location      -> 0
    - City covered, all areas wanted        -> 100
    - City covered, authority matches       -> 100
    - City covered, authority unknown       -> 60
    - City covered, authority differs       -> 0
    """
    locations = list(locations)
    if not locations:
        return SubScore(NEUTRAL_SCORE)

    city_key = prop.city.strip().lower()
    authority = resolve_local_authority(prop)
    authority_key = authority.lower() if authority else None

    best: Optional[tuple[float, bool, SubScore]] = None
    for location in locations:
        if not _location_covers(location, city_key, authority_key):
            candidate = (0.0, False, SubScore(0.0, "City not in preferred locations"))
        elif location.covers_all_areas:
            candidate = (NEUTRAL_SCORE, True, SubScore(NEUTRAL_SCORE, "City match (all areas)"))
        elif authority_key is None:
            candidate = (
                UNCONFIRMED_AREA_SCORE,
                True,
                SubScore(UNCONFIRMED_AREA_SCORE, "City match (area unconfirmed)"),
            )
        elif authority_key in _requested_authorities(location):
            candidate = (
                NEUTRAL_SCORE,
                True,
                SubScore(NEUTRAL_SCORE, f"Local authority match: {authority}"),
            )
        else:
            candidate = (0.0, True, SubScore(0.0, "Area does not match preference"))

        # On equal scores a city match explains the result better than a miss
        if best is None or candidate[:2] > best[:2]:
            best = candidate

    return best[2]


# =============================================================================
# Price
# =============================================================================


def price_score(prop: Property, budget: NumericRange) -> SubScore:
    """
    Price sub-score. Rent is stored in pence, the budget in pounds.

    At or under budget scores 100. Over budget falls linearly to 0 at 50%
    over the maximum.
    """
    price = prop.rent_pounds

    if budget.contains(price):
        return SubScore(100.0, "Within budget")

    if price < budget.min:
        return SubScore(100.0, "Below budget")

    if budget.max <= 0:
        return SubScore(0.0, "Over budget")

    over = (price - budget.max) / budget.max
    score = max(0.0, 100.0 - (100.0 / PRICE_ZERO_OVER_BUDGET) * over)
    return SubScore(score, f"{over * 100:.0f}% over budget")


# =============================================================================
# Bedrooms
# =============================================================================


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _bedroom_label(count: int) -> str:
    if count == 0:
        return "Studio"
    return f"{count} bedroom" if count == 1 else f"{count} bedrooms"


def bedroom_score(prop: Property, bedrooms: NumericRange) -> SubScore:
    """Bedroom sub-score: 100 in range, minus 25 per bedroom outside it."""
    count = prop.bedrooms
    wanted = f"{_format_number(bedrooms.min)}-{_format_number(bedrooms.max)}"

    if bedrooms.contains(count):
        return SubScore(100.0, f"{_bedroom_label(count)} (wanted {wanted})")

    if count < bedrooms.min:
        distance = bedrooms.min - count
    else:
        distance = count - bedrooms.max

    score = max(0.0, 100.0 - BEDROOM_PENALTY_PER_ROOM * distance)
    return SubScore(score, f"{_bedroom_label(count)}, outside {wanted} range")


# =============================================================================
# Property Type
# =============================================================================


def type_score(prop: Property, property_types: Iterable[str]) -> SubScore:
    """Type sub-score: exact, case-insensitive membership. No partial credit."""
    wanted = {t.strip().lower() for t in property_types if t and t.strip()}
    if not wanted:
        return SubScore(NEUTRAL_SCORE)

    if prop.property_type.value in wanted:
        return SubScore(100.0, "Matches preferred type")
    return SubScore(0.0, "Type not in preferences")


# =============================================================================
# Composite
# =============================================================================


class PropertyMatchScorer:
    """
    Combines the four factor scores into a single match score.

    Usage:
        scorer = PropertyMatchScorer()
        result = scorer.score(prop, preference)
    """

    # Scoring weights
    WEIGHT_LOCATION = 0.50
    WEIGHT_PRICE = 0.30
    WEIGHT_BEDROOMS = 0.15
    WEIGHT_TYPE = 0.05

    def score(
        self,
        prop: Property,
        preference: Union[PreferenceData, InvestorPreference],
    ) -> MatchResult:
        """
        Score one property against one investor's preferences.

        Raises:
            ValidationError: If the preference has no budget or bedroom range,
                or the property has no city or rent
        """
        criteria = (
            preference.preference_data
            if isinstance(preference, InvestorPreference)
            else preference
        )
        self.validate_preference(criteria)
        self.validate_property(prop)

        location = location_score(prop, criteria.locations)
        price = price_score(prop, criteria.budget)
        bedrooms = bedroom_score(prop, criteria.bedrooms)
        ptype = type_score(prop, criteria.property_types)

        weighted = (
            location.score * self.WEIGHT_LOCATION
            + price.score * self.WEIGHT_PRICE
            + bedrooms.score * self.WEIGHT_BEDROOMS
            + ptype.score * self.WEIGHT_TYPE
        )
        # Round half up; round() would send 62.5 to 62
        overall = min(100, max(0, int(math.floor(weighted + 0.5))))

        reasons = tuple(
            sub.reason for sub in (location, price, bedrooms, ptype) if sub.reason
        )

        return MatchResult(
            property_id=prop.id,
            score=overall,
            reasons=reasons,
            breakdown={
                "location": round(location.score, 1),
                "price": round(price.score, 1),
                "bedrooms": round(bedrooms.score, 1),
                "type": round(ptype.score, 1),
            },
        )

    @staticmethod
    def validate_preference(criteria: PreferenceData) -> None:
        """Fail fast on preferences that cannot be scored against."""
        if criteria.budget is None:
            raise ValidationError("budget", "Preference has no budget range")
        if criteria.bedrooms is None:
            raise ValidationError("bedrooms", "Preference has no bedroom range")

    @staticmethod
    def validate_property(prop: Property) -> None:
        """Fail fast on properties missing the fields scoring depends on."""
        if not prop.city or not prop.city.strip():
            raise ValidationError("city", f"Property {prop.id} has no city")
        if prop.monthly_rent is None:
            raise ValidationError("monthly_rent", f"Property {prop.id} has no monthly rent")


_default_scorer = PropertyMatchScorer()


def score_property(
    prop: Property,
    preference: Union[PreferenceData, InvestorPreference],
) -> MatchResult:
    """Score a property with the default weights."""
    return _default_scorer.score(prop, preference)
