"""
London postcode district to borough inference.

Listings rarely carry a local authority tag, but London postcodes identify
the borough well enough at district level. Each district maps to the borough
that holds most of it; districts that straddle a boundary resolve to that
majority borough.

Only London is covered. Everywhere else the caller falls back to the
listing's own tags.
"""

from __future__ import annotations

import re
from typing import Final, Optional


# Outward code: area letters + district digits + optional sub-district letter
OUTWARD_CODE_PATTERN: Final[re.Pattern] = re.compile(r"^([A-Z]{1,2})(\d{1,2})([A-Z]?)$")

_BOROUGH_DISTRICTS: Final[dict[str, tuple[str, ...]]] = {
    "Barking and Dagenham": ("IG11", "RM8", "RM9", "RM10"),
    "Barnet": ("N2", "N3", "N12", "N20", "NW4", "NW7", "NW9", "NW11", "EN4", "EN5", "HA8"),
    "Bexley": ("DA5", "DA6", "DA7", "DA8", "DA14", "DA15", "DA16", "DA17", "DA18"),
    "Brent": ("NW2", "NW10", "HA0", "HA9"),
    "Bromley": ("BR1", "BR2", "BR3", "BR4", "BR5", "BR6", "BR7", "SE20"),
    "Camden": ("NW1", "NW3", "NW5", "NW6", "WC1"),
    "City of London": ("EC2", "EC3", "EC4"),
    "Croydon": ("CR0", "CR2", "CR7", "SE19", "SE25"),
    "Ealing": ("W3", "W5", "W7", "W13", "UB1", "UB2", "UB5", "UB6"),
    "Enfield": ("N9", "N11", "N13", "N14", "N18", "N21", "EN1", "EN2", "EN3"),
    "Greenwich": ("SE2", "SE3", "SE7", "SE9", "SE10", "SE18", "SE28"),
    "Hackney": ("E5", "E8", "E9", "N16"),
    "Hammersmith and Fulham": ("SW6", "W6", "W12", "W14"),
    "Haringey": ("N4", "N6", "N8", "N10", "N15", "N17", "N22"),
    "Harrow": ("HA1", "HA2", "HA3", "HA5", "HA7"),
    "Havering": ("RM1", "RM2", "RM3", "RM4", "RM5", "RM6", "RM7", "RM11", "RM12", "RM13", "RM14"),
    "Hillingdon": ("UB3", "UB4", "UB7", "UB8", "UB9", "UB10", "UB11", "HA4", "HA6"),
    "Hounslow": ("W4", "TW3", "TW4", "TW5", "TW7", "TW8", "TW13", "TW14"),
    "Islington": ("N1", "N5", "N7", "N19", "EC1"),
    "Kensington and Chelsea": ("SW3", "SW5", "SW7", "SW10", "W8", "W10", "W11"),
    "Kingston upon Thames": ("KT1", "KT2", "KT3", "KT5", "KT6", "KT9"),
    "Lambeth": ("SE11", "SE24", "SE27", "SW2", "SW4", "SW8", "SW9", "SW16"),
    "Lewisham": ("SE4", "SE6", "SE8", "SE12", "SE13", "SE14", "SE23", "SE26"),
    "Merton": ("SW19", "SW20", "SM4", "CR4"),
    "Newham": ("E6", "E7", "E12", "E13", "E15", "E16", "E20"),
    "Redbridge": ("E18", "IG1", "IG2", "IG3", "IG4", "IG5", "IG6", "IG8"),
    "Richmond upon Thames": ("SW13", "SW14", "TW1", "TW2", "TW9", "TW10", "TW11", "TW12"),
    "Southwark": ("SE1", "SE5", "SE15", "SE16", "SE17", "SE21", "SE22"),
    "Sutton": ("SM1", "SM2", "SM3", "SM5", "SM6"),
    "Tower Hamlets": ("E1", "E2", "E3", "E14"),
    "Waltham Forest": ("E4", "E10", "E11", "E17"),
    "Wandsworth": ("SW11", "SW12", "SW15", "SW17", "SW18"),
    "Westminster": ("SW1", "W1", "W2", "W9", "NW8", "WC2"),
}

LONDON_DISTRICT_BOROUGHS: Final[dict[str, str]] = {
    district: borough
    for borough, districts in _BOROUGH_DISTRICTS.items()
    for district in districts
}


def outward_code(postcode: Optional[str]) -> Optional[str]:
    """
    Extract the outward code from a UK postcode.

    Accepts "SW1A 1AA", "sw1a1aa" and bare outward codes like "SE15".
    """
    if not postcode:
        return None

    cleaned = postcode.strip().upper()
    if not cleaned:
        return None

    if " " in cleaned:
        candidate = cleaned.split()[0]
    elif len(cleaned) > 4:
        # Full postcode without a space: inward code is always 3 characters
        candidate = cleaned[:-3]
    else:
        candidate = cleaned

    if not OUTWARD_CODE_PATTERN.match(candidate):
        return None
    return candidate


def infer_london_borough(postcode: Optional[str]) -> Optional[str]:
    """
    Infer the London borough for a postcode.

    Sub-district letters are dropped before lookup (SW1A -> SW1, E1W -> E1).

    Returns:
        Borough name, or None for non-London or unparseable postcodes.
    """
    code = outward_code(postcode)
    if code is None:
        return None

    borough = LONDON_DISTRICT_BOROUGHS.get(code)
    if borough is not None:
        return borough

    match = OUTWARD_CODE_PATTERN.match(code)
    if match and match.group(3):
        return LONDON_DISTRICT_BOROUGHS.get(match.group(1) + match.group(2))

    return None
