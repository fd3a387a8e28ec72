"""
UK Location Taxonomy

Hierarchical reference data: Main Region -> Sub-Region -> Local Authority.
Investors pick a sub-region ("city" in stored preferences) and optionally
narrow it to specific local authorities.

Pure data and pure lookups. Unknown names are answered with an empty list
or None, never an exception.
"""

from __future__ import annotations

from typing import Final, Optional


# =============================================================================
# Reference Data
# =============================================================================

UK_REGIONS: Final[dict[str, list[str]]] = {
    "London": [
        "Central London",
        "North London",
        "North West London",
        "East London",
        "South East London",
        "South West London",
        "West London",
    ],
    "North West": [
        "Greater Manchester",
        "Merseyside",
        "Cheshire",
        "Lancashire",
        "Cumbria",
    ],
    "North East & Yorkshire": [
        "Tyne & Wear",
        "County Durham & Tees Valley",
        "Northumberland",
        "West Yorkshire",
        "South Yorkshire",
        "North & East Yorkshire",
    ],
    "Midlands": [
        "West Midlands (Metropolitan)",
        "Staffordshire & Shropshire",
        "Warwickshire & Coventry",
        "East Midlands - Leicester, Nottingham & Derby Areas",
        "East Midlands - Lincolnshire & Northamptonshire",
    ],
    "South East": [
        "Berkshire & Thames Valley",
        "Kent & Medway",
        "Surrey",
        "Sussex (East & West)",
        "Hampshire & Isle of Wight",
        "Oxfordshire",
        "Buckinghamshire & Milton Keynes",
    ],
    "South West & East of England": [
        "Bristol & Somerset",
        "Devon & Cornwall",
        "Dorset & Wiltshire",
        "Gloucestershire",
        "Cambridgeshire & Peterborough",
        "Norfolk & Suffolk",
        "Essex & Hertfordshire",
        "Bedfordshire & Luton",
        "Isles of Scilly",
    ],
}

LOCAL_AUTHORITIES: Final[dict[str, list[str]]] = {
    # London
    "Central London": [
        "Camden",
        "City of London",
        "Islington",
        "Westminster",
    ],
    "North London": [
        "Barnet",
        "Enfield",
        "Haringey",
    ],
    "North West London": [
        "Brent",
        "Harrow",
    ],
    "East London": [
        "Barking and Dagenham",
        "Hackney",
        "Havering",
        "Newham",
        "Redbridge",
        "Tower Hamlets",
        "Waltham Forest",
    ],
    "South East London": [
        "Bexley",
        "Bromley",
        "Greenwich",
        "Lewisham",
    ],
    "South West London": [
        "Croydon",
        "Kingston upon Thames",
        "Lambeth",
        "Merton",
        "Richmond upon Thames",
        "Southwark",
        "Sutton",
        "Wandsworth",
    ],
    "West London": [
        "Ealing",
        "Hammersmith and Fulham",
        "Hillingdon",
        "Hounslow",
        "Kensington and Chelsea",
    ],

    # North West
    "Greater Manchester": [
        "Bolton",
        "Bury",
        "Manchester",
        "Oldham",
        "Rochdale",
        "Salford",
        "Stockport",
        "Tameside",
        "Trafford",
        "Wigan",
    ],
    "Merseyside": [
        "Knowsley",
        "Liverpool",
        "Sefton",
        "St Helens",
        "Wirral",
    ],
    "Cheshire": [
        "Cheshire East",
        "Cheshire West and Chester",
        "Halton",
        "Warrington",
    ],
    "Lancashire": [
        "Blackburn with Darwen",
        "Blackpool",
        "Burnley",
        "Chorley",
        "Fylde",
        "Hyndburn",
        "Lancaster",
        "Lancashire County Council",
        "Pendle",
        "Preston",
        "Ribble Valley",
        "Rossendale",
        "South Ribble",
        "West Lancashire",
        "Wyre",
    ],
    "Cumbria": [
        "Cumberland",
        "Westmorland and Furness",
    ],

    # North East & Yorkshire
    "Tyne & Wear": [
        "Gateshead",
        "Newcastle upon Tyne",
        "North Tyneside",
        "South Tyneside",
        "Sunderland",
    ],
    "County Durham & Tees Valley": [
        "Darlington",
        "Durham",
        "Hartlepool",
        "Middlesbrough",
        "Redcar and Cleveland",
        "Stockton-on-Tees",
    ],
    "Northumberland": [
        "Northumberland",
    ],
    "West Yorkshire": [
        "Bradford",
        "Calderdale",
        "Kirklees",
        "Leeds",
        "Wakefield",
    ],
    "South Yorkshire": [
        "Barnsley",
        "Doncaster",
        "Rotherham",
        "Sheffield",
    ],
    "North & East Yorkshire": [
        "East Riding of Yorkshire",
        "Hull (Kingston upon Hull)",
        "North Yorkshire",
        "York",
    ],

    # Midlands
    "West Midlands (Metropolitan)": [
        "Birmingham",
        "Coventry",
        "Dudley",
        "Sandwell",
        "Solihull",
        "Walsall",
        "Wolverhampton",
    ],
    "Staffordshire & Shropshire": [
        "Bromsgrove",
        "Cannock Chase",
        "East Staffordshire",
        "Herefordshire",
        "Lichfield",
        "Malvern Hills",
        "Newcastle-under-Lyme",
        "Redditch",
        "Shropshire",
        "South Staffordshire",
        "Stafford",
        "Staffordshire County Council",
        "Staffordshire Moorlands",
        "Stoke-on-Trent",
        "Tamworth",
        "Telford and Wrekin",
        "Worcester",
        "Worcestershire County Council",
        "Wychavon",
        "Wyre Forest",
    ],
    "Warwickshire & Coventry": [
        "North Warwickshire",
        "Nuneaton and Bedworth",
        "Rugby",
        "Stratford-on-Avon",
        "Warwick",
        "Warwickshire County Council",
    ],
    "East Midlands - Leicester, Nottingham & Derby Areas": [
        "Amber Valley",
        "Ashfield",
        "Bassetlaw",
        "Blaby",
        "Bolsover",
        "Broxtowe",
        "Charnwood",
        "Chesterfield",
        "Derby",
        "Derbyshire County Council",
        "Derbyshire Dales",
        "Erewash",
        "Gedling",
        "Harborough",
        "High Peak",
        "Hinckley and Bosworth",
        "Leicester",
        "Leicestershire County Council",
        "Mansfield",
        "Melton",
        "Newark and Sherwood",
        "North East Derbyshire",
        "North West Leicestershire",
        "Nottingham",
        "Nottinghamshire County Council",
        "Oadby and Wigston",
        "Rushcliffe",
        "South Derbyshire",
    ],
    "East Midlands - Lincolnshire & Northamptonshire": [
        "Boston",
        "East Lindsey",
        "Lincoln",
        "Lincolnshire County Council",
        "North East Lincolnshire",
        "North Kesteven",
        "North Lincolnshire",
        "North Northamptonshire",
        "Rutland",
        "South Holland",
        "South Kesteven",
        "West Lindsey",
        "West Northamptonshire",
    ],

    # South East
    "Berkshire & Thames Valley": [
        "Bracknell Forest",
        "Reading",
        "Slough",
        "West Berkshire",
        "Windsor and Maidenhead",
        "Wokingham",
    ],
    "Kent & Medway": [
        "Ashford",
        "Canterbury",
        "Dartford",
        "Dover",
        "Folkestone and Hythe",
        "Gravesham",
        "Kent County Council",
        "Maidstone",
        "Medway",
        "Sevenoaks",
        "Swale",
        "Thanet",
        "Tonbridge and Malling",
        "Tunbridge Wells",
    ],
    "Surrey": [
        "Elmbridge",
        "Epsom and Ewell",
        "Guildford",
        "Mole Valley",
        "Reigate and Banstead",
        "Runnymede",
        "Spelthorne",
        "Surrey County Council",
        "Surrey Heath",
        "Tandridge",
        "Waverley",
        "Woking",
    ],
    "Sussex (East & West)": [
        "Adur",
        "Arun",
        "Brighton and Hove",
        "Chichester",
        "Crawley",
        "East Sussex County Council",
        "Eastbourne",
        "Hastings",
        "Horsham",
        "Lewes",
        "Mid Sussex",
        "Rother",
        "Wealden",
        "West Sussex County Council",
        "Worthing",
    ],
    "Hampshire & Isle of Wight": [
        "Basingstoke and Deane",
        "East Hampshire",
        "Eastleigh",
        "Fareham",
        "Gosport",
        "Hampshire County Council",
        "Hart",
        "Havant",
        "Isle of Wight",
        "New Forest",
        "Portsmouth",
        "Rushmoor",
        "Southampton",
        "Test Valley",
        "Winchester",
    ],
    "Oxfordshire": [
        "Cherwell",
        "Oxford",
        "Oxfordshire County Council",
        "South Oxfordshire",
        "Vale of White Horse",
        "West Oxfordshire",
    ],
    "Buckinghamshire & Milton Keynes": [
        "Buckinghamshire",
        "Milton Keynes",
    ],

    # South West & East of England
    "Bristol & Somerset": [
        "Bath and North East Somerset",
        "Bristol",
        "North Somerset",
        "Somerset",
        "South Gloucestershire",
    ],
    "Devon & Cornwall": [
        "Cornwall",
        "Devon County Council",
        "East Devon",
        "Exeter",
        "Mid Devon",
        "North Devon",
        "Plymouth",
        "South Hams",
        "Teignbridge",
        "Torbay",
        "Torridge",
        "West Devon",
    ],
    "Dorset & Wiltshire": [
        "Bournemouth, Christchurch and Poole",
        "Dorset",
        "Swindon",
        "Wiltshire",
    ],
    "Gloucestershire": [
        "Cheltenham",
        "Cotswold",
        "Forest of Dean",
        "Gloucester",
        "Gloucestershire County Council",
        "Stroud",
        "Tewkesbury",
    ],
    "Cambridgeshire & Peterborough": [
        "Cambridge",
        "Cambridgeshire County Council",
        "East Cambridgeshire",
        "Fenland",
        "Huntingdonshire",
        "Peterborough",
        "South Cambridgeshire",
    ],
    "Norfolk & Suffolk": [
        "Babergh",
        "Breckland",
        "Broadland",
        "East Suffolk",
        "Great Yarmouth",
        "Ipswich",
        "King's Lynn and West Norfolk",
        "Mid Suffolk",
        "Norfolk County Council",
        "North Norfolk",
        "Norwich",
        "South Norfolk",
        "Suffolk County Council",
        "West Suffolk",
    ],
    "Essex & Hertfordshire": [
        "Basildon",
        "Braintree",
        "Brentwood",
        "Broxbourne",
        "Castle Point",
        "Chelmsford",
        "Colchester",
        "Dacorum",
        "East Hertfordshire",
        "Epping Forest",
        "Essex County Council",
        "Harlow",
        "Hertfordshire County Council",
        "Hertsmere",
        "Maldon",
        "North Hertfordshire",
        "Rochford",
        "Southend-on-Sea",
        "St Albans",
        "Stevenage",
        "Tendring",
        "Three Rivers",
        "Thurrock",
        "Uttlesford",
        "Watford",
        "Welwyn Hatfield",
    ],
    "Bedfordshire & Luton": [
        "Bedford",
        "Central Bedfordshire",
        "Luton",
    ],
    "Isles of Scilly": [
        "Isles of Scilly",
    ],
}

# London first (most searched), then north to south
REGION_DISPLAY_ORDER: Final[tuple[str, ...]] = (
    "London",
    "North East & Yorkshire",
    "North West",
    "Midlands",
    "South West & East of England",
    "South East",
)

# Names too broad to identify a single borough
GENERIC_LONDON_NAMES: Final[frozenset[str]] = frozenset({"london", "greater london"})


# =============================================================================
# Case-insensitive indexes
# =============================================================================

_REGION_BY_KEY: Final[dict[str, str]] = {r.lower(): r for r in UK_REGIONS}

_SUB_REGION_BY_KEY: Final[dict[str, str]] = {s.lower(): s for s in LOCAL_AUTHORITIES}

_REGION_FOR_SUB_REGION: Final[dict[str, str]] = {
    sub_region.lower(): region
    for region, sub_regions in UK_REGIONS.items()
    for sub_region in sub_regions
}

_SUB_REGION_FOR_AUTHORITY: Final[dict[str, str]] = {
    authority.lower(): sub_region
    for sub_region, authorities in LOCAL_AUTHORITIES.items()
    for authority in authorities
}


def _key(name: Optional[str]) -> str:
    return (name or "").strip().lower()


# =============================================================================
# Lookups
# =============================================================================


def cities_for_region(region: str) -> list[str]:
    """Sub-regions for a main region, or an empty list if unknown."""
    canonical = _REGION_BY_KEY.get(_key(region))
    if canonical is None:
        return []
    return list(UK_REGIONS[canonical])


def local_authorities_for_city(city: str) -> list[str]:
    """
    Local authorities for a sub-region.

    An empty list is a valid answer meaning no finer granularity is known.
    """
    canonical = _SUB_REGION_BY_KEY.get(_key(city))
    if canonical is None:
        return []
    return list(LOCAL_AUTHORITIES[canonical])


def region_for_city(city: str) -> Optional[str]:
    """
    Reverse lookup of the main region for a sub-region.

    Falls back to the local authority index so a borough or district name
    ("Canterbury", "Salford") resolves to the region of its sub-region.

    Returns:
        Region name, or None if the name is not in the taxonomy.
    """
    key = _key(city)
    if not key:
        return None

    region = _REGION_FOR_SUB_REGION.get(key)
    if region is not None:
        return region

    sub_region = _SUB_REGION_FOR_AUTHORITY.get(key)
    if sub_region is not None:
        return _REGION_FOR_SUB_REGION.get(sub_region.lower())

    return None


def all_regions() -> list[str]:
    """All main regions in display order."""
    return list(REGION_DISPLAY_ORDER)


def is_local_authority(name: str) -> bool:
    """True when the name is a known local authority."""
    return _key(name) in _SUB_REGION_FOR_AUTHORITY


def canonical_local_authority(name: str) -> Optional[str]:
    """Correctly-cased authority name for a case-insensitive match."""
    key = _key(name)
    sub_region = _SUB_REGION_FOR_AUTHORITY.get(key)
    if sub_region is None:
        return None
    for authority in LOCAL_AUTHORITIES[sub_region]:
        if authority.lower() == key:
            return authority
    return None


def expand_area_to_authorities(area: str) -> list[str]:
    """
    Expand an area name to the local authorities it covers (lower-cased).

    - Region ("North West")          -> every authority under every sub-region
    - Sub-region ("East London")     -> its authorities
    - Anything else                  -> [area] (already an authority, or unknown)
    """
    key = _key(area)
    if not key:
        return []

    region = _REGION_BY_KEY.get(key)
    if region is not None:
        result: list[str] = []
        for sub_region in UK_REGIONS[region]:
            result.extend(a.lower() for a in LOCAL_AUTHORITIES.get(sub_region, []))
        return result

    sub_region = _SUB_REGION_BY_KEY.get(key)
    if sub_region is not None:
        return [a.lower() for a in LOCAL_AUTHORITIES[sub_region]]

    return [key]
