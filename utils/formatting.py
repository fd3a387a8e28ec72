"""
Formatting utilities.
"""

import re


def format_currency(amount: float, currency: str = "GBP") -> str:
    """
    Format an amount as currency.

    Args:
        amount: The amount in whole units (e.g., pounds, not pence).
        currency: Currency code (default GBP).

    Returns:
        Formatted currency string.
    """
    symbols = {
        "GBP": "£",
        "USD": "$",
        "EUR": "€",
    }
    symbol = symbols.get(currency, currency + " ")
    if float(amount).is_integer():
        return f"{symbol}{int(amount):,}"
    return f"{symbol}{amount:,.2f}"


def pence_to_pounds(pence: int) -> float:
    """Convert an amount stored in pence to pounds."""
    return (pence or 0) / 100


def format_property_title(address: str, city: str, postcode: str) -> str:
    """
    Build a listing title: "Road Name, City, OUTWARD".

    The door number is dropped from the address and only the outward half
    of the postcode is shown.
    """
    road = (address or "").split(",")[0].strip()
    road = re.sub(r"^\d+\s*", "", road).strip()
    outward = (postcode or "").split(" ")[0].upper() if postcode else ""

    words = []
    for part in (road, (city or "").strip()):
        if part:
            words.append(" ".join(w[:1].upper() + w[1:].lower() for w in part.split()))
    if outward:
        words.append(outward)
    return ", ".join(words)


def bedroom_badge(bedrooms: int) -> str:
    """Short bedroom label used on property cards."""
    if bedrooms == 0:
        return "Studio"
    if bedrooms == 1:
        return "1BR"
    if bedrooms == 2:
        return "2BR"
    return "3BR+"
