"""
Utility modules for the matching service.
"""

from .formatting import format_currency, format_property_title, bedroom_badge, pence_to_pounds
from .config import Config

__all__ = ["format_currency", "format_property_title", "bedroom_badge", "pence_to_pounds", "Config"]
