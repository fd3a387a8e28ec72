"""
Data store interface.

The matcher reads and writes plain row dicts shaped like the hosted
Postgres tables (investor_preferences, properties). Implementations must
provide upsert-on-conflict by investor_id so that an investor never has
more than one preference row.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional


Record = dict[str, Any]


class DataStore(ABC):
    """Abstract base class for preference and property storage."""

    @abstractmethod
    def get_preference(self, investor_id: str) -> Optional[Record]:
        """
        Fetch the preference row for an investor.

        Returns:
            The row, or None if the investor has never saved preferences.
        """

    @abstractmethod
    def upsert_preference(self, record: Record) -> Record:
        """
        Insert or replace the preference row keyed on investor_id.

        Returns:
            The stored row as it now exists.
        """

    @abstractmethod
    def list_active_preferences(self) -> list[Record]:
        """All preference rows with is_active = true."""

    @abstractmethod
    def get_property(self, property_id: str) -> Optional[Record]:
        """Fetch a single property row by id, any status."""

    @abstractmethod
    def list_properties(
        self,
        status: str = "active",
        created_since: Optional[datetime] = None,
    ) -> list[Record]:
        """
        List properties with the given status, newest first.

        Args:
            status: Listing status to filter on
            created_since: Only rows created at or after this time
        """
