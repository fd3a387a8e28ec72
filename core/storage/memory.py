"""
In-Memory Data Store

Development and test implementation of DataStore with optional JSON file
persistence. Production uses the Supabase store.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from uuid import uuid4

from core.models import EPOCH, parse_timestamp
from core.storage.base import DataStore, Record


logger = logging.getLogger(__name__)


class InMemoryDataStore(DataStore):
    """
    Dict-backed store for preference and property rows.

    Rows are copied on the way in and out so callers can never mutate
    stored state. A lock serialises writes because FastAPI runs sync
    endpoints on a threadpool.
    """

    def __init__(self, persist_path: Optional[str] = None):
        """
        Initialise store.

        Args:
            persist_path: Optional path to persist data to JSON file
        """
        self._preferences: dict[str, Record] = {}
        self._properties: dict[str, Record] = {}
        self._lock = threading.Lock()
        self._persist_path = Path(persist_path) if persist_path else None

        # Load existing data if persist path exists
        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _save_to_file(self) -> None:
        """Persist data to file."""
        if not self._persist_path:
            return

        data = {
            "investor_preferences": self._preferences,
            "properties": self._properties,
            "saved_at": datetime.now(timezone.utc).isoformat(),
        }

        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2, default=str))

    def _load_from_file(self) -> None:
        """Load data from file."""
        try:
            data = json.loads(self._persist_path.read_text())
            self._preferences = dict(data.get("investor_preferences", {}))
            self._properties = dict(data.get("properties", {}))
        except (json.JSONDecodeError, AttributeError, TypeError) as e:
            # Start fresh rather than refuse to boot
            logger.warning("Could not load data store from %s: %s", self._persist_path, e)

    # =========================================================================
    # Preferences
    # =========================================================================

    def get_preference(self, investor_id: str) -> Optional[Record]:
        row = self._preferences.get(investor_id)
        return copy.deepcopy(row) if row is not None else None

    def upsert_preference(self, record: Record) -> Record:
        investor_id = record.get("investor_id")
        if not investor_id:
            raise ValueError("investor_id is required for upsert")

        with self._lock:
            existing = self._preferences.get(investor_id)
            row = copy.deepcopy(record)
            if existing is not None:
                row["id"] = existing.get("id")
                row["created_at"] = existing.get("created_at")
            else:
                row["id"] = row.get("id") or uuid4().hex
                row["created_at"] = datetime.now(timezone.utc).isoformat()
            self._preferences[investor_id] = row
            self._save_to_file()
            return copy.deepcopy(row)

    def list_active_preferences(self) -> list[Record]:
        return [
            copy.deepcopy(row)
            for row in self._preferences.values()
            if row.get("is_active") is not False
        ]

    # =========================================================================
    # Properties
    # =========================================================================

    def add_property(self, record: Record) -> Record:
        """Store a property row (listing creation lives outside this service)."""
        row = copy.deepcopy(record)
        row["id"] = str(row.get("id") or uuid4().hex)
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        with self._lock:
            self._properties[row["id"]] = row
            self._save_to_file()
        return copy.deepcopy(row)

    def get_property(self, property_id: str) -> Optional[Record]:
        row = self._properties.get(property_id)
        return copy.deepcopy(row) if row is not None else None

    def list_properties(
        self,
        status: str = "active",
        created_since: Optional[datetime] = None,
    ) -> list[Record]:
        rows = [row for row in self._properties.values() if row.get("status") == status]

        if created_since is not None:
            if created_since.tzinfo is None:
                created_since = created_since.replace(tzinfo=timezone.utc)
            rows = [
                row for row in rows
                if (parse_timestamp(row.get("created_at")) or EPOCH) >= created_since
            ]

        def _created(row: Record) -> datetime:
            return parse_timestamp(row.get("created_at")) or EPOCH

        rows.sort(key=_created, reverse=True)
        return [copy.deepcopy(row) for row in rows]
