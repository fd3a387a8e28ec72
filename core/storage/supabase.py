"""
Supabase Data Store

DataStore backed by the hosted Postgres tables through the PostgREST API.
Uses the service-role key, so it must only run server-side.

Tables:
- investor_preferences (unique investor_id)
- properties
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Final, Optional

import requests

from core.errors import UpstreamFailure
from core.storage.base import DataStore, Record


logger = logging.getLogger(__name__)

PREFERENCES_TABLE: Final[str] = "investor_preferences"
PROPERTIES_TABLE: Final[str] = "properties"
REQUEST_TIMEOUT_SECONDS: Final[int] = 30


class SupabaseDataStore(DataStore):
    """PostgREST client for the preference and property tables."""

    def __init__(
        self,
        url: str,
        service_role_key: str,
        timeout: int = REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        if not url or not service_role_key:
            raise UpstreamFailure(
                "Supabase URL and service role key are required",
                service="supabase",
                unavailable=True,
            )
        self._rest_url = f"{url.rstrip('/')}/rest/v1"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Content-Type": "application/json",
        })

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict[str, str]] = None,
        json_body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> list[Record]:
        url = f"{self._rest_url}/{table}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Supabase %s %s failed: %s", method, table, e)
            raise UpstreamFailure(f"Data store request failed: {e}", service="supabase")

        if response.status_code >= 400:
            logger.error(
                "Supabase %s %s returned %d: %s",
                method,
                table,
                response.status_code,
                response.text[:500],
            )
            raise UpstreamFailure(
                f"Data store returned HTTP {response.status_code}",
                service="supabase",
            )

        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    # =========================================================================
    # Preferences
    # =========================================================================

    def get_preference(self, investor_id: str) -> Optional[Record]:
        rows = self._request(
            "GET",
            PREFERENCES_TABLE,
            params={"select": "*", "investor_id": f"eq.{investor_id}", "limit": "1"},
        )
        return rows[0] if rows else None

    def upsert_preference(self, record: Record) -> Record:
        body = {k: v for k, v in record.items() if v is not None or k == "operator_type_other"}
        rows = self._request(
            "POST",
            PREFERENCES_TABLE,
            params={"on_conflict": "investor_id"},
            json_body=body,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        if not rows:
            raise UpstreamFailure("Upsert returned no row", service="supabase")
        return rows[0]

    def list_active_preferences(self) -> list[Record]:
        return self._request(
            "GET",
            PREFERENCES_TABLE,
            params={"select": "*", "is_active": "eq.true"},
        )

    # =========================================================================
    # Properties
    # =========================================================================

    def get_property(self, property_id: str) -> Optional[Record]:
        rows = self._request(
            "GET",
            PROPERTIES_TABLE,
            params={"select": "*", "id": f"eq.{property_id}", "limit": "1"},
        )
        return rows[0] if rows else None

    def list_properties(
        self,
        status: str = "active",
        created_since: Optional[datetime] = None,
    ) -> list[Record]:
        params = {
            "select": "*",
            "status": f"eq.{status}",
            "order": "created_at.desc",
        }
        if created_since is not None:
            params["created_at"] = f"gte.{created_since.isoformat()}"
        return self._request("GET", PROPERTIES_TABLE, params=params)
