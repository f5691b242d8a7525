"""Supabase remote mirror implementation."""

import logging
from typing import Any, Optional

from pydantic import ValidationError
from supabase import Client, create_client

from compound.models import RemoteRow
from compound.remotes.base import BaseRemote, RemoteError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "entries"


class SupabaseRemote(BaseRemote):
    """Remote mirror backed by a Supabase (PostgREST) table.

    The table has one row per entry with ``id`` as primary key, plus
    ``device_id`` and ``updated_at`` columns.
    """

    def __init__(self, url: str, anon_key: str, table: str = DEFAULT_TABLE):
        """Initialize the Supabase mirror.

        Args:
            url: Supabase project URL.
            anon_key: Supabase anonymous API key.
            table: Name of the entries table.
        """
        self.url = url
        self.anon_key = anon_key
        self.table = table
        self._client: Optional[Client] = None

    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def _get_client(self) -> Client:
        """Create the Supabase client on first use."""
        if not self.is_configured():
            raise RemoteError("Supabase is not configured")
        if self._client is None:
            try:
                self._client = create_client(self.url, self.anon_key)
            except Exception as e:
                raise RemoteError(f"Could not create Supabase client: {e}") from e
        return self._client

    def upsert(self, rows: list[RemoteRow]) -> None:
        if not rows:
            return
        client = self._get_client()
        records = [row.to_record() for row in rows]
        try:
            client.table(self.table).upsert(records, on_conflict="id").execute()
        except Exception as e:
            raise RemoteError(f"Upsert failed: {e}") from e
        logger.debug(f"Upserted {len(records)} rows to '{self.table}'")

    def select_all(self) -> list[RemoteRow]:
        client = self._get_client()
        try:
            response = (
                client.table(self.table)
                .select("*")
                .order("id", desc=True)
                .execute()
            )
        except Exception as e:
            raise RemoteError(f"Select failed: {e}") from e
        return self._parse_rows(response.data or [])

    def update_analysis(self, entry_id: str, analysis: Optional[str]) -> None:
        client = self._get_client()
        try:
            client.table(self.table).update({"analysis": analysis}).eq("id", entry_id).execute()
        except Exception as e:
            raise RemoteError(f"Analysis update failed: {e}") from e

    def _parse_rows(self, data: list[dict[str, Any]]) -> list[RemoteRow]:
        """Parse backend records, skipping rows that do not validate."""
        rows = []
        for record in data:
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed remote row {record!r}")
                continue
            try:
                rows.append(RemoteRow.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping malformed remote row {record.get('id')}: {e}")
        return rows
