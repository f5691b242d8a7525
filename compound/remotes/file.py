"""File-backed remote mirror implementation."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from compound.models import RemoteRow
from compound.remotes.base import BaseRemote, RemoteError

logger = logging.getLogger(__name__)


class FileRemote(BaseRemote):
    """Remote mirror kept in a single JSON file.

    Useful for mirroring into a folder that another tool synchronises
    between machines. Rows are stored under a top-level ``rows`` list and
    the file is replaced atomically on every write.
    """

    def __init__(self, path: Optional[Path]):
        """Initialize the file mirror.

        Args:
            path: Location of the mirror file. None leaves it unconfigured.
        """
        self.path = path

    def is_configured(self) -> bool:
        return self.path is not None

    def _require_path(self) -> Path:
        if self.path is None:
            raise RemoteError("File mirror path is not configured")
        return self.path

    def _load(self) -> dict[str, RemoteRow]:
        path = self._require_path()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise RemoteError(f"Could not read mirror file {path}: {e}") from e

        records = data.get("rows", []) if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise RemoteError(f"Mirror file {path} has no 'rows' list")

        rows = {}
        for record in records:
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed mirror row {record!r}")
                continue
            try:
                row = RemoteRow.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping malformed mirror row {record.get('id')}: {e}")
                continue
            rows[row.id] = row
        return rows

    def _dump(self, rows: dict[str, RemoteRow]) -> None:
        path = self._require_path()
        ordered = sorted(rows.values(), key=lambda r: r.id, reverse=True)
        payload = {"rows": [row.to_record() for row in ordered]}
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False))
            tmp_path.replace(path)
        except OSError as e:
            raise RemoteError(f"Could not write mirror file {path}: {e}") from e

    def upsert(self, rows: list[RemoteRow]) -> None:
        if not rows:
            return
        existing = self._load()
        for row in rows:
            existing[row.id] = row
        self._dump(existing)

    def select_all(self) -> list[RemoteRow]:
        rows = self._load()
        return sorted(rows.values(), key=lambda r: r.id, reverse=True)

    def update_analysis(self, entry_id: str, analysis: Optional[str]) -> None:
        rows = self._load()
        row = rows.get(entry_id)
        if row is None:
            return
        rows[entry_id] = row.model_copy(update={"analysis": analysis})
        self._dump(rows)
