"""Pull-merge-push synchronization between the local store and a remote mirror."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from compound.db.store import EntryStore
from compound.models import EPOCH, Entry, RemoteRow
from compound.remotes.base import BaseRemote, RemoteError

logger = logging.getLogger(__name__)


class SyncReport(BaseModel):
    """Outcome of one synchronization run."""

    attempted: bool = Field(default=False, description="A remote was configured and reachable")
    pulled: int = Field(default=0, ge=0, description="Rows read from the remote")
    merged: int = Field(default=0, ge=0, description="Local entries overwritten by remote rows")
    pushed: int = Field(default=0, ge=0, description="Local-only entries written to the remote")
    flushed: int = Field(default=0, ge=0, description="Pending entries written to the remote")
    failed_ids: list[str] = Field(default_factory=list, description="Ids left pending")

    @property
    def changed(self) -> bool:
        """Whether the local entry set changed."""
        return self.merged > 0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyncOrchestrator:
    """Coordinates pull, merge, push and pending flush.

    Safe to run any number of times: a run with no new writes on either
    side changes nothing. Remote failures never escape; the worst outcome
    is that entries stay local until the next run.
    """

    def __init__(
        self,
        store: EntryStore,
        remote: Optional[BaseRemote],
        on_change: Optional[Callable[[], None]] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the orchestrator.

        Args:
            store: Local entry store.
            remote: Remote mirror, None when cloud sync is disabled.
            on_change: Called once after a merge changed local entries.
            clock: Source of the current instant.
        """
        self._store = store
        self._remote = remote
        self._on_change = on_change
        self._clock = clock

    @property
    def enabled(self) -> bool:
        """Whether a remote mirror is configured."""
        return self._remote is not None and self._remote.is_configured()

    def sync(self) -> bool:
        """Run one synchronization.

        Returns:
            True if remote data changed the local entry set.
        """
        return self.run().changed

    def run(self) -> SyncReport:
        """Run one synchronization and report what happened."""
        report = SyncReport()
        remote = self._remote
        if remote is None or not remote.is_configured():
            return report

        try:
            rows = remote.select_all()
        except RemoteError as e:
            logger.warning(f"Cloud sync failed: {e}")
            return report

        report.attempted = True
        report.pulled = len(rows)

        local = {entry.id: entry for entry in self._store.get_entries()}
        if rows:
            merged = self._merge(rows, local)
            if merged:
                self._store.save_entries(merged)
                if self._on_change is not None:
                    self._on_change()
                report.merged = len(merged)
                logger.info(f"Synced {len(merged)} entries from cloud")

        remote_ids = {row.id for row in rows}
        self._push_missing(remote, local, remote_ids, report)
        self._flush_pending(remote, local, report)

        self._store.set_last_sync(self._clock())
        return report

    def _merge(self, rows: list[RemoteRow], local: dict[str, Entry]) -> list[Entry]:
        """Apply remote rows that win over local entries.

        A row wins when the local entry is absent or the row's
        ``updated_at`` is strictly newer. ``local`` is updated in place.
        """
        merged = []
        for row in rows:
            try:
                incoming = row.to_entry()
            except ValidationError as e:
                logger.warning(f"Ignoring invalid remote row {row.id}: {e}")
                continue

            existing = local.get(row.id)
            if existing is None or (row.updated_at or EPOCH) > existing.effective_timestamp:
                local[row.id] = incoming
                merged.append(incoming)
        return merged

    def _push_missing(
        self,
        remote: BaseRemote,
        local: dict[str, Entry],
        remote_ids: set[str],
        report: SyncReport,
    ) -> None:
        """Upsert entries the remote does not have yet."""
        missing = sorted(set(local) - remote_ids)
        if not missing:
            return

        device_id = self._store.get_device_id()
        rows = [RemoteRow.from_entry(local[entry_id], device_id) for entry_id in missing]
        try:
            remote.upsert(rows)
        except RemoteError as e:
            logger.warning(f"Push to cloud failed, data is safe locally: {e}")
            for entry_id in missing:
                self._store.add_pending(entry_id)
            return

        report.pushed = len(rows)
        logger.info(f"Pushed {len(rows)} local entries to cloud")

    def _flush_pending(
        self,
        remote: BaseRemote,
        local: dict[str, Entry],
        report: SyncReport,
    ) -> None:
        """Retry queued writes; the queue clears only if the batch succeeds."""
        pending = self._store.get_pending()
        if not pending:
            return

        device_id = self._store.get_device_id()
        rows = [
            RemoteRow.from_entry(local[entry_id], device_id)
            for entry_id in pending
            if entry_id in local
        ]
        if not rows:
            self._store.clear_pending()
            return

        try:
            remote.upsert(rows)
        except RemoteError as e:
            logger.warning(f"Pending sync failed: {e}")
            report.failed_ids = [row.id for row in rows]
            return

        self._store.clear_pending()
        report.flushed = len(rows)
        logger.info(f"Synced {len(rows)} pending entries")
