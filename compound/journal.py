"""The journal: read/write surface used by the CLI and other front ends.

Local writes are synchronous and always treated as successful. Remote
writes run in the background and fall back to the pending-sync queue.
"""

import logging
import sqlite3
from concurrent.futures import Future
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from compound.analytics import calculate_stats, compute_valuation
from compound.db.store import EntryStore
from compound.models import Entry, RemoteRow, Stats, Valuation
from compound.remotes.base import BaseRemote, RemoteError
from compound.sync import BackgroundWriter, SyncOrchestrator, SyncReport

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Journal:
    """Entry persistence, cloud sync, stats and valuation behind one object.

    Use as a context manager, or call ``close()``, to release the
    background writer.
    """

    def __init__(
        self,
        store: EntryStore,
        remote: Optional[BaseRemote] = None,
        clock: Callable[[], datetime] = _utc_now,
        today: Callable[[], date] = date.today,
    ):
        """Initialize the journal.

        Args:
            store: Local entry store.
            remote: Remote mirror, None for local-only mode.
            clock: Source of the current instant, used to stamp saves.
            today: Source of the current local date.
        """
        self._store = store
        self._remote = remote
        self._clock = clock
        self._today = today
        self._writer = BackgroundWriter()
        self._orchestrator = SyncOrchestrator(
            store,
            remote,
            on_change=self._recalculate_stats,
            clock=clock,
        )
        self.last_remote_write: Optional[Future] = None

    def __enter__(self) -> "Journal":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Finish queued remote writes and release the background worker."""
        self._writer.close()

    @property
    def cloud_enabled(self) -> bool:
        """Whether a remote mirror is configured."""
        return self._orchestrator.enabled

    @property
    def device_id(self) -> str:
        return self._store.get_device_id()

    # ==================== Entries ====================

    def save(self, entry: Entry) -> Entry:
        """Insert or replace the entry for its date.

        The entry is stamped with the current instant and written locally
        before returning. The remote write continues in the background;
        ``last_remote_write`` resolves to True once it is confirmed.

        Args:
            entry: Entry to save.

        Returns:
            The entry as stored.
        """
        stamped = entry.model_copy(update={"timestamp": self._clock()})
        self._store.save_entry(stamped)
        self._recalculate_stats()

        if self._remote is not None and self.cloud_enabled:
            self.last_remote_write = self._writer.submit(self._push_entry, self._remote, stamped)
        return stamped

    def _push_entry(self, remote: BaseRemote, entry: Entry) -> bool:
        try:
            remote.upsert([RemoteRow.from_entry(entry, self._store.get_device_id())])
        except RemoteError as e:
            logger.warning(f"Cloud save failed, data is safe locally: {e}")
            self._store.add_pending(entry.id)
            return False
        logger.info(f"Saved {entry.id} to cloud")
        return True

    def save_analysis(self, entry_id: str, analysis: str) -> bool:
        """Attach analysis text to an existing entry.

        The remote row is updated as well; a failed remote update is
        logged and not retried.

        Args:
            entry_id: Entry date id.
            analysis: Analysis text.

        Returns:
            True if a local entry was updated.
        """
        entry = self.read(entry_id)
        updated = False
        if entry is not None:
            updated = self._store.save_entry(entry.model_copy(update={"analysis": analysis}))

        if self._remote is not None and self.cloud_enabled:
            try:
                self._remote.update_analysis(entry_id, analysis)
                logger.info(f"Analysis for {entry_id} saved to cloud")
            except RemoteError as e:
                logger.warning(f"Cloud analysis save failed: {e}")
        return updated

    def read(self, entry_id: str) -> Optional[Entry]:
        """Get the entry for a date id, or None."""
        try:
            return self._store.get_entry(entry_id)
        except sqlite3.Error as e:
            logger.error(f"Local read failed: {e}")
            return None

    def list_entries(self) -> list[Entry]:
        """Get all entries in no particular order."""
        try:
            return self._store.get_entries()
        except sqlite3.Error as e:
            logger.error(f"Local read failed: {e}")
            return []

    def list_sorted(self, descending: bool = True) -> list[Entry]:
        """Get all entries sorted by date, most recent first by default."""
        return sorted(self.list_entries(), key=lambda e: e.id, reverse=descending)

    def today_entry(self) -> Optional[Entry]:
        return self.read(self._today().isoformat())

    def yesterday_entry(self) -> Optional[Entry]:
        return self.read((self._today() - timedelta(days=1)).isoformat())

    def is_first_visit(self) -> bool:
        """Whether no entry has been saved yet."""
        return not self.list_entries()

    # ==================== Derived state ====================

    def _recalculate_stats(self) -> Stats:
        stats = calculate_stats(self.list_entries(), self._today())
        self._store.save_stats(stats)
        return stats

    def get_stats(self) -> Stats:
        """Get stats as of the last write, recalculating if none are cached."""
        try:
            cached = self._store.get_cached_stats()
            if cached is not None:
                return cached
            return self._recalculate_stats()
        except sqlite3.Error as e:
            logger.error(f"Local stats read failed: {e}")
            return Stats()

    def compute_valuation(self, entries: Optional[Iterable[Entry]] = None) -> Valuation:
        """Value the given entries, or all stored entries, as of today."""
        if entries is None:
            entries = self.list_entries()
        return compute_valuation(entries, self._today())

    # ==================== Sync ====================

    def sync(self) -> bool:
        """Synchronize with the remote mirror.

        Returns:
            True if remote data changed local entries.
        """
        return self.sync_report().changed

    def sync_report(self) -> SyncReport:
        """Synchronize with the remote mirror and report the details."""
        self._writer.drain()
        try:
            return self._orchestrator.run()
        except sqlite3.Error as e:
            logger.error(f"Sync aborted, local store unavailable: {e}")
            return SyncReport()

    def wait_for_remote(self, timeout: Optional[float] = None) -> bool:
        """Block until background remote writes settle.

        Returns:
            True if all writes settled within the timeout.
        """
        return self._writer.drain(timeout)

    def pending_ids(self) -> list[str]:
        """Get ids still waiting for a confirmed remote write."""
        return self._store.get_pending()

    def last_sync(self) -> Optional[datetime]:
        return self._store.get_last_sync()
