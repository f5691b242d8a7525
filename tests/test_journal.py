"""Tests for the journal read/write surface.

**Feature: compound-journal**
"""

import sqlite3
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

import pytest

from compound.db.store import EntryStore
from compound.journal import Journal
from compound.models import Entry, RemoteRow, Stats
from compound.remotes import FileRemote, RemoteError

TODAY = date(2024, 1, 3)
NOW = datetime(2024, 1, 3, 20, 0, tzinfo=timezone.utc)


class FlakyRemote(FileRemote):
    """File mirror that can be switched offline."""

    def __init__(self, path: Optional[Path], offline: bool = False):
        super().__init__(path)
        self.offline = offline

    def select_all(self) -> list[RemoteRow]:
        if self.offline:
            raise RemoteError("offline")
        return super().select_all()

    def upsert(self, rows: list[RemoteRow]) -> None:
        if self.offline:
            raise RemoteError("offline")
        super().upsert(rows)

    def update_analysis(self, entry_id: str, analysis: Optional[str]) -> None:
        if self.offline:
            raise RemoteError("offline")
        super().update_analysis(entry_id, analysis)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def open_journal(temp_dir: Path, remote=None) -> Journal:
    return Journal(
        EntryStore(temp_dir / "test.db"),
        remote,
        clock=lambda: NOW,
        today=lambda: TODAY,
    )


class TestLocalOnly:

    def test_save_stamps_and_persists(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            saved = journal.save(Entry(id="2024-01-03", text="Wrote tests"))

            assert saved.timestamp == NOW
            assert journal.read("2024-01-03") == saved
            assert journal.last_remote_write is None
            assert journal.cloud_enabled is False

    def test_save_replaces_same_day(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            journal.save(Entry(id="2024-01-03", text="first"))
            journal.save(Entry(id="2024-01-03", text="second"))

            assert [e.text for e in journal.list_entries()] == ["second"]

    def test_read_missing(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            assert journal.read("2024-01-03") is None

    def test_stats_recomputed_on_every_save(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            journal.save(Entry(id="2024-01-01"))
            assert journal.get_stats().total_deposits == 1

            journal.save(Entry(id="2024-01-02"))
            journal.save(Entry(id="2024-01-03"))

            assert journal.get_stats() == Stats(
                total_deposits=3,
                current_streak=3,
                longest_streak=3,
                start_date="2024-01-01",
            )

    def test_stats_without_cache_are_computed(self, temp_dir: Path):
        store = EntryStore(temp_dir / "test.db")
        store.save_entries([Entry(id="2024-01-02"), Entry(id="2024-01-03")])

        with open_journal(temp_dir) as journal:
            assert journal.get_stats().current_streak == 2

    def test_sorting_and_day_helpers(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            assert journal.is_first_visit() is True
            for entry_id in ("2024-01-02", "2024-01-03", "2024-01-01"):
                journal.save(Entry(id=entry_id))

            assert [e.id for e in journal.list_sorted()] == ["2024-01-03", "2024-01-02", "2024-01-01"]
            assert [e.id for e in journal.list_sorted(descending=False)] == [
                "2024-01-01", "2024-01-02", "2024-01-03",
            ]
            assert journal.today_entry().id == "2024-01-03"
            assert journal.yesterday_entry().id == "2024-01-02"
            assert journal.is_first_visit() is False

    def test_valuation_uses_current_day(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            for entry_id in ("2024-01-01", "2024-01-02", "2024-01-03"):
                journal.save(Entry(id=entry_id))

            valuation = journal.compute_valuation()

            assert valuation.compound_value == 3.0
            assert valuation.growth_curve[-1].date == TODAY
            assert len(valuation.projection) == 30

    def test_valuation_of_given_entries(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            journal.save(Entry(id="2024-01-01"))
            assert journal.compute_valuation([]).compound_value == 0

    def test_sync_without_remote(self, temp_dir: Path):
        with open_journal(temp_dir) as journal:
            journal.save(Entry(id="2024-01-03"))
            assert journal.sync() is False
            assert journal.last_sync() is None

    def test_local_failure_never_raises(self, temp_dir: Path, monkeypatch):
        with open_journal(temp_dir) as journal:
            def broken_connection():
                raise sqlite3.OperationalError("disk I/O error")

            monkeypatch.setattr(journal._store, "_get_connection", broken_connection)

            saved = journal.save(Entry(id="2024-01-03", text="kept in memory"))

            assert saved.text == "kept in memory"
            assert journal.read("2024-01-03") is None
            assert journal.list_entries() == []


class TestWithRemote:

    def test_save_writes_remote_in_background(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        with open_journal(temp_dir, remote) as journal:
            saved = journal.save(Entry(id="2024-01-03", text="Cloud"))

            assert journal.last_remote_write.result(timeout=10) is True
            rows = remote.select_all()
            assert rows[0].to_entry() == saved
            assert rows[0].device_id == journal.device_id
            assert journal.pending_ids() == []

    def test_failed_remote_write_is_queued(self, temp_dir: Path):
        remote = FlakyRemote(temp_dir / "mirror.json", offline=True)
        with open_journal(temp_dir, remote) as journal:
            journal.save(Entry(id="2024-01-03"))

            assert journal.last_remote_write.result(timeout=10) is False
            assert journal.pending_ids() == ["2024-01-03"]
            assert journal.read("2024-01-03") is not None

    def test_pending_is_flushed_once_back_online(self, temp_dir: Path):
        remote = FlakyRemote(temp_dir / "mirror.json", offline=True)
        with open_journal(temp_dir, remote) as journal:
            journal.save(Entry(id="2024-01-03", text="offline deposit"))
            journal.wait_for_remote(timeout=10)
            assert journal.sync() is False

            remote.offline = False
            assert journal.sync() is False

            assert journal.pending_ids() == []
            assert remote.select_all()[0].text == "offline deposit"
            assert journal.last_sync() == NOW

    def test_sync_pulls_and_recomputes_stats(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        remote.upsert([
            RemoteRow(id="2024-01-02", text="from phone", updated_at=NOW),
            RemoteRow(id="2024-01-03", text="from phone", updated_at=NOW),
        ])
        with open_journal(temp_dir, remote) as journal:
            assert journal.sync() is True
            assert journal.get_stats().current_streak == 2
            assert journal.sync() is False

    def test_save_analysis(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        with open_journal(temp_dir, remote) as journal:
            journal.save(Entry(id="2024-01-03", text="Deposit"))
            journal.wait_for_remote(timeout=10)

            assert journal.save_analysis("2024-01-03", "Strong day") is True

            assert journal.read("2024-01-03").analysis == "Strong day"
            assert journal.read("2024-01-03").text == "Deposit"
            assert remote.select_all()[0].analysis == "Strong day"

    def test_save_analysis_for_missing_entry(self, temp_dir: Path):
        with open_journal(temp_dir, FileRemote(temp_dir / "mirror.json")) as journal:
            assert journal.save_analysis("2024-01-03", "Nothing here") is False
            assert journal.read("2024-01-03") is None

    def test_save_analysis_offline_keeps_local(self, temp_dir: Path):
        remote = FlakyRemote(temp_dir / "mirror.json", offline=True)
        with open_journal(temp_dir, remote) as journal:
            journal.save(Entry(id="2024-01-03"))

            assert journal.save_analysis("2024-01-03", "Local only") is True
            assert journal.read("2024-01-03").analysis == "Local only"

    def test_last_save_wins_remotely(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        with open_journal(temp_dir, remote) as journal:
            for text in ("one", "two", "three"):
                journal.save(Entry(id="2024-01-03", text=text))

            assert journal.wait_for_remote(timeout=10) is True
            assert remote.select_all()[0].text == "three"

    def test_unreadable_mirror_queues_save(self, temp_dir: Path):
        mirror = temp_dir / "mirror.json"
        mirror.write_text("[]")
        with open_journal(temp_dir, FileRemote(mirror)) as journal:
            journal.save(Entry(id="2024-01-03"))

            assert journal.last_remote_write.result(timeout=10) is False
            assert journal.pending_ids() == ["2024-01-03"]
            assert journal.sync() is False
            assert journal.pending_ids() == ["2024-01-03"]


class TestCorruptLocalStore:

    @pytest.fixture
    def corrupt_db(self, temp_dir: Path):
        """Return a callable that overwrites the database with garbage."""
        def corrupt():
            (temp_dir / "test.db").write_bytes(b"not a database" * 512)
        return corrupt

    def test_reads_degrade_to_defaults(self, temp_dir: Path, corrupt_db):
        with open_journal(temp_dir) as journal:
            journal.save(Entry(id="2024-01-03", text="before"))
            corrupt_db()

            saved = journal.save(Entry(id="2024-01-03", text="after"))

            assert saved.text == "after"
            assert journal.read("2024-01-03") is None
            assert journal.list_entries() == []
            assert journal.get_stats() == Stats()
            assert journal.pending_ids() == []
            assert journal.last_sync() is None

    def test_sync_does_not_raise(self, temp_dir: Path, corrupt_db):
        remote = FileRemote(temp_dir / "mirror.json")
        remote.upsert([RemoteRow(id="2024-01-02", text="from phone", updated_at=NOW)])
        with open_journal(temp_dir, remote) as journal:
            corrupt_db()

            report = journal.sync_report()

            assert report.changed is False
            assert journal.sync() is False
