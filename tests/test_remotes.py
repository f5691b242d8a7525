"""Tests for remote mirror implementations.

**Feature: compound-journal**
"""

import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from compound.models import Entry, RemoteRow
from compound.remotes import BaseRemote, FileRemote, RemoteError, SupabaseRemote


def make_row(entry_id: str, text: str = "", hour: int = 12) -> RemoteRow:
    return RemoteRow(
        id=entry_id,
        text=text,
        device_id="device-1",
        updated_at=datetime(2024, 1, 1, hour, tzinfo=timezone.utc),
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_client():
    """Create a mock Supabase client."""
    with patch("compound.remotes.supabase.create_client") as mock:
        instance = MagicMock()
        mock.return_value = instance
        yield instance


class TestInterface:

    def test_implementations_are_remotes(self, temp_dir: Path):
        assert isinstance(FileRemote(temp_dir / "mirror.json"), BaseRemote)
        assert isinstance(SupabaseRemote("https://x.supabase.co", "key"), BaseRemote)

    def test_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            BaseRemote()


class TestFileRemote:

    def test_missing_file_is_empty(self, temp_dir: Path):
        assert FileRemote(temp_dir / "mirror.json").select_all() == []

    def test_select_all_is_id_descending(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        remote.upsert([make_row("2024-01-02"), make_row("2024-01-03"), make_row("2024-01-01")])

        assert [r.id for r in remote.select_all()] == ["2024-01-03", "2024-01-02", "2024-01-01"]

    def test_upsert_overwrites_on_id(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        remote.upsert([make_row("2024-01-01", "old")])
        remote.upsert([make_row("2024-01-01", "new", hour=8)])

        rows = remote.select_all()
        assert len(rows) == 1
        assert rows[0].text == "new"
        # Last upsert wins even with an older timestamp
        assert rows[0].updated_at.hour == 8

    def test_round_trips_entry_content(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        entry = Entry(
            id="2024-01-05",
            timestamp=datetime(2024, 1, 5, 21, 15, 30, 250000, tzinfo=timezone.utc),
            text="存入",
            health={"reading": True, "meditation": False},
            energy=3,
            tomorrow="Early night",
        )
        remote.upsert([RemoteRow.from_entry(entry, "device-1")])

        assert remote.select_all()[0].to_entry() == entry

    def test_update_analysis(self, temp_dir: Path):
        remote = FileRemote(temp_dir / "mirror.json")
        remote.upsert([make_row("2024-01-01", "text")])

        remote.update_analysis("2024-01-01", "Looks good")
        remote.update_analysis("2024-02-01", "No such row")

        rows = remote.select_all()
        assert len(rows) == 1
        assert rows[0].analysis == "Looks good"
        assert rows[0].text == "text"

    def test_unconfigured(self):
        remote = FileRemote(None)

        assert remote.is_configured() is False
        with pytest.raises(RemoteError):
            remote.select_all()
        with pytest.raises(RemoteError):
            remote.upsert([make_row("2024-01-01")])

    def test_corrupt_file_raises(self, temp_dir: Path):
        path = temp_dir / "mirror.json"
        path.write_text("{not json")

        with pytest.raises(RemoteError):
            FileRemote(path).select_all()

    def test_malformed_rows_are_skipped(self, temp_dir: Path):
        path = temp_dir / "mirror.json"
        path.write_text(json.dumps({"rows": [{"id": "2024-01-01"}, {"text": "no id"}]}))

        assert [r.id for r in FileRemote(path).select_all()] == ["2024-01-01"]

    @pytest.mark.parametrize("content", ["[]", "\"rows\"", json.dumps({"rows": {"id": "2024-01-01"}})])
    def test_file_without_rows_list_raises(self, temp_dir: Path, content: str):
        path = temp_dir / "mirror.json"
        path.write_text(content)
        remote = FileRemote(path)

        with pytest.raises(RemoteError):
            remote.select_all()
        with pytest.raises(RemoteError):
            remote.upsert([make_row("2024-01-01")])

    def test_non_object_rows_are_skipped(self, temp_dir: Path):
        path = temp_dir / "mirror.json"
        path.write_text(json.dumps({"rows": ["junk", 7, None, {"id": "2024-01-01"}]}))
        remote = FileRemote(path)

        assert [r.id for r in remote.select_all()] == ["2024-01-01"]
        remote.upsert([make_row("2024-01-02")])
        assert [r.id for r in remote.select_all()] == ["2024-01-02", "2024-01-01"]


class TestSupabaseRemote:

    def test_is_configured(self):
        assert SupabaseRemote("https://x.supabase.co", "key").is_configured() is True
        assert SupabaseRemote("", "key").is_configured() is False
        assert SupabaseRemote("https://x.supabase.co", "").is_configured() is False

    def test_unconfigured_raises_without_client(self):
        with patch("compound.remotes.supabase.create_client") as factory:
            with pytest.raises(RemoteError):
                SupabaseRemote("", "").select_all()
            factory.assert_not_called()

    def test_select_all(self, mock_client: MagicMock):
        query = mock_client.table.return_value.select.return_value.order.return_value
        query.execute.return_value = MagicMock(data=[
            {
                "id": "2024-01-02",
                "text": "two",
                "health": {"reading": True},
                "energy": 4,
                "tomorrow": "",
                "analysis": None,
                "device_id": "device-1",
                "updated_at": "2024-01-02T10:00:00+00:00",
            },
            {"id": "2024-01-01", "text": None, "health": None, "energy": None},
        ])

        rows = SupabaseRemote("https://x.supabase.co", "key").select_all()

        mock_client.table.assert_called_with("entries")
        mock_client.table.return_value.select.assert_called_with("*")
        mock_client.table.return_value.select.return_value.order.assert_called_with("id", desc=True)
        assert [r.id for r in rows] == ["2024-01-02", "2024-01-01"]
        assert rows[0].health == {"reading": True}
        assert rows[0].updated_at == datetime(2024, 1, 2, 10, tzinfo=timezone.utc)
        assert rows[1].text == ""

    def test_upsert_conflicts_on_id(self, mock_client: MagicMock):
        remote = SupabaseRemote("https://x.supabase.co", "key", table="deposits")

        remote.upsert([make_row("2024-01-01", "one"), make_row("2024-01-02", "two")])

        mock_client.table.assert_called_with("deposits")
        args, kwargs = mock_client.table.return_value.upsert.call_args
        assert [r["id"] for r in args[0]] == ["2024-01-01", "2024-01-02"]
        assert args[0][0]["device_id"] == "device-1"
        assert kwargs == {"on_conflict": "id"}
        mock_client.table.return_value.upsert.return_value.execute.assert_called_once()

    def test_empty_upsert_is_noop(self, mock_client: MagicMock):
        SupabaseRemote("https://x.supabase.co", "key").upsert([])
        mock_client.table.assert_not_called()

    def test_backend_errors_become_remote_errors(self, mock_client: MagicMock):
        mock_client.table.return_value.upsert.return_value.execute.side_effect = Exception("boom")
        remote = SupabaseRemote("https://x.supabase.co", "key")

        with pytest.raises(RemoteError):
            remote.upsert([make_row("2024-01-01")])

    def test_client_creation_failure(self):
        with patch("compound.remotes.supabase.create_client", side_effect=Exception("bad url")):
            with pytest.raises(RemoteError):
                SupabaseRemote("nonsense", "key").select_all()

    def test_update_analysis(self, mock_client: MagicMock):
        SupabaseRemote("https://x.supabase.co", "key").update_analysis("2024-01-01", "Nice")

        mock_client.table.return_value.update.assert_called_with({"analysis": "Nice"})
        mock_client.table.return_value.update.return_value.eq.assert_called_with("id", "2024-01-01")

    def test_select_all_skips_non_object_rows(self, mock_client: MagicMock):
        query = mock_client.table.return_value.select.return_value.order.return_value
        query.execute.return_value = MagicMock(data=["junk", {"id": "2024-01-01"}])

        rows = SupabaseRemote("https://x.supabase.co", "key").select_all()

        assert [r.id for r in rows] == ["2024-01-01"]
