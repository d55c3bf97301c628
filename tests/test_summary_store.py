"""Tests for SummaryStore."""

from unittest.mock import patch

import pytest

from dialog_digest.dialogues.models import InvalidDateError
from dialog_digest.summaries.store import SummaryStore


def test_read_absent_returns_none(summaries: SummaryStore) -> None:
    assert summaries.read("2024-01-05") is None
    assert summaries.exists("2024-01-05") is False


def test_write_then_read(summaries: SummaryStore) -> None:
    path = summaries.write("2024-01-05", "# report")
    assert path.name == "2024-01-05.md"
    assert summaries.read("2024-01-05") == "# report"
    assert summaries.exists("2024-01-05") is True


def test_write_overwrites(summaries: SummaryStore) -> None:
    summaries.write("2024-01-05", "first")
    summaries.write("2024-01-05", "second")
    assert summaries.read("2024-01-05") == "second"


def test_write_leaves_no_temp_file(summaries: SummaryStore) -> None:
    summaries.write("2024-01-05", "text")
    assert [p.name for p in summaries.directory.iterdir()] == ["2024-01-05.md"]


def test_failed_write_leaves_no_summary(summaries: SummaryStore) -> None:
    with (
        patch("pathlib.Path.replace", side_effect=OSError("read-only")),
        pytest.raises(OSError),
    ):
        summaries.write("2024-01-05", "text")
    assert summaries.exists("2024-01-05") is False
    assert list(summaries.directory.iterdir()) == []


def test_list_dates_newest_first_and_filters(summaries: SummaryStore) -> None:
    for date in ("2024-01-05", "2024-01-07", "2023-12-31"):
        summaries.write(date, "x")
    (summaries.directory / "notes.md").write_text("x")
    (summaries.directory / "2024-1-5.md").write_text("x")
    (summaries.directory / "2024-01-06.md.bak").write_text("x")
    (summaries.directory / "2024-01-08.md").mkdir()

    assert summaries.list_dates() == ["2024-01-07", "2024-01-05", "2023-12-31"]


def test_invalid_date_rejected(summaries: SummaryStore) -> None:
    with pytest.raises(InvalidDateError):
        summaries.read("../secrets")
    with pytest.raises(InvalidDateError):
        summaries.write("2024-01-05.md", "x")


def test_creates_directory(tmp_path) -> None:
    store = SummaryStore(tmp_path / "nested" / "summaries")
    assert store.directory.is_dir()
    assert store.list_dates() == []


def test_unusable_directory_does_not_raise(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    store = SummaryStore(blocker / "summaries")

    assert store.list_dates() == []
    assert store.read("2024-01-05") is None
    with pytest.raises(OSError):
        store.write("2024-01-05", "text")
