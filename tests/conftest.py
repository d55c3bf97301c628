"""Shared test fixtures."""

from __future__ import annotations

import itertools
import json
from typing import TYPE_CHECKING

import pytest

from dialog_digest.dialogues.store import DialogueStore
from dialog_digest.scheduler.service import DigestService
from dialog_digest.summaries.store import SummaryStore
from dialog_digest.summarizer.engine import SummaryEngine

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


_ids = itertools.count(1)


def _make_record(
    content: str,
    role: str = "user",
    timestamp: str = "2024-01-05T10:00:00.000Z",
    **extra: str,
) -> dict:
    """A persisted-message dict with a fixed timestamp."""
    record = {
        "id": f"test-{next(_ids)}",
        "timestamp": timestamp,
        "role": role,
        "content": content,
    }
    record.update(extra)
    return record


@pytest.fixture
def make_record() -> Callable[..., dict]:
    return _make_record


@pytest.fixture
def dialogues_path(tmp_path: Path) -> Path:
    return tmp_path / "dialogues" / "current.json"


@pytest.fixture
def store(dialogues_path: Path) -> DialogueStore:
    return DialogueStore(dialogues_path)


@pytest.fixture
def seeded_store(dialogues_path: Path) -> Callable[[list[dict]], DialogueStore]:
    """Factory: persist the given records, then load a store from them."""

    def _seed(records: list[dict]) -> DialogueStore:
        dialogues_path.parent.mkdir(parents=True, exist_ok=True)
        dialogues_path.write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
        return DialogueStore(dialogues_path)

    return _seed


@pytest.fixture
def summaries(tmp_path: Path) -> SummaryStore:
    return SummaryStore(tmp_path / "summaries")


@pytest.fixture
def engine() -> SummaryEngine:
    """Heuristic-only engine."""
    return SummaryEngine(None)


@pytest.fixture
def service(store: DialogueStore, summaries: SummaryStore, engine: SummaryEngine) -> DigestService:
    return DigestService(store, summaries, engine)
