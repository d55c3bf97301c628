"""DialogueStore: append-only message log persisted as one JSON file."""

from __future__ import annotations

import contextlib
import json
import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dialog_digest.dialogues.models import (
    ROLES,
    Message,
    make_message_id,
    message_date,
    now_timestamp,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationInfo:
    id: str
    count: int
    last_timestamp: str
    repository: str | None = None
    workspace: str | None = None


@dataclass(frozen=True)
class RepositoryInfo:
    name: str
    count: int


@dataclass(frozen=True)
class DialogueStats:
    total: int
    by_date: dict[str, int]


class DialogueStore:
    """Ordered, append-only log of dialogue messages.

    The whole collection lives in memory and is rewritten to *path* on every
    append. Reads are scan-and-filter over the in-memory list. All methods
    are synchronous: local file I/O completes before the call returns, so a
    read never interleaves with a half-finished write.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._messages: list[Message] = []
        self._listeners: list[Callable[[Message], None]] = []
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._messages)

    # -- Persistence -----------------------------------------------------------

    def _load(self) -> None:
        """Load persisted messages. Any failure leaves the store empty."""
        if not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                msg = f"Expected a JSON array, got {type(raw).__name__}"
                raise TypeError(msg)
            self._messages = [Message.from_dict(item) for item in raw]
            logger.info("Loaded %d dialogue message(s) from %s", len(self._messages), self._path)
        except Exception:
            logger.exception("Failed to load dialogues from %s, starting empty", self._path)
            self._messages = []

    def _save(self) -> None:
        """Rewrite the full collection. Failures are logged, never raised."""
        payload = json.dumps(
            [m.to_dict() for m in self._messages], ensure_ascii=False, indent=2
        )
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(self._path)
        except OSError:
            logger.exception("Failed to save dialogues to %s", self._path)
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)

    # -- Write -----------------------------------------------------------------

    def append(
        self,
        role: str,
        content: str,
        *,
        workspace: str | None = None,
        repository: str | None = None,
        conversation_id: str | None = None,
        generation_id: str | None = None,
    ) -> Message:
        """Record a message, persist the log, and notify listeners.

        Raises ``ValueError`` if *role* is not ``user``/``assistant`` or
        *content* is empty.
        """
        if role not in ROLES:
            msg = f"Invalid role: {role!r} (expected one of {', '.join(ROLES)})"
            raise ValueError(msg)
        if not content:
            msg = "Message content must not be empty"
            raise ValueError(msg)

        message = Message(
            id=make_message_id(),
            timestamp=now_timestamp(),
            role=role,
            content=content,
            workspace=workspace or None,
            repository=repository or None,
            conversation_id=conversation_id or None,
            generation_id=generation_id or None,
        )
        self._messages.append(message)
        self._save()
        logger.info("Recorded dialogue: %s - %s", role, content[:50])

        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception("Append listener failed for message %s", message.id)
        return message

    def subscribe(self, listener: Callable[[Message], None]) -> None:
        """Register a callable invoked with every newly appended message."""
        self._listeners.append(listener)

    # -- Read ------------------------------------------------------------------

    def list_all(self) -> list[Message]:
        return list(self._messages)

    def list_by_date(self, date: str) -> list[Message]:
        """Messages whose UTC calendar day equals *date* (``YYYY-MM-DD``)."""
        return [m for m in self._messages if message_date(m.timestamp) == date]

    def list_by_conversation(self, conversation_id: str) -> list[Message]:
        return [m for m in self._messages if m.conversation_id == conversation_id]

    def list_by_repository(self, repository: str) -> list[Message]:
        return [m for m in self._messages if m.repository == repository]

    # -- Aggregates ------------------------------------------------------------

    def aggregate_conversations(self) -> list[ConversationInfo]:
        """Group by conversation_id, most recently active first."""
        groups: dict[str, list[Message]] = {}
        for m in self._messages:
            if m.conversation_id:
                groups.setdefault(m.conversation_id, []).append(m)

        conversations = [
            ConversationInfo(
                id=conv_id,
                count=len(messages),
                last_timestamp=messages[-1].timestamp,
                repository=messages[0].repository,
                workspace=messages[0].workspace,
            )
            for conv_id, messages in groups.items()
        ]
        conversations.sort(key=lambda c: c.last_timestamp, reverse=True)
        return conversations

    def aggregate_repositories(self) -> list[RepositoryInfo]:
        """Message count per repository, largest first."""
        counts = Counter(m.repository for m in self._messages if m.repository)
        repos = [RepositoryInfo(name=name, count=count) for name, count in counts.items()]
        repos.sort(key=lambda r: r.count, reverse=True)
        return repos

    def stats(self) -> DialogueStats:
        """Total message count and per-date counts."""
        by_date: dict[str, int] = {}
        for m in self._messages:
            date = message_date(m.timestamp)
            if date is not None:
                by_date[date] = by_date.get(date, 0) + 1
        return DialogueStats(total=len(self._messages), by_date=by_date)
