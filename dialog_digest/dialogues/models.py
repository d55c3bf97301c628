"""Message data model."""

from __future__ import annotations

import random
import re
import string
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

USER = "user"
ASSISTANT = "assistant"
ROLES = (USER, ASSISTANT)

_OPTIONAL_FIELDS = ("workspace", "repository", "conversation_id", "generation_id")
_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class Message:
    """One recorded conversational turn.

    Attributes:
        id: Unique identifier assigned at append time.
        timestamp: ISO 8601 UTC timestamp assigned at append time.
        role: Either ``"user"`` or ``"assistant"``.
        content: The message text.
        workspace: Editor workspace path the turn came from.
        repository: Repository name the turn is associated with.
        conversation_id: Identifier grouping turns of one conversation.
        generation_id: Identifier of the assistant generation, if any.
    """

    id: str
    timestamp: str
    role: str
    content: str
    workspace: str | None = None
    repository: str | None = None
    conversation_id: str | None = None
    generation_id: str | None = None

    @property
    def date(self) -> str | None:
        """UTC calendar date (``YYYY-MM-DD``) of the timestamp."""
        return message_date(self.timestamp)

    # -- Serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict, omitting unset optional fields."""
        data: dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "role": self.role,
            "content": self.content,
        }
        for name in _OPTIONAL_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        """Deserialize from a persisted dict. Raises KeyError/TypeError on bad input."""
        if not isinstance(data, dict):
            msg = f"Expected a message object, got {type(data).__name__}"
            raise TypeError(msg)
        return cls(
            id=str(data["id"]),
            timestamp=str(data["timestamp"]),
            role=str(data["role"]),
            content=str(data["content"]),
            **{name: data.get(name) for name in _OPTIONAL_FIELDS},
        )


def make_message_id() -> str:
    """Millisecond wall clock plus a random suffix, e.g. ``1706000000000-k3j9x0a2b``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


def now_timestamp() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def message_date(timestamp: str) -> str | None:
    """Truncate an ISO timestamp to its UTC calendar day, or None if unparseable."""
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).date().isoformat()


_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidDateError(ValueError):
    """Raised when a date string is not a valid ``YYYY-MM-DD`` calendar date."""


def validate_date(date: str) -> str:
    """Return *date* unchanged if it is a real ``YYYY-MM-DD`` date, else raise."""
    if not isinstance(date, str) or not _DATE_RE.match(date):
        msg = f"Invalid date: {date!r} (expected YYYY-MM-DD)"
        raise InvalidDateError(msg)
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError as exc:
        msg = f"Invalid date: {date!r}"
        raise InvalidDateError(msg) from exc
    return date
