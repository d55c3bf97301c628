"""SummaryEngine: remote generation with a deterministic heuristic fallback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dialog_digest.summarizer import heuristic
from dialog_digest.summarizer.remote import RemoteSummarizer
from dialog_digest.summarizer.report import (
    ORIGIN_FALLBACK,
    ORIGIN_HEURISTIC,
    remote_footer,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    import anthropic

    from dialog_digest.dialogues.models import Message
    from dialog_digest.summarizer.remote import RemoteConfig

logger = logging.getLogger(__name__)

DEFAULT_MIN_LENGTH = 200


class SummaryEngine:
    """Turns one day's messages into a markdown report.

    The remote/heuristic choice is fixed at construction: pass a
    ``RemoteConfig`` to enable the remote strategy, or ``None`` to always use
    the heuristic one. A remote report shorter than *min_length* characters
    is discarded in favour of the heuristic report.

    Args:
        remote: Remote endpoint configuration, or None when unconfigured.
        min_length: Quality-gate threshold for remote output.
        client: Pre-built Anthropic client (for tests).
    """

    def __init__(
        self,
        remote: RemoteConfig | None = None,
        *,
        min_length: int = DEFAULT_MIN_LENGTH,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self._remote = RemoteSummarizer(remote, client=client) if remote else None
        self._min_length = min_length

    @property
    def mode(self) -> str:
        return "remote" if self._remote else "heuristic"

    async def summarize(self, messages: Sequence[Message], date: str) -> str:
        """Return the markdown report for *date*. Raises ValueError on empty input."""
        if not messages:
            msg = f"No messages to summarize for {date}"
            raise ValueError(msg)

        if self._remote is None:
            return heuristic.summarize(messages, date, origin=ORIGIN_HEURISTIC)

        points = await self._remote.extract_knowledge_points(messages)
        report = await self._remote.generate_report(messages, date, points)
        if report is None or len(report) < self._min_length:
            # Remote knowledge points are dropped along with the failed report.
            logger.warning(
                "Remote report for %s unusable (%s), falling back to heuristic summary",
                date,
                "missing" if report is None else f"{len(report)} chars",
            )
            return heuristic.summarize(messages, date, origin=ORIGIN_FALLBACK)

        logger.info("Generated remote summary for %s (%d chars)", date, len(report))
        return report + remote_footer(self._remote.model)
