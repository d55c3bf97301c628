"""DigestService: summarize one date, or fill in every missing date."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from dialog_digest.dialogues.models import validate_date

if TYPE_CHECKING:
    from dialog_digest.dialogues.store import DialogueStore
    from dialog_digest.summaries.store import SummaryStore
    from dialog_digest.summarizer.engine import SummaryEngine

logger = logging.getLogger(__name__)


def yesterday(now: datetime | None = None) -> str:
    """The UTC calendar date before *now* (default: current time)."""
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return (now.astimezone(UTC) - timedelta(days=1)).date().isoformat()


class DigestService:
    """Orchestrates DialogueStore → SummaryEngine → SummaryStore.

    Owns no data of its own. Every entry point is safe to call from a
    scheduler job: failures are logged and reported through the return
    value, never raised.

    Args:
        store: Source of messages.
        summaries: Destination for generated reports.
        engine: Report generator.
    """

    def __init__(
        self,
        store: DialogueStore,
        summaries: SummaryStore,
        engine: SummaryEngine,
    ) -> None:
        self._store = store
        self._summaries = summaries
        self._engine = engine

    async def summarize_date(self, date: str) -> bool:
        """Generate and write (overwriting) the summary for *date*.

        Returns True if a summary was written. A date without messages is a
        no-op; an engine or write failure leaves the date without a summary.
        Raises ``InvalidDateError`` for a malformed date.
        """
        validate_date(date)
        messages = self._store.list_by_date(date)
        if not messages:
            logger.info("No dialogues recorded on %s, skipping summary", date)
            return False

        logger.info("Summarizing %d message(s) for %s", len(messages), date)
        try:
            report = await self._engine.summarize(messages, date)
            self._summaries.write(date, report)
        except Exception:
            logger.exception("Summary generation failed for %s", date)
            return False
        return True

    async def summarize_yesterday(self, now: datetime | None = None) -> bool:
        """Scheduled entry point: summarize the previous UTC day."""
        return await self.summarize_date(yesterday(now))

    def find_missing_dates(self) -> list[str]:
        """Dates with messages but no summary, oldest first."""
        dates = sorted(self._store.stats().by_date)
        return [d for d in dates if not self._summaries.exists(d)]

    async def reconcile(self) -> list[str]:
        """Summarize every missing date, one at a time.

        Each date finishes (including any remote call) before the next one
        starts. Returns the dates that received a summary.
        """
        missing = self.find_missing_dates()
        if not missing:
            logger.info("Reconciliation: all dates with dialogues have summaries")
            return []

        logger.info(
            "Reconciliation: %d date(s) missing a summary: %s",
            len(missing),
            ", ".join(missing),
        )
        written = []
        for date in missing:
            if await self.summarize_date(date):
                written.append(date)
        logger.info("Reconciliation finished: %d/%d summarized", len(written), len(missing))
        return written

    def store_external_summary(self, date: str, text: str) -> None:
        """Write externally supplied summary text verbatim, bypassing the engine."""
        self._summaries.write(date, text)
        logger.info("Stored external summary for %s (%d chars)", date, len(text))
