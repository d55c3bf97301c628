"""SummaryStore: one markdown file per summarized date."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from dialog_digest.dialogues.models import validate_date

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_SUMMARY_FILE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\.md$")


class SummaryStore:
    """Reads and writes ``<date>.md`` summaries under a single directory.

    Writing a date that already has a summary overwrites it; there is no
    versioning and no delete.
    """

    def __init__(self, directory: Path) -> None:
        self._dir = directory
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.exception("Failed to create summaries directory %s", self._dir)

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, date: str) -> Path:
        """Return the summary path for *date*. Raises InvalidDateError."""
        return self._dir / f"{validate_date(date)}.md"

    def exists(self, date: str) -> bool:
        return self.path_for(date).is_file()

    def read(self, date: str) -> str | None:
        """Return the summary text, or None if absent or unreadable."""
        path = self.path_for(date)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError:
            logger.exception("Failed to read summary file: %s", path)
            return None

    def write(self, date: str, text: str) -> Path:
        """Write (or overwrite) the summary for *date*.

        The text goes to a temporary sibling first, so a failed write never
        leaves a partial summary behind. OSError propagates to the caller.
        """
        path = self.path_for(date)
        tmp = path.with_name(path.name + ".tmp")
        self._dir.mkdir(parents=True, exist_ok=True)
        try:
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(path)
        finally:
            tmp.unlink(missing_ok=True)
        logger.info("Wrote summary file: %s", path)
        return path

    def list_dates(self) -> list[str]:
        """Dates that have a summary, newest first. Non-conforming files are ignored."""
        try:
            names = [
                p.name for p in self._dir.iterdir()
                if p.is_file() and _SUMMARY_FILE_RE.match(p.name)
            ]
        except OSError:
            logger.exception("Failed to list summary files in %s", self._dir)
            return []
        return [name.removesuffix(".md") for name in sorted(names, reverse=True)]
