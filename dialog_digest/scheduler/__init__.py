"""Daily summary scheduling: orchestration, reconciliation, and timing."""

from dialog_digest.scheduler.engine import DigestScheduler
from dialog_digest.scheduler.service import DigestService, yesterday

__all__ = [
    "DigestScheduler",
    "DigestService",
    "yesterday",
]
