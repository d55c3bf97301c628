"""Daily summary generation: remote model with a heuristic fallback."""

from dialog_digest.summarizer.engine import SummaryEngine
from dialog_digest.summarizer.remote import RemoteConfig, RemoteSummarizer
from dialog_digest.summarizer.report import KnowledgePoint

__all__ = [
    "KnowledgePoint",
    "RemoteConfig",
    "RemoteSummarizer",
    "SummaryEngine",
]
