"""Dialogue digest entry point."""

import asyncio
import contextlib
import logging

from dialog_digest.api.server import ApiServer, create_web_app
from dialog_digest.config import settings
from dialog_digest.dialogues.store import DialogueStore
from dialog_digest.scheduler import DigestScheduler, DigestService
from dialog_digest.summaries.store import SummaryStore
from dialog_digest.summarizer import SummaryEngine

logger = logging.getLogger(__name__)


async def run() -> None:
    """Wire the shared instances, start the API and scheduler, run until cancelled."""
    store = DialogueStore(settings.get_dialogues_file())
    summaries = SummaryStore(settings.get_summaries_dir())
    engine = SummaryEngine(settings.remote_config(), min_length=settings.summary_min_length)
    service = DigestService(store, summaries, engine)

    if engine.mode == "remote":
        logger.info("Remote summarization enabled (model %s)", settings.summary_model)
    else:
        logger.warning("ANTHROPIC_API_KEY not set, summaries use the local heuristic analyzer")

    server = ApiServer(
        create_web_app(store, summaries, service),
        host=settings.http_host,
        port=settings.http_port,
    )
    scheduler = DigestScheduler(service)

    await server.start()
    await scheduler.start(reconcile=settings.reconcile_on_startup)
    try:
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()
        await server.stop()


def main() -> None:
    """Start the dialogue digest service."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    logger.info("Starting dialogue digest (data dir: %s)", settings.data_dir)
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(run())
    logger.info("Dialogue digest stopped")


if __name__ == "__main__":
    main()
