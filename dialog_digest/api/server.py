"""Async HTTP API for recording dialogues and reading summaries.

Uses aiohttp's AppRunner/TCPSite for non-blocking start/stop so the server
shares the asyncio event loop with the summary scheduler.

Every JSON body has the shape ``{"success": bool, "data": ...}`` or
``{"success": false, "error": "..."}``.
"""

from __future__ import annotations

import json
import logging
from functools import partial
from typing import Any

from aiohttp import web

from dialog_digest.dialogues.models import ROLES, InvalidDateError, validate_date
from dialog_digest.dialogues.store import DialogueStore
from dialog_digest.scheduler.service import DigestService
from dialog_digest.summaries.store import SummaryStore

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", DialogueStore)
SUMMARIES_KEY = web.AppKey("summaries", SummaryStore)
SERVICE_KEY = web.AppKey("service", DigestService)

_OPTIONAL_FIELDS = ("workspace", "repository", "conversation_id", "generation_id")
_dumps = partial(json.dumps, ensure_ascii=False)


def _ok(data: Any = None, message: str | None = None) -> web.Response:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return web.json_response(body, dumps=_dumps)


def _error(error: str, status: int) -> web.Response:
    return web.json_response({"success": False, "error": error}, status=status, dumps=_dumps)


async def _read_json_object(request: web.Request) -> dict[str, Any] | None:
    """Parse the request body as a JSON object, or None if it isn't one."""
    try:
        payload = await request.json()
    except Exception:
        return None
    return payload if isinstance(payload, dict) else None


@web.middleware
async def _error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Map invalid dates to 400 and unexpected failures to 500."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except InvalidDateError as exc:
        return _error(str(exc), 400)
    except Exception as exc:
        logger.exception("Request failed: %s %s", request.method, request.path)
        return _error(str(exc), 500)


# -- Dialogues -----------------------------------------------------------------


async def _list_dialogues(request: web.Request) -> web.Response:
    """GET /api/dialogues: every recorded message."""
    store = request.app[STORE_KEY]
    return _ok([m.to_dict() for m in store.list_all()])


async def _dialogues_by_date(request: web.Request) -> web.Response:
    date = validate_date(request.match_info["date"])
    store = request.app[STORE_KEY]
    return _ok([m.to_dict() for m in store.list_by_date(date)])


async def _dialogues_by_conversation(request: web.Request) -> web.Response:
    store = request.app[STORE_KEY]
    messages = store.list_by_conversation(request.match_info["conversation_id"])
    return _ok([m.to_dict() for m in messages])


async def _dialogues_by_repository(request: web.Request) -> web.Response:
    store = request.app[STORE_KEY]
    messages = store.list_by_repository(request.match_info["name"])
    return _ok([m.to_dict() for m in messages])


async def _add_dialogue(request: web.Request) -> web.Response:
    """POST /api/dialogues: record one message (called by editor integrations)."""
    payload = await _read_json_object(request)
    if payload is None:
        return _error("invalid JSON body", 400)

    role = payload.get("role")
    content = payload.get("content")
    if not role or not content:
        return _error("role and content are required", 400)
    if role not in ROLES or not isinstance(content, str):
        return _error(f"role must be one of {', '.join(ROLES)} and content a string", 400)

    optional = {}
    for name in _OPTIONAL_FIELDS:
        value = payload.get(name)
        if value is not None and not isinstance(value, str):
            return _error(f"{name} must be a string", 400)
        optional[name] = value

    message = request.app[STORE_KEY].append(role, content, **optional)
    return _ok(message.to_dict(), message="dialogue recorded")


# -- Aggregates ------------------------------------------------------------------


async def _stats(request: web.Request) -> web.Response:
    stats = request.app[STORE_KEY].stats()
    return _ok({"total": stats.total, "byDate": stats.by_date})


async def _conversations(request: web.Request) -> web.Response:
    conversations = request.app[STORE_KEY].aggregate_conversations()
    return _ok([
        {
            "id": c.id,
            "repository": c.repository,
            "workspace": c.workspace,
            "count": c.count,
            "lastMessage": c.last_timestamp,
        }
        for c in conversations
    ])


async def _repositories(request: web.Request) -> web.Response:
    repos = request.app[STORE_KEY].aggregate_repositories()
    return _ok([{"name": r.name, "count": r.count} for r in repos])


# -- Summaries -------------------------------------------------------------------


async def _list_summaries(request: web.Request) -> web.Response:
    """GET /api/summaries: summary dates, newest first."""
    return _ok(request.app[SUMMARIES_KEY].list_dates())


async def _get_summary(request: web.Request) -> web.Response:
    date = validate_date(request.match_info["date"])
    summary = request.app[SUMMARIES_KEY].read(date)
    if summary is None:
        return _error(f"no summary for {date}", 404)
    return _ok(summary)


async def _analyze(request: web.Request) -> web.Response:
    """POST /api/analyze/<date>: regenerate a date's summary now."""
    date = validate_date(request.match_info["date"])
    written = await request.app[SERVICE_KEY].summarize_date(date)
    message = f"summarized {date}" if written else f"no summary generated for {date}"
    return _ok({"date": date, "summarized": written}, message=message)


async def _analyze_external(request: web.Request) -> web.Response:
    """POST /api/analyze-with-cursor/<date>: store a summary written elsewhere."""
    date = validate_date(request.match_info["date"])
    payload = await _read_json_object(request)
    if payload is None:
        return _error("invalid JSON body", 400)
    summary = payload.get("summary")
    if not isinstance(summary, str) or not summary:
        return _error("summary is required", 400)

    request.app[SERVICE_KEY].store_external_summary(date, summary)
    return _ok({"date": date}, message=f"stored summary for {date}")


async def _health(request: web.Request) -> web.Response:
    """GET /health: basic liveness check."""
    return web.json_response({"status": "ok"})


def create_web_app(
    store: DialogueStore,
    summaries: SummaryStore,
    service: DigestService,
) -> web.Application:
    """Build the aiohttp Application with routes and injected dependencies."""
    app = web.Application(middlewares=[_error_middleware])
    app[STORE_KEY] = store
    app[SUMMARIES_KEY] = summaries
    app[SERVICE_KEY] = service

    app.router.add_get("/health", _health)
    app.router.add_get("/api/dialogues", _list_dialogues)
    app.router.add_post("/api/dialogues", _add_dialogue)
    app.router.add_get(
        "/api/dialogues/conversation/{conversation_id}", _dialogues_by_conversation
    )
    app.router.add_get("/api/dialogues/repository/{name}", _dialogues_by_repository)
    app.router.add_get("/api/dialogues/{date}", _dialogues_by_date)
    app.router.add_get("/api/stats", _stats)
    app.router.add_get("/api/conversations", _conversations)
    app.router.add_get("/api/repositories", _repositories)
    app.router.add_get("/api/summaries", _list_summaries)
    app.router.add_get("/api/summaries/{date}", _get_summary)
    app.router.add_post("/api/analyze/{date}", _analyze)
    app.router.add_post("/api/analyze-with-cursor/{date}", _analyze_external)
    return app


class ApiServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(self, app: web.Application, host: str, port: int) -> None:
        self.host = host
        self.port = port
        self._app = app
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening for API requests."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("API server listening on http://%s:%d/api", self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("API server stopped")
