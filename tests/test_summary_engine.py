"""Tests for SummaryEngine strategy selection, quality gate and fallback."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from dialog_digest.dialogues.models import Message
from dialog_digest.summarizer import heuristic
from dialog_digest.summarizer.engine import SummaryEngine
from dialog_digest.summarizer.remote import RemoteConfig
from dialog_digest.summarizer.report import ORIGIN_FALLBACK

CONFIG = RemoteConfig(api_key="test-key", model="claude-test-model")
DATE = "2024-01-05"

MESSAGES = [
    Message(id="1", timestamp="2024-01-05T10:00:00Z", role="user", content="如何优化性能？"),
    Message(id="2", timestamp="2024-01-05T10:01:00Z", role="assistant", content="## 缓存\n使用缓存减少重复计算"),
]

LONG_REPORT = "# 2024-01-05 对话总结\n\n" + "内容" * 200


def _response(text: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(type="text", text=text)]
    return response


def _client(*effects) -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=list(effects))
    return client


async def test_unconfigured_uses_heuristic() -> None:
    engine = SummaryEngine(None)
    assert engine.mode == "heuristic"
    assert await engine.summarize(MESSAGES, DATE) == heuristic.summarize(MESSAGES, DATE)


async def test_empty_messages_raise() -> None:
    with pytest.raises(ValueError):
        await SummaryEngine(None).summarize([], DATE)


async def test_remote_report_used_when_long_enough() -> None:
    client = _client(
        _response(json.dumps({"knowledge_points": [{"title": "缓存", "content": "减少计算"}]})),
        _response(LONG_REPORT),
    )
    engine = SummaryEngine(CONFIG, client=client, min_length=100)
    assert engine.mode == "remote"

    report = await engine.summarize(MESSAGES, DATE)

    assert report.startswith(LONG_REPORT)
    assert "claude-test-model" in report
    assert client.messages.create.await_count == 2
    report_prompt = client.messages.create.call_args_list[1].kwargs["messages"][0]["content"]
    assert "### 缓存\n\n减少计算" in report_prompt


async def test_short_remote_report_falls_back() -> None:
    client = _client(_response("{}"), _response("too short"))
    engine = SummaryEngine(CONFIG, client=client, min_length=100)

    report = await engine.summarize(MESSAGES, DATE)

    assert report == heuristic.summarize(MESSAGES, DATE, origin=ORIGIN_FALLBACK)


async def test_report_failure_discards_extracted_points() -> None:
    client = _client(
        _response(json.dumps({"knowledge_points": [{"title": "远程知识点", "content": "x"}]})),
        RuntimeError("network down"),
    )
    engine = SummaryEngine(CONFIG, client=client, min_length=100)

    report = await engine.summarize(MESSAGES, DATE)

    assert "远程知识点" not in report
    assert report == heuristic.summarize(MESSAGES, DATE, origin=ORIGIN_FALLBACK)


async def test_extraction_failure_still_requests_report() -> None:
    client = _client(RuntimeError("timeout"), _response(LONG_REPORT))
    engine = SummaryEngine(CONFIG, client=client, min_length=100)

    report = await engine.summarize(MESSAGES, DATE)

    assert report.startswith(LONG_REPORT)


async def test_engine_never_mutates_messages() -> None:
    messages = list(MESSAGES)
    await SummaryEngine(None).summarize(messages, DATE)
    assert messages == MESSAGES
