"""Tests for the remote summarization strategy."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from dialog_digest.dialogues.models import Message
from dialog_digest.summarizer.remote import (
    RemoteConfig,
    RemoteSummarizer,
    build_extraction_prompt,
    build_report_prompt,
    parse_knowledge_points,
)
from dialog_digest.summarizer.report import KnowledgePoint

CONFIG = RemoteConfig(api_key="test-key", model="claude-test-model")

MESSAGES = [
    Message(id="1", timestamp="2024-01-05T10:00:00Z", role="user", content="如何使用泛型？"),
    Message(id="2", timestamp="2024-01-05T10:01:00Z", role="assistant", content="泛型允许复用类型。"),
]


def _client_returning(*texts: str) -> MagicMock:
    responses = []
    for text in texts:
        response = MagicMock()
        response.content = [MagicMock(type="text", text=text)]
        responses.append(response)
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=responses)
    return client


# -- prompts ---------------------------------------------------------------------


def test_extraction_prompt_uses_assistant_content_only() -> None:
    prompt = build_extraction_prompt(MESSAGES)
    assert "泛型允许复用类型。" in prompt
    assert "如何使用泛型？" not in prompt
    assert "knowledge_points" in prompt


def test_report_prompt_embeds_counts_content_and_points() -> None:
    prompt = build_report_prompt(
        MESSAGES, "2024-01-05", [KnowledgePoint(title="泛型", content="类型参数")]
    )
    assert "2024-01-05" in prompt
    assert "对话总数: 2" in prompt
    assert "用户消息: 1" in prompt
    assert "AI回复: 1" in prompt
    assert "如何使用泛型？" in prompt
    assert "### 泛型\n\n类型参数" in prompt
    assert "时间戳" in prompt
    assert "10:00" not in prompt


# -- parse_knowledge_points --------------------------------------------------------


def test_parse_valid_json() -> None:
    raw = json.dumps({"knowledge_points": [{"title": "A", "content": "a"}, {"title": "B", "content": "b"}]})
    assert parse_knowledge_points(raw) == [
        KnowledgePoint(title="A", content="a"),
        KnowledgePoint(title="B", content="b"),
    ]


def test_parse_fenced_json() -> None:
    raw = 'Here you go:\n```json\n{"knowledge_points": [{"title": "A", "content": "a"}]}\n```'
    assert parse_knowledge_points(raw) == [KnowledgePoint(title="A", content="a")]


def test_parse_accepts_camel_case_key() -> None:
    raw = json.dumps({"knowledgePoints": [{"title": "A", "content": "a"}]})
    assert len(parse_knowledge_points(raw)) == 1


def test_parse_drops_incomplete_entries() -> None:
    raw = json.dumps({"knowledge_points": [{"title": "A"}, "junk", {"title": "B", "content": "b"}]})
    assert parse_knowledge_points(raw) == [KnowledgePoint(title="B", content="b")]


def test_parse_garbage_returns_empty() -> None:
    assert parse_knowledge_points("not json at all") == []
    assert parse_knowledge_points("{broken") == []
    assert parse_knowledge_points("[1, 2]") == []
    assert parse_knowledge_points('{"knowledge_points": "nope"}') == []


# -- RemoteSummarizer ------------------------------------------------------------


async def test_extract_knowledge_points_success() -> None:
    client = _client_returning(json.dumps({"knowledge_points": [{"title": "T", "content": "C"}]}))
    summarizer = RemoteSummarizer(CONFIG, client=client)

    points = await summarizer.extract_knowledge_points(MESSAGES)

    assert points == [KnowledgePoint(title="T", content="C")]
    call_kwargs = client.messages.create.call_args.kwargs
    assert call_kwargs["model"] == "claude-test-model"
    assert call_kwargs["messages"][0]["role"] == "user"


async def test_extract_knowledge_points_request_failure_returns_empty() -> None:
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=RuntimeError("network down"))
    summarizer = RemoteSummarizer(CONFIG, client=client)
    assert await summarizer.extract_knowledge_points(MESSAGES) == []


async def test_extract_skips_request_without_assistant_messages() -> None:
    client = _client_returning("unused")
    summarizer = RemoteSummarizer(CONFIG, client=client)
    assert await summarizer.extract_knowledge_points(MESSAGES[:1]) == []
    client.messages.create.assert_not_awaited()


async def test_generate_report_success() -> None:
    client = _client_returning("  # report  ")
    summarizer = RemoteSummarizer(CONFIG, client=client)
    assert await summarizer.generate_report(MESSAGES, "2024-01-05", []) == "# report"


async def test_generate_report_failure_returns_none() -> None:
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=RuntimeError("boom"))
    summarizer = RemoteSummarizer(CONFIG, client=client)
    assert await summarizer.generate_report(MESSAGES, "2024-01-05", []) is None


async def test_generate_report_empty_returns_none() -> None:
    summarizer = RemoteSummarizer(CONFIG, client=_client_returning("   "))
    assert await summarizer.generate_report(MESSAGES, "2024-01-05", []) is None


def test_client_built_lazily_with_base_url() -> None:
    config = RemoteConfig(api_key="k", model="m", base_url="https://proxy.example/v1")
    with patch("dialog_digest.summarizer.remote.anthropic.AsyncAnthropic") as mock_cls:
        summarizer = RemoteSummarizer(config)
        mock_cls.assert_not_called()
        summarizer._get_client()
        summarizer._get_client()
    mock_cls.assert_called_once_with(api_key="k", base_url="https://proxy.example/v1")


def test_client_omits_empty_base_url() -> None:
    with patch("dialog_digest.summarizer.remote.anthropic.AsyncAnthropic") as mock_cls:
        RemoteSummarizer(CONFIG)._get_client()
    mock_cls.assert_called_once_with(api_key="test-key")
