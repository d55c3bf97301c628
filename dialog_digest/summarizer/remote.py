"""Remote summarization through the Anthropic Messages API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import anthropic

from dialog_digest.dialogues.models import ASSISTANT
from dialog_digest.summarizer.report import (
    KnowledgePoint,
    MessageCounts,
    render_knowledge_points,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dialog_digest.dialogues.models import Message

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM = (
    "你是一个专业的知识点提取助手，擅长从技术对话中提取和整理知识点。请始终只返回有效的 JSON。"
)
REPORT_SYSTEM = "你是一个专业的对话分析助手，擅长从对话中提取关键信息、知识点和洞察。"


@dataclass(frozen=True)
class RemoteConfig:
    """Credentials and model for the remote generation endpoint.

    An empty *base_url* means the SDK default.
    """

    api_key: str
    model: str
    base_url: str = ""


def build_extraction_prompt(messages: Sequence[Message]) -> str:
    """Prompt asking for knowledge points over assistant-authored content only."""
    text = "\n\n".join(m.content for m in messages if m.role == ASSISTANT)
    return (
        "从以下 AI 回复中提取重要的知识点，每个知识点需要包含：\n"
        "1. 标题（简洁明了）\n"
        "2. 详细内容（包括定义、用法、示例等）\n\n"
        f"AI 回复内容:\n{text}\n\n"
        "请以 JSON 格式返回一个包含 knowledge_points 数组的对象，格式：\n"
        '{"knowledge_points": [{"title": "知识点标题", "content": "详细内容..."}]}'
    )


def build_report_prompt(
    messages: Sequence[Message],
    date: str,
    points: Sequence[KnowledgePoint],
) -> str:
    """Prompt for the full daily report."""
    counts = MessageCounts.of(messages)
    dialogue_text = "\n\n".join(m.content for m in messages)
    knowledge = render_knowledge_points(points, numbered=False) or "（无）"
    return (
        "请分析以下对话记录，生成一份详细的每日总结报告。\n\n"
        f"日期: {date}\n"
        f"对话总数: {counts.total}\n\n"
        f"对话内容:\n{dialogue_text}\n\n"
        "请按照以下格式生成 Markdown 格式的总结：\n\n"
        f"# {date} 对话总结\n\n"
        "## 📊 概览\n"
        f"- 对话总数: {counts.total}\n"
        f"- 用户消息: {counts.user}\n"
        f"- AI回复: {counts.assistant}\n\n"
        "## 🎯 主要话题\n"
        "列出今天讨论的主要话题和问题（只列出话题内容）\n\n"
        "## 💡 知识点总结\n"
        f"{knowledge}\n\n"
        "## 🔍 关键洞察\n"
        "总结今天对话中的关键洞察和建议\n\n"
        "**重要要求：**\n"
        "- 不要包含任何时间信息或时间戳\n"
        "- 不要包含“用户”、“AI”等角色标识\n"
        "- 只关注内容本身，以知识点的形式呈现\n"
        "- 用中文生成，格式要清晰易读"
    )


def parse_knowledge_points(text: str) -> list[KnowledgePoint]:
    """Parse the extraction model's JSON output. Unparseable input yields []."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Try to extract JSON from markdown fences or surrounding prose
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            logger.warning("Knowledge point response contained no JSON object")
            return []
        try:
            data = json.loads(text[start:end])
        except json.JSONDecodeError:
            logger.warning("Failed to parse knowledge point JSON")
            return []

    if not isinstance(data, dict):
        return []
    raw_points = data.get("knowledge_points", data.get("knowledgePoints", []))
    if not isinstance(raw_points, list):
        return []

    points = []
    for item in raw_points:
        if not isinstance(item, dict):
            continue
        title = str(item.get("title") or "").strip()
        content = str(item.get("content") or "").strip()
        if title and content:
            points.append(KnowledgePoint(title=title, content=content))
    return points


class RemoteSummarizer:
    """Issues the extraction and report requests for one configured endpoint.

    Args:
        config: Endpoint credentials and model.
        client: Pre-built client (for tests); created lazily otherwise.
    """

    def __init__(
        self,
        config: RemoteConfig,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self._config = config
        self._client = client

    @property
    def model(self) -> str:
        return self._config.model

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Lazily initialize the Anthropic client."""
        if self._client is None:
            kwargs: dict[str, Any] = {"api_key": self._config.api_key}
            if self._config.base_url:
                kwargs["base_url"] = self._config.base_url
            self._client = anthropic.AsyncAnthropic(**kwargs)
        return self._client

    async def _complete(self, system: str, prompt: str, max_tokens: int) -> str:
        response = await self._get_client().messages.create(
            model=self._config.model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )

    async def extract_knowledge_points(
        self, messages: Sequence[Message]
    ) -> list[KnowledgePoint]:
        """Structured extraction over assistant messages. Any failure yields []."""
        if not any(m.role == ASSISTANT for m in messages):
            return []
        try:
            text = await self._complete(
                EXTRACTION_SYSTEM, build_extraction_prompt(messages), max_tokens=2048
            )
        except Exception:
            logger.exception("Knowledge point extraction request failed")
            return []
        points = parse_knowledge_points(text)
        logger.info("Extracted %d knowledge point(s) remotely", len(points))
        return points

    async def generate_report(
        self,
        messages: Sequence[Message],
        date: str,
        points: Sequence[KnowledgePoint],
    ) -> str | None:
        """Full report request. Returns None on failure or empty output."""
        try:
            text = await self._complete(
                REPORT_SYSTEM, build_report_prompt(messages, date, points), max_tokens=4096
            )
        except Exception:
            logger.exception("Report generation request failed for %s", date)
            return None
        return text.strip() or None
