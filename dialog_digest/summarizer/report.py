"""Markdown assembly for daily summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dialog_digest.dialogues.models import ASSISTANT, USER

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dialog_digest.dialogues.models import Message

ORIGIN_HEURISTIC = "heuristic"
ORIGIN_FALLBACK = "fallback"

_FOOTERS = {
    ORIGIN_HEURISTIC: "*注: 本总结由本地规则分析生成。配置 ANTHROPIC_API_KEY 可启用模型分析。*",
    ORIGIN_FALLBACK: "*注: 模型分析不可用或结果未通过质量检查，本总结由本地规则分析生成。*",
}


@dataclass(frozen=True)
class KnowledgePoint:
    title: str
    content: str


@dataclass(frozen=True)
class MessageCounts:
    total: int
    user: int
    assistant: int

    @classmethod
    def of(cls, messages: Sequence[Message]) -> MessageCounts:
        return cls(
            total=len(messages),
            user=sum(1 for m in messages if m.role == USER),
            assistant=sum(1 for m in messages if m.role == ASSISTANT),
        )


def render_overview(counts: MessageCounts) -> str:
    return (
        "## 📊 概览\n"
        f"- 对话总数: {counts.total}\n"
        f"- 用户消息: {counts.user}\n"
        f"- AI回复: {counts.assistant}"
    )


def render_knowledge_points(points: Sequence[KnowledgePoint], *, numbered: bool = True) -> str:
    """Render points as ``###`` subsections."""
    blocks = []
    for i, point in enumerate(points, 1):
        title = f"{i}. {point.title}" if numbered else point.title
        blocks.append(f"### {title}\n\n{point.content}")
    return "\n\n".join(blocks)


def render_report(
    date: str,
    counts: MessageCounts,
    topics: Sequence[str],
    points: Sequence[KnowledgePoint],
    insights: Sequence[str],
    origin: str = ORIGIN_HEURISTIC,
) -> str:
    """Assemble the full daily report in its fixed section order."""
    sections = [f"# {date} 对话总结", render_overview(counts)]

    if topics:
        topic_lines = "\n".join(f"{i}. {t}" for i, t in enumerate(topics, 1))
    else:
        topic_lines = "今天没有识别出明确的话题。"
    sections.append(f"## 🎯 主要话题\n\n{topic_lines}")

    if points:
        sections.append(f"## 💡 知识点总结\n\n{render_knowledge_points(points)}")
    else:
        sections.append("## 💡 知识点总结\n\n今天没有提取到知识点。")

    insight_lines = "\n".join(f"{i}. {s}" for i, s in enumerate(insights, 1))
    sections.append(f"## 🔍 关键洞察\n\n{insight_lines}")

    sections.append(f"---\n{_FOOTERS.get(origin, _FOOTERS[ORIGIN_HEURISTIC])}")
    return "\n\n".join(sections) + "\n"


def remote_footer(model: str) -> str:
    return f"\n\n---\n*注: 本总结由模型 {model} 分析生成。*\n"
