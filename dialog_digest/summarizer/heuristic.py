"""Deterministic rule-based summarizer.

Used when no remote model is configured, and as the fallback when the
remote report fails or is too short. Identical input always produces an
identical report.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING

from dialog_digest.dialogues.models import ASSISTANT, USER
from dialog_digest.summarizer import tables
from dialog_digest.summarizer.report import (
    ORIGIN_HEURISTIC,
    KnowledgePoint,
    MessageCounts,
    render_report,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from dialog_digest.dialogues.models import Message

_SENTENCE_SPLIT_RE = re.compile(r"([。！？!?\n；;]|\.(?=\s))")
_CLAUSE_SPLIT_RE = re.compile(r"[。！？!?；;，,\n]+")
_FENCE_RE = re.compile(r"```[ \t]*([\w+#.-]*)[^\n]*\n(.*?)```", re.DOTALL)
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)、])\s+(.+?)\s*$")
_HEADING_RE = re.compile(r"^(#{1,3})\s+(.+?)\s*#*\s*$")
_ANY_HEADING_RE = re.compile(r"^#{1,6}\s+")
_CAPITALIZED_RE = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b", re.ASCII)
_CJK_TOKEN_RE = re.compile(r"[\u4e00-\u9fff]{2,4}")
_LATIN_TOKEN_RE = re.compile(r"[a-z][a-z0-9]{2,}")
_EMPHASIS_RE = re.compile(r"\*\*|__|`")


def contains_keyword(text: str, keyword: str) -> bool:
    """Case-insensitive keyword test.

    ASCII keywords must match on word boundaries (``how`` does not match
    ``show``); CJK keywords match as plain substrings.
    """
    text = text.lower()
    keyword = keyword.lower()
    if keyword.isascii():
        pattern = rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])"
        return re.search(pattern, text) is not None
    return keyword in text


def _contents(messages: Iterable[Message], role: str) -> list[str]:
    return [m.content for m in messages if m.role == role]


def _mean_length(texts: Sequence[str]) -> float:
    if not texts:
        return 0
    return sum(len(t) for t in texts) / len(texts)


# -- Topics -------------------------------------------------------------------


def _questions(text: str) -> list[str]:
    """Sentences terminated by a question mark, without the mark."""
    # Split output alternates sentence, terminator, sentence, ...
    parts = _SENTENCE_SPLIT_RE.split(text)
    return [
        parts[i].strip()
        for i in range(0, len(parts) - 1, 2)
        if parts[i + 1] in ("?", "？") and parts[i].strip()
    ]


def extract_topics(messages: Sequence[Message]) -> list[str]:
    """Questions and keyword clauses from user messages, first 10 distinct."""
    seen: set[str] = set()
    topics: list[str] = []

    def _add(candidate: str) -> None:
        if candidate and candidate not in seen:
            seen.add(candidate)
            topics.append(candidate)

    for text in _contents(messages, USER):
        for question in _questions(text):
            if len(question) > tables.MIN_TOPIC_LENGTH:
                _add(question)

        for clause in _CLAUSE_SPLIT_RE.split(text):
            clause = clause.strip()
            if len(clause) <= tables.MIN_TOPIC_LENGTH:
                continue
            if any(contains_keyword(clause, kw) for kw in tables.TOPIC_KEYWORDS):
                _add(clause[: tables.MAX_TOPIC_LENGTH])

    return topics[: tables.MAX_TOPICS]


# -- Knowledge points -----------------------------------------------------------


def _clean_prose_line(line: str) -> str:
    line = line.strip()
    line = re.sub(r"^#{1,6}\s+", "", line)
    match = _LIST_ITEM_RE.match(line)
    if match:
        line = match.group(1)
    return _EMPHASIS_RE.sub("", line).strip().rstrip("：:").strip()


def _code_block_points(text: str, lang_counts: Counter[str]) -> list[KnowledgePoint]:
    points = []
    prose_start = 0
    for match in _FENCE_RE.finditer(text):
        before = text[prose_start:match.start()]
        prose_start = match.end()
        code = match.group(2).strip()
        if len(code) < tables.MIN_CODE_LENGTH:
            continue

        lang = match.group(1).lower() or "code"
        lang_counts[lang] += 1
        title = f"{lang} 示例 {lang_counts[lang]}"

        context = [_clean_prose_line(line) for line in before.splitlines()]
        context = [line for line in context if line]
        if context:
            content = "\n".join(context[-tables.MAX_CONTEXT_LINES:])
        else:
            content = f"```{lang}\n{code[: tables.MAX_CODE_CONTENT]}\n```"
        points.append(KnowledgePoint(title=title, content=content))
    return points


def _list_runs(lines: Sequence[str]) -> list[list[str]]:
    """Consecutive bullet/numbered items, as lists of item texts."""
    runs: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        match = _LIST_ITEM_RE.match(line)
        if match:
            current.append(_EMPHASIS_RE.sub("", match.group(1)).strip())
            continue
        if current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return [run for run in runs if len(run) >= tables.MIN_LIST_ITEMS]


def _heading_points(lines: Sequence[str]) -> list[KnowledgePoint]:
    points = []
    for i, line in enumerate(lines):
        match = _HEADING_RE.match(line)
        if not match:
            continue
        title = _EMPHASIS_RE.sub("", match.group(2)).strip()
        if not title or len(title) > tables.MAX_HEADING_TITLE:
            continue
        body: list[str] = []
        for following in lines[i + 1:]:
            if _ANY_HEADING_RE.match(following):
                break
            body.append(following)
        content = "\n".join(body).strip()[: tables.MAX_SECTION_CONTENT]
        if content:
            points.append(KnowledgePoint(title=title, content=content))
    return points


def extract_knowledge_points(messages: Sequence[Message]) -> list[KnowledgePoint]:
    """Code examples, lists and sections from assistant messages, at most 8."""
    points: list[KnowledgePoint] = []
    titles: set[str] = set()
    lang_counts: Counter[str] = Counter()
    list_count = 0

    def _add(point: KnowledgePoint) -> None:
        if point.title not in titles:
            titles.add(point.title)
            points.append(point)

    assistant_texts = _contents(messages, ASSISTANT)
    for text in assistant_texts:
        for point in _code_block_points(text, lang_counts):
            _add(point)

        prose_lines = _FENCE_RE.sub("\n", text).splitlines()
        for run in _list_runs(prose_lines):
            list_count += 1
            items = "\n".join(f"- {item}" for item in run[: tables.MAX_LIST_ITEMS])
            _add(KnowledgePoint(title=f"要点列表 {list_count}", content=items))

        for point in _heading_points(prose_lines):
            _add(point)

    if not points:
        for text in assistant_texts:
            for term in _CAPITALIZED_RE.findall(text):
                _add(KnowledgePoint(title=term, content=f"关于 {term} 的讨论和说明"))

    return points[: tables.MAX_KNOWLEDGE_POINTS]


# -- Insights -------------------------------------------------------------------


def matched_domains(texts: Iterable[str]) -> list[str]:
    """Domains with at least two distinct keywords present, in table order."""
    corpus = "\n".join(texts)
    domains = []
    for domain, keywords in tables.DOMAIN_KEYWORDS.items():
        hits = {kw for kw in keywords if contains_keyword(corpus, kw)}
        if len(hits) >= tables.DOMAIN_MIN_MATCHES:
            domains.append(domain)
    return domains


def classify_questions(user_texts: Iterable[str]) -> dict[str, int]:
    """Count user messages per question category. Empty categories are omitted."""
    counts: dict[str, int] = {}
    for text in user_texts:
        for category, keywords in tables.QUESTION_CATEGORIES.items():
            if any(contains_keyword(text, kw) for kw in keywords):
                counts[category] = counts.get(category, 0) + 1
    return {c: counts[c] for c in tables.QUESTION_CATEGORIES if c in counts}


def recurring_themes(texts: Iterable[str]) -> list[str]:
    """Most frequent short tokens, stop-words removed."""
    counter: Counter[str] = Counter()
    for text in texts:
        lowered = text.lower()
        tokens = _CJK_TOKEN_RE.findall(lowered) + _LATIN_TOKEN_RE.findall(lowered)
        counter.update(t for t in tokens if t not in tables.STOP_WORDS)
    top = counter.most_common(tables.THEME_TOP_N)
    if not top or top[0][1] < tables.THEME_MIN_COUNT:
        return []
    return [token for token, count in top if count >= tables.THEME_MIN_COUNT]


def generate_insights(messages: Sequence[Message]) -> list[str]:
    user_texts = _contents(messages, USER)
    assistant_texts = _contents(messages, ASSISTANT)
    insights: list[str] = []

    domains = matched_domains(m.content for m in messages)
    if domains:
        insights.append(f"今天的讨论主要涉及{'、'.join(domains)}等领域。")

    categories = classify_questions(user_texts)
    if categories:
        parts = "、".join(f"{name} {count} 个" for name, count in categories.items())
        insights.append(f"提问类型分布：{parts}。")

    mean_length = _mean_length(assistant_texts)
    if mean_length > tables.DEEP_DISCUSSION_MEAN_LENGTH:
        insights.append(
            f"回复平均长度约 {round(mean_length)} 字，讨论较为深入，建议整理成笔记以便复习。"
        )
    if assistant_texts and len(user_texts) > tables.ACTIVE_LEARNER_RATIO * len(assistant_texts):
        insights.append("提问频率较高，体现了积极主动的学习状态。")

    themes = recurring_themes(m.content for m in messages)
    if themes:
        insights.append(f"反复出现的主题：{'、'.join(themes)}。")

    return insights or [tables.FALLBACK_INSIGHT]


# -- Report -------------------------------------------------------------------


def summarize(messages: Sequence[Message], date: str, origin: str = ORIGIN_HEURISTIC) -> str:
    """Build the full heuristic report for one day's messages."""
    return render_report(
        date,
        MessageCounts.of(messages),
        extract_topics(messages),
        extract_knowledge_points(messages),
        generate_insights(messages),
        origin=origin,
    )
