from __future__ import annotations

import re

from ai_news_ingest.core.constants import (
    BANNED_PATTERNS,
    BANNED_TOPICS,
    MIN_WORD_COUNT,
    MIN_WORD_COUNT_SHORT_FORM,
    REQUIRED_AI_SIGNALS,
    SHORT_FORM_SOURCE_TYPES,
)
from ai_news_ingest.models import FilterResult
from ai_news_ingest.utils.common import word_count


def _compile_topic(topic: str) -> re.Pattern[str] | None:
    normalized = (topic or "").strip().lower()
    if not normalized:
        return None
    # 단어 경계 매칭 ("forward" 안의 "war"는 제외), 구 내부 공백 길이는 허용
    body = r"\s+".join(re.escape(part) for part in normalized.split())
    return re.compile(rf"(?:^|\W){body}(?:\W|$)", re.IGNORECASE)


def min_word_count_for(source_type: str) -> int:
    if source_type in SHORT_FORM_SOURCE_TYPES or source_type.startswith("youtube"):
        return MIN_WORD_COUNT_SHORT_FORM
    return MIN_WORD_COUNT


class ContentFilter:
    def __init__(
        self,
        *,
        min_word_count: int = MIN_WORD_COUNT,
        required_signals: list[str] | None = None,
        banned_patterns: list[str] | None = None,
        banned_topics: list[str] | None = None,
    ) -> None:
        self._min_word_count = min_word_count
        self._required_signals = [s.lower() for s in (required_signals or REQUIRED_AI_SIGNALS)]
        self._banned_patterns = [
            (p, re.compile(p, re.IGNORECASE)) for p in (banned_patterns or BANNED_PATTERNS)
        ]
        self._banned_topics = [
            (t, compiled)
            for t in (banned_topics or BANNED_TOPICS)
            if (compiled := _compile_topic(t)) is not None
        ]

    def check(
        self,
        *,
        title: str,
        summary: str,
        body: str,
        min_word_count: int | None = None,
    ) -> FilterResult:
        combined = " ".join(x for x in (title, summary, body) if x).lower()
        floor = min_word_count if min_word_count and min_word_count > 0 else self._min_word_count

        if word_count(combined) < floor:
            return FilterResult(False, "insufficient word count")

        if not any(signal in combined for signal in self._required_signals):
            return FilterResult(False, "missing AI keyword (no AI signal terms found)")

        for raw, pattern in self._banned_patterns:
            if pattern.search(combined):
                return FilterResult(False, f"banned content pattern ({raw})")

        for topic, pattern in self._banned_topics:
            if pattern.search(combined):
                return FilterResult(False, f"banned topic ({topic})")

        return FilterResult(True)
