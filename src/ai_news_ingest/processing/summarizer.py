from __future__ import annotations

import re
from collections import Counter

from ai_news_ingest.core.constants import STOPWORDS, SUMMARY_CHAR_LIMIT
from ai_news_ingest.models import EditorialPackage
from ai_news_ingest.utils import clamp_text, sanitize_text

_TOKEN_STRIP_RE = re.compile(r"[^a-z0-9\s]")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.?!])\s+(?=\S)")


def tokenize(text: str) -> list[str]:
    return _TOKEN_STRIP_RE.sub(" ", (text or "").lower()).split()


def split_sentences(text: str) -> list[str]:
    normalized = " ".join((text or "").split())
    if not normalized:
        return []
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(normalized) if s.strip()]


def build_frequency_map(text: str) -> Counter[str]:
    return Counter(t for t in tokenize(text) if t not in STOPWORDS and len(t) > 2)


def _score_sentence(sentence: str, freq: Counter[str]) -> float:
    tokens = tokenize(sentence)
    if not tokens:
        return 0.0
    return sum(freq.get(t, 0) for t in tokens) / len(tokens)


def select_top_sentences(sentences: list[str], freq: Counter[str], limit: int) -> list[str]:
    if len(sentences) <= limit:
        return list(sentences)
    ranked = sorted(
        enumerate(sentences),
        key=lambda pair: _score_sentence(pair[1], freq),
        reverse=True,
    )[:limit]
    # 원문 순서 유지
    return [sentence for _, sentence in sorted(ranked, key=lambda pair: pair[0])]


def extract_top_keywords(freq: Counter[str], limit: int = 5) -> list[str]:
    return [keyword for keyword, _ in freq.most_common(limit)]


def build_narrative(title: str, source: str, keywords: list[str]) -> str:
    focus = " & ".join(keywords[:2]) or "momentum across core AI research and deployment"
    if title and source:
        return f'{source} reports that "{title}" underscores {focus}.'
    if title:
        return f'"{title}" highlights {focus}.'
    return f"This update reflects {focus}."


def format_editorial_summary(
    sentences: list[str],
    *,
    highlights: list[str],
    keywords: list[str],
    narrative: str,
    limit: int = SUMMARY_CHAR_LIMIT,
) -> str:
    blocks: list[str] = []
    if sentences:
        blocks.append(" ".join(sentences))
    if highlights:
        blocks.append("Key Points:\n- " + "\n- ".join(highlights))
    if keywords:
        blocks.append(f"Topics: {', '.join(keywords)}")
    if narrative:
        blocks.append(f"Why it matters: {narrative}")
    return clamp_text("\n\n".join(blocks), limit)


class ExtractiveSummarizer:
    """LLM을 쓸 수 없을 때의 결정적 로컬 요약기.

    같은 입력이면 항상 같은 결과를 돌려주며 예외를 던지지 않는다.
    """

    def __init__(self, *, sentence_limit: int = 2, keyword_limit: int = 5) -> None:
        self._sentence_limit = sentence_limit
        self._keyword_limit = keyword_limit

    def summarize(self, *, title: str, snippet: str, body: str, source: str = "") -> EditorialPackage:
        clean_title = sanitize_text(title)
        text = next(
            (v for v in (sanitize_text(snippet), sanitize_text(body)) if v),
            clean_title or "Summary unavailable",
        )
        full_text = " ".join(x for x in (sanitize_text(snippet), sanitize_text(body)) if x) or text
        freq = build_frequency_map(full_text)
        sentences = select_top_sentences(split_sentences(text), freq, self._sentence_limit)
        keywords = extract_top_keywords(freq, self._keyword_limit)
        narrative = build_narrative(clean_title, source, keywords)
        summary = format_editorial_summary(
            sentences or [text],
            highlights=[],
            keywords=keywords,
            narrative=narrative,
        )
        return EditorialPackage(
            summary=summary,
            content=summary,
            headline=clean_title,
            tags=keywords,
            highlights=[],
        )
