from __future__ import annotations

from ai_news_ingest.core.constants import (
    BASE_IMPORTANCE_SCORE,
    FEATURED_MIN_SCORE,
    IMPORTANT_KEYWORDS,
    MAX_KEYWORD_BONUS,
    MIN_IMPORTANCE_DEFAULT,
    MIN_IMPORTANCE_RESEARCH,
    PRESTIGE_BONUS,
    PRESTIGIOUS_SOURCES,
)


def min_importance_for(is_research: bool) -> int:
    return MIN_IMPORTANCE_RESEARCH if is_research else MIN_IMPORTANCE_DEFAULT


def is_featured(score: int) -> bool:
    return score >= FEATURED_MIN_SCORE


class ImportanceScorer:
    """키워드 적중과 소스 신뢰도로 정수 중요도 점수 산출 (순수 함수)."""

    def __init__(
        self,
        *,
        keywords: list[str] | None = None,
        prestigious_sources: set[str] | None = None,
        base_score: int = BASE_IMPORTANCE_SCORE,
        max_keyword_bonus: int = MAX_KEYWORD_BONUS,
        prestige_bonus: int = PRESTIGE_BONUS,
    ) -> None:
        self._keywords = [k.lower() for k in (keywords or IMPORTANT_KEYWORDS)]
        self._prestigious_sources = prestigious_sources or PRESTIGIOUS_SOURCES
        self._base_score = base_score
        self._max_keyword_bonus = max_keyword_bonus
        self._prestige_bonus = prestige_bonus

    def matched_keywords(self, title: str, summary: str) -> list[str]:
        text = f"{title} {summary}".lower()
        return [k for k in dict.fromkeys(self._keywords) if k in text]

    def score(self, title: str, summary: str, source: str) -> int:
        score = self._base_score
        score += min(len(self.matched_keywords(title, summary)), self._max_keyword_bonus)
        if source in self._prestigious_sources:
            score += self._prestige_bonus
        return score

    @property
    def max_score(self) -> int:
        return self._base_score + self._max_keyword_bonus + self._prestige_bonus
