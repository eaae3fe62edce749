from __future__ import annotations

from ai_news_ingest.processing.scoring import ImportanceScorer, is_featured, min_importance_for


def test_base_score_without_keywords() -> None:
    scorer = ImportanceScorer()
    assert scorer.score("Weekly roundup", "Nothing notable here", "Some Blog") == 5


def test_keyword_bonus_is_capped() -> None:
    scorer = ImportanceScorer()
    title = "OpenAI announces GPT breakthrough"
    summary = "artificial intelligence research model release with funding from Microsoft and Google"
    assert scorer.score(title, summary, "Some Blog") == 10


def test_prestige_bonus_reaches_max() -> None:
    scorer = ImportanceScorer()
    title = "OpenAI announces GPT breakthrough"
    summary = "artificial intelligence research model release"
    assert scorer.score(title, summary, "MIT Technology Review") == 12
    assert scorer.max_score == 12


def test_prestige_requires_exact_name() -> None:
    scorer = ImportanceScorer()
    assert scorer.score("x", "y", "mit technology review") == 5


def test_score_monotonic_in_distinct_keywords() -> None:
    scorer = ImportanceScorer()
    words = ["openai", "gpt", "launch", "ethics", "funding", "nvidia", "safety"]
    previous = 0
    for i in range(len(words) + 1):
        current = scorer.score(" ".join(words[:i]), "", "Blog")
        assert current >= previous
        assert current <= 10
        previous = current


def test_repeated_keyword_counts_once() -> None:
    scorer = ImportanceScorer()
    assert scorer.score("openai openai openai", "openai", "Blog") == 6


def test_publication_floor_and_featured() -> None:
    assert min_importance_for(True) == 5
    assert min_importance_for(False) == 6
    assert is_featured(9) is True
    assert is_featured(8) is False
