from __future__ import annotations

import pytest


def test_package_imports() -> None:
    import ai_news_ingest  # noqa: F401

    from ai_news_ingest.core import config  # noqa: F401
    from ai_news_ingest.sources import classifier  # noqa: F401

    pytest.importorskip("feedparser")
    from ai_news_ingest.processing import pipeline  # noqa: F401
    from ai_news_ingest.processing import service  # noqa: F401


def test_default_data_paths() -> None:
    from ai_news_ingest.core.config import CATEGORIES_PATH, SOURCES_PATH, YOUTUBE_CACHE_PATH

    assert CATEGORIES_PATH.replace("\\", "/").endswith("/data/article_categories.json")
    assert SOURCES_PATH.replace("\\", "/").endswith("/data/ai_sources.tsv")
    assert YOUTUBE_CACHE_PATH.replace("\\", "/").endswith("/data/.cache/youtube_feeds.json")


def test_bundled_registries_load() -> None:
    from ai_news_ingest.core.config import CATEGORIES_PATH, SOURCES_PATH
    from ai_news_ingest.sources.registry import load_categories, load_sources

    categories = load_categories(CATEGORIES_PATH)
    sources = load_sources(SOURCES_PATH)

    assert categories.default == "Technology"
    assert len(sources) > 10
    assert len({s.name for s in sources}) == len(sources)
