from __future__ import annotations

from ai_news_ingest.core.constants import CATEGORY_FALLBACK_IMAGES, FALLBACK_NEWS_IMAGES
from ai_news_ingest.processing.merge import (
    is_generic_fallback_url,
    is_renderable_image_url,
    merge_articles,
    merge_image,
)

_GOOD = "https://cdn.example.com/real.jpg"
_NEW = "https://cdn.example.com/new.jpg"


def test_renderable_and_generic() -> None:
    assert is_renderable_image_url(_GOOD)
    assert is_renderable_image_url("data:image/png;base64,AAAA")
    assert not is_renderable_image_url("null")
    assert not is_renderable_image_url(None)
    assert not is_renderable_image_url("/relative.jpg")

    assert is_generic_fallback_url("https://source.unsplash.com/featured/?robot")
    assert is_generic_fallback_url(FALLBACK_NEWS_IMAGES[0])
    assert is_generic_fallback_url(CATEGORY_FALLBACK_IMAGES["Research"])
    assert not is_generic_fallback_url(_GOOD)


def test_merge_keeps_good_image_over_placeholder() -> None:
    assert merge_image(_GOOD, FALLBACK_NEWS_IMAGES[1]) == _GOOD
    assert merge_image(_GOOD, None) == _GOOD
    assert merge_image(_GOOD, "undefined") == _GOOD


def test_merge_takes_better_incoming() -> None:
    assert merge_image(_GOOD, _NEW) == _NEW
    assert merge_image(FALLBACK_NEWS_IMAGES[0], _NEW) == _NEW
    assert merge_image(None, FALLBACK_NEWS_IMAGES[0]) == FALLBACK_NEWS_IMAGES[0]


def test_merge_articles_uses_existing_by_source_url() -> None:
    articles = [
        {"source_url": "https://a.example/1", "image_url": CATEGORY_FALLBACK_IMAGES["Technology"]},
        {"source_url": "https://a.example/2", "image_url": _NEW},
    ]
    merged = merge_articles(articles, {"https://a.example/1": _GOOD, "https://a.example/2": _GOOD})
    assert [a["image_url"] for a in merged] == [_GOOD, _NEW]
    assert articles[0]["image_url"] == CATEGORY_FALLBACK_IMAGES["Technology"]
