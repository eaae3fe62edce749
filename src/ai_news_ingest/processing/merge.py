from __future__ import annotations

from typing import Any, Mapping

from ai_news_ingest.core.constants import (
    CATEGORY_FALLBACK_IMAGES,
    DEFAULT_CATEGORY_FALLBACK_IMAGE,
    FALLBACK_NEWS_IMAGES,
    GENERIC_FALLBACK_PREFIXES,
)
from ai_news_ingest.models import ArticleRow

_STATIC_FALLBACKS = (
    set(FALLBACK_NEWS_IMAGES)
    | set(CATEGORY_FALLBACK_IMAGES.values())
    | {DEFAULT_CATEGORY_FALLBACK_IMAGE}
)


def is_renderable_image_url(value: Any) -> bool:
    if value is None:
        return False
    url = str(value).strip()
    if not url or url in {"null", "undefined"}:
        return False
    if url.startswith("data:image/"):
        return True
    return url.startswith("https://") or url.startswith("http://")


def is_generic_fallback_url(value: Any) -> bool:
    if not value:
        return False
    url = str(value).strip()
    return url.startswith(GENERIC_FALLBACK_PREFIXES) or url in _STATIC_FALLBACKS


def merge_image(existing_image: Any, incoming_image: Any) -> Any:
    """기존의 좋은 이미지를 더 나쁜 값으로 덮어쓰지 않는다."""
    if (
        is_renderable_image_url(existing_image)
        and not is_generic_fallback_url(existing_image)
        and (not is_renderable_image_url(incoming_image) or is_generic_fallback_url(incoming_image))
    ):
        return existing_image
    return incoming_image


def merge_articles(
    articles: list[ArticleRow],
    existing_images: Mapping[str, str | None],
) -> list[ArticleRow]:
    merged: list[ArticleRow] = []
    for article in articles:
        existing = existing_images.get(article["source_url"])
        image = merge_image(existing, article.get("image_url"))
        if image is article.get("image_url"):
            merged.append(article)
        else:
            merged.append({**article, "image_url": image})  # type: ignore[typeddict-item]
    return merged
