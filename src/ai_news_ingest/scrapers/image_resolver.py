from __future__ import annotations

import hashlib
import logging
from typing import Callable

from ai_news_ingest.core.config import ImageResolverConfig
from ai_news_ingest.core.constants import CATEGORY_FALLBACK_IMAGES, FALLBACK_NEWS_IMAGES
from ai_news_ingest.models import FeedItem
from ai_news_ingest.scrapers.image_extractor import extract_image_url
from ai_news_ingest.scrapers.image_generator import HuggingFaceImageGenerator, ImageGenerationState
from ai_news_ingest.utils import sanitize_text

logger = logging.getLogger(__name__)


def build_image_prompt(*, title: str, summary: str, category: str, source: str) -> str:
    clean_summary = sanitize_text(summary)[:260].strip()
    clean_title = sanitize_text(title).replace('"', "").replace("'", "")
    focus = f"Focus on {category.lower()} innovation." if category else "Focus on AI innovation."
    authority = f"As reported by {source}." if source else ""
    return (
        f"{clean_title}. {clean_summary} {focus} {authority} "
        "Shot as high-resolution editorial photography, natural lighting, expressive but realistic."
    )


def select_fallback_image(*, title: str, base: str, category: str | None) -> str:
    """카테고리 큐레이션 이미지, 없으면 제목+기준 URL 해시로 일반 이미지 선택."""
    if category and category in CATEGORY_FALLBACK_IMAGES:
        return CATEGORY_FALLBACK_IMAGES[category]
    digest = hashlib.sha1(f"{title}{base}".encode("utf-8")).hexdigest()
    return FALLBACK_NEWS_IMAGES[int(digest, 16) % len(FALLBACK_NEWS_IMAGES)]


class ImageResolver:
    def __init__(
        self,
        *,
        generator: HuggingFaceImageGenerator,
        config: ImageResolverConfig | None = None,
        extractor: Callable[[FeedItem], str | None] = extract_image_url,
    ) -> None:
        self._generator = generator
        self._config = config or ImageResolverConfig()
        self._extractor = extractor

    @property
    def fallback_policy(self) -> str:
        return self._config.fallback_policy

    def resolve(
        self,
        item: FeedItem,
        *,
        title: str,
        summary: str,
        category: str,
        source: str,
        state: ImageGenerationState,
    ) -> str | None:
        """피드 이미지 → HTML 스크랩 → 이미지 생성 → 정적 대체 순서로 첫 성공 반환.

        정책이 ``skip``이면 마지막 단계 대신 None을 반환한다.
        """
        existing = self._extractor(item)
        if existing:
            return existing

        prompt = build_image_prompt(title=title, summary=summary, category=category, source=source)
        generated = self._generator.generate(prompt, state)
        if generated:
            return generated

        if self._config.fallback_policy == "skip":
            logger.info('사용 가능한 이미지 없음: "%s" (%s)', title, source)
            return None
        return select_fallback_image(title=title, base=item.link or "", category=category)
