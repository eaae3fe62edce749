from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from ai_news_ingest.core.errors import ConfigError
from ai_news_ingest.models import FeedSource

logger = logging.getLogger(__name__)

_MULTI_SPACE_RE = re.compile(r"\s{2,}")


class CategoryRegistry:
    """인식 가능한 기사 카테고리 집합. 첫 항목이 기본값."""

    def __init__(self, categories: list[str]) -> None:
        cleaned = [c.strip() for c in categories if isinstance(c, str) and c.strip()]
        if not cleaned:
            raise ConfigError("articleCategories must contain at least one category.")
        self._categories = cleaned
        self._category_set = set(cleaned)

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def default(self) -> str:
        return self._categories[0]

    def __contains__(self, category: object) -> bool:
        return category in self._category_set

    def __len__(self) -> int:
        return len(self._categories)

    def ensure(self, category: str) -> str:
        if category in self._category_set:
            return category
        logger.warning(
            "⚠️ 알 수 없는 카테고리 %r → 기본값 %s 사용",
            category,
            self.default,
        )
        return self.default


def load_categories(path: str | Path) -> CategoryRegistry:
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to read category registry {path}: {exc}") from exc
    categories = payload.get("articleCategories") if isinstance(payload, dict) else None
    if not isinstance(categories, list):
        raise ConfigError(f"articleCategories missing in {path}")
    return CategoryRegistry(categories)


def parse_source_row(line: str) -> FeedSource:
    # 탭 구분이 기본, 탭이 부족하면 2칸 이상 공백으로 재시도
    parts = line.split("\t") if "\t" in line else _MULTI_SPACE_RE.split(line)
    parts = [p.strip() for p in parts] + ["", "", ""]
    return FeedSource(name=parts[0], main_url=parts[1], rss_url=parts[2])


def load_sources(path: str | Path) -> list[FeedSource]:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read source registry {path}: {exc}") from exc

    lines = [line.rstrip() for line in raw.splitlines() if line.strip()]
    if not lines or "name" not in lines[0].lower():
        raise ConfigError(f"Invalid TSV header in {path}")

    by_name: dict[str, FeedSource] = {}
    for line in lines[1:]:
        source = parse_source_row(line)
        if not source.name or not source.main_url:
            continue
        if source.name in by_name:
            logger.warning("⚠️ 중복 소스명 무시: %s", source.name)
            continue
        by_name[source.name] = source
    return list(by_name.values())
