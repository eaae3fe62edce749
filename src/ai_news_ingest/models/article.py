from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import NotRequired, TypedDict


@dataclass(frozen=True)
class FeedSource:
    name: str
    main_url: str
    rss_url: str = ""


@dataclass(frozen=True)
class Feed:
    id: str
    name: str
    type: str
    main_url: str
    url: str | None
    category: str
    source_category: str
    is_research: bool


@dataclass(frozen=True)
class FeedItem:
    title: str = ""
    link: str = ""
    guid: str = ""
    summary_html: str = ""
    content_html: str = ""
    published_at: str | None = None
    image_candidates: tuple[str, ...] = ()


@dataclass(frozen=True)
class FilterResult:
    allowed: bool
    reason: str = ""


@dataclass(frozen=True)
class EditorialPackage:
    summary: str
    content: str
    headline: str
    tags: list[str] = field(default_factory=list)
    highlights: list[str] = field(default_factory=list)


class ArticleRow(TypedDict):
    title: str
    summary: str
    category: str
    source: str
    source_url: str
    image_url: str | None
    importance_score: int
    is_featured: bool
    published_at: str
    id: NotRequired[str]
    created_at: NotRequired[str]


@dataclass
class RunMetrics:
    articlesFetchedCount: int = 0
    articlesSummarizedCount: int = 0
    upsertedCount: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def incr(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def as_dict(self) -> dict[str, int]:
        return {
            "articlesFetchedCount": self.articlesFetchedCount,
            "articlesSummarizedCount": self.articlesSummarizedCount,
            "upsertedCount": self.upsertedCount,
        }
