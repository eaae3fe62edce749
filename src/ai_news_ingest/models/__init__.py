"""Typed models for feed sources, items and article rows."""

from .article import (
    ArticleRow,
    EditorialPackage,
    Feed,
    FeedItem,
    FeedSource,
    FilterResult,
    RunMetrics,
)

__all__ = [
    "ArticleRow",
    "EditorialPackage",
    "Feed",
    "FeedItem",
    "FeedSource",
    "FilterResult",
    "RunMetrics",
]
