from __future__ import annotations

from typing import Callable

from ai_news_ingest.core.constants import RESEARCH_SOURCE_TYPES
from ai_news_ingest.models import FeedSource
from ai_news_ingest.sources.registry import CategoryRegistry

# (main_url, rss_url) 소문자 → 일치 여부
SourcePredicate = Callable[[str, str], bool]
# (source_type, name, main_url) 소문자 → 일치 여부
CategoryPredicate = Callable[[str, str, str], bool]


def _any_in(text: str, needles: tuple[str, ...]) -> bool:
    return any(n in text for n in needles)


_RESEARCH_DOMAINS = ("arxiv.org", "paperswithcode.com", "jmlr.org", "mlr.press", "distill.pub")
_NEWSLETTER_HOSTS = ("substack.com", "beehiiv.com")
_PODCAST_RSS_HINTS = ("/podcast", "feeds.blubrry.com", "changelog.com")
_PODCAST_MAIN_HINTS = ("/podcast", "ai-podcast")
_COMPANY_BLOG_DOMAINS = (
    "openai.com",
    "deepmind.com",
    "ai.meta.com",
    "huggingface.co/blog",
    "blogs.microsoft.com",
    "aws.amazon.com/blogs",
    "developer.nvidia.com",
    "research.ibm.com",
)
_BUSINESS_NAME_HINTS = ("business", "trends", "analytics")
_BUSINESS_DOMAINS = ("forrester.com", "marketingaiinstitute.com", "oecd.ai", "partnershiponai.org")
_ACADEMIC_NAME_HINTS = ("stanford", "bair", "mila", "ieee", "mit", "distill", "jmlr", "pmlr")

# 위에서부터 첫 일치가 결과. 재생목록(list=) 판정이 채널보다 앞선다.
SOURCE_TYPE_RULES: list[tuple[SourcePredicate, str]] = [
    (lambda main, rss: "youtube.com" in main and "list=" in main, "youtube_playlist"),
    (lambda main, rss: "youtube.com" in main, "youtube_channel"),
    (lambda main, rss: "reddit.com" in main, "community_reddit"),
    (lambda main, rss: "huggingface.co/models" in main, "research_platform_api"),
    (lambda main, rss: _any_in(main, _RESEARCH_DOMAINS), "research_platform"),
    (lambda main, rss: "substack.com" in main or _any_in(rss, _NEWSLETTER_HOSTS) or "beehiiv.com" in main, "newsletter"),
    (lambda main, rss: _any_in(rss, _PODCAST_RSS_HINTS) or _any_in(main, _PODCAST_MAIN_HINTS), "podcast"),
    (lambda main, rss: _any_in(main, _COMPANY_BLOG_DOMAINS), "company_blog"),
]
DEFAULT_SOURCE_TYPE = "rss_website"

CATEGORY_RULES: list[tuple[CategoryPredicate, str]] = [
    (lambda t, name, main: t in RESEARCH_SOURCE_TYPES, "Research"),
    (lambda t, name, main: t == "community_reddit" and "datascience" in name, "Business"),
    (lambda t, name, main: t == "community_reddit", "Research"),
    (lambda t, name, main: t == "podcast" and ("business" in name or "emerj.com" in main), "Business"),
    (lambda t, name, main: t == "podcast", "Technology"),
    (lambda t, name, main: _any_in(name, _BUSINESS_NAME_HINTS) or _any_in(main, _BUSINESS_DOMAINS), "Business"),
    (lambda t, name, main: _any_in(name, _ACADEMIC_NAME_HINTS), "Research"),
]
DEFAULT_CATEGORY = "Technology"


def classify_source_type(
    source: FeedSource,
    rules: list[tuple[SourcePredicate, str]] | None = None,
) -> str:
    main = (source.main_url or "").lower()
    rss = (source.rss_url or "").lower()
    for predicate, source_type in rules or SOURCE_TYPE_RULES:
        if predicate(main, rss):
            return source_type
    return DEFAULT_SOURCE_TYPE


def infer_category(
    source_type: str,
    source: FeedSource,
    rules: list[tuple[CategoryPredicate, str]] | None = None,
) -> str:
    name = (source.name or "").lower()
    main = (source.main_url or "").lower()
    for predicate, category in rules or CATEGORY_RULES:
        if predicate(source_type, name, main):
            return category
    return DEFAULT_CATEGORY


def is_research_source(source_type: str, category: str) -> bool:
    return source_type in RESEARCH_SOURCE_TYPES or category == "Research"


class SourceClassifier:
    def __init__(
        self,
        *,
        categories: CategoryRegistry,
        type_rules: list[tuple[SourcePredicate, str]] | None = None,
        category_rules: list[tuple[CategoryPredicate, str]] | None = None,
    ) -> None:
        self._categories = categories
        self._type_rules = type_rules or SOURCE_TYPE_RULES
        self._category_rules = category_rules or CATEGORY_RULES

    def classify(self, source: FeedSource) -> str:
        return classify_source_type(source, self._type_rules)

    def infer_category(self, source_type: str, source: FeedSource) -> str:
        # 규칙 결과가 등록된 카테고리가 아니면 경고 후 기본값
        return self._categories.ensure(infer_category(source_type, source, self._category_rules))
