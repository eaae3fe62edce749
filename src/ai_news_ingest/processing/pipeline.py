from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from ai_news_ingest.core.config import (
    CATEGORIES_PATH,
    ITEM_CONCURRENCY,
    MAX_ITEMS_PER_FEED,
    MAX_SOURCES_PER_RUN,
    SELF_TEST_MAX_ARTICLES,
    SELF_TEST_MAX_SOURCES,
    SOURCES_PATH,
    YOUTUBE_CACHE_PATH,
    ImageResolverConfig,
    OpenRouterConfig,
)
from ai_news_ingest.core.constants import SOURCE_CATEGORY, TITLE_MAX_CHARS
from ai_news_ingest.core.errors import FeedFetchError, StorageError
from ai_news_ingest.models import ArticleRow, Feed, FeedItem, FeedSource, RunMetrics
from ai_news_ingest.processing.content_filter import ContentFilter, min_word_count_for
from ai_news_ingest.processing.llm_client import OpenRouterClient
from ai_news_ingest.processing.merge import merge_articles
from ai_news_ingest.processing.rewriter import EditorialRewriter
from ai_news_ingest.processing.scoring import ImportanceScorer, is_featured, min_importance_for
from ai_news_ingest.processing.types import LogFunc
from ai_news_ingest.scrapers.feed_fetcher import FeedFetcher
from ai_news_ingest.scrapers.image_generator import HuggingFaceImageGenerator, ImageGenerationState
from ai_news_ingest.scrapers.image_resolver import ImageResolver
from ai_news_ingest.sources.classifier import SourceClassifier, is_research_source
from ai_news_ingest.sources.registry import CategoryRegistry, load_categories, load_sources
from ai_news_ingest.sources.youtube import YoutubeFeedCache, YoutubeFeedResolver
from ai_news_ingest.utils import safe_id_from_name, sanitize_text, to_iso_date


@dataclass
class RunContext:
    """한 번의 수집 실행 상태. 실행마다 새로 만든다."""

    self_test: bool = False
    max_articles: int | None = None
    metrics: RunMetrics = field(default_factory=RunMetrics)
    image_state: ImageGenerationState = field(default_factory=ImageGenerationState)

    def remaining(self, collected: int) -> int | None:
        if self.max_articles is None:
            return None
        return max(0, self.max_articles - collected)


@dataclass
class PipelineResult:
    articles: list[ArticleRow]
    persisted: list[dict[str, Any]]
    metrics: RunMetrics

    @property
    def count(self) -> int:
        return len(self.persisted)


class IngestionPipeline:
    def __init__(
        self,
        *,
        sources: list[FeedSource],
        categories: CategoryRegistry,
        classifier: SourceClassifier,
        youtube_resolver: YoutubeFeedResolver,
        youtube_cache: YoutubeFeedCache,
        fetcher: FeedFetcher,
        content_filter: ContentFilter,
        scorer: ImportanceScorer,
        rewriter: EditorialRewriter,
        image_resolver: ImageResolver,
        store: Any,
        logger: LogFunc,
        max_sources_per_run: int = MAX_SOURCES_PER_RUN,
        self_test_max_sources: int = SELF_TEST_MAX_SOURCES,
        self_test_max_articles: int = SELF_TEST_MAX_ARTICLES,
        max_items_per_feed: int = MAX_ITEMS_PER_FEED,
        item_concurrency: int = ITEM_CONCURRENCY,
    ) -> None:
        self._sources = sources
        self._categories = categories
        self._classifier = classifier
        self._youtube_resolver = youtube_resolver
        self._youtube_cache = youtube_cache
        self._fetcher = fetcher
        self._content_filter = content_filter
        self._scorer = scorer
        self._rewriter = rewriter
        self._image_resolver = image_resolver
        self._store = store
        self._log = logger
        self._max_sources_per_run = max_sources_per_run
        self._self_test_max_sources = self_test_max_sources
        self._self_test_max_articles = self_test_max_articles
        self._max_items_per_feed = max_items_per_feed
        self._item_concurrency = max(1, item_concurrency)
        self._youtube_lock = threading.Lock()

    @property
    def sources(self) -> list[FeedSource]:
        return list(self._sources)

    @property
    def categories(self) -> CategoryRegistry:
        return self._categories

    @property
    def llm_enabled(self) -> bool:
        return self._rewriter.llm_enabled

    # -----------------------------
    # 피드 목록
    # -----------------------------
    def _resolve_youtube_feed(self, source: FeedSource) -> str | None:
        cached = self._youtube_cache.get(source.main_url)
        if cached and cached.startswith("http"):
            return cached
        resolved = self._youtube_resolver.resolve(source.main_url)
        if resolved:
            self._youtube_cache.set(source.main_url, resolved)
            return resolved
        self._log(f"⚠️ YouTube RSS 확인 실패: {source.name} ({source.main_url})")
        return None

    def build_feed_list(self) -> list[Feed]:
        feeds: list[Feed] = []
        with self._youtube_lock:
            self._youtube_cache.load()
            for source in self._sources:
                source_type = self._classifier.classify(source)
                category = self._classifier.infer_category(source_type, source)
                url = source.rss_url or None
                if source_type.startswith("youtube") and not url:
                    url = self._resolve_youtube_feed(source)
                feeds.append(
                    Feed(
                        id=safe_id_from_name(source.name),
                        name=source.name,
                        type=source_type,
                        main_url=source.main_url,
                        url=url,
                        category=category,
                        source_category=SOURCE_CATEGORY,
                        is_research=is_research_source(source_type, category),
                    )
                )
            if self._youtube_cache.dirty:
                try:
                    self._youtube_cache.save()
                except OSError as exc:
                    self._log(f"⚠️ YouTube 캐시 저장 실패: {exc}")
        return feeds

    def select_feeds(self, feeds: list[Feed], *, self_test: bool = False) -> list[Feed]:
        rss_feeds = [
            f for f in feeds
            if f.type != "research_platform_api" and isinstance(f.url, str) and f.url.startswith("http")
        ]
        api_feeds = [f for f in feeds if f.type == "research_platform_api"]
        limit = self._self_test_max_sources if self_test else self._max_sources_per_run
        return (rss_feeds + api_feeds)[: max(0, limit)]

    # -----------------------------
    # 기사 단위 처리
    # -----------------------------
    def build_article(self, item: FeedItem, feed: Feed, ctx: RunContext) -> ArticleRow | None:
        title = sanitize_text(item.title) or "No title"
        source_url = (item.link or item.guid or "").strip()
        if not source_url.startswith(("http://", "https://")):
            self._log(f"⏭️ 원문 URL 없음: {feed.name} ({feed.type}) \"{title}\"")
            return None

        snippet = sanitize_text(item.summary_html or item.content_html) or "No summary available"
        body = sanitize_text(item.content_html or item.summary_html)

        verdict = self._content_filter.check(
            title=title,
            summary=snippet,
            body=body,
            min_word_count=min_word_count_for(feed.type),
        )
        if not verdict.allowed:
            self._log(f"🚫 필터 제외: {feed.name} \"{title}\" ({verdict.reason})")
            return None

        package = self._rewriter.rewrite(
            title=title,
            snippet=snippet,
            body=body,
            source=feed.name,
            category=feed.category,
        )
        ctx.metrics.incr("articlesSummarizedCount")

        summary = package.content or package.summary or snippet
        score = self._scorer.score(title, summary, feed.name)
        if score < min_importance_for(feed.is_research):
            return None

        image_url = self._image_resolver.resolve(
            item,
            title=title,
            summary=summary,
            category=feed.category,
            source=feed.name,
            state=ctx.image_state,
        )
        if image_url is None:
            self._log(f"🖼️ 이미지 없음, 게시 생략: \"{title}\" ({feed.name})")
            return None

        return ArticleRow(
            title=title[:TITLE_MAX_CHARS],
            summary=summary,
            category=feed.category,
            source=feed.name,
            source_url=source_url,
            image_url=image_url,
            importance_score=score,
            is_featured=is_featured(score),
            published_at=to_iso_date(item.published_at),
        )

    def _build_articles(self, items: list[FeedItem], feed: Feed, ctx: RunContext) -> list[ArticleRow]:
        def _safe_build(item: FeedItem) -> ArticleRow | None:
            try:
                return self.build_article(item, feed, ctx)
            except Exception as exc:
                self._log(f"⚠️ 기사 처리 실패: {feed.name} \"{item.title[:80]}\" ({type(exc).__name__}: {exc})")
                return None

        if self._item_concurrency == 1 or len(items) <= 1:
            results = [_safe_build(item) for item in items]
        else:
            with ThreadPoolExecutor(max_workers=self._item_concurrency) as executor:
                results = list(executor.map(_safe_build, items))
        return [row for row in results if row is not None]

    def _fetch_items(self, feed: Feed, ctx: RunContext) -> list[FeedItem]:
        if feed.type == "research_platform_api":
            self._log(f"📡 {feed.name} (API) 수집 중...")
            items = self._fetcher.fetch_huggingface_models()
        else:
            self._log(f"📡 {feed.name} 수집 중...")
            items = self._fetcher.fetch_feed(feed.url or "", limit=self._max_items_per_feed)
        ctx.metrics.incr("articlesFetchedCount", len(items))
        return items

    def collect(self, ctx: RunContext) -> list[ArticleRow]:
        feeds = self.select_feeds(self.build_feed_list(), self_test=ctx.self_test)
        collected: list[ArticleRow] = []
        for feed in feeds:
            remaining = ctx.remaining(len(collected))
            if remaining == 0:
                break
            try:
                items = self._fetch_items(feed, ctx)
                articles = self._build_articles(items, feed, ctx)
            except FeedFetchError as exc:
                self._log(f"⚠️ 피드 수집 실패: {feed.name} ({exc})")
                continue
            except Exception as exc:
                self._log(f"⚠️ 피드 처리 실패: {feed.name} ({type(exc).__name__}: {exc})")
                continue
            remaining = ctx.remaining(len(collected))
            collected += articles if remaining is None else articles[:remaining]
            self._log(f"✅ {feed.name}: 주요 기사 {len(articles)}건")
        return collected

    # -----------------------------
    # 저장
    # -----------------------------
    def persist(self, articles: list[ArticleRow], ctx: RunContext) -> list[dict[str, Any]]:
        # source_url 기준 중복 제거 (먼저 들어온 기사 우선)
        seen: set[str] = set()
        unique: list[ArticleRow] = []
        for a in articles:
            if a["source_url"] in seen:
                continue
            seen.add(a["source_url"])
            unique.append(a)
        articles = unique
        urls = [a["source_url"] for a in articles if a.get("source_url")]
        existing: dict[str, str | None] = {}
        try:
            existing = self._store.fetch_existing_images(urls)
        except StorageError as exc:
            self._log(f"⚠️ 기존 이미지 조회 실패, 병합 보호 생략: {exc}")
        merged = merge_articles(articles, existing)
        persisted = self._store.upsert_articles(merged)
        ctx.metrics.incr("upsertedCount", len(persisted))
        return persisted

    def run(self, *, self_test: bool = False, metrics: RunMetrics | None = None) -> PipelineResult:
        ctx = RunContext(
            self_test=self_test,
            max_articles=self._self_test_max_articles if self_test else None,
            metrics=metrics or RunMetrics(),
        )
        articles = self.collect(ctx)
        if not articles:
            self._log("ℹ️ 중요도 기준을 넘은 기사가 없습니다.")
            return PipelineResult(articles=[], persisted=[], metrics=ctx.metrics)

        self._log(f"💾 {len(articles)}건 저장 중...")
        persisted = self.persist(articles, ctx)
        self._log(f"✅ {len(persisted)}건 저장 완료")
        return PipelineResult(articles=articles, persisted=persisted, metrics=ctx.metrics)


def build_default_pipeline(*, logger: LogFunc, store: Any) -> IngestionPipeline:
    categories = load_categories(CATEGORIES_PATH)
    image_config = ImageResolverConfig()
    return IngestionPipeline(
        sources=load_sources(SOURCES_PATH),
        categories=categories,
        classifier=SourceClassifier(categories=categories),
        youtube_resolver=YoutubeFeedResolver(),
        youtube_cache=YoutubeFeedCache(YOUTUBE_CACHE_PATH),
        fetcher=FeedFetcher(),
        content_filter=ContentFilter(),
        scorer=ImportanceScorer(),
        rewriter=EditorialRewriter(client=OpenRouterClient(OpenRouterConfig())),
        image_resolver=ImageResolver(
            generator=HuggingFaceImageGenerator(image_config),
            config=image_config,
        ),
        store=store,
        logger=logger,
    )
