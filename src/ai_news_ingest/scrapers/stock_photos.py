from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests

from ai_news_ingest.core.constants import (
    AI_FOCUS_KEYWORDS,
    CATEGORY_FALLBACK_IMAGES,
    DEFAULT_CATEGORY_FALLBACK_IMAGE,
    GENERIC_PHOTO_TAGS,
    STOPWORDS,
)
from ai_news_ingest.processing.types import HttpGet, SleepFunc

logger = logging.getLogger(__name__)

UNSPLASH_API = "https://api.unsplash.com"
PIXABAY_API = "https://pixabay.com/api/"
MAX_QUERIES_PER_ARTICLE = 4
MIN_RELEVANCE_SCORE = 1.0
REQUEST_DELAY_SEC = 0.45

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_TITLE_SPLIT_RE = re.compile(r"[-–:|]")


@dataclass(frozen=True)
class ResolvedPhoto:
    url: str
    provider: str
    query: str
    score: float
    photographer: str = "Unknown"
    attribution: str = ""


@dataclass
class StockPhotoState:
    unsplash_rate_limited: bool = False


def category_fallback_for(category: str | None) -> str:
    return CATEGORY_FALLBACK_IMAGES.get(category or "", DEFAULT_CATEGORY_FALLBACK_IMAGE)


def _normalize_ws(value: str) -> str:
    return " ".join((value or "").split())


def clean_title(title: str) -> str:
    if not title:
        return ""
    primary = _TITLE_SPLIT_RE.split(title)[0] or title
    return _normalize_ws(re.sub(r"[\"'`]", "", primary))


def tokenize(text: str) -> list[str]:
    tokens = _NON_ALNUM_RE.sub(" ", (text or "").lower()).split()
    return [t for t in tokens if len(t) > 2 and t not in STOPWORDS]


def aggregate_keywords(article: Mapping[str, Any]) -> list[str]:
    freq: dict[str, int] = {}
    for key in ("title", "summary", "category", "source"):
        for token in tokenize(str(article.get(key) or "")):
            freq[token] = freq.get(token, 0) + 1
    # 빈도 내림차순, 동률은 등장 순서
    ranked = sorted(freq, key=lambda t: freq[t], reverse=True)
    keywords = ranked[:8]
    for focus in AI_FOCUS_KEYWORDS:
        if focus not in keywords:
            keywords.append(focus)
    return keywords[:10]


def build_search_queries(article: Mapping[str, Any], keywords: list[str]) -> list[str]:
    compact = " ".join(keywords[:3])
    broader = " ".join(keywords[:5])
    title = clean_title(str(article.get("title") or ""))
    category = str(article.get("category") or "").lower()
    candidates = [
        f"{title} {compact}",
        f"{title} {category}",
        f"{category} {compact}",
        f"{broader} {category}",
        f"{compact} artificial intelligence",
    ]
    queries = [q for q in (_normalize_ws(c) for c in candidates) if q]
    return list(dict.fromkeys(queries))[:MAX_QUERIES_PER_ARTICLE]


def _tag_title(tag: Any) -> str:
    if not isinstance(tag, dict):
        return ""
    return str(tag.get("title") or (tag.get("source") or {}).get("title") or "")


def _approved(photo: Mapping[str, Any], topic: str) -> bool:
    meta = (photo.get("topic_submissions") or {}).get(topic) or {}
    return isinstance(meta, dict) and meta.get("status") == "approved"


def photo_vocabulary(photo: Mapping[str, Any]) -> str:
    tags = [_tag_title(t) for t in photo.get("tags") or []]
    topics = [
        topic.replace("-", " ").replace("_", " ")
        for topic in (photo.get("topic_submissions") or {})
        if _approved(photo, topic)
    ]
    parts = [
        photo.get("description"),
        photo.get("alt_description"),
        (photo.get("location") or {}).get("name"),
        (photo.get("user") or {}).get("name"),
        *tags,
        *topics,
    ]
    return _normalize_ws(" ".join(str(p) for p in parts if p).lower())


def has_generic_tag(photo: Mapping[str, Any]) -> bool:
    return any(_tag_title(t).lower() in GENERIC_PHOTO_TAGS for t in photo.get("tags") or [])


def score_photo(photo: Mapping[str, Any], article: Mapping[str, Any], keywords: list[str]) -> float:
    vocabulary = photo_vocabulary(photo)
    if not vocabulary:
        return 0.0
    score = 0.0
    for keyword in keywords:
        normalized = keyword.lower()
        if len(normalized) < 2:
            continue
        if normalized in vocabulary:
            score += 2 if len(normalized) >= 6 else 1

    category = str(article.get("category") or "").lower()
    if category and category in vocabulary:
        score += 1
    if _approved(photo, "technology"):
        score += 1.5
    if _approved(photo, "current-events"):
        score += 1
    if has_generic_tag(photo):
        score -= 1
    alt_text = str(photo.get("alt_description") or "").lower()
    if "copy space" in alt_text or "background" in alt_text:
        score -= 1
    return score


def select_relevant_photo(
    photos: list[Mapping[str, Any]],
    article: Mapping[str, Any],
    keywords: list[str],
) -> tuple[Mapping[str, Any], float] | None:
    ranked = sorted(
        ((photo, score_photo(photo, article, keywords)) for photo in photos),
        key=lambda pair: pair[1],
        reverse=True,
    )
    if ranked and ranked[0][1] >= MIN_RELEVANCE_SCORE:
        return ranked[0]
    return None


def normalize_pixabay_hit(hit: Mapping[str, Any]) -> dict[str, Any]:
    tags = str(hit.get("tags") or "")
    user = str(hit.get("user") or "")
    return {
        "description": tags,
        "alt_description": tags,
        "location": {"name": user},
        "user": {"name": user},
        "tags": [{"title": t.strip()} for t in tags.split(",") if t.strip()],
        "topic_submissions": {},
        "links": {"html": hit.get("pageURL")},
        "urls": {
            "regular": hit.get("largeImageURL") or hit.get("webformatURL") or hit.get("fullHDURL") or hit.get("previewURL"),
            "full": hit.get("fullHDURL") or hit.get("largeImageURL") or hit.get("webformatURL") or hit.get("previewURL"),
        },
    }


class StockPhotoSearch:
    """Unsplash → Pixabay 검색으로 기사와 관련 있는 사진을 고른다."""

    def __init__(
        self,
        *,
        unsplash_access_key: str = "",
        pixabay_api_key: str = "",
        http_get: HttpGet | None = None,
        sleep: SleepFunc = time.sleep,
        timeout_sec: int = 15,
        request_delay_sec: float = REQUEST_DELAY_SEC,
    ) -> None:
        self._unsplash_key = unsplash_access_key
        self._pixabay_key = pixabay_api_key
        self._http_get = http_get or requests.get
        self._sleep = sleep
        self._timeout_sec = timeout_sec
        self._request_delay_sec = request_delay_sec

    @property
    def configured(self) -> bool:
        return bool(self._unsplash_key or self._pixabay_key)

    def search_unsplash(self, query: str, state: StockPhotoState) -> list[dict[str, Any]]:
        if not self._unsplash_key or state.unsplash_rate_limited:
            return []
        resp = self._http_get(
            f"{UNSPLASH_API}/search/photos",
            params={
                "query": query,
                "per_page": "12",
                "order_by": "relevant",
                "content_filter": "high",
                "orientation": "landscape",
            },
            headers={"Authorization": f"Client-ID {self._unsplash_key}", "Accept-Version": "v1"},
            timeout=self._timeout_sec,
        )
        if not resp.ok:
            body = resp.text or ""
            if resp.status_code == 403 and "rate limit" in body.lower():
                state.unsplash_rate_limited = True
                logger.warning("⚠️ Unsplash 호출 한도 초과: 이번 실행에서는 Unsplash 생략")
                return []
            raise RuntimeError(f"Unsplash request failed ({resp.status_code}): {body[:200]}")
        return list((resp.json() or {}).get("results") or [])

    def search_pixabay(self, query: str) -> list[dict[str, Any]]:
        if not self._pixabay_key:
            return []
        resp = self._http_get(
            PIXABAY_API,
            params={
                "key": self._pixabay_key,
                "q": query,
                "per_page": "20",
                "orientation": "horizontal",
                "safesearch": "true",
                "image_type": "photo",
                "editors_choice": "true",
            },
            timeout=self._timeout_sec,
        )
        if not resp.ok:
            raise RuntimeError(f"Pixabay request failed ({resp.status_code}): {(resp.text or '')[:200]}")
        return [normalize_pixabay_hit(hit) for hit in (resp.json() or {}).get("hits") or []]

    def resolve(self, article: Mapping[str, Any], state: StockPhotoState) -> ResolvedPhoto:
        keywords = aggregate_keywords(article)
        title = article.get("title") or ""
        for query in build_search_queries(article, keywords):
            try:
                results = self.search_unsplash(query, state)
                selected = select_relevant_photo(results, article, keywords)
                if selected:
                    photo, score = selected
                    urls = photo.get("urls") or {}
                    return ResolvedPhoto(
                        url=urls.get("regular") or urls.get("full"),
                        provider="unsplash",
                        query=query,
                        score=score,
                        photographer=(photo.get("user") or {}).get("name") or "Unknown",
                        attribution=(photo.get("links") or {}).get("html") or "",
                    )
                if results:
                    logger.info('Unsplash 상위 결과 관련도 미달: "%s"', query)
            except Exception as exc:
                logger.warning('⚠️ Unsplash 검색 실패 "%s": %s', query, exc)

            if self._pixabay_key:
                try:
                    hits = self.search_pixabay(query)
                    selected = select_relevant_photo(hits, article, keywords)
                    if selected:
                        photo, score = selected
                        urls = photo.get("urls") or {}
                        return ResolvedPhoto(
                            url=urls.get("regular") or urls.get("full"),
                            provider="pixabay",
                            query=query,
                            score=score,
                            photographer=(photo.get("user") or {}).get("name") or "Unknown",
                            attribution="https://pixabay.com/",
                        )
                    if not hits:
                        logger.info('Pixabay 결과 없음: "%s" (%s)', query, title)
                except Exception as exc:
                    logger.warning('⚠️ Pixabay 검색 실패 "%s": %s', query, exc)

            self._sleep(self._request_delay_sec)

        return ResolvedPhoto(
            url=category_fallback_for(article.get("category")),
            provider="fallback",
            query="category-fallback",
            score=0.0,
            photographer="Unsplash (curated)",
            attribution="https://unsplash.com/",
        )
