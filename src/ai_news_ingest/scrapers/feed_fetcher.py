from __future__ import annotations

import datetime
import logging
from typing import Any, Callable, Mapping

import feedparser
import requests

from ai_news_ingest.core.config import (
    FEED_ACCEPT,
    FEED_TIMEOUT_SEC,
    FEED_USER_AGENT,
    HF_MODELS_API,
    HF_MODELS_MAX_ITEMS,
)
from ai_news_ingest.core.errors import FeedFetchError
from ai_news_ingest.models import FeedItem
from ai_news_ingest.processing.types import HttpGet, ParseFunc
from ai_news_ingest.utils import struct_time_to_iso

logger = logging.getLogger(__name__)


def _first_value(entries: Any, key: str) -> list[str]:
    urls: list[str] = []
    if isinstance(entries, Mapping):
        entries = [entries]
    if not isinstance(entries, list):
        return urls
    for entry in entries:
        if isinstance(entry, Mapping):
            value = entry.get(key)
            if isinstance(value, str) and value.strip():
                urls.append(value.strip())
    return urls


def structured_image_candidates(entry: Mapping[str, Any]) -> tuple[str, ...]:
    # 우선순위: enclosure → media:content → media:thumbnail(그룹 포함) → itunes:image
    candidates: list[str] = []
    candidates += _first_value(entry.get("enclosures"), "href")
    candidates += _first_value(entry.get("enclosures"), "url")
    candidates += _first_value(entry.get("media_content"), "url")
    candidates += _first_value(entry.get("media_thumbnail"), "url")
    candidates += _first_value(entry.get("image"), "href")
    candidates += _first_value(entry.get("itunes_image"), "href")
    return tuple(dict.fromkeys(candidates))


def _content_value(entry: Mapping[str, Any]) -> str:
    content = entry.get("content")
    if isinstance(content, list):
        for block in content:
            if isinstance(block, Mapping) and block.get("value"):
                return str(block["value"])
    elif isinstance(content, str):
        return content
    return ""


def entry_to_feed_item(entry: Mapping[str, Any]) -> FeedItem:
    published = (
        struct_time_to_iso(entry.get("published_parsed"))
        or struct_time_to_iso(entry.get("updated_parsed"))
        or entry.get("published")
        or entry.get("updated")
    )
    return FeedItem(
        title=str(entry.get("title") or ""),
        link=str(entry.get("link") or ""),
        guid=str(entry.get("id") or entry.get("guid") or ""),
        summary_html=str(entry.get("summary") or entry.get("description") or ""),
        content_html=_content_value(entry),
        published_at=published or None,
        image_candidates=structured_image_candidates(entry),
    )


def _strip_leading_noise(raw: str) -> str:
    text = raw.lstrip("\ufeff")
    first_tag = text.find("<")
    if first_tag > 0:
        text = text[first_tag:]
    return text.lstrip()


class FeedFetcher:
    def __init__(
        self,
        *,
        http_get: HttpGet | None = None,
        feed_parser: ParseFunc | None = None,
        timeout_sec: int = FEED_TIMEOUT_SEC,
        user_agent: str = FEED_USER_AGENT,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._http_get = http_get or requests.get
        self._feed_parser = feed_parser or feedparser.parse
        self._timeout_sec = timeout_sec
        self._user_agent = user_agent
        self._clock = clock or (lambda: datetime.datetime.now(datetime.timezone.utc))

    def fetch_feed(self, url: str, *, limit: int | None = None) -> list[FeedItem]:
        try:
            resp = self._http_get(
                url,
                headers={"User-Agent": self._user_agent, "Accept": FEED_ACCEPT},
                timeout=self._timeout_sec,
            )
        except Exception as exc:
            raise FeedFetchError(url, f"{type(exc).__name__}: {exc}") from exc

        if not resp.ok:
            raise FeedFetchError(url, f"HTTP {resp.status_code} fetching feed: {(resp.text or '')[:180]}")

        content_type = resp.headers.get("content-type", "") if resp.headers else ""
        xml = _strip_leading_noise(resp.text or "")
        if not xml.startswith("<"):
            raise FeedFetchError(
                url,
                f"Non-XML feed response (content-type: {content_type or 'unknown'}): {xml[:120]}",
            )

        parsed = self._feed_parser(xml)
        entries = list(getattr(parsed, "entries", None) or [])
        if not entries and getattr(parsed, "bozo", False):
            reason = getattr(parsed, "bozo_exception", None) or "malformed feed"
            raise FeedFetchError(url, f"Feed parse failed: {reason}")
        if limit is not None:
            entries = entries[:limit]
        return [entry_to_feed_item(entry) for entry in entries]

    def fetch_huggingface_models(self, *, limit: int = HF_MODELS_MAX_ITEMS) -> list[FeedItem]:
        try:
            resp = self._http_get(HF_MODELS_API, timeout=self._timeout_sec)
        except Exception as exc:
            raise FeedFetchError(HF_MODELS_API, f"{type(exc).__name__}: {exc}") from exc
        if not resp.ok:
            raise FeedFetchError(
                HF_MODELS_API,
                f"Hugging Face models API failed ({resp.status_code}): {(resp.text or '')[:180]}",
            )
        try:
            models = resp.json() or []
        except ValueError as exc:
            raise FeedFetchError(HF_MODELS_API, "Hugging Face models API returned non-JSON") from exc

        now = self._clock().isoformat()
        items: list[FeedItem] = []
        for model in models:
            if not isinstance(model, dict) or not model.get("id"):
                continue
            model_id = model["id"]
            tags = ", ".join(str(t) for t in (model.get("tags") or [])[:6])
            items.append(
                FeedItem(
                    title=f"Model update: {model_id}",
                    link=f"https://huggingface.co/{model_id}",
                    summary_html=f"Pipeline: {model.get('pipeline_tag') or 'unknown'}. Tags: {tags}.",
                    published_at=model.get("lastModified") or now,
                )
            )
            if len(items) >= limit:
                break
        return items
