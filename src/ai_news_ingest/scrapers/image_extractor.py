from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ai_news_ingest.models import FeedItem

logger = logging.getLogger(__name__)

_IMAGE_EXT_RE = re.compile(r"\.(png|jpe?g|gif|webp|svg|avif)$", re.IGNORECASE)
_FORMAT_HINT_RE = re.compile(r"[?&](fm|format)=(jpg|jpeg|png|webp|avif)\b", re.IGNORECASE)
_META_IMAGE_KEYS = {"og:image", "twitter:image"}
_IMG_ATTRS = ("src", "data-src", "data-original", "data-lazy-src")


def absolute_url(url: str, base: str) -> str | None:
    raw = (url or "").strip()
    if not raw:
        return None
    try:
        return urljoin(base or "", raw)
    except ValueError:
        return None


def looks_like_image_url(url: str) -> bool:
    if not url.startswith(("http://", "https://")):
        return False
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    if _IMAGE_EXT_RE.search(path) or _IMAGE_EXT_RE.search(url):
        return True
    # CDN(Unsplash 등)은 확장자 없이 포맷 힌트만 준다
    return bool(_FORMAT_HINT_RE.search(url))


def _json_ld_images(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        url = value.get("url") or value.get("contentUrl")
        return [url] if isinstance(url, str) else []
    if isinstance(value, list):
        urls: list[str] = []
        for v in value:
            urls += _json_ld_images(v)
        return urls
    return []


def extract_html_images(markup: str) -> list[str]:
    """HTML 조각에서 이미지 후보 추출: og/twitter 메타 → <img> → JSON-LD 순."""
    if not markup or "<" not in markup:
        return []
    soup = BeautifulSoup(markup, "html.parser")
    urls: list[str] = []

    for meta in soup.find_all("meta"):
        key = (meta.get("property") or meta.get("name") or "").strip().lower()
        content = meta.get("content")
        if key in _META_IMAGE_KEYS and content:
            urls.append(content)

    for img in soup.find_all("img"):
        for attr in _IMG_ATTRS:
            value = img.get(attr)
            if value:
                urls.append(value)
                break

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            payload = json.loads(script.string or script.get_text() or "")
        except (TypeError, ValueError):
            logger.debug("JSON-LD 파싱 실패")
            continue
        blocks = payload if isinstance(payload, list) else [payload]
        for block in blocks:
            if isinstance(block, dict) and block.get("image"):
                urls += _json_ld_images(block["image"])
    return urls


def _normalize(candidates: Iterable[str], base: str) -> list[str]:
    seen: list[str] = []
    for candidate in candidates:
        url = absolute_url(candidate, base)
        if url and url not in seen:
            seen.append(url)
    return seen


def extract_image_url(item: FeedItem) -> str | None:
    """구조화 필드 → HTML(content, summary) 순서로 첫 번째 유효 이미지 URL."""
    base = item.link or ""
    structured = _normalize(item.image_candidates, base)
    for url in structured:
        if looks_like_image_url(url):
            return url

    for markup in (item.content_html, item.summary_html):
        for url in _normalize(extract_html_images(markup), base):
            if looks_like_image_url(url):
                return url
    return None
