from __future__ import annotations

import calendar
import datetime
import email.utils
import html
import re
import time
from typing import Any

from bs4 import BeautifulSoup

_WS_RE = re.compile(r"\s+")  # 연속 공백을 단일 공백으로 축약
_CDATA_RE = re.compile(r"<!\[CDATA\[([\s\S]*?)\]\]>", re.IGNORECASE)  # CDATA 래퍼 해제
_STRIP_BLOCK_RE = re.compile(
    r"<\s*(script|style|iframe|object|embed|noscript)[^>]*>[\s\S]*?<\/\s*\1\s*>",
    re.IGNORECASE,
)  # 내용까지 통째로 제거할 블록
_TAG_RE = re.compile(r"<[^>]+>")  # 파서 실패 시 태그 제거용
_CONTROL_RE = re.compile(r"[\x00-\x1F\x7F]+")  # 제어문자
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_STRIP_TAG_NAMES = ["script", "style", "iframe", "object", "embed", "noscript"]


def strip_cdata(text: str) -> str:
    return _CDATA_RE.sub(r"\1", text or "")


def _extract_visible_text(markup: str) -> str:
    try:
        soup = BeautifulSoup(markup, "html.parser")
        for tag in soup(_STRIP_TAG_NAMES):
            tag.decompose()
        return soup.get_text(" ")
    except Exception:
        # 깨진 마크업은 정규식으로 태그만 걷어낸다
        return _TAG_RE.sub(" ", markup)


def _sanitize_once(raw: str) -> str:
    text = strip_cdata(raw)
    text = _STRIP_BLOCK_RE.sub(" ", text)
    text = _extract_visible_text(text)
    text = html.unescape(text).replace("\xa0", " ")
    text = _CONTROL_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def sanitize_text(raw: Any) -> str:
    """피드 원문(HTML/CDATA/제어문자 포함)을 화면용 평문으로 정규화.

    엔티티로 한 번 더 감싸진 마크업(&lt;script&gt;...)은 디코딩 후 다시 태그가 되므로
    결과가 더 이상 변하지 않을 때까지 반복 적용한다.
    """
    if raw is None:
        return ""
    text = str(raw)
    if not text:
        return ""
    result = _sanitize_once(text)
    # 변화가 있는 패스는 문자열을 늘리지 않으므로 반드시 멈춘다
    while True:
        again = _sanitize_once(result)
        if again == result:
            return result
        result = again


def word_count(text: str) -> int:
    return len((text or "").split())


def safe_id_from_name(name: str) -> str:
    slug = _SLUG_RE.sub("-", str(name or "").lower()).strip("-")
    return slug[:80]


def clamp_text(text: str, limit: int) -> str:
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3].strip()}..."


def struct_time_to_iso(value: time.struct_time | None) -> str | None:
    if not value:
        return None
    try:
        ts = calendar.timegm(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return datetime.datetime.fromtimestamp(ts, tz=datetime.timezone.utc).isoformat()


def parse_datetime_utc(value: str) -> datetime.datetime | None:
    if not value:
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.datetime.fromisoformat(raw)
    except Exception:
        try:
            dt = email.utils.parsedate_to_datetime(value)
        except Exception:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def to_iso_date(published: str | None, *, now: datetime.datetime | None = None) -> str:
    """발행 시각을 ISO-8601(UTC)로 변환. 없거나 파싱 실패 시 현재 시각."""
    parsed = parse_datetime_utc(published or "")
    if parsed is None:
        parsed = now or datetime.datetime.now(datetime.timezone.utc)
    return parsed.isoformat()
