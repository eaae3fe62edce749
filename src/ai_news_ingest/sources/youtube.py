from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import requests

from ai_news_ingest.core.config import FEED_USER_AGENT, YOUTUBE_RESOLVE_TIMEOUT_SEC
from ai_news_ingest.processing.types import HttpGet

logger = logging.getLogger(__name__)

_PLAYLIST_RE = re.compile(r"[?&]list=([a-zA-Z0-9_-]+)")
_CHANNEL_PATH_RE = re.compile(r"/channel/(UC[a-zA-Z0-9_-]+)")
_CHANNEL_META_RE = re.compile(r'itemprop="channelId" content="(UC[a-zA-Z0-9_-]+)"')
_CHANNEL_JSON_RE = re.compile(r'"channelId"\s*:\s*"(UC[a-zA-Z0-9_-]+)"')


def rss_from_channel_id(channel_id: str) -> str:
    return f"https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"


def rss_from_playlist_id(playlist_id: str) -> str:
    return f"https://www.youtube.com/feeds/videos.xml?playlist_id={playlist_id}"


class YoutubeFeedCache:
    """채널 URL → RSS URL 매핑을 담는 작은 JSON 파일 캐시.

    읽고 나서 쓰는 단순 방식이며 동시 기록은 보호하지 않는다.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._entries: dict[str, str] = {}
        self._dirty = False

    def load(self) -> "YoutubeFeedCache":
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError:
            payload = {}
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("⚠️ YouTube 캐시 읽기 실패: %s", exc)
            payload = {}
        if isinstance(payload, dict):
            self._entries = {str(k): str(v) for k, v in payload.items() if v}
        self._dirty = False
        return self

    def get(self, main_url: str) -> str | None:
        return self._entries.get(main_url)

    def set(self, main_url: str, rss_url: str) -> None:
        if self._entries.get(main_url) == rss_url:
            return
        self._entries[main_url] = rss_url
        self._dirty = True

    @property
    def dirty(self) -> bool:
        return self._dirty

    def save(self) -> None:
        if not self._dirty:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._entries, f, ensure_ascii=False, indent=2)
        self._dirty = False

    def __len__(self) -> int:
        return len(self._entries)


class YoutubeFeedResolver:
    def __init__(
        self,
        *,
        http_get: HttpGet | None = None,
        timeout_sec: int = YOUTUBE_RESOLVE_TIMEOUT_SEC,
        user_agent: str = FEED_USER_AGENT,
    ) -> None:
        self._http_get = http_get or requests.get
        self._timeout_sec = timeout_sec
        self._user_agent = user_agent

    def resolve(self, main_url: str) -> str | None:
        url = str(main_url or "")
        if not url:
            return None

        playlist = _PLAYLIST_RE.search(url)
        if playlist:
            return rss_from_playlist_id(playlist.group(1))

        channel = _CHANNEL_PATH_RE.search(url)
        if channel:
            return rss_from_channel_id(channel.group(1))

        # 핸들(@name) 형태는 페이지 HTML에서 channelId 추출
        try:
            resp = self._http_get(
                url,
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout_sec,
            )
            html_text = resp.text or ""
        except Exception as exc:
            logger.warning("⚠️ YouTube 채널 확인 실패: %s (%s)", url, exc)
            return None

        for pattern in (_CHANNEL_META_RE, _CHANNEL_JSON_RE):
            match = pattern.search(html_text)
            if match:
                return rss_from_channel_id(match.group(1))
        return None
