from __future__ import annotations

import logging
from typing import Any

from supabase import Client as SupabaseClient
from supabase import create_client

from ai_news_ingest.core.config import ServerSettings
from ai_news_ingest.core.errors import DuplicateSubscriberError, StorageError
from ai_news_ingest.models import ArticleRow

logger = logging.getLogger(__name__)

ARTICLES_TABLE = "news_articles"
SUBSCRIBERS_TABLE = "newsletter_subscribers"
UNIQUE_VIOLATION = "23505"

# 이미지 백필 대상: 비어 있음, data: URL, 일반 플레이스홀더, 상대 경로
NEEDS_IMAGE_FILTER = ",".join(
    [
        "image_url.is.null",
        "image_url.eq.",
        "image_url.ilike.data:%",
        "image_url.ilike.https://source.unsplash.com/featured/%",
        "image_url.like./%",
        "image_url.like.//%",
    ]
)


def build_client(settings: ServerSettings) -> SupabaseClient:
    return create_client(settings.supabase_url, settings.supabase_service_key)


def _is_unique_violation(exc: Exception) -> bool:
    code = getattr(exc, "code", None)
    if str(code or "") == UNIQUE_VIOLATION:
        return True
    return "duplicate key" in str(exc).lower()


class ArticleStore:
    def __init__(self, client: Any) -> None:
        self._client = client

    def fetch_existing_images(self, source_urls: list[str]) -> dict[str, str | None]:
        urls = list(dict.fromkeys(u for u in source_urls if u))
        if not urls:
            return {}
        try:
            resp = (
                self._client.table(ARTICLES_TABLE)
                .select("source_url, image_url")
                .in_("source_url", urls)
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Unable to prefetch existing images: {exc}") from exc
        return {
            row["source_url"]: row.get("image_url")
            for row in (resp.data or [])
            if isinstance(row, dict) and row.get("source_url")
        }

    def upsert_articles(self, rows: list[ArticleRow]) -> list[dict[str, Any]]:
        if not rows:
            return []
        try:
            resp = (
                self._client.table(ARTICLES_TABLE)
                .upsert(list(rows), on_conflict="source_url", ignore_duplicates=False)
                .execute()
            )
        except Exception as exc:
            logger.error("Database upsert error: %s", exc)
            raise StorageError(f"Database upsert failed: {exc}") from exc
        return list(resp.data or [])

    def articles_needing_images(self, limit: int) -> list[dict[str, Any]]:
        try:
            resp = (
                self._client.table(ARTICLES_TABLE)
                .select("id, title, summary, category, source, image_url")
                .or_(NEEDS_IMAGE_FILTER)
                .order("published_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Unable to load articles needing images: {exc}") from exc
        return list(resp.data or [])

    def update_image(self, article_id: str, image_url: str) -> None:
        try:
            self._client.table(ARTICLES_TABLE).update({"image_url": image_url}).eq("id", article_id).execute()
        except Exception as exc:
            raise StorageError(f"Unable to update image for {article_id}: {exc}") from exc


class SubscriberStore:
    def __init__(self, client: Any) -> None:
        self._client = client

    def subscribe(self, email: str, source: str | None) -> dict[str, Any]:
        try:
            resp = self._client.table(SUBSCRIBERS_TABLE).insert({"email": email, "source": source}).execute()
        except Exception as exc:
            if _is_unique_violation(exc):
                raise DuplicateSubscriberError(email) from exc
            raise StorageError(f"Newsletter insert failed: {exc}") from exc
        data = resp.data or []
        row = data[0] if isinstance(data, list) and data else {}
        return {"id": row.get("id"), "created_at": row.get("created_at")}

    def subscriber_count(self) -> int:
        try:
            resp = self._client.table(SUBSCRIBERS_TABLE).select("id", count="exact", head=True).execute()
        except Exception as exc:
            raise StorageError(f"Unable to count subscribers: {exc}") from exc
        return int(resp.count or 0)
