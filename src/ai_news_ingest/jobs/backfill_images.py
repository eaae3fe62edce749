from __future__ import annotations

import datetime
import logging
import os
import time
from typing import Any

from supabase import create_client

from ai_news_ingest.core.config import (
    IMAGE_BACKFILL_BATCH_SIZE,
    PIXABAY_API_KEY,
    UNSPLASH_ACCESS_KEY,
)
from ai_news_ingest.processing.types import LogFunc, SleepFunc
from ai_news_ingest.scrapers.stock_photos import StockPhotoSearch, StockPhotoState
from ai_news_ingest.storage.supabase_store import ArticleStore

UPDATE_DELAY_SEC = 0.35


def _log(message: str) -> None:
    ts = datetime.datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {message}")


def backfill_images(
    *,
    store: Any,
    search: StockPhotoSearch,
    logger: LogFunc,
    limit: int = IMAGE_BACKFILL_BATCH_SIZE,
    sleep: SleepFunc = time.sleep,
) -> tuple[int, int]:
    """이미지가 없거나 플레이스홀더인 기사에 스톡 사진을 채운다. (처리 수, 갱신 수) 반환."""
    articles = store.articles_needing_images(limit)
    if not articles:
        logger("ℹ️ 백필 대상 기사가 없습니다.")
        return 0, 0

    state = StockPhotoState()
    processed = updated = 0
    for article in articles:
        processed += 1
        title = article.get("title") or ""
        logger(f"🖼️ \"{title}\" ({article.get('category')}) [{processed}/{len(articles)}]")
        try:
            resolved = search.resolve(article, state)
            if not resolved.url:
                logger(f"⚠️ 적합한 이미지 없음: \"{title}\"")
                continue
            store.update_image(article["id"], resolved.url)
            updated += 1
            logger(
                f"✅ {article['id']} ← {resolved.url} "
                f"(provider: {resolved.provider}, query: \"{resolved.query}\", score: {resolved.score:.2f})"
            )
            sleep(UPDATE_DELAY_SEC)
        except Exception as exc:
            logger(f"❌ 갱신 실패 \"{title}\": {type(exc).__name__}: {exc}")

    logger(f"백필 완료: {processed}건 처리, {updated}건 갱신")
    return processed, updated


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    supabase_url = (os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "").strip()
    service_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip()
    missing = [
        name
        for name, value in (("SUPABASE_URL", supabase_url), ("SUPABASE_SERVICE_ROLE_KEY", service_key))
        if not value
    ]
    if missing:
        _log(f"❌ Missing required environment variables: {', '.join(missing)}")
        return 1
    if not UNSPLASH_ACCESS_KEY and not PIXABAY_API_KEY:
        _log("❌ Missing image provider key: set UNSPLASH_ACCESS_KEY and/or PIXABAY_API_KEY.")
        return 1

    store = ArticleStore(create_client(supabase_url, service_key))
    search = StockPhotoSearch(unsplash_access_key=UNSPLASH_ACCESS_KEY, pixabay_api_key=PIXABAY_API_KEY)
    try:
        backfill_images(store=store, search=search, logger=_log)
    except Exception as exc:
        _log(f"❌ 이미지 백필 실패: {type(exc).__name__}: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
