from __future__ import annotations

import argparse
import datetime
import logging
import threading
from typing import Callable

import uvicorn

from ai_news_ingest.api.app import create_app
from ai_news_ingest.core.config import (
    AUTO_FETCH_NEWS_MINUTES,
    CATEGORIES_PATH,
    PORT,
    SELF_TEST,
    SOURCES_PATH,
    ServerSettings,
)
from ai_news_ingest.core.errors import ConfigError
from ai_news_ingest.processing.pipeline import build_default_pipeline
from ai_news_ingest.processing.service import IngestionService
from ai_news_ingest.processing.types import LogFunc
from ai_news_ingest.sources.classifier import SourceClassifier
from ai_news_ingest.sources.registry import load_categories, load_sources
from ai_news_ingest.storage.supabase_store import ArticleStore, SubscriberStore, build_client


def _log(message: str) -> None:
    ts = datetime.datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {message}")


class AutoFetchScheduler:
    """주기적으로 수집을 돌리는 백그라운드 스레드. 실행 중인 주기는 건너뛴다."""

    def __init__(self, *, task: Callable[[], object], interval_sec: float, logger: LogFunc) -> None:
        self._task = task
        self._interval_sec = interval_sec
        self._log = logger
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, name="auto-fetch", daemon=True)

    def _tick(self) -> None:
        try:
            self._task()
        except Exception as exc:
            self._log(f"❌ 자동 수집 실패: {type(exc).__name__}: {exc}")

    def _loop(self) -> None:
        self._tick()
        while not self._stop.wait(self._interval_sec):
            self._tick()

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()


def list_sources() -> int:
    categories = load_categories(CATEGORIES_PATH)
    classifier = SourceClassifier(categories=categories)
    sources = load_sources(SOURCES_PATH)
    for source in sources:
        source_type = classifier.classify(source)
        category = classifier.infer_category(source_type, source)
        print(f"{source.name}\t{source_type}\t{category}\t{source.rss_url or source.main_url}")
    print(f"총 {len(sources)}개 소스")
    return 0


def _build_service(settings: ServerSettings) -> tuple[IngestionService, SubscriberStore]:
    client = build_client(settings)
    pipeline = build_default_pipeline(logger=_log, store=ArticleStore(client))
    service = IngestionService(
        pipeline=pipeline,
        logger=_log,
        supabase_project_ref=settings.supabase_project_ref,
    )
    return service, SubscriberStore(client)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="AI news ingestion server and one-shot runner")
    parser.add_argument("--run-now", action="store_true", help="run one ingestion pass and exit")
    parser.add_argument("--self-test", action="store_true", help="lightweight pass (2 sources, 5 articles)")
    parser.add_argument("--list-sources", action="store_true", help="print classified sources and exit")
    parser.add_argument("--port", type=int, default=PORT)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = _parse_args(argv)

    try:
        if args.list_sources:
            return list_sources()
        settings = ServerSettings.from_env()
        service, subscriber_store = _build_service(settings)
    except ConfigError as exc:
        _log(f"❌ 설정 오류: {exc}")
        return 1

    if args.run_now:
        try:
            result = service.run(self_test=args.self_test or SELF_TEST)
        except Exception as exc:
            _log(f"❌ 수집 실패: {type(exc).__name__}: {exc}")
            return 1
        _log(f"완료! {result['message']}")
        return 0

    app = create_app(settings=settings, service=service, subscriber_store=subscriber_store)
    scheduler = None
    if AUTO_FETCH_NEWS_MINUTES > 0:
        _log(f"⏱️ 자동 수집 활성화: {AUTO_FETCH_NEWS_MINUTES}분 간격")
        scheduler = AutoFetchScheduler(
            task=service.run_scheduled,
            interval_sec=AUTO_FETCH_NEWS_MINUTES * 60,
            logger=_log,
        )
        scheduler.start()

    _log(f"News fetcher server running on http://localhost:{args.port}")
    try:
        uvicorn.run(app, host="0.0.0.0", port=args.port)
    finally:
        if scheduler:
            scheduler.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
