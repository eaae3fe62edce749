from __future__ import annotations

import threading
from typing import Any

from ai_news_ingest.core.errors import IngestionInProgressError
from ai_news_ingest.models import RunMetrics
from ai_news_ingest.processing.pipeline import IngestionPipeline
from ai_news_ingest.processing.types import LogFunc


class IngestionService:
    """수집 실행을 직렬화하고 API 응답 형태의 결과를 만든다.

    실행 잠금은 프로세스 단위다. 이미 실행 중이면 새 요청은 기다리지 않고 거절된다.
    """

    def __init__(
        self,
        *,
        pipeline: IngestionPipeline,
        logger: LogFunc,
        supabase_project_ref: str | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._log = logger
        self._project_ref = supabase_project_ref
        self._run_lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._run_lock.locked()

    def debug_info(self, metrics: RunMetrics) -> dict[str, Any]:
        return {
            "supabaseProjectRef": self._project_ref,
            "sourcesLoadedCount": len(self._pipeline.sources),
            "categoriesLoadedCount": len(self._pipeline.categories),
            "openrouterEnabled": self._pipeline.llm_enabled,
            **metrics.as_dict(),
        }

    def run(self, *, self_test: bool = False, metrics: RunMetrics | None = None) -> dict[str, Any]:
        if not self._run_lock.acquire(blocking=False):
            raise IngestionInProgressError("News ingestion is already running.")
        metrics = metrics or RunMetrics()
        try:
            result = self._pipeline.run(self_test=self_test, metrics=metrics)
        finally:
            self._run_lock.release()

        if not result.articles:
            message = "No articles found"
        else:
            message = f"Upserted {result.count} news articles"
        return {
            "success": True,
            "message": message,
            "count": result.count,
            "articles": result.persisted,
            "debug": self.debug_info(metrics),
        }

    def run_scheduled(self) -> dict[str, Any] | None:
        # 스케줄 틱: 실행 중이면 건너뛴다
        if self.in_progress:
            self._log("⏭️ 이전 수집이 아직 진행 중이라 이번 주기는 건너뜁니다.")
            return None
        try:
            return self.run()
        except IngestionInProgressError:
            self._log("⏭️ 이전 수집이 아직 진행 중이라 이번 주기는 건너뜁니다.")
            return None
