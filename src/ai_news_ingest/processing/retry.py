from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from ai_news_ingest.core.config import REWRITE_BASE_DELAY_SEC, REWRITE_MAX_ATTEMPTS
from ai_news_ingest.processing.types import SleepFunc

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = REWRITE_MAX_ATTEMPTS
    base_delay_sec: float = REWRITE_BASE_DELAY_SEC

    def delay_for(self, attempt: int) -> float:
        # 1회차 실패 후 base, 이후 두 배씩
        return self.base_delay_sec * (2 ** (attempt - 1))

    def run(
        self,
        operation: Callable[[], T],
        *,
        fallback: Callable[[Exception], T],
        label: str = "operation",
        sleep: SleepFunc = time.sleep,
    ) -> T:
        """operation을 최대 max_attempts회 실행하고, 모두 실패하면 fallback 결과를 반환."""
        attempts = max(1, self.max_attempts)
        for attempt in range(1, attempts):
            try:
                return operation()
            except Exception as exc:
                delay = self.delay_for(attempt)
                logger.info(
                    "%s 실패 %d/%d, %.1fs 후 재시도: %s", label, attempt, attempts, delay, exc
                )
                sleep(delay)
        try:
            return operation()
        except Exception as exc:
            logger.warning("⚠️ %s 실패 (%d회 시도 후 포기): %s", label, attempts, exc)
            return fallback(exc)
