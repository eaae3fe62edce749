from __future__ import annotations

import logging
import time
from typing import Any

from ai_news_ingest.core.config import (
    REWRITE_INPUT_MAX_CHARS,
    REWRITE_MAX_TOKENS,
    REWRITE_TEMPERATURE,
)
from ai_news_ingest.core.errors import RewriteError
from ai_news_ingest.models import EditorialPackage
from ai_news_ingest.processing.llm_client import OpenRouterClient, parse_json
from ai_news_ingest.processing.prompts import SYSTEM_PROMPT, build_user_prompt
from ai_news_ingest.processing.retry import RetryPolicy
from ai_news_ingest.processing.summarizer import ExtractiveSummarizer
from ai_news_ingest.processing.types import SleepFunc
from ai_news_ingest.utils import sanitize_text

logger = logging.getLogger(__name__)


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def build_body_from_parts(
    *,
    short_summary: str,
    highlights: list[str],
    source: str,
    category: str,
) -> str:
    narrative = f"{source} reports on developments in {category or 'AI technology'}."
    blocks = [short_summary]
    if highlights:
        blocks.append("## Key Highlights\n" + "\n".join(f"- {h}" for h in highlights))
    blocks.append(f"### Why it matters\n{narrative}")
    return "\n\n".join(b for b in blocks if b)


def package_from_payload(
    payload: dict[str, Any] | None,
    *,
    title: str,
    source: str,
    category: str,
) -> EditorialPackage:
    if not isinstance(payload, dict):
        raise RewriteError("LLM response was not a JSON object")
    short_summary = str(payload.get("short_summary") or payload.get("summary") or "").strip()
    body = str(payload.get("article_body") or "").strip()
    if not short_summary and not body:
        raise RewriteError("LLM response missing short_summary and article_body")
    highlights = _as_str_list(payload.get("highlights"))
    if not body:
        body = build_body_from_parts(
            short_summary=short_summary,
            highlights=highlights,
            source=source,
            category=category,
        )
    return EditorialPackage(
        summary=short_summary,
        content=body,
        headline=str(payload.get("headline") or "").strip() or title,
        tags=_as_str_list(payload.get("tags")),
        highlights=highlights,
    )


class EditorialRewriter:
    def __init__(
        self,
        *,
        client: OpenRouterClient,
        retry_policy: RetryPolicy | None = None,
        fallback_summarizer: ExtractiveSummarizer | None = None,
        sleep: SleepFunc = time.sleep,
        temperature: float = REWRITE_TEMPERATURE,
        max_tokens: int = REWRITE_MAX_TOKENS,
        input_max_chars: int = REWRITE_INPUT_MAX_CHARS,
    ) -> None:
        self._client = client
        self._retry_policy = retry_policy or RetryPolicy()
        self._fallback = fallback_summarizer or ExtractiveSummarizer()
        self._sleep = sleep
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._input_max_chars = input_max_chars

    @property
    def llm_enabled(self) -> bool:
        return self._client.enabled

    def rewrite(
        self,
        *,
        title: str,
        snippet: str,
        body: str,
        source: str,
        category: str,
    ) -> EditorialPackage:
        combined = " ".join(x for x in (snippet, body) if x).strip()
        if not combined:
            text = sanitize_text(snippet or body or title or "")
            return EditorialPackage(summary=text, content=text, headline=title)

        if not self._client.enabled:
            return self._fallback.summarize(title=title, snippet=snippet, body=body, source=source)

        prompt = build_user_prompt(
            title=title,
            source=source,
            category=category,
            insight=combined[: self._input_max_chars],
        )

        def _attempt() -> EditorialPackage:
            text = self._client.generate(
                prompt,
                system_prompt=SYSTEM_PROMPT,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            return package_from_payload(parse_json(text), title=title, source=source, category=category)

        def _fallback(exc: Exception) -> EditorialPackage:
            logger.warning("⚠️ 에디토리얼 재작성 실패, 로컬 요약 사용: %s", title)
            return self._fallback.summarize(title=title, snippet=snippet, body=body, source=source)

        return self._retry_policy.run(
            _attempt,
            fallback=_fallback,
            label=f'rewrite "{title[:60]}"',
            sleep=self._sleep,
        )
