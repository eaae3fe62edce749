from __future__ import annotations

import ast
import json
import logging
import re
from typing import Any

import requests

from ai_news_ingest.core.config import OpenRouterConfig
from ai_news_ingest.core.errors import LLMError
from ai_news_ingest.processing.types import HttpPost

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|[a-zA-Z]*)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").replace("```", "").strip()


def parse_json(text: str) -> dict[str, Any] | None:
    # 문자열에서 JSON 객체를 파싱(직접 파싱 실패 시 중괄호 블록 탐색)
    if not text:
        return None
    raw = strip_code_fences(text)

    def _try_load_json(payload: str) -> dict[str, Any] | None:
        try:
            obj = json.loads(payload)
            return obj if isinstance(obj, dict) else None
        except Exception:
            return None

    def _strip_trailing_commas(payload: str) -> str:
        return re.sub(r",\s*([}\]])", r"\1", payload)

    def _extract_json_block(payload: str) -> str | None:
        start = payload.find("{")
        if start == -1:
            return None
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(payload)):
            ch = payload[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return payload[start : i + 1]
        return payload[start:] if depth > 0 else None

    parsed = _try_load_json(raw)
    if parsed is not None:
        return parsed

    candidate = _extract_json_block(raw)
    if not candidate:
        return None
    parsed = _try_load_json(candidate)
    if parsed is not None:
        return parsed
    cleaned = _strip_trailing_commas(candidate)
    parsed = _try_load_json(cleaned)
    if parsed is not None:
        return parsed
    try:
        obj = ast.literal_eval(cleaned)
        return obj if isinstance(obj, dict) else None
    except Exception:
        return None


def _extract_text(payload: dict[str, Any]) -> str:
    # chat-completions 응답에서 텍스트만 추출
    try:
        choice = (payload.get("choices") or [{}])[0] or {}
        text = (
            (choice.get("message") or {}).get("content")
            or (choice.get("delta") or {}).get("content")
            or ((payload.get("output") or [{}])[0] or {}).get("content")
        )
    except (AttributeError, IndexError, TypeError):
        return ""
    return text.strip() if isinstance(text, str) else ""


class OpenRouterClient:
    """OpenRouter chat-completions 게이트웨이. 모든 실패는 LLMError로 통일."""

    def __init__(
        self,
        config: OpenRouterConfig | None = None,
        *,
        http_post: HttpPost | None = None,
    ) -> None:
        self._config = config or OpenRouterConfig()
        self._http_post = http_post or requests.post

    @property
    def enabled(self) -> bool:
        return bool(self._config.api_key)

    @property
    def model(self) -> str:
        return self._config.model

    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str = "You are a concise AI assistant.",
        temperature: float = 0.2,
        max_tokens: int = 400,
        model: str | None = None,
    ) -> str:
        if not self._config.api_key:
            raise LLMError("OPENROUTER_API_KEY is missing.")
        if not prompt:
            raise LLMError("generate() requires a prompt string.")

        endpoint = f"{self._config.base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": model or self._config.model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
            "HTTP-Referer": self._config.site_url,
            "X-Title": self._config.app_name,
        }
        try:
            resp = self._http_post(
                endpoint,
                headers=headers,
                json=payload,
                timeout=self._config.timeout_sec,
            )
        except requests.Timeout as exc:
            raise LLMError("Timed out waiting for OpenRouter response.") from exc
        except Exception as exc:
            raise LLMError(f"OpenRouter request failed: {type(exc).__name__}: {exc}") from exc

        if not resp.ok:
            raise LLMError(f"OpenRouter request failed ({resp.status_code}): {resp.text[:300]}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise LLMError("OpenRouter response was not JSON.") from exc

        text = _extract_text(data) if isinstance(data, dict) else ""
        if not text:
            raise LLMError("OpenRouter response missing text content.")
        return text
