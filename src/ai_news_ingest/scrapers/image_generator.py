from __future__ import annotations

import base64
import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

import requests

from ai_news_ingest.core.config import ImageResolverConfig
from ai_news_ingest.core.errors import ImageGenerationError
from ai_news_ingest.processing.types import HttpPost

logger = logging.getLogger(__name__)


@dataclass
class ImageGenerationState:
    """한 번의 수집 실행 동안만 유지되는 생성기 상태."""

    missing_token_warned: bool = False
    auth_failed: bool = False
    generated_count: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def warn_missing_token_once(self) -> bool:
        with self._lock:
            if self.missing_token_warned:
                return False
            self.missing_token_warned = True
            return True

    def mark_auth_failed(self) -> None:
        with self._lock:
            self.auth_failed = True

    def mark_generated(self) -> None:
        with self._lock:
            self.generated_count += 1


def bytes_to_data_url(data: bytes, mime_type: str = "image/png") -> str | None:
    if not data:
        return None
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _base64_from_json(payload: Any) -> str | None:
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        value = payload[0].get("b64_json")
        if value:
            return str(value)
    if isinstance(payload, dict):
        if payload.get("image_base64"):
            return str(payload["image_base64"])
        data = payload.get("data")
        if isinstance(data, list) and data and isinstance(data[0], dict) and data[0].get("b64_json"):
            return str(data[0]["b64_json"])
    return None


class HuggingFaceImageGenerator:
    def __init__(
        self,
        config: ImageResolverConfig | None = None,
        *,
        http_post: HttpPost | None = None,
    ) -> None:
        self._config = config or ImageResolverConfig()
        self._http_post = http_post or requests.post

    @property
    def configured(self) -> bool:
        return bool(self._config.hf_api_token and self._config.hf_image_model)

    def _request(self, prompt: str, state: ImageGenerationState) -> str:
        width, height = self._config.hf_image_size
        try:
            resp = self._http_post(
                self._config.endpoint,
                headers={
                    "Authorization": f"Bearer {self._config.hf_api_token}",
                    "Content-Type": "application/json",
                    "Accept": "image/png",
                },
                json={
                    "inputs": prompt,
                    "parameters": {
                        "negative_prompt": self._config.hf_negative_prompt,
                        "guidance_scale": self._config.hf_image_guidance,
                        "width": width,
                        "height": height,
                    },
                },
                timeout=self._config.hf_timeout_sec,
            )
        except Exception as exc:
            raise ImageGenerationError(f"{type(exc).__name__}: {exc}") from exc

        if resp.status_code in (401, 403):
            state.mark_auth_failed()
            raise ImageGenerationError(
                f"Hugging Face token rejected ({resp.status_code}); disabling image generation for this run"
            )
        if not resp.ok:
            raise ImageGenerationError(f"Hugging Face image request failed ({resp.status_code}): {resp.text[:200]}")

        content_type = (resp.headers.get("content-type") or "").lower() if resp.headers else ""
        if "application/json" in content_type:
            try:
                payload = json.loads(resp.content or b"")
            except ValueError as exc:
                raise ImageGenerationError("Hugging Face returned invalid JSON") from exc
            encoded = _base64_from_json(payload)
            if not encoded:
                raise ImageGenerationError("Hugging Face JSON payload had no image data")
            return f"data:image/png;base64,{encoded}"

        if content_type and not content_type.startswith("image/"):
            raise ImageGenerationError(f"Unexpected content-type from Hugging Face: {content_type}")
        data_url = bytes_to_data_url(resp.content or b"", content_type or "image/png")
        if not data_url:
            raise ImageGenerationError("Hugging Face returned an empty image")
        return data_url

    def generate(self, prompt: str, state: ImageGenerationState) -> str | None:
        if not self.configured:
            if state.warn_missing_token_once():
                logger.warning("⚠️ HF_API_TOKEN 또는 HF_IMAGE_MODEL 미설정: 정적 이미지로 대체")
            return None
        if state.auth_failed:
            return None
        try:
            url = self._request(prompt, state)
        except ImageGenerationError as exc:
            logger.warning("⚠️ 이미지 생성 실패: %s", exc)
            return None
        state.mark_generated()
        return url
