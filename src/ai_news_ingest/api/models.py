from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict

EMAIL_REGEX = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)
_SOURCE_NEWLINES_RE = re.compile(r"[\r\n]+")
_SOURCE_FORBIDDEN_RE = re.compile(r"[<>\"'`]")
SOURCE_TAG_MAX_CHARS = 100


class SubscribeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Any = None
    source: Any = None

    def normalized_email(self) -> str:
        return self.email.strip() if isinstance(self.email, str) else ""

    def normalized_source(self) -> str | None:
        raw = self.source.strip() if isinstance(self.source, str) else ""
        if not raw:
            return None
        return sanitize_source_tag(raw)[:SOURCE_TAG_MAX_CHARS] or None


def sanitize_source_tag(value: str) -> str:
    text = _SOURCE_NEWLINES_RE.sub(" ", value or "")
    return _SOURCE_FORBIDDEN_RE.sub("", text).strip()


def is_valid_email(email: str) -> bool:
    return 5 <= len(email) <= 255 and bool(EMAIL_REGEX.match(email))
