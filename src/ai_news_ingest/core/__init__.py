"""Core configuration, constants and errors.

Import what you need from `ai_news_ingest.core.config`,
`ai_news_ingest.core.constants` and `ai_news_ingest.core.errors` to avoid heavy
side effects at import time.
"""

__all__ = ["config", "constants", "errors"]
