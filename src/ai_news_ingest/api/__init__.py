"""HTTP API (FastAPI) for triggering ingestion and newsletter signups."""

__all__ = ["app", "models", "rate_limit"]
