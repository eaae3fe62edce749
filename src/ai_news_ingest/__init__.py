"""AI news feed ingestion and editorial scoring backend."""

__all__ = ["api", "core", "jobs", "models", "processing", "scrapers", "sources", "storage", "utils"]
