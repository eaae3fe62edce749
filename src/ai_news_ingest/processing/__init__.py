"""Filtering, scoring, editorial rewrite and the ingestion pipeline."""

__all__ = [
    "content_filter",
    "llm_client",
    "merge",
    "pipeline",
    "retry",
    "rewriter",
    "scoring",
    "service",
    "summarizer",
    "types",
]
