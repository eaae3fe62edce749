"""Command-line entry points (server, self-test, image backfill)."""

__all__ = ["backfill_images", "fetch_news", "self_test"]
