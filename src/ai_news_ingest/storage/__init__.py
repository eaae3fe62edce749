"""Hosted database access (news articles and newsletter subscribers)."""

__all__ = ["supabase_store"]
