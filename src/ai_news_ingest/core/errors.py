from __future__ import annotations


class IngestError(Exception):
    """Base class for errors raised by the ingestion backend."""


class ConfigError(IngestError):
    """Required configuration is missing or malformed (fatal at startup)."""


class FeedFetchError(IngestError):
    """A feed could not be fetched or parsed; only that source is skipped."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class LLMError(IngestError):
    """The text-generation gateway failed or returned no usable text."""


class RewriteError(IngestError):
    """The gateway answered but the payload did not match the editorial schema."""


class StorageError(IngestError):
    """A read or write against the hosted database failed."""


class DuplicateSubscriberError(StorageError):
    """The newsletter address is already stored (unique constraint)."""


class IngestionInProgressError(IngestError):
    """Another ingestion pass holds the run lock."""


class ImageGenerationError(IngestError):
    """The image generation endpoint rejected the request or returned no image."""
