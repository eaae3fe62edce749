"""Feed fetching, image extraction, generation and stock-photo search."""

__all__ = [
    "feed_fetcher",
    "image_extractor",
    "image_generator",
    "image_resolver",
    "stock_photos",
]
