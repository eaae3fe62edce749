"""Source registry, classification and YouTube feed resolution."""

from .classifier import SourceClassifier, classify_source_type, infer_category, is_research_source
from .registry import CategoryRegistry, load_categories, load_sources
from .youtube import YoutubeFeedCache, YoutubeFeedResolver

__all__ = [
    "CategoryRegistry",
    "SourceClassifier",
    "YoutubeFeedCache",
    "YoutubeFeedResolver",
    "classify_source_type",
    "infer_category",
    "is_research_source",
    "load_categories",
    "load_sources",
]
