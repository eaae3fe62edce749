from __future__ import annotations

from ai_news_ingest.models import FeedSource
from ai_news_ingest.sources.classifier import (
    SourceClassifier,
    classify_source_type,
    infer_category,
    is_research_source,
)
from ai_news_ingest.sources.registry import CategoryRegistry


def _src(name: str, main: str, rss: str = "") -> FeedSource:
    return FeedSource(name=name, main_url=main, rss_url=rss)


def test_youtube_playlist_wins_over_channel() -> None:
    source = _src("Karpathy", "https://www.youtube.com/playlist?list=PL123")
    assert classify_source_type(source) == "youtube_playlist"
    assert classify_source_type(_src("Yannic", "https://www.youtube.com/channel/UCabc")) == "youtube_channel"


def test_source_type_rules() -> None:
    cases = [
        (_src("r/MachineLearning", "https://www.reddit.com/r/MachineLearning/"), "community_reddit"),
        (_src("HF Models", "https://huggingface.co/models"), "research_platform_api"),
        (_src("arXiv cs.AI", "https://arxiv.org/list/cs.AI/recent"), "research_platform"),
        (_src("Import AI", "https://importai.substack.com/", "https://importai.substack.com/feed"), "newsletter"),
        (_src("Practical AI", "https://changelog.com/practicalai", "https://changelog.com/practicalai/feed"), "podcast"),
        (_src("OpenAI News", "https://openai.com/news/"), "company_blog"),
        (_src("The Verge AI", "https://www.theverge.com/ai-artificial-intelligence"), "rss_website"),
    ]
    for source, expected in cases:
        assert classify_source_type(source) == expected, source.name


def test_category_rules() -> None:
    assert infer_category("research_platform", _src("arXiv", "https://arxiv.org/")) == "Research"
    assert infer_category("community_reddit", _src("r/datascience", "https://www.reddit.com/r/datascience/")) == "Business"
    assert infer_category("community_reddit", _src("r/MachineLearning", "https://www.reddit.com/")) == "Research"
    assert infer_category("podcast", _src("AI in Business Podcast", "https://emerj.com/ai-podcast/")) == "Business"
    assert infer_category("podcast", _src("NVIDIA AI Podcast", "https://blogs.nvidia.com/ai-podcast/")) == "Technology"
    assert infer_category("rss_website", _src("Stanford HAI", "https://hai.stanford.edu/news")) == "Research"
    assert infer_category("rss_website", _src("Marketing", "https://www.marketingaiinstitute.com/blog")) == "Business"
    assert infer_category("company_blog", _src("OpenAI News", "https://openai.com/news/")) == "Technology"


def test_is_research_source() -> None:
    assert is_research_source("research_platform_api", "Technology") is True
    assert is_research_source("rss_website", "Research") is True
    assert is_research_source("company_blog", "Business") is False


def test_classifier_falls_back_to_registered_category() -> None:
    classifier = SourceClassifier(categories=CategoryRegistry(["Technology", "Research"]))
    source = _src("r/datascience", "https://www.reddit.com/r/datascience/")
    source_type = classifier.classify(source)
    assert source_type == "community_reddit"
    assert classifier.infer_category(source_type, source) == "Technology"
