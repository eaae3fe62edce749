from __future__ import annotations

import json
import logging

import pytest

from ai_news_ingest.core.errors import ConfigError
from ai_news_ingest.sources.registry import CategoryRegistry, load_categories, load_sources, parse_source_row


def test_category_registry_default_and_membership() -> None:
    registry = CategoryRegistry(["Technology", "Research", " ", "Business"])
    assert registry.default == "Technology"
    assert "Research" in registry
    assert "Robotics" not in registry
    assert len(registry) == 3


def test_category_registry_rejects_empty() -> None:
    with pytest.raises(ConfigError):
        CategoryRegistry([])


def test_ensure_unknown_category_warns(caplog: pytest.LogCaptureFixture) -> None:
    registry = CategoryRegistry(["Technology", "Research"])
    with caplog.at_level(logging.WARNING):
        assert registry.ensure("Business") == "Technology"
    assert "Business" in caplog.text
    assert registry.ensure("Research") == "Research"


def test_load_categories(tmp_path) -> None:
    path = tmp_path / "categories.json"
    path.write_text(json.dumps({"articleCategories": ["Research", "Business"]}), encoding="utf-8")
    assert load_categories(path).categories == ["Research", "Business"]


def test_load_categories_bad_shape(tmp_path) -> None:
    path = tmp_path / "categories.json"
    path.write_text(json.dumps({"categories": []}), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_categories(path)
    with pytest.raises(ConfigError):
        load_categories(tmp_path / "missing.json")


def test_parse_source_row_tab_and_spaces() -> None:
    tab = parse_source_row("OpenAI News\thttps://openai.com/news/\thttps://openai.com/news/rss.xml")
    assert tab.name == "OpenAI News"
    assert tab.rss_url == "https://openai.com/news/rss.xml"

    spaced = parse_source_row("Two Minute Papers   https://www.youtube.com/@TwoMinutePapers")
    assert spaced.name == "Two Minute Papers"
    assert spaced.main_url == "https://www.youtube.com/@TwoMinutePapers"
    assert spaced.rss_url == ""


def test_load_sources_skips_incomplete_and_duplicates(tmp_path) -> None:
    path = tmp_path / "sources.tsv"
    path.write_text(
        "\n".join(
            [
                "name\tmain_url\trss_url",
                "A\thttps://a.example/\thttps://a.example/feed",
                "A\thttps://dup.example/\thttps://dup.example/feed",
                "\thttps://noname.example/\t",
                "B\t\thttps://b.example/feed",
                "",
                "C\thttps://c.example/",
            ]
        ),
        encoding="utf-8",
    )
    sources = load_sources(path)
    assert [s.name for s in sources] == ["A", "C"]
    assert sources[0].main_url == "https://a.example/"
    assert sources[1].rss_url == ""


def test_load_sources_requires_header(tmp_path) -> None:
    path = tmp_path / "sources.tsv"
    path.write_text("A\thttps://a.example/\t\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_sources(path)
