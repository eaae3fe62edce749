from __future__ import annotations

from ai_news_ingest.models import FeedItem
from ai_news_ingest.scrapers.image_extractor import extract_html_images, extract_image_url, looks_like_image_url


def test_looks_like_image_url() -> None:
    assert looks_like_image_url("https://cdn.example.com/a/photo.JPG")
    assert looks_like_image_url("https://images.unsplash.com/photo-1?w=1200&fm=jpg")
    assert not looks_like_image_url("https://example.com/article")
    assert not looks_like_image_url("/relative/photo.jpg")
    assert not looks_like_image_url("data:image/png;base64,AAAA")


def test_extract_html_images_order() -> None:
    markup = """
    <meta property="og:image" content="https://cdn.example.com/og.png">
    <img data-src="/lazy.webp">
    <script type="application/ld+json">{"image": {"url": "https://cdn.example.com/ld.jpg"}}</script>
    """
    assert extract_html_images(markup) == [
        "https://cdn.example.com/og.png",
        "/lazy.webp",
        "https://cdn.example.com/ld.jpg",
    ]
    assert extract_html_images("plain text") == []


def test_structured_candidate_wins() -> None:
    item = FeedItem(
        link="https://news.example.com/post",
        summary_html='<img src="https://cdn.example.com/inline.png">',
        image_candidates=("https://cdn.example.com/audio.mp3", "https://cdn.example.com/cover.jpg"),
    )
    assert extract_image_url(item) == "https://cdn.example.com/cover.jpg"


def test_relative_html_image_resolved_against_link() -> None:
    item = FeedItem(
        link="https://news.example.com/2024/post",
        content_html='<p>Body</p><img src="../img/hero.png">',
    )
    assert extract_image_url(item) == "https://news.example.com/img/hero.png"


def test_no_image() -> None:
    assert extract_image_url(FeedItem(link="https://x.example/", summary_html="<p>text only</p>")) is None
