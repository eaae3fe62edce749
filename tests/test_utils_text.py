from __future__ import annotations

from ai_news_ingest.utils import clamp_text, safe_id_from_name, sanitize_text, to_iso_date


def test_sanitize_text_removes_script_contents() -> None:
    raw = "<p>Model launch</p><script>alert('secret payload')</script><style>p{color:red}</style>"
    out = sanitize_text(raw)
    assert "secret payload" not in out
    assert "color" not in out
    assert out == "Model launch"


def test_sanitize_text_unwraps_cdata_and_entities() -> None:
    assert sanitize_text("<![CDATA[<b>AI</b> &amp; robotics]]>") == "AI & robotics"


def test_sanitize_text_strips_control_chars() -> None:
    assert sanitize_text("ok\x01bad\n\tline") == "ok bad line"


def test_sanitize_text_handles_none_and_empty() -> None:
    assert sanitize_text(None) == ""
    assert sanitize_text("") == ""


def test_sanitize_text_is_idempotent() -> None:
    samples = [
        "<div>Hello&nbsp;<b>world</b></div>",
        "&lt;script&gt;alert(1)&lt;/script&gt;visible",
        "<![CDATA[<iframe src='x'>hidden</iframe>text]]>",
        "plain text",
        "<p>unclosed <b>tag",
        "&" + "amp;" * 20 + "lt;b&gt;AI",
    ]
    for sample in samples:
        once = sanitize_text(sample)
        assert sanitize_text(once) == once


def test_sanitize_text_drops_entity_encoded_script() -> None:
    out = sanitize_text("&lt;script&gt;alert(1)&lt;/script&gt;visible")
    assert "alert" not in out
    assert out == "visible"


def test_safe_id_from_name() -> None:
    assert safe_id_from_name("  r/MachineLearning!! ") == "r-machinelearning"
    assert len(safe_id_from_name("x" * 200)) == 80


def test_clamp_text() -> None:
    assert clamp_text("short", 10) == "short"
    assert clamp_text("abcdefghijkl", 8) == "abcde..."


def test_to_iso_date_parses_rfc822_and_iso() -> None:
    assert to_iso_date("Mon, 01 Jan 2024 10:00:00 GMT") == "2024-01-01T10:00:00+00:00"
    assert to_iso_date("2024-01-02T03:04:05Z") == "2024-01-02T03:04:05+00:00"


def test_sanitize_text_decodes_deeply_nested_entities() -> None:
    assert sanitize_text("&" + "amp;" * 20 + "lt;b&gt;AI") == "AI"
