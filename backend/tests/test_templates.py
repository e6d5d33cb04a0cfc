from datetime import datetime, timezone

from docgen.rendering.templates import fallback_html, loading_html, timeout_html

AT = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_loading_html_mentions_prompt_and_start_time():
    out = loading_html("Write a memo", AT)
    assert "Processing Your Request" in out
    assert '"Write a memo"' in out
    assert "2024-03-01 12:00:00" in out


def test_loading_html_is_stable_for_the_same_inputs():
    assert loading_html("p", AT) == loading_html("p", AT)


def test_fallback_html_includes_error_only_when_present():
    with_error = fallback_html("X", "Server responded with status: 500", AT)
    without_error = fallback_html("X", "", AT)

    assert "<strong>Error:</strong> Server responded with status: 500" in with_error
    assert "Error:" not in without_error
    assert '"X"' in with_error


def test_templates_escape_user_text():
    out = fallback_html("<script>alert(1)</script>", "bad <tag>", AT)
    assert "<script>" not in out
    assert "&lt;script&gt;" in out
    assert "bad &lt;tag&gt;" in out


def test_timeout_html_defaults_error_text():
    out = timeout_html("X", "", AT)
    assert "Processing Timeout" in out
    assert "Error: Unknown error" in out
