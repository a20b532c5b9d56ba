import datetime as _dt

import pytest

from wpstatic.common import TRUNCATION_MARKER, absolute_url, excerpt, parse_datetime, strip_markup, truncate
from wpstatic.config import SITE_URL


def test_excerpt_empty_input():
    assert excerpt("") == ""
    assert excerpt(None, 5) == ""


def test_excerpt_truncates_with_marker():
    assert excerpt("<p>One two three</p>", 2) == "One two [...]"


def test_excerpt_exact_budget_has_no_marker():
    assert excerpt("<p>One two</p>", 2) == "One two"


def test_excerpt_markup_only():
    assert excerpt("<div><br/><img src='a.png'/></div>" * 50, 3) == ""


def test_excerpt_decodes_entities_and_collapses_whitespace():
    content = "<p>Don&rsquo;t&nbsp;stop</p>\n\n<p>  running&hellip;</p>"
    assert excerpt(content) == "Don’t stop running…"


@pytest.mark.parametrize("limit", [0, 1, 3, 10])
def test_excerpt_word_budget(limit):
    content = "<p>" + " ".join(f"word{i}" for i in range(8)) + "</p>"
    result = excerpt(content, limit)
    body = result[: -len(TRUNCATION_MARKER)] if result.endswith(TRUNCATION_MARKER) else result
    assert len([word for word in body.split(" ") if word]) <= limit
    assert result.count("[...]") <= 1


def test_strip_markup():
    assert strip_markup("<h2>Hello&nbsp;<em>world</em></h2>") == "Hello world"


def test_truncate_keeps_limit():
    text = "A" * 80
    result = truncate(text, 50)
    assert len(result) == 50
    assert result.endswith("...")
    assert truncate("short", 50) == "short"


def test_parse_datetime_variants():
    assert parse_datetime("2024-01-05T10:00:00") == _dt.datetime(2024, 1, 5, 10, 0)
    assert parse_datetime("2024-01-05T10:00:00Z") == _dt.datetime(2024, 1, 5, 10, 0)
    assert parse_datetime("2024-01-05T12:00:00+02:00") == _dt.datetime(2024, 1, 5, 10, 0)
    assert parse_datetime("") is None
    assert parse_datetime("not a date") is None


def test_absolute_url():
    assert absolute_url("/blog/") == SITE_URL + "/blog/"
    assert absolute_url("blog/") == SITE_URL + "/blog/"
    assert absolute_url("https://example.com/x") == "https://example.com/x"
