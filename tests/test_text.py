import re

import pytest

from catalog_search.domain.services.text import escape_regex, make_snippet, suggestion_snippet


@pytest.mark.parametrize("raw", [".", "*", "+", "?", "^", "$", "{", "}", "(", ")", "|", "[", "]", "\\"])
def test_escape_regex_escapes_each_metacharacter(raw):
    assert escape_regex(raw) == "\\" + raw
    assert re.fullmatch(escape_regex(raw), raw)


def test_escape_regex_leaves_plain_text_alone():
    assert escape_regex("dark choco 70%") == "dark choco 70%"


def test_escaped_query_matches_literally():
    q = "c++ (beta) [v2]"
    assert re.search(escape_regex(q), "Learn C++ (beta) [v2] today", re.IGNORECASE)
    assert not re.search(escape_regex("a.c"), "abc")


class TestMakeSnippet:
    def test_missing_description(self):
        assert make_snippet(None, "tea") == ""
        assert make_snippet("", "tea") == ""

    def test_short_description_without_match_is_returned_whole(self):
        assert make_snippet("Creamy milk bar.", "choco") == "Creamy milk bar."

    def test_long_description_without_match_is_prefix_truncated(self):
        desc = "x" * 200
        assert make_snippet(desc, "choco") == "x" * 150 + "..."

    def test_window_is_centered_on_first_match(self):
        desc = "a" * 50 + "Chocolate" + "b" * 50
        snippet = make_snippet(desc, "choco")
        assert snippet == "..." + "a" * 30 + "Choco" + "late" + "b" * 26 + "..."

    def test_match_near_start_has_no_leading_ellipsis(self):
        desc = "Chocolate cake with cream and a lot of other things to say here"
        snippet = make_snippet(desc, "chocolate")
        assert snippet.startswith("Chocolate")
        assert snippet.endswith("...")

    def test_match_near_end_has_no_trailing_ellipsis(self):
        desc = "Everything you want in a dessert, topped with dark chocolate"
        snippet = make_snippet(desc, "chocolate")
        assert snippet.startswith("...")
        assert snippet.endswith("dark chocolate")


def test_suggestion_snippet_is_plain_prefix():
    assert suggestion_snippet("y" * 300) == "y" * 120
    assert suggestion_snippet(None) == ""
    assert suggestion_snippet("short") == "short"
