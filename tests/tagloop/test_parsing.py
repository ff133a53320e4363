"""Tests for tagloop model output parsing."""

import time

import pytest

from tagloop.parsing import (
    extract_payload,
    find_matching_close,
    find_name_terminator,
    find_tag_end,
    find_tag_open,
    index_closing_tags,
    parse_attributes,
    parse_model_response,
)
from tagloop.types import Invocation


class TestScanSteps:
    """Tests for the individual scan step functions."""

    def test_find_tag_open(self):
        """find_tag_open returns the next '<' at or after pos."""
        assert find_tag_open("ab<c<d", 0) == 2
        assert find_tag_open("ab<c<d", 3) == 4
        assert find_tag_open("ab<c<d", 5) is None
        assert find_tag_open("", 0) is None

    def test_find_name_terminator_space_or_gt(self):
        """find_name_terminator stops at the first '>' or space."""
        assert find_name_terminator("<a>", 0) == 2
        assert find_name_terminator('<abc k="v">', 0) == 4

    def test_find_name_terminator_truncated(self):
        """WHEN the tag name runs to end of text THEN None is returned."""
        assert find_name_terminator("<abc", 0) is None
        assert find_name_terminator("<", 0) is None

    def test_find_name_terminator_stops_at_next_open(self):
        """WHEN another '<' comes before any '>' or space THEN it ends the name."""
        assert find_name_terminator("<a<b>", 0) == 2

    def test_find_tag_end(self):
        """find_tag_end returns the first '>' after the opening '<'."""
        assert find_tag_end('<a k="v">x', 0) == 8
        assert find_tag_end('<a k="v"', 0) is None

    def test_find_matching_close(self):
        """find_matching_close finds the literal closing tag."""
        assert find_matching_close("<a>x</a>", "a", 3) == 4
        assert find_matching_close("<a>x</b>", "a", 3) is None
        assert find_matching_close("<a>x</a", "a", 3) is None

    def test_find_matching_close_with_index(self):
        """An index of closing tags gives the same answers as a text search."""
        text = "<a>x</a> <b>y</b> <a>z</a>"
        index = index_closing_tags(text)

        for name in ["a", "b", "c"]:
            for pos in range(len(text) + 1):
                assert find_matching_close(text, name, pos, index) == find_matching_close(
                    text, name, pos
                )

    def test_index_closing_tags(self):
        """index_closing_tags maps names to ascending positions."""
        assert index_closing_tags("</a> </b></a> </ c>") == {"a": [0, 9], "b": [5]}

    def test_parse_attributes(self):
        """parse_attributes reads repeated key="value" pairs."""
        assert parse_attributes('k="v" other="two words"') == {
            "k": "v",
            "other": "two words",
        }

    def test_parse_attributes_trims_values(self):
        """Attribute values are trimmed."""
        assert parse_attributes('k="  v  "') == {"k": "v"}

    def test_parse_attributes_later_duplicate_wins(self):
        """WHEN a key repeats THEN the later value overwrites the earlier one."""
        assert parse_attributes('k="1" k="2"') == {"k": "2"}

    def test_parse_attributes_nothing_valid(self):
        """WHEN no pair matches THEN None is returned."""
        assert parse_attributes("garbage") is None
        assert parse_attributes("") is None

    def test_extract_payload(self):
        """extract_payload trims and rejects empty or tag-like bodies."""
        assert extract_payload("  hello \n") == "hello"
        assert extract_payload("   ") is None
        assert extract_payload("") is None
        assert extract_payload(" <b>x</b>") is None


class TestParseModelResponse:
    """Tests for parse_model_response()."""

    def test_single_invocation(self):
        """WHEN parsing <a k="v">p</a> THEN one invocation is returned."""
        result = parse_model_response('<a k="v">p</a>')

        assert result == [Invocation(action="a", attributes={"k": "v"}, payload="p")]

    def test_empty_input(self):
        """WHEN input is empty THEN no invocations are returned."""
        assert parse_model_response("") == []

    def test_no_tags(self):
        """WHEN input has no '<' THEN no invocations are returned."""
        assert parse_model_response("I think I should update the plan.") == []

    def test_surrounding_prose_is_ignored(self):
        """Text outside tags is skipped."""
        text = "Let me save this.\n<memorize>port is 8080</memorize>\nDone."
        result = parse_model_response(text)

        assert len(result) == 1
        assert result[0].action == "memorize"
        assert result[0].payload == "port is 8080"
        assert result[0].attributes is None

    def test_multiple_invocations_in_order(self):
        """Invocations are returned in order of appearance."""
        text = '<a>1</a> then <b x="y">2</b> and <c></c>'
        result = parse_model_response(text)

        assert [inv.action for inv in result] == ["a", "b", "c"]
        assert result[1].attributes == {"x": "y"}
        assert result[2].payload is None

    def test_payload_is_trimmed(self):
        """Payload whitespace is trimmed, internal newlines kept."""
        result = parse_model_response("<plan>\n  step one\n  step two\n</plan>")

        assert result[0].payload == "step one\n  step two"

    def test_whitespace_payload_is_absent(self):
        """WHEN the body is only whitespace THEN payload is None."""
        result = parse_model_response("<a>   \n </a>")

        assert result == [Invocation(action="a")]

    def test_malformed_attribute_dropped_siblings_kept(self):
        """WHEN one attribute is unquoted THEN only that attribute is dropped."""
        result = parse_model_response('<a x=1 y="2">p</a>')

        assert len(result) == 1
        assert result[0].attributes == {"y": "2"}
        assert result[0].payload == "p"

    def test_space_without_attributes(self):
        """WHEN the tag has a space but no valid attributes THEN attributes is None."""
        result = parse_model_response("<a junk>p</a>")

        assert result == [Invocation(action="a", payload="p")]

    def test_unterminated_tag_keeps_scanning(self):
        """WHEN a tag is never closed THEN later tags are still found."""
        result = parse_model_response("<open>never closed <b>ok</b>")

        assert result == [Invocation(action="b", payload="ok")]

    def test_truncated_closing_tag(self):
        """WHEN the closing tag is cut off THEN nothing is returned."""
        assert parse_model_response("<a>payload</a") == []

    def test_truncated_opening_tag(self):
        """WHEN the opening tag is cut off THEN nothing is returned."""
        assert parse_model_response('<a k="v"') == []

    def test_stray_closing_tag_is_skipped(self):
        """A closing tag with no opening tag does not produce an invocation."""
        result = parse_model_response("</a> <b>x</b>")

        assert result == [Invocation(action="b", payload="x")]

    def test_nested_tags_not_recovered(self):
        """WHEN tags are nested THEN only the outer tag is returned, without payload."""
        result = parse_model_response("<a><b>x</b></a>")

        assert result == [Invocation(action="a")]

    def test_unknown_action_names_pass_through(self):
        """Action names are not validated."""
        result = parse_model_response("<definitely-not-an-action>x</definitely-not-an-action>")

        assert result[0].action == "definitely-not-an-action"

    def test_unicode_payload(self):
        """Non-ASCII text is handled."""
        result = parse_model_response("<say>héllo → wörld</say>")

        assert result[0].payload == "héllo → wörld"

    @pytest.mark.parametrize(
        "text",
        [
            "<",
            ">",
            "<>",
            "</>",
            "<<<<",
            "< >",
            "<a",
            "<a ",
            '<a k="',
            "<a>",
            "<a></",
            "<a></a",
            "<<a>b</a>",
            '<a k="v>x</a>',
            "\x00<\x00>\x00",
            "<a>" * 200,
        ],
    )
    def test_parsing_is_total(self, text):
        """WHEN input is malformed or truncated THEN parsing never raises."""
        result = parse_model_response(text)
        assert isinstance(result, list)

    def test_double_open_recovers_inner_tag(self):
        """WHEN a '<' precedes a tag THEN the tag is still found."""
        result = parse_model_response("<<a>b</a>")

        assert result == [Invocation(action="a", payload="b")]

    def test_attribute_keys_cannot_contain_spaces(self):
        """WHEN a key has an internal space THEN only the last word is kept as key."""
        result = parse_model_response('<a my key="v">p</a>')

        assert result[0].attributes == {"key": "v"}


class TestAdversarialInput:
    """Tests that hostile input is scanned in bounded time."""

    @pytest.mark.parametrize(
        "text",
        [
            "<" * 20000,
            "<a " * 20000,
            "<a>" * 20000,
            "x" * 5000 + "<" * 20000 + "<b>ok</b>",
            "<" * 20000 + "b>" + "y" * 20000,
            "".join(f"<a{i}>" for i in range(20000)),
            "<a k=\"v\">" * 20000 + ">",
        ],
        ids=[
            "bare-opens",
            "opens-with-space",
            "unclosed-tags",
            "opens-before-valid-tag",
            "opens-before-long-tail",
            "distinct-unclosed-names",
            "unclosed-with-attributes",
        ],
    )
    def test_flood_is_fast(self, text):
        """WHEN input is a flood of unmatched openings THEN parsing finishes quickly."""
        start = time.monotonic()
        parse_model_response(text)
        elapsed = time.monotonic() - start

        assert elapsed < 1.0

    def test_missing_terminator_ends_scan(self):
        """WHEN trailing openings can never close THEN earlier invocations are still returned."""
        assert parse_model_response("<a>x</a><" * 3 + "<" * 100) == [
            Invocation(action="a", payload="x")
        ] * 3

    def test_repeated_unclosed_name_still_finds_others(self):
        """WHEN a name is never closed THEN other tags after it are still found."""
        text = "<a>" * 1000 + "<b>found</b>"

        assert parse_model_response(text) == [Invocation(action="b", payload="found")]
