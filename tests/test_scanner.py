"""
Delimiter scanner tests

Tests that the scanner:
- Reports every delimiter occurrence in Text tokens, in document order
- Never searches Opaque, Inline or Span tokens
- Reports all delimiters starting at a position, then skips the longest
- Treats delimiters literally (regex metacharacters included)
- Parses trailers only for right-usable delimiters
"""

import pytest

from flexspan.lib.scanner import DelimiterScanner
from flexspan.models.rules import FilterRule, RuleStore
from flexspan.models.tokens import Text, Opaque, Inline, Span


def scanner_make(*rules):
    return DelimiterScanner(RuleStore.rules_make(rules))


def positions(occurrences):
    return [(o.token_index, o.start, o.delimiter) for o in occurrences]


class TestBasicScanning:
    """Test occurrence discovery"""

    def test_no_rules(self):
        """An empty store finds nothing"""
        scanner = DelimiterScanner(RuleStore.rules_make([]))
        assert scanner.delimiters_scan([Text("--a--")]) == []

    def test_single_token(self):
        scanner = scanner_make(FilterRule("--", "--", "cmd"))
        found = scanner.delimiters_scan([Text("a --b-- c")])
        assert positions(found) == [(0, 2, "--"), (0, 5, "--")]

    def test_across_tokens_in_order(self):
        scanner = scanner_make(FilterRule("[[", "]]", "box"))
        tokens = [Text("[[a"), Inline({"t": "Space"}), Text("b]]")]
        found = scanner.delimiters_scan(tokens)
        assert positions(found) == [(0, 0, "[["), (2, 1, "]]")]

    def test_offsets_and_rules(self):
        rule = FilterRule("[[", "]]", "box")
        scanner = scanner_make(rule)
        found = scanner.delimiters_scan([Text("x[[y]]")])
        left, right = found
        assert (left.start, left.end) == (1, 3)
        assert left.left_rules == (rule,)
        assert left.right_rules == ()
        assert (right.start, right.end) == (4, 6)
        assert right.left_rules == ()
        assert right.right_rules == (rule,)

    def test_start_index(self):
        """Tokens before start_index are not searched"""
        scanner = scanner_make(FilterRule("--", "--", "cmd"))
        tokens = [Text("--a--"), Text("--b--")]
        found = scanner.delimiters_scan(tokens, 1)
        assert positions(found) == [(1, 0, "--"), (1, 3, "--")]


class TestSkippedTokens:
    """Test that only Text tokens are searched"""

    def test_opaque_not_searched(self):
        scanner = scanner_make(FilterRule("--", "--", "cmd"))
        tokens = [Opaque({"t": "Code", "c": [["", [], []], "--x--"]}), Text("--")]
        assert positions(scanner.delimiters_scan(tokens)) == [(1, 0, "--")]

    def test_inline_not_searched(self):
        scanner = scanner_make(FilterRule("--", "--", "cmd"))
        tokens = [Inline({"t": "Str", "c": "--"}), Text("a")]
        assert scanner.delimiters_scan(tokens) == []

    def test_span_not_searched(self):
        """Built spans are never searched again"""
        scanner = scanner_make(FilterRule("--", "--", "cmd"))
        tokens = [Span("cmd", {}, [Text("--x--")])]
        assert scanner.delimiters_scan(tokens) == []


class TestLongestDelimiter:
    """Test prefix-sharing delimiters"""

    def test_longer_and_shorter_reported_at_same_offset(self):
        """'---' also yields '--' at the same offset, longest first"""
        scanner = scanner_make(FilterRule("--", "--", "two"), FilterRule("---", "---", "three"))
        found = scanner.delimiters_scan([Text("---x---")])
        assert positions(found) == [
            (0, 0, "---"), (0, 0, "--"),
            (0, 4, "---"), (0, 4, "--"),
        ]

    def test_no_overlapping_shorter_hit(self):
        """After '---' the scan resumes past it: no '--' at offset 1"""
        scanner = scanner_make(FilterRule("--", "--", "two"), FilterRule("---", "---", "three"))
        found = scanner.delimiters_scan([Text("---")])
        assert all(o.start == 0 for o in found)

    def test_run_of_single_delimiter(self):
        """'----' holds two back-to-back '--'"""
        scanner = scanner_make(FilterRule("--", "--", "two"))
        found = scanner.delimiters_scan([Text("----")])
        assert positions(found) == [(0, 0, "--"), (0, 2, "--")]


class TestLiteralDelimiters:
    """Test that regex metacharacters are matched literally"""

    @pytest.mark.parametrize("left,right", [
        ("**", "**"),
        ("[[", "]]"),
        ("((", "))"),
        ("$", "$"),
        ("^.", ".^"),
        ("a+", "+a"),
    ])
    def test_metacharacters(self, left, right):
        scanner = scanner_make(FilterRule(left, right, "cmd"))
        text = f"x {left}content{right} y"
        found = scanner.delimiters_scan([Text(text)])
        assert [o.start for o in found if o.left_rules][0] == 2
        assert [o.start for o in found if o.right_rules][-1] == 2 + len(left) + len("content")

    def test_dot_is_not_wildcard(self):
        scanner = scanner_make(FilterRule("..", "..", "cmd"))
        assert scanner.delimiters_scan([Text("ab")]) == []


class TestTrailers:
    """Test trailers on right-usable occurrences"""

    def test_left_only_has_no_trailer(self):
        scanner = scanner_make(FilterRule("[[", "]]", "box"))
        found = scanner.delimiters_scan([Text("[[.a]]")])
        assert found[0].trailer is None

    def test_right_options(self):
        scanner = scanner_make(FilterRule("!!", "!!", "custombox"))
        found = scanner.delimiters_scan([Text("!!flexspan!!(LimeGreen)")])
        right = found[-1]
        assert right.trailer.options == "LimeGreen"
        assert right.trailer_end == len("!!flexspan!!(LimeGreen)")

    def test_right_punctuation(self):
        scanner = scanner_make(FilterRule("!!", "!!", "custombox"))
        found = scanner.delimiters_scan([Text("!!flexspan!!.")])
        assert found[-1].trailer.punct == "."

    def test_configured_punctuation(self):
        scanner = DelimiterScanner(RuleStore.rules_make([FilterRule("!!", "!!", "c")]), punctuation=";")
        found = scanner.delimiters_scan([Text("!!a!!.")])
        assert found[-1].trailer.punct is None


class TestSplitTrailers:
    """Test trailers continuing past the delimiter's own token"""

    SPACE = {"t": "Space"}

    def test_group_continues_in_next_tokens(self):
        scanner = scanner_make(FilterRule("!!", "!!", "custombox"))
        tokens = [Text("!!x!!(fg=blue,"), Inline(self.SPACE), Text("bold)"), Inline(self.SPACE), Text("more")]
        right = scanner.delimiters_scan(tokens)[-1]
        assert right.trailer.options == "fg=blue, bold"
        assert right.trailer_token == 2
        assert right.trailer_end == 5

    def test_group_after_space_token(self):
        scanner = scanner_make(FilterRule("!!", "!!", "custombox"))
        right = scanner.delimiters_scan([Text("!!x!!"), Inline(self.SPACE), Text("(Red) y")])[-1]
        assert right.trailer.options == "Red"
        assert (right.trailer_token, right.trailer_end) == (2, 5)

    def test_group_in_own_token(self):
        scanner = scanner_make(FilterRule("!!", "!!", "custombox"))
        right = scanner.delimiters_scan([Text("!!x!!(Red)"), Inline(self.SPACE), Text("y")])[-1]
        assert right.trailer_token == right.token_index

    def test_other_inline_ends_the_search(self):
        scanner = scanner_make(FilterRule("!!", "!!", "custombox"))
        emph = Inline({"t": "Emph", "c": [{"t": "Str", "c": "e"}]})
        right = scanner.delimiters_scan([Text("!!x!!(a,"), emph, Text("b)")])[1]
        assert right.trailer.options is None
        assert right.trailer_token == 0


class TestTokenScan:
    """Test scanning a single token"""

    def test_non_text_token(self):
        scanner = scanner_make(FilterRule("--", "--", "cmd"))
        assert scanner.token_scan([Inline({"t": "Emph", "c": []})], 0) == []

    def test_empty_store(self):
        assert scanner_make().token_scan([Text("--a--")], 0) == []
