"""
Tests for call site scanning — the argument under the cursor
"""

from runedex.core.matching.parameters import scan_call_site
from runedex.core.tokenizer import get_words


def scan(text, cursor):
    name, index = scan_call_site(text, cursor, get_words(text))
    return (name.value if name else None), index


class TestScanCallSite:
    """Backward scan to the innermost unmatched '('."""

    def test_first_argument(self):
        """The first argument has index 0."""
        assert scan("mes(text)", 5) == ("mes", 0)

    def test_commas_in_strings_ignored(self):
        """foo("a,b", 1) with the cursor after 1 is argument 1."""
        text = 'foo("a,b", 1)'
        assert scan(text, text.index("1") + 1) == ("foo", 1)

    def test_escaped_quote_in_string(self):
        """An escaped quote does not end the string."""
        text = 'foo("say \\"a,b\\"", x)'
        assert scan(text, text.index("x")) == ("foo", 1)

    def test_interpolation_skipped(self):
        """Commas inside <...> do not count for the outer call."""
        text = "foo(<bar(1, 2)>, 3)"
        assert scan(text, text.index("3")) == ("foo", 1)

    def test_inside_interpolation(self):
        """A cursor inside <...> belongs to the inner call."""
        text = "foo(<bar(1, 2)>, 3)"
        assert scan(text, text.index("2")) == ("bar", 1)

    def test_nested_groups_skipped(self):
        """Closed inner calls are skipped."""
        text = "inv_add(inv, calc(1, 2), coins)"
        assert scan(text, text.index("coins")) == ("inv_add", 2)

    def test_inner_call(self):
        """An unclosed inner call wins."""
        text = "inv_add(inv, calc(1, 2), coins)"
        assert scan(text, text.index("2")) == ("calc", 1)

    def test_outside_any_call(self):
        """No '(' before the cursor means no call."""
        assert scan("mes", 2) == (None, None)

    def test_parenthesis_without_name(self):
        """A bare group has no name."""
        assert scan("(1, 2)", 4) == (None, 1)
