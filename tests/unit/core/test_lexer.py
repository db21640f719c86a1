"""Unit tests for core/lexer.py"""

import pytest

from acrylic.core import terms as t
from acrylic.core.cursor import Cursor
from acrylic.core.errors import LexError
from acrylic.core.lexer import TermLexer


def test_simple_words(lex):
    """Words and whitespace runs alternate."""
    assert lex("foo bar  baz") == [
        t.Word("foo"), t.Space(" "), t.Word("bar"), t.Space("  "), t.Word("baz"),
    ]


def test_comment_is_discarded(lex):
    """`%%` comments produce no term."""
    assert lex("foo %% ignored *stuff") == [t.Word("foo"), t.Space(" ")]


@pytest.mark.parametrize("source,expected", [
    ("`x = 1`", t.InlineCode("x = 1")),
    ("*strong*", t.InlineBold("strong")),
    ("_em_", t.InlineItalics("em")),
    ("`a\\`b`", t.InlineCode("a`b")),
    ("*a\\\\b*", t.InlineBold("a\\b")),
])
def test_symmetric_delimiters(lex, source, expected):
    """Code, bold and italics spans, with their own escapes."""
    assert lex(source) == [expected]


def test_delimiter_followed_by_space_is_literal(lex):
    """An opening delimiter followed by whitespace is a plain word character."""
    assert lex("2 * 3") == [t.Word("2"), t.Space(" "), t.Word("*"), t.Space(" "), t.Word("3")]


def test_unterminated_delimiter_points_at_opening():
    """An unclosed delimiter reports the column of the opening character."""
    with pytest.raises(LexError, match="unterminated") as exc:
        TermLexer().get_term(Cursor("`unterminated"))
    assert (exc.value.line, exc.value.column) == (1, 1)


def test_unknown_escape_in_delimiter():
    """Only the delimiter itself and backslash can be escaped in a span."""
    with pytest.raises(LexError, match="unknown escape"):
        TermLexer().get_term(Cursor("*a\\q*"))


def test_tag(lex):
    """`%name` is a tag; a lone `%` is a word."""
    assert lex("%-fold") == [t.Tag("-fold")]
    assert lex("50 %") == [t.Word("50"), t.Space(" "), t.Word("%")]


def test_tag_runs_to_whitespace(lex):
    """Brackets and further `%` signs belong to the tag name."""
    assert lex("%a%b %foo(bar)") == [t.Tag("a%b"), t.Space(" "), t.Tag("foo(bar)")]


def test_function_call_with_brace_args(lex):
    """@name followed by brace arguments is a call."""
    assert lex("@foo{bar}{baz}") == [t.FuncCall("foo", [[t.Word("bar")], [t.Word("baz")]])]


def test_function_call_with_paren_arg(lex):
    """Paren and brace arguments can be mixed."""
    assert lex("@foo(bar){baz}") == [t.FuncCall("foo", [[t.Word("bar")], [t.Word("baz")]])]


def test_raw_argument_is_verbatim(lex):
    """Hash-fenced arguments keep their text, braces included."""
    assert lex("@bar#{ idk man { ksdljakld } }#") == [
        t.FuncCall("bar", [[t.Word(" idk man { ksdljakld } ")]]),
    ]
    assert lex("@c##{ a }# b }##") == [t.FuncCall("c", [[t.Word(" a }# b ")]])]


def test_unterminated_raw_argument():
    with pytest.raises(LexError, match="unterminated raw argument"):
        TermLexer().get_term(Cursor("@c#{ never closed"))


def test_anonymous_list(lex):
    """`@` without a name followed by arguments is a list."""
    assert lex("@{a}{b}") == [t.ListTerm([[t.Word("a")], [t.Word("b")]])]


def test_at_without_arguments_is_literal(lex):
    """`@name` with no argument falls back to a plain word."""
    assert lex("mail me@example.com @foo") == [
        t.Word("mail"), t.Space(" "), t.Word("me@example.com"), t.Space(" "), t.Word("@foo"),
    ]


def test_nested_call_arguments(lex):
    """Arguments are lexed recursively."""
    assert lex("@ref{*bold* @c{x}}{y}") == [
        t.FuncCall("ref", [
            [t.InlineBold("bold"), t.Space(" "), t.FuncCall("c", [[t.Word("x")]])],
            [t.Word("y")],
        ]),
    ]


def test_argument_spans_lines(lex):
    """Newlines inside an argument are kept in whitespace runs."""
    assert lex("@code{\n  x\n}") == [
        t.FuncCall("code", [[t.Space("\n  "), t.Word("x"), t.Space("\n")]]),
    ]


def test_nested_braces_are_balanced(lex):
    """Unescaped inner braces nest instead of closing the argument."""
    assert lex("@c{a{b}c}") == [
        t.FuncCall("c", [[
            t.Word("a"), t.MaybeDelim("{"), t.Word("b"), t.MaybeDelim("}"), t.Word("c"),
        ]]),
    ]
    assert lex("@c((x))") == [t.FuncCall("c", [[t.MaybeDelim("("), t.Word("x"), t.MaybeDelim(")")]])]


def test_mismatched_argument_brackets():
    """An argument that is never closed is an error."""
    with pytest.raises(LexError, match="mismatched brackets"):
        TermLexer().get_term(Cursor("@c{a{b}"))


def test_nesting_limit():
    """Arguments nested past max_depth fail cleanly."""
    source = "@c{" * 5 + "x" + "}" * 5
    assert TermLexer(max_depth=5).get_term(Cursor(source)) is not None
    with pytest.raises(LexError, match="nested deeper than 4"):
        TermLexer(max_depth=4).get_term(Cursor(source))


@pytest.mark.parametrize("source,expected", [
    ("${5 + 8}", t.InlineMath("5 + 8")),
    ("${\\frac{1}{2}}", t.InlineMath("\\frac{1}{2}")),
    ("$: x^2 + y", t.InlineMath("x^2 + y")),
    ("$${E=mc^2}", t.DisplayMath("E=mc^2")),
    ("$$: \\sum_i i", t.DisplayMath("\\sum_i i")),
])
def test_math(lex, source, expected):
    """Brace and colon forms of inline and display math."""
    assert lex(source) == [expected]


@pytest.mark.parametrize("source", ["${5 + 8", "${{5 + 8}", "$: {x"])
def test_unbalanced_math(source):
    with pytest.raises(LexError, match="mismatched brackets"):
        TermLexer().get_term(Cursor(source))


def test_colon_math_ends_at_closing_argument_brace(lex):
    """An unmatched `}` ends colon-form math and still closes the argument."""
    assert lex("@c{$: x} y") == [t.FuncCall("c", [[t.InlineMath("x")]]), t.Space(" "), t.Word("y")]


def test_dollar_amount_is_a_word(lex):
    assert lex("I have $5.00") == [
        t.Word("I"), t.Space(" "), t.Word("have"), t.Space(" "), t.Word("$5.00"),
    ]


def test_brackets_are_maybe_delims(lex):
    """Bracket characters are emitted on their own."""
    assert lex("(x)") == [t.MaybeDelim("("), t.Word("x"), t.MaybeDelim(")")]


def test_word_escapes(lex):
    """Escapable characters lose their special meaning after a backslash."""
    assert lex("\\*not bold\\* \\@x \\\\") == [
        t.Word("*not"), t.Space(" "), t.Word("bold*"), t.Space(" "), t.Word("@x"), t.Space(" "), t.Word("\\"),
    ]


@pytest.mark.parametrize("source", ["a\\q", "a\\"])
def test_invalid_word_escape(source):
    with pytest.raises(LexError, match="invalid escape"):
        TermLexer().get_term(Cursor(source))
