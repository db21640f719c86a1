"""Shared fixtures for core unit tests"""

import pytest

from acrylic.core.cursor import Cursor
from acrylic.core.lexer import TermLexer
from acrylic.core.lines import LineParser
from acrylic.core.models import StandardOptions


@pytest.fixture(name="lexer")
def lexer_fixture():
    return TermLexer()


@pytest.fixture(name="line_parser")
def line_parser_fixture():
    return LineParser(StandardOptions())


@pytest.fixture(name="lex")
def lex_fixture(lexer):
    """Lex all terms of a single-line string."""
    def _lex(source: str, multiline: bool = False) -> list:
        cur = Cursor(source)
        terms = []
        while (term := lexer.get_term(cur, multiline)) is not None:
            terms.append(term)
        return terms
    return _lex
