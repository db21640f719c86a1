"""Term lexer: recognizes one inline term at a time from a cursor"""

from typing import Optional

from acrylic.core import terms as t
from acrylic.core.cursor import Cursor
from acrylic.core.errors import LexError


ESCAPABLE = frozenset('\\@$%*_`')
BRACKETS = frozenset('(){}')
WORD_START_SPECIALS = frozenset('$%*_`')
SYMMETRIC_DELIMITERS = (('`', t.InlineCode), ('*', t.InlineBold), ('_', t.InlineItalics))
DEFAULT_MAX_DEPTH = 64


def is_inline_whitespace(c: Optional[str]) -> bool:
    return c is not None and c in ' \t'


def is_word_char(c: str) -> bool:
    return c not in '\n \t*`$%(){}\\'


def _is_ident_char(c: str) -> bool:
    return c.isascii() and c.isalnum()


class TermLexer:
    """Recursive-descent lexer for inline terms.

    Every `get_*` production works on a clone of the cursor and commits it only
    on a match; `None` means "no match here". Real errors raise `LexError`.
    Function-call arguments recurse into `get_term`; `max_depth` bounds how
    deeply they may nest.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth

    def get_term(self, cur: Cursor, multiline: bool = False, depth: int = 0) -> Optional[t.Term]:
        """Lex the next term at `cur`; None when no term starts here.

        In multi-line mode (inside function arguments) newlines are part of
        whitespace runs, so arguments can span several source lines.
        """
        while True:
            if (ws := self.get_whitespace(cur, multiline)) is not None:
                return t.Space(ws)
            if self.get_comment(cur) is not None:
                continue
            for delim, kind in SYMMETRIC_DELIMITERS:
                if (x := self.get_symmetric_delimiter(cur, delim)) is not None:
                    return kind(x)
            if (x := self.get_tag(cur)) is not None:
                return t.Tag(x)
            if (call := self.get_list_or_call(cur, depth)) is not None:
                return call
            if (x := self.get_braced_math(cur, '${', multiline)) is not None:
                return t.InlineMath(x)
            if (x := self.get_colon_math(cur, '$:')) is not None:
                return t.InlineMath(x)
            if (x := self.get_braced_math(cur, '$${', multiline)) is not None:
                return t.DisplayMath(x)
            if (x := self.get_colon_math(cur, '$$:')) is not None:
                return t.DisplayMath(x)
            if (x := self.get_maybe_delim(cur)) is not None:
                return t.MaybeDelim(x)
            if (x := self.get_word_part(cur)) is not None:
                return t.Word(x)
            return None

    def get_whitespace(self, cur: Cursor, multiline: bool = False) -> Optional[str]:
        chars = ' \t\n' if multiline else ' \t'
        return cur.collect_at_least(1, lambda c: c in chars)

    def get_comment(self, cur: Cursor) -> Optional[str]:
        """`%% ...` up to the end of the line; the text is discarded by callers."""
        p = cur.clone()
        if not (p.expect_and_skip('%') and p.expect_and_skip('%')):
            return None
        text = p.collect(lambda c: c != '\n')
        cur.commit(p)
        return text

    def get_symmetric_delimiter(self, cur: Cursor, delim: str) -> Optional[str]:
        """`<d>text<d>`: the opening delimiter must be followed by non-whitespace."""
        p = cur.clone()
        line, column = p.line, p.column
        if not p.expect_and_skip(delim):
            return None
        if p.peek() is None or p.peek() in ' \t\n':
            return None

        ret = []
        while True:
            c = p.peek()
            if c == delim:
                p.step()
                break
            if c is None or c == '\n':
                raise LexError(
                    f"unterminated {delim!r} delimiter (opened at line {line}, column {column})",
                    line, column,
                )
            if c == '\\':
                esc = p.peek(1)
                if esc is None or esc == '\n':
                    raise LexError(
                        f"unterminated {delim!r} delimiter (opened at line {line}, column {column})",
                        line, column,
                    )
                if esc != delim and esc != '\\':
                    raise LexError(f"(delimiter {delim!r}) unknown escape sequence: \\{esc}", p.line, p.column)
                ret.append(esc)
                p.step()
                p.step()
                continue
            ret.append(c)
            p.step()

        cur.commit(p)
        return ''.join(ret)

    def get_tag(self, cur: Cursor) -> Optional[str]:
        """`%name`: the name runs to the next whitespace, brackets and `%` included."""
        p = cur.clone()
        if not p.expect_and_skip('%'):
            return None
        name = p.collect_at_least(1, lambda c: c not in " \t\n")
        if name is None:
            return None
        cur.commit(p)
        return name

    def get_ident(self, cur: Cursor) -> Optional[str]:
        p = cur.clone()
        head = p.collect_at_least(1, lambda c: c.isascii() and c.isalpha())
        if head is None:
            return None
        ret = head + p.collect(_is_ident_char)
        cur.commit(p)
        return ret

    def get_list_or_call(self, cur: Cursor, depth: int = 0) -> Optional[t.Term]:
        """`@name` + arguments is a call, bare `@` + arguments an anonymous list.

        Without at least one argument nothing is consumed, so the `@` falls
        through to word lexing.
        """
        p = cur.clone()
        if not p.expect_and_skip('@'):
            return None
        name = self.get_ident(p)

        args = []
        while True:
            if (arg := self.get_arg(p, '{', '}', depth)) is not None:
                args.append(arg)
            elif (arg := self.get_arg(p, '(', ')', depth)) is not None:
                args.append(arg)
            elif (raw := self.get_raw_arg(p)) is not None:
                args.append([t.Word(raw)])
            else:
                break

        if not args:
            return None
        cur.commit(p)
        return t.FuncCall(name, args) if name is not None else t.ListTerm(args)

    def get_arg(self, cur: Cursor, opening: str, closing: str, depth: int = 0) -> Optional[list[t.Term]]:
        """A bracketed argument whose contents are lexed as terms across lines.

        Unescaped brackets of the same kind nest; the one that brings the
        nesting back to zero closes the argument.
        """
        p = cur.clone()
        line, column = p.line, p.column
        if not p.expect_and_skip(opening):
            return None
        if depth >= self.max_depth:
            raise LexError(f"arguments nested deeper than {self.max_depth} levels", line, column)

        terms: list[t.Term] = []
        level = 0
        while True:
            term = self.get_term(p, multiline=True, depth=depth + 1)
            if term is None:
                if p.at_end():
                    raise LexError(
                        f"mismatched brackets: {opening!r} opened at line {line}, column {column} is never closed",
                        line, column,
                    )
                raise LexError(f"unexpected character {p.peek()!r} in argument", p.line, p.column)
            if isinstance(term, t.MaybeDelim):
                if term.char == closing:
                    if level == 0:
                        break
                    level -= 1
                elif term.char == opening:
                    level += 1
            terms.append(term)

        cur.commit(p)
        return terms

    def get_raw_arg(self, cur: Cursor) -> Optional[str]:
        """`#{...}#`, `##{...}##`, ...: copied verbatim up to the matching fence."""
        p = cur.clone()
        line, column = p.line, p.column
        hashes = p.count_while(lambda c: c == '#')
        if hashes == 0 or not p.expect_and_skip('{'):
            return None

        fence = '}' + '#' * hashes
        end = p.source.find(fence, p.pos)
        if end == -1:
            raise LexError(f"unterminated raw argument: missing {fence!r}", line, column)
        text = p.source[p.pos:end]
        while p.pos < end + len(fence):
            p.step()

        cur.commit(p)
        return text

    def get_braced_math(self, cur: Cursor, prefix: str, multiline: bool = False) -> Optional[str]:
        """`${...}` / `$${...}`, ended by the brace that balances the opening one."""
        p = cur.clone()
        line, column = p.line, p.column
        for ch in prefix:
            if not p.expect_and_skip(ch):
                return None

        ret = []
        level = 1
        while True:
            c = p.peek()
            if c is None or (c == '\n' and not multiline):
                raise LexError(
                    f"mismatched brackets: math opened at line {line}, column {column} is never closed",
                    line, column,
                )
            if c == '\\':
                ret.append(self._math_escape(p))
                continue
            p.step()
            if c == '{':
                level += 1
            elif c == '}':
                level -= 1
                if level == 0:
                    break
            ret.append(c)

        cur.commit(p)
        return ''.join(ret)

    def get_colon_math(self, cur: Cursor, prefix: str) -> Optional[str]:
        """`$:...` / `$$:...`, running to the end of the line.

        An unmatched `}` also ends it (left in place), so the form can sit at
        the end of a function argument.
        """
        p = cur.clone()
        line, column = p.line, p.column
        for ch in prefix:
            if not p.expect_and_skip(ch):
                return None

        ret = []
        level = 0
        while True:
            c = p.peek()
            if c is None or c == '\n':
                break
            if c == '\\':
                ret.append(self._math_escape(p))
                continue
            if c == '{':
                level += 1
            elif c == '}':
                if level == 0:
                    break
                level -= 1
            ret.append(c)
            p.step()

        if level:
            raise LexError(f"mismatched brackets in math opened at line {line}, column {column}", line, column)
        cur.commit(p)
        return ''.join(ret).strip()

    def _math_escape(self, p: Cursor) -> str:
        # escapes are kept as-is for the math renderer
        esc = p.peek(1)
        if esc is None or esc == '\n':
            raise LexError("line ended in the middle of a math escape", p.line, p.column)
        p.step()
        p.step()
        return '\\' + esc

    def get_maybe_delim(self, cur: Cursor) -> Optional[str]:
        c = cur.peek()
        if c is None or c not in BRACKETS:
            return None
        cur.step()
        return c

    def get_word_part(self, cur: Cursor) -> Optional[str]:
        """Run of word characters; `\\x` yields a literal `x` for escapable `x`."""
        p = cur.clone()
        ret = []
        while True:
            c = p.peek()
            if c == '\\':
                esc = p.peek(1)
                if esc is None or esc == '\n':
                    raise LexError("invalid escape sequence: backslash at end of line", p.line, p.column)
                if esc not in ESCAPABLE:
                    raise LexError(f"invalid escape sequence: \\{esc}", p.line, p.column)
                ret.append(esc)
                p.step()
                p.step()
            elif c is not None and is_word_char(c):
                ret.append(c)
                p.step()
            elif c is not None and not ret and c in WORD_START_SPECIALS:
                ret.append(c)
                p.step()
            else:
                break

        if not ret:
            return None
        cur.commit(p)
        return ''.join(ret)
