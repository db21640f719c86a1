"""Line parser: indentation, bullet/task prefixes and the terms of one logical line"""

from typing import Optional

from acrylic.core import terms as t
from acrylic.core.cursor import Cursor
from acrylic.core.errors import LexError, LineError
from acrylic.core.lexer import TermLexer, is_inline_whitespace
from acrylic.core.models import BulletType, StandardOptions, TaskFormat, TaskState


BULLETS = {'-': BulletType.dash, '*': BulletType.star}
TASK_BRACKETS = {'[': (TaskFormat.square, ']'), '(': (TaskFormat.paren, ')')}
TASK_STATES = {' ': TaskState.todo, 'x': TaskState.done, 'X': TaskState.done, '-': TaskState.cancelled}


def format_error(cur: Cursor, message: str, terms: list) -> str:
    """Render `message` with the source line under `cur` and a caret at its column."""
    src = cur.source
    start = src.rfind('\n', 0, cur.pos) + 1
    end = src.find('\n', cur.pos)
    text = src[start:] if end == -1 else src[start:end]

    prefix = f"{cur.line:2} | "
    caret = ' ' * (len(prefix) + cur.pos - start) + '^'
    return f"{message}\n{prefix}{text}\n{caret}\nSuccessfully parsed before (in the line): {terms!r}"


def line_error(cur: Cursor, message: str, terms: list) -> LineError:
    return LineError(message, cur.line, cur.column, format_error(cur, message, terms), list(terms))


def get_bullet_prefix(cur: Cursor) -> Optional[BulletType]:
    """`-` or `*` followed by inline whitespace (not consumed)."""
    bullet = BULLETS.get(cur.peek())
    if bullet is None or not is_inline_whitespace(cur.peek(1)):
        return None
    cur.step()
    return bullet


def get_task_prefix(cur: Cursor) -> Optional[t.TaskPrefix]:
    """`[ ]`, `[x]`, `[X]`, `[-]` or the same with parentheses."""
    if cur.peek() not in TASK_BRACKETS:
        return None
    fmt, closing = TASK_BRACKETS[cur.peek()]
    state = TASK_STATES.get(cur.peek(1))
    if state is None or cur.peek(2) != closing:
        return None
    for _ in range(3):
        cur.step()
    return t.TaskPrefix(state, fmt)


class LineParser:
    """Parses one logical line at a time with the document's options."""

    def __init__(self, options: StandardOptions, lexer: Optional[TermLexer] = None):
        self.options = options
        self.lexer = lexer or TermLexer()

    def get_line(self, cur: Cursor) -> Optional[t.Line]:
        """Parse the line at `cur` and move past its newline; None at end of input."""
        if cur.at_end():
            return None

        p = cur.clone()
        number = p.line

        if self._skip_blank(p):
            cur.commit(p)
            return t.Line(indent=0, terms=[], number=number)

        indent = self.get_indent(p)

        terms: list[t.Term] = []
        if (bullet := get_bullet_prefix(p)) is not None:
            terms.append(t.BulletPrefix(bullet))
            p.count_while(is_inline_whitespace)
        if (task := get_task_prefix(p)) is not None:
            terms.append(task)
            p.count_while(is_inline_whitespace)

        while True:
            start = p.clone()
            try:
                term = self.lexer.get_term(p)
            except LexError as e:
                raise line_error(start, e.message, terms) from e
            if term is None:
                break
            terms.append(term)

        while terms and isinstance(terms[-1], t.Space):
            terms.pop()
        p.count_while(is_inline_whitespace)

        if p.peek() not in (None, '\n'):
            raise line_error(p, "failed to parse entire line", terms)
        p.step()

        cur.commit(p)
        return t.Line(indent=indent, terms=terms, number=number)

    def get_indent(self, cur: Cursor) -> int:
        """Indent level at line start; spaces must be a multiple of the indent width."""
        width = self.options.indent
        if width == "tab":
            return cur.count_while(lambda c: c == '\t')

        count = cur.count_while(lambda c: c == ' ')
        if count % width:
            raise line_error(cur, f"bad indent: {count} spaces is not divisible by indent size {width}", [])
        return count // width

    @staticmethod
    def _skip_blank(cur: Cursor) -> bool:
        p = cur.clone()
        p.count_while(is_inline_whitespace)
        if p.peek() not in (None, '\n'):
            return False
        p.step()
        cur.commit(p)
        return True
