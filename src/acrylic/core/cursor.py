"""Character cursor over source text with line/column tracking"""

from dataclasses import dataclass, replace
from typing import Callable, Optional


@dataclass
class Cursor:
    """Position in a source string.

    Speculative parses work on a `clone()` and `commit()` it back on success;
    a failed attempt just drops the clone.
    """
    source: str
    pos: int = 0
    line: int = 1
    column: int = 1

    def clone(self) -> "Cursor":
        return replace(self)

    def commit(self, other: "Cursor") -> None:
        """Move this cursor to the position of `other` (a clone of it)."""
        self.pos, self.line, self.column = other.pos, other.line, other.column

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> Optional[str]:
        i = self.pos + offset
        return self.source[i] if i < len(self.source) else None

    def step(self) -> None:
        c = self.peek()
        if c is None:
            return
        if c == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1

    def next(self) -> Optional[str]:
        c = self.peek()
        self.step()
        return c

    def expect_and_skip(self, expected: str) -> bool:
        if self.peek() == expected:
            self.step()
            return True
        return False

    def count_while(self, pred: Callable[[str], bool]) -> int:
        n = 0
        while (c := self.peek()) is not None and pred(c):
            self.step()
            n += 1
        return n

    def collect(self, pred: Callable[[str], bool]) -> str:
        start = self.pos
        self.count_while(pred)
        return self.source[start:self.pos]

    def collect_at_least(self, n: int, pred: Callable[[str], bool]) -> Optional[str]:
        """Like `collect`, but leaves the cursor untouched unless at least `n` chars match."""
        p = self.clone()
        ret = p.collect(pred)
        if len(ret) < n:
            return None
        self.commit(p)
        return ret

    def rest_of_line(self) -> str:
        """Source text from the cursor up to (excluding) the next newline."""
        end = self.source.find('\n', self.pos)
        return self.source[self.pos:] if end == -1 else self.source[self.pos:end]
