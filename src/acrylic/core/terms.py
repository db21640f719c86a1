"""Stage-1 terms: the lexical units a logical line is made of"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from acrylic.core.models import BulletType, TaskFormat, TaskState


@dataclass(frozen=True)
class Space:
    """A whitespace run; `raw` keeps the exact text (newlines inside multi-line arguments)."""
    raw: str = " "


@dataclass(frozen=True)
class Word:
    text: str


@dataclass(frozen=True)
class MaybeDelim:
    """A bracket character that may close a function argument or be literal text."""
    char: str


@dataclass(frozen=True)
class Tag:
    name: str


@dataclass(frozen=True)
class InlineMath:
    text: str


@dataclass(frozen=True)
class DisplayMath:
    text: str


@dataclass(frozen=True)
class InlineCode:
    text: str


@dataclass(frozen=True)
class InlineBold:
    text: str


@dataclass(frozen=True)
class InlineItalics:
    text: str


@dataclass(frozen=True)
class FuncCall:
    """`@name{...}(...)#{...}#`: each argument is its own list of terms."""
    name: str
    args: list[list[Term]] = field(default_factory=list)


@dataclass(frozen=True)
class ListTerm:
    """Anonymous `@{...}{...}` list; only meaningful as a table row."""
    args: list[list[Term]] = field(default_factory=list)


@dataclass(frozen=True)
class BulletPrefix:
    bullet: BulletType


@dataclass(frozen=True)
class TaskPrefix:
    state: TaskState
    format: TaskFormat


Term = Union[
    Space, Word, MaybeDelim, Tag, InlineMath, DisplayMath, InlineCode,
    InlineBold, InlineItalics, FuncCall, ListTerm, BulletPrefix, TaskPrefix,
]


@dataclass(frozen=True)
class Line:
    """One logical source line: indent level plus its terms, in source order."""
    indent: int
    terms: list[Term]
    number: int = 1     # 1-based source line the logical line starts on
