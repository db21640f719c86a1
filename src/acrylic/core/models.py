"""Document models: header options, intermediate stage records and the classified tree"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class BulletType(str, Enum):
    """Bullet marker a line starts with (`- ` or `* `)"""
    dash = "dash"
    star = "star"


class TaskState(str, Enum):
    todo = "todo"
    done = "done"
    cancelled = "cancelled"


class TaskFormat(str, Enum):
    """Bracket style of a task prefix: `[x]` or `(x)`"""
    square = "square"
    paren = "paren"


class StandardOptions(BaseModel):
    """Options derived from the `%:key value` header block, shared by all stages."""
    indent: Union[Literal["tab"], int] = 2     # "tab", or spaces per level
    tags: list[str] = []
    title: str = ""


# --- stage 1 / stage 2 records (internal, not serialized) ---

@dataclass
class ParsedDoc:
    """Stage-1 result: residual header, options and the flat list of lines."""
    header:  dict[str, str]
    options: StandardOptions
    lines:   list               # acrylic.core.terms.Line


@dataclass
class RawNode:
    """Stage-2 tree node still holding raw stage-1 terms."""
    contents:       list        # acrylic.core.terms.Term
    children:       list[RawNode] = field(default_factory=list)
    bottom_spacing: bool = False
    number:         int = 0     # 1-based source line


@dataclass
class TreeDoc:
    """Stage-2 result: a forest of raw nodes."""
    header:  dict[str, str]
    options: StandardOptions
    nodes:   list[RawNode]


# --- stage 3: classified document (public, serializable) ---

class Task(BaseModel):
    state: TaskState
    format: TaskFormat = TaskFormat.square


class Space(BaseModel):
    kind: Literal["space"] = "space"


class Word(BaseModel):
    kind: Literal["word"] = "word"
    text: str


class Tag(BaseModel):
    kind: Literal["tag"] = "tag"
    name: str


class Url(BaseModel):
    kind: Literal["url"] = "url"
    url: str


class Math(BaseModel):
    kind: Literal["math"] = "math"
    text: str


class Code(BaseModel):
    kind: Literal["code"] = "code"
    text: str


class Bold(BaseModel):
    kind: Literal["bold"] = "bold"
    text: str


class Italics(BaseModel):
    kind: Literal["italics"] = "italics"
    text: str


class Ref(BaseModel):
    """Link: `content` is displayed, `target` is where it points."""
    kind: Literal["ref"] = "ref"
    content: list[InlineTerm]
    target: str


InlineTerm = Annotated[
    Union[Space, Word, Tag, Url, Math, Code, Bold, Italics, Ref],
    Field(discriminator="kind"),
]


class TextLine(BaseModel):
    kind: Literal["text"] = "text"
    bullet: Optional[BulletType] = None
    task: Optional[Task] = None
    content: list[InlineTerm] = []

    def has_tag(self, name: str) -> bool:
        return any(isinstance(t, Tag) and t.name == name for t in self.content)


class TableRow(BaseModel):
    kind: Literal["row"] = "row"
    cells: list[list[InlineTerm]]


class TableSeparator(BaseModel):
    kind: Literal["separator"] = "separator"


TableItem = Annotated[Union[TableRow, TableSeparator], Field(discriminator="kind")]


class TableLine(BaseModel):
    kind: Literal["table"] = "table"
    columns: int
    items: list[TableItem] = []


class CodeBlockLine(BaseModel):
    """De-indented code block; `language` is informational only."""
    kind: Literal["code"] = "code"
    code: str
    language: Optional[str] = None


class DisplayMathLine(BaseModel):
    kind: Literal["display_math"] = "display_math"
    text: str


class DotGraphLine(BaseModel):
    kind: Literal["dot"] = "dot"
    source: str


class ImageLine(BaseModel):
    kind: Literal["image"] = "image"
    url: str
    caption: Optional[str] = None


LineKind = Annotated[
    Union[TextLine, TableLine, CodeBlockLine, DisplayMathLine, DotGraphLine, ImageLine],
    Field(discriminator="kind"),
]


class Node(BaseModel):
    """Classified tree node: one line kind plus its ordered children."""
    line: LineKind
    children: list[Node] = []
    bottom_spacing: bool = False


class Document(BaseModel):
    """Public contract handed to rendering backends."""
    header: dict[str, str] = {}
    options: StandardOptions = Field(default_factory=StandardOptions)
    nodes: list[Node] = []


Ref.model_rebuild()
TextLine.model_rebuild()
TableRow.model_rebuild()
TableLine.model_rebuild()
Node.model_rebuild()
Document.model_rebuild()
