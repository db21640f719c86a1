"""Line classifier: reinterprets raw node terms as semantic line kinds"""

import re
from typing import Callable, Iterable, Optional

from acrylic.core import terms as raw
from acrylic.core.errors import ClassifyError
from acrylic.core.models import (
    Bold, Code, CodeBlockLine, DisplayMathLine, Document, DotGraphLine, ImageLine,
    InlineTerm, Italics, LineKind, Math, Node, RawNode, Ref, Space, TableItem, TableLine,
    TableRow, TableSeparator, Tag, Task, TextLine, TreeDoc, Url, Word,
)


URL_RE = re.compile(r'[A-Za-z]+://\S+')
TABLE_SEPARATOR = '---'
TAB_WIDTH = 8

_TEXT_TERMS = {
    raw.InlineMath: Math,
    raw.InlineCode: Code,
    raw.InlineBold: Bold,
    raw.InlineItalics: Italics,
}


def classify_document(doc: TreeDoc) -> Document:
    """Stage 3: classify every node of the forest."""
    return Document(
        header=doc.header,
        options=doc.options,
        nodes=[classify_node(n) for n in doc.nodes],
    )


def classify_node(node: RawNode) -> Node:
    try:
        line = classify_line(node.contents)
    except ClassifyError as e:
        raise ClassifyError(f"line {node.number}: {e}") from e
    return Node(
        line=line,
        children=[classify_node(c) for c in node.children],
        bottom_spacing=node.bottom_spacing,
    )


def classify_line(terms: list[raw.Term]) -> LineKind:
    """Display math and the block calls must be alone in their line; the rest is text."""
    first = next((x for x in terms if not isinstance(x, raw.Space)), None)

    if isinstance(first, raw.DisplayMath):
        _expect_alone(terms, first, "display math")
        return DisplayMathLine(text=first.text)

    if isinstance(first, raw.FuncCall) and first.name in BLOCK_CALLS:
        _expect_alone(terms, first, f"`@{first.name}`")
        return BLOCK_CALLS[first.name](first)

    return classify_text(terms)


def classify_text(terms: list[raw.Term]) -> TextLine:
    i = 0
    bullet = task = None
    if i < len(terms) and isinstance(terms[i], raw.BulletPrefix):
        bullet = terms[i].bullet
        i += 1
    if i < len(terms) and isinstance(terms[i], raw.TaskPrefix):
        task = Task(state=terms[i].state, format=terms[i].format)
        i += 1
    return TextLine(bullet=bullet, task=task, content=reduce_terms(terms[i:]))


def reduce_terms(terms: Iterable[raw.Term]) -> list[InlineTerm]:
    """Map raw terms onto inline terms.

    Adjacent words and bracket characters are joined into one word, which
    becomes a Url if it looks like one. `@c` and `@ref` calls are resolved;
    anything that cannot appear inside text is an error.
    """
    ret: list[InlineTerm] = []
    word: list[str] = []

    def flush() -> None:
        if word:
            ret.append(word_or_url(''.join(word)))
            word.clear()

    for term in terms:
        if isinstance(term, raw.Word):
            word.append(term.text)
        elif isinstance(term, raw.MaybeDelim):
            word.append(term.char)
        else:
            flush()
            ret.append(_reduce_term(term))
    flush()
    return ret


def _reduce_term(term: raw.Term) -> InlineTerm:
    if isinstance(term, raw.Space):
        return Space()
    if isinstance(term, raw.Tag):
        return Tag(name=term.name)
    if type(term) in _TEXT_TERMS:
        return _TEXT_TERMS[type(term)](text=term.text)
    if isinstance(term, raw.FuncCall):
        return _reduce_call(term)
    raise ClassifyError(f"unexpected {term!r}")


def _reduce_call(call: raw.FuncCall) -> InlineTerm:
    if call.name == 'c':
        _expect_arity(call, 1)
        return Code(text=_stringify_arg(call, call.args[0]))

    if call.name == 'ref':
        if len(call.args) == 1:
            target = _stringify_arg(call, call.args[0]).strip()
            return Ref(content=[Word(text=target)], target=target)
        if len(call.args) == 2:
            content, target = call.args
            return Ref(content=reduce_terms(content), target=_stringify_arg(call, target).strip())
        raise ClassifyError(f"`@ref` call must have 1 or 2 arguments, got {len(call.args)}")

    if call.name in BLOCK_CALLS:
        raise ClassifyError(f"`@{call.name}` must be at the beginning of the line")
    raise ClassifyError(f"unknown function {call.name!r}")


def word_or_url(text: str) -> InlineTerm:
    return Url(url=text) if URL_RE.fullmatch(text) else Word(text=text)


def stringify(terms: Iterable[raw.Term]) -> Optional[str]:
    """Plain text of a term list made only of spaces, words and brackets; else None."""
    parts = []
    for term in terms:
        if isinstance(term, raw.Space):
            parts.append(term.raw)
        elif isinstance(term, raw.Word):
            parts.append(term.text)
        elif isinstance(term, raw.MaybeDelim):
            parts.append(term.char)
        else:
            return None
    return ''.join(parts)


def _stringify_arg(call: raw.FuncCall, arg: list[raw.Term]) -> str:
    text = stringify(arg)
    if text is None:
        offending = next(x for x in arg if not isinstance(x, (raw.Space, raw.Word, raw.MaybeDelim)))
        raise ClassifyError(
            f"`@{call.name}` expects a plain string argument, got {offending!r} "
            f"(use a raw `#{{...}}#` argument for literal text)"
        )
    return text


def _expect_arity(call: raw.FuncCall, *allowed: int) -> None:
    if len(call.args) not in allowed:
        expected = " or ".join(str(n) for n in allowed)
        raise ClassifyError(f"`@{call.name}` call expects {expected} argument(s), {len(call.args)} given")


def _expect_alone(terms: list[raw.Term], term: raw.Term, what: str) -> None:
    others = [x for x in terms if x is not term and not isinstance(x, raw.Space)]
    if others:
        raise ClassifyError(f"{what} should be alone in its line, got {others[0]!r}")


# --- block calls ---

def classify_code(call: raw.FuncCall) -> CodeBlockLine:
    """`@code{body}` or `@code{language}{body}`."""
    _expect_arity(call, 1, 2)
    language = None
    if len(call.args) == 2:
        language = (stringify(call.args[0]) or '').strip() or None
    return CodeBlockLine(code=dedent(_stringify_arg(call, call.args[-1])), language=language)


def classify_dot(call: raw.FuncCall) -> DotGraphLine:
    _expect_arity(call, 1)
    return DotGraphLine(source=_stringify_arg(call, call.args[0]))


def classify_image(call: raw.FuncCall) -> ImageLine:
    """`@image{url}` or `@image{caption}{url}`."""
    _expect_arity(call, 1, 2)
    url = _stringify_arg(call, call.args[-1]).strip()
    caption = _stringify_arg(call, call.args[0]).strip() if len(call.args) == 2 else None
    return ImageLine(url=url, caption=caption)


def classify_table(call: raw.FuncCall) -> TableLine:
    """`@table{ {a}{b} --- {1}{2} }`: rows of cells, `---` separators between them."""
    _expect_arity(call, 1)

    items: list[TableItem] = []
    columns = None
    for item in _table_items(call.args[0]):
        if isinstance(item, TableRow):
            if columns is None:
                columns = len(item.cells)
            elif len(item.cells) != columns:
                raise ClassifyError(f"got table rows of different sizes (first {columns}, then {len(item.cells)})")
        items.append(item)

    return TableLine(columns=columns or 0, items=items)


def _table_items(terms: list[raw.Term]) -> Iterable[TableItem]:
    i = 0
    while i < len(terms):
        term = terms[i]
        if isinstance(term, raw.Space):
            i += 1
        elif isinstance(term, raw.Word) and term.text == TABLE_SEPARATOR:
            yield TableSeparator()
            i += 1
        elif isinstance(term, raw.ListTerm):
            yield TableRow(cells=[reduce_terms(cell) for cell in term.args])
            i += 1
        elif term == raw.MaybeDelim('{'):
            cells, i = _brace_row(terms, i)
            yield TableRow(cells=[reduce_terms(cell) for cell in cells])
        else:
            raise ClassifyError(f"expected space, row or separator in `@table`, got {term!r}")


def _brace_row(terms: list[raw.Term], i: int) -> tuple[list[list[raw.Term]], int]:
    """Collect adjacent `{...}` groups starting at `terms[i]` as the cells of one row."""
    cells = []
    while i < len(terms) and terms[i] == raw.MaybeDelim('{'):
        level = 0
        j = i + 1
        while True:
            if j >= len(terms):
                raise ClassifyError("unclosed '{' in table row")
            if terms[j] == raw.MaybeDelim('{'):
                level += 1
            elif terms[j] == raw.MaybeDelim('}'):
                if level == 0:
                    break
                level -= 1
            j += 1
        cells.append(terms[i + 1:j])
        i = j + 1
    return cells, i


BLOCK_CALLS: dict[str, Callable[[raw.FuncCall], LineKind]] = {
    'code': classify_code,
    'dot': classify_dot,
    'table': classify_table,
    'image': classify_image,
}


# --- code block de-indentation ---

def _indent_width(line: str) -> int:
    width = 0
    for c in line:
        if c == ' ':
            width += 1
        elif c == '\t':
            width += TAB_WIDTH
        else:
            break
    return width


def _strip_indent(line: str, width: int) -> str:
    consumed = i = 0
    while consumed < width and i < len(line) and line[i] in ' \t':
        consumed += 1 if line[i] == ' ' else TAB_WIDTH
        i += 1
    # a tab that overshoots leaves its remainder as spaces
    return ' ' * max(consumed - width, 0) + line[i:]


def dedent(text: str) -> str:
    """Remove the common leading indentation of a code block body.

    A whitespace-only first and last line are dropped; tabs count as 8
    columns. Whitespace-only lines don't take part in the minimum.
    """
    lines = text.split('\n')
    if lines and not lines[0].strip(' \t'):
        lines.pop(0)
    if lines and not lines[-1].strip(' \t'):
        lines.pop()

    width = min((_indent_width(line) for line in lines if line.strip(' \t')), default=0)
    return '\n'.join(_strip_indent(line, width) for line in lines)
