"""Tree builder: nests the flat list of lines into nodes by indentation"""

from acrylic.core import terms as t
from acrylic.core.errors import TreeError
from acrylic.core.lexer import DEFAULT_MAX_DEPTH
from acrylic.core.models import ParsedDoc, RawNode, TreeDoc


def _to_node(line: t.Line) -> RawNode:
    return RawNode(contents=line.terms, number=line.number)


def build_tree(doc: ParsedDoc, max_depth: int = DEFAULT_MAX_DEPTH) -> TreeDoc:
    """Stage 2: turn indented lines into a forest of RawNodes.

    `stack[k]` is the open node at indent level k, so a line may be indented at
    most `len(stack)` levels. Blank lines set `bottom_spacing` on the deepest
    open node and never become nodes. A line holding only a comment has no
    terms, so it counts as blank.
    """
    nodes: list[RawNode] = []
    stack: list[RawNode] = []

    def pop_to_parent() -> None:
        top = stack.pop()
        (stack[-1].children if stack else nodes).append(top)

    for line in doc.lines:
        if not line.terms:
            if stack:
                stack[-1].bottom_spacing = True
            continue

        if line.indent > max_depth:
            raise TreeError(f"indent level {line.indent} exceeds the nesting limit of {max_depth}", line.number)

        if not stack:
            if line.indent != 0:
                raise TreeError("indented line before any top-level line", line.number)
        else:
            while line.indent + 1 < len(stack):
                pop_to_parent()
            if line.indent + 1 == len(stack):
                # sibling of the deepest open node
                pop_to_parent()
            elif line.indent != len(stack):
                raise TreeError(
                    f"indent leap (current {line.indent}, expected at most {len(stack)})", line.number
                )
        stack.append(_to_node(line))

    while stack:
        pop_to_parent()

    return TreeDoc(header=doc.header, options=doc.options, nodes=nodes)
