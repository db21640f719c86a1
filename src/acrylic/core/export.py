"""HTML export: render a classified Document to a standalone page and write it"""

import logging
from dataclasses import dataclass
from pathlib import Path

from acrylic.core.errors import RenderError
from acrylic.core.models import (
    Bold, BulletType, Code, CodeBlockLine, DisplayMathLine, Document, DotGraphLine,
    ImageLine, InlineTerm, Italics, LineKind, Math, Node, Ref, Space, TableLine,
    TableRow, TableSeparator, Tag, TaskState, TextLine, Url, Word,
)
from acrylic.core.utils.dot import dot_to_svg
from acrylic.core.utils.html import elem, text


logger = logging.getLogger(__name__)

INDENT_EM = 1.25
FOLD_TAG = '-fold'
BULLET_MARKS = {BulletType.dash: '-', BulletType.star: '*'}

HEADER_METATAGS = (
    '<meta name="viewport" content="width=device-width,initial-scale=1,maximum-scale=1,user-scalable=no"/>'
    '<meta http-equiv="X-UA-Compatible" content="IE=edge,chrome=1"/>'
    '<meta name="HandheldFriendly" content="true"/>'
    '<meta charset="UTF-8"/>'
)

DEFAULT_STYLE = """\
main { max-width: 48em; margin: 2em auto; padding: 0 1em; font-family: sans-serif; line-height: 1.5; }
p, summary { margin: 0.2em 0; }
.acr-tag { color: #888; font-size: 0.85em; }
.acr-inline-code, pre { background: #f4f4f4; border-radius: 3px; }
.acr-inline-code { padding: 0 0.2em; }
pre { padding: 0.5em; overflow-x: auto; }
.acr-spacing { height: 0.8em; }
.acr-task-cancelled { color: #888; }
table { border-collapse: collapse; }
td, th { border: 1px solid #ccc; padding: 0.2em 0.5em; }
figure { margin: 0.5em 0; }
"""

INIT_JS = """\
window.addEventListener("load", function () {
  document.querySelectorAll(".katex-inline, .katex-display").forEach(function (el) {
    katex.render(el.textContent, el, {
      displayMode: el.classList.contains("katex-display"),
      throwOnError: false,
    });
  });
});
"""


@dataclass(frozen=True)
class HtmlOptions:
    katex_path: str = "katex"
    render_dot: bool = True
    dot_command: str = "dot"
    dot_timeout: float = 30.0
    dot_fallback: bool = False


def build_inline(terms: list[InlineTerm]) -> str:
    parts = []
    for term in terms:
        if isinstance(term, Space):
            parts.append(' ')
        elif isinstance(term, Word):
            parts.append(text(term.text))
        elif isinstance(term, Tag):
            parts.append(elem('span', text('%' + term.name), [('class', 'acr-tag')]))
        elif isinstance(term, Url):
            parts.append(elem('a', text(term.url), [('href', term.url)]))
        elif isinstance(term, Math):
            parts.append(elem('span', text(term.text), [('class', 'katex-inline')]))
        elif isinstance(term, Code):
            parts.append(elem('code', text(term.text), [('class', 'acr-inline-code')]))
        elif isinstance(term, Bold):
            parts.append(elem('b', text(term.text)))
        elif isinstance(term, Italics):
            parts.append(elem('i', text(term.text)))
        elif isinstance(term, Ref):
            parts.append(elem('a', build_inline(term.content), [('class', 'acr-href'), ('href', term.target)]))
    return ''.join(parts)


def build_text(line: TextLine) -> str:
    """Bullet marker, task checkbox and inline content of a text line."""
    prefix = ''
    if line.bullet is not None:
        prefix += text(BULLET_MARKS[line.bullet]) + ' '

    content = build_inline(line.content)
    if line.task is not None:
        checkbox = [('type', 'checkbox'), ('disabled', 'disabled')]
        if line.task.state != TaskState.todo:
            checkbox.append(('checked', 'checked'))
        prefix += elem('input', pairs=checkbox) + ' '
        if line.task.state == TaskState.cancelled:
            content = elem('s', content, [('class', 'acr-task-cancelled')])
    return prefix + content


def _table_row(row: TableRow, cell_tag: str) -> str:
    return elem('tr', ''.join(elem(cell_tag, build_inline(cell)) for cell in row.cells))


def build_table(line: TableLine) -> str:
    """Rows before the first separator form the header; later separators are rules."""
    items = line.items
    first_sep = next((i for i, x in enumerate(items) if isinstance(x, TableSeparator)), None)
    head = items[:first_sep] if first_sep else []
    body = items[first_sep + 1:] if first_sep else items

    rule = elem('tr', elem('td', '', [('colspan', str(line.columns))]), [('class', 'acr-table-rule')])
    thead = elem('thead', ''.join(_table_row(r, 'th') for r in head)) if head else ''
    tbody = elem('tbody', ''.join(
        _table_row(x, 'td') if isinstance(x, TableRow) else rule for x in body
    ))
    return elem('table', thead + tbody)


def build_dot(line: DotGraphLine, options: HtmlOptions) -> str:
    fallback = elem('pre', elem('code', text(line.source)), [('class', 'acr-dot-source')])
    if not options.render_dot:
        return fallback
    try:
        return elem('div', dot_to_svg(line.source, options.dot_command, options.dot_timeout), [('class', 'acr-dot')])
    except RenderError as e:
        if not options.dot_fallback:
            raise
        logger.warning("dot rendering failed, emitting graph source instead: %s", e)
        return fallback


def build_block(line: LineKind, options: HtmlOptions) -> str:
    """HTML for any non-text line kind."""
    if isinstance(line, CodeBlockLine):
        code_attrs = [('class', f'language-{line.language}')] if line.language else None
        return elem('pre', elem('code', text(line.code), code_attrs))
    if isinstance(line, DisplayMathLine):
        return elem('div', text(line.text), [('class', 'katex-display')])
    if isinstance(line, TableLine):
        return build_table(line)
    if isinstance(line, ImageLine):
        img = elem('img', pairs=[('src', line.url), ('alt', line.caption or '')])
        caption = elem('figcaption', text(line.caption)) if line.caption else ''
        return elem('figure', img + caption)
    if isinstance(line, DotGraphLine):
        return build_dot(line, options)
    raise RenderError(f"cannot render line of kind {line.kind!r} as a block")


def build_node(node: Node, depth: int, options: HtmlOptions) -> str:
    """Render a node and its subtree; children are indented one level further."""
    style = [('style', f"margin-left: {depth * INDENT_EM:.2f}em")] if depth else []
    children = ''.join(build_node(c, depth + 1, options) for c in node.children)
    line = node.line

    if isinstance(line, TextLine) and line.has_tag(FOLD_TAG):
        out = elem('details', elem('summary', build_text(line), style) + '\n' + children) + '\n'
    elif isinstance(line, TextLine):
        out = elem('p', build_text(line), style) + '\n' + children
    else:
        out = elem('div', build_block(line, options), [('class', 'acr-block')] + style) + '\n' + children

    if node.bottom_spacing:
        out += '<div class="acr-spacing"></div>\n'
    return out


def build_katex_header(katex_path: str) -> str:
    prefix = katex_path if not katex_path or katex_path.endswith('/') else katex_path + '/'
    return (
        elem('link', pairs=[('rel', 'stylesheet'), ('href', f'{prefix}katex.min.css')])
        + elem('script', '', [('src', f'{prefix}katex.min.js'), ('defer', 'true')])
        + elem('script', INIT_JS)
    )


def build_page(doc: Document, options: HtmlOptions) -> str:
    """Return a complete HTML page for `doc`."""
    title = doc.options.title
    head = HEADER_METATAGS + elem('title', text(title))
    if doc.options.tags:
        head += elem('meta', pairs=[('name', 'keywords'), ('content', ', '.join(doc.options.tags))])
    head += build_katex_header(options.katex_path) + elem('style', DEFAULT_STYLE)

    article = elem('h1', text(title)) + '\n' if title else ''
    article += ''.join(build_node(n, 0, options) for n in doc.nodes)

    return "<!DOCTYPE html>\n" + elem('html', elem('head', head) + elem('body', elem('main', article)))


def write_doc(doc: Document, relative_path: Path, output_dir: Path, options: HtmlOptions) -> Path:
    """Write the page for one document.

    Output path mirrors the source layout:
      output_dir / relative_path.parent / <stem>.html
    """
    html_path = output_dir / relative_path.with_suffix('.html')
    html_path.parent.mkdir(parents=True, exist_ok=True)
    html_path.write_text(build_page(doc, options), encoding='utf-8')
    logger.debug("wrote %s", html_path)
    return html_path
