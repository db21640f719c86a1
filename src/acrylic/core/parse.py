"""File discovery, header extraction and stage-1 line parsing"""

from pathlib import Path
from typing import Optional

from acrylic.core import terms as t
from acrylic.core.cursor import Cursor
from acrylic.core.errors import ConfigError
from acrylic.core.lexer import DEFAULT_MAX_DEPTH, TermLexer, is_inline_whitespace
from acrylic.core.lines import LineParser
from acrylic.core.models import ParsedDoc, StandardOptions


ACR_EXTENSIONS = {'.acr'}
DEFAULT_INDENT = 2


def discover_files(path: Path) -> list[Path]:
    """Return sorted .acr files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in ACR_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in ACR_EXTENSIONS)


def get_header_entry(cur: Cursor) -> Optional[tuple[str, str]]:
    """One `%:key value` header line, or None (cursor untouched) if the line isn't one."""
    p = cur.clone()
    if not (p.expect_and_skip('%') and p.expect_and_skip(':')):
        return None

    key = p.collect_at_least(1, lambda c: not c.isspace())
    if key is None or p.count_while(is_inline_whitespace) == 0:
        return None
    value = p.collect_at_least(1, lambda c: c != '\n')
    if value is None:
        return None
    p.step()

    cur.commit(p)
    return key, value


def make_options(header: dict[str, str]) -> StandardOptions:
    """Pop `indent`, `tags` and `title` off `header` into StandardOptions."""
    raw_indent = header.pop('indent', None)
    if raw_indent is None:
        indent = DEFAULT_INDENT
    elif raw_indent.strip() == 'tab':
        indent = 'tab'
    else:
        try:
            indent = int(raw_indent.strip())
        except ValueError:
            raise ConfigError(f"failed to parse indent: {raw_indent!r} (expected 'tab' or a number of spaces)") from None
        if indent <= 0:
            raise ConfigError(f"failed to parse indent: {raw_indent!r} (indent width must be positive)")

    return StandardOptions(
        indent=indent,
        tags=header.pop('tags', '').split(),
        title=header.pop('title', ''),
    )


def parse_source(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> ParsedDoc:
    """Stage 1: header block, standard options, then one Line per logical line."""
    cur = Cursor(source.replace('\r\n', '\n'))

    header: dict[str, str] = {}
    while (entry := get_header_entry(cur)) is not None:
        key, value = entry
        header[key] = value
    options = make_options(header)

    cur.count_while(lambda c: c == '\n')

    parser = LineParser(options, TermLexer(max_depth))
    lines: list[t.Line] = []
    while (line := parser.get_line(cur)) is not None:
        lines.append(line)

    return ParsedDoc(header=header, options=options, lines=lines)
