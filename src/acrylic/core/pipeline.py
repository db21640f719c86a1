"""Pipeline step functions: parse, check and render orchestration"""

import logging
from pathlib import Path
from typing import Optional

from acrylic.core.classify import classify_document
from acrylic.core.errors import AcrylicError
from acrylic.core.export import HtmlOptions, write_doc
from acrylic.core.lexer import DEFAULT_MAX_DEPTH
from acrylic.core.models import Document
from acrylic.core.parse import discover_files, parse_source
from acrylic.core.tree import build_tree


logger = logging.getLogger(__name__)


def parse_text(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Document:
    """Run all three stages over a document source."""
    parsed = parse_source(source, max_depth)
    logger.debug("stage 1: %d lines, header keys %s", len(parsed.lines), sorted(parsed.header))
    tree = build_tree(parsed, max_depth)
    logger.debug("stage 2: %d top-level nodes", len(tree.nodes))
    return classify_document(tree)


def parse_file(path: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> Document:
    return parse_text(path.read_text(encoding='utf-8'), max_depth)


def run_render(
    path: str,
    output_dir: Path,
    options: HtmlOptions,
    max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> list[tuple[Path, Path]]:
    """Render every .acr file under path to HTML. Returns (source_path, html_path) pairs."""
    root = Path(path)
    results = []
    for p in discover_files(root):
        try:
            doc = parse_file(p, max_depth)
            relative = p.relative_to(root) if root.is_dir() else Path(p.name)
            results.append((p, write_doc(doc, relative, output_dir, options)))
        except Exception as e:
            raise RuntimeError(f"Failed to render {p}: {e}") from e
    return results


def run_check(path: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[tuple[Path, Optional[str]]]:
    """Parse every .acr file under path. Returns (source_path, error message or None) pairs."""
    results = []
    for p in discover_files(Path(path)):
        try:
            parse_file(p, max_depth)
            results.append((p, None))
        except AcrylicError as e:
            logger.debug("check failed for %s", p, exc_info=True)
            results.append((p, str(e)))
    return results
