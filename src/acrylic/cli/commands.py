"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from acrylic.config import Settings, load_config
from acrylic.core.errors import AcrylicError
from acrylic.core.export import HtmlOptions
from acrylic.core.pipeline import parse_file, run_check, run_render


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def render_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to render")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    katex: Annotated[Optional[str], typer.Option("--katex-path", help="Path or URL prefix of the KaTeX assets")] = None,
    no_dot: Annotated[bool, typer.Option("--no-dot", help="Emit @dot graph sources instead of running dot")] = False,
    nesting: Annotated[Optional[int], typer.Option("--max-nesting", help="Max argument/indentation nesting")] = None,
    ):
    """Render .acr documents to standalone HTML pages."""
    settings = _settings(overrides={
        "output_dir": out, "katex_path": katex,
        "render_dot": False if no_dot else None, "max_nesting": nesting,
    })
    options = HtmlOptions(
        katex_path=settings.katex_path,
        render_dot=settings.render_dot,
        dot_command=settings.dot_command,
        dot_timeout=settings.dot_timeout,
        dot_fallback=settings.dot_fallback,
    )
    output_dir = Path(settings.output_dir)

    try:
        results = run_render(path, output_dir, options, settings.max_nesting)
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        typer.echo(f"No .acr files found at {path}.")
        raise typer.Exit(1)
    for src, html_path in results:
        typer.echo(f"  {src} -> {html_path}")
    typer.echo(f"Rendered {len(results)} document(s) to {output_dir}/")


def parse_cmd(
    path: Annotated[Path, typer.Argument(help=".acr file to parse")],
    nesting: Annotated[Optional[int], typer.Option("--max-nesting", help="Max argument/indentation nesting")] = None,
    ):
    """Print the classified document tree as JSON."""
    settings = _settings(overrides={"max_nesting": nesting})
    try:
        doc = parse_file(path, settings.max_nesting)
    except OSError as e:
        _fail(f"Cannot read {path}", e)
    except AcrylicError as e:
        _fail(f"Failed to parse {path}", e)
    typer.echo(doc.model_dump_json(indent=2))


def check_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to check")],
    nesting: Annotated[Optional[int], typer.Option("--max-nesting", help="Max argument/indentation nesting")] = None,
    ):
    """Parse .acr documents and report errors without writing output."""
    settings = _settings(overrides={"max_nesting": nesting})
    results = run_check(path, settings.max_nesting)
    if not results:
        typer.echo(f"No .acr files found at {path}.")
        raise typer.Exit(1)

    failed = 0
    for src, error in results:
        if error is None:
            typer.echo(f"  ok: {src}")
        else:
            failed += 1
            typer.echo(f"  error: {src}", err=True)
            typer.echo(error, err=True)
    typer.echo(f"Checked {len(results)} document(s), {failed} with errors")
    if failed:
        raise typer.Exit(1)
