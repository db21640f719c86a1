"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from acrylic.cli.commands import check_cmd, parse_cmd, render_cmd


app = typer.Typer(name="acrylic", no_args_is_help=True, help="Compile .acr documents to HTML")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log pipeline progress to stderr")] = False,
    ):
    """Parse and render acrylic (.acr) documents."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")


app.command(name="render")(render_cmd)
app.command(name="parse")(parse_cmd)
app.command(name="check")(check_cmd)
