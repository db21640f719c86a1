"""Graphviz `dot` invocation for DotGraph lines"""

import logging
import subprocess

from acrylic.core.errors import RenderError


logger = logging.getLogger(__name__)


def dot_to_svg(source: str, command: str = "dot", timeout: float = 30.0) -> str:
    """Render a graph description to inline SVG by piping it through `dot -Tsvg`."""
    logger.debug("running %s on %d bytes of graph source", command, len(source))
    try:
        out = subprocess.run(
            [command, "-Tsvg"],
            input=source,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise RenderError(f"failed to start {command!r}: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise RenderError(f"{command!r} timed out after {timeout}s") from e

    if out.returncode != 0:
        raise RenderError(f"{command!r} exited with code {out.returncode}; stderr output:\n{out.stderr}")

    # drop the XML prolog/doctype so the SVG can be inlined
    svg = out.stdout
    start = svg.find('<svg')
    return svg[start:] if start != -1 else svg
