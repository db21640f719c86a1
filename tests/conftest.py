"""Root test configuration: shared sample document and session-level cleanup of runtime artifacts"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_DIRS = ["dist"]

SAMPLE_ACR = """\
%:title Sample Document
%:tags notes draft
%:author someone

Introduction with *bold* and _italics_ text.
  - a child item with `code`
  - [x] a finished task

@code{python}{
  def f():
      return 1
}

$${E=mc^2}
Links: @ref{Example}{https://example.com} and https://example.org
  @table{
    {name}{value}
    ---
    {a}{1}
  }
"""


@pytest.fixture(name="sample_source")
def sample_source_fixture():
    return SAMPLE_ACR


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove output directories created during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)
