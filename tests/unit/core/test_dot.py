"""Unit tests for core/utils/dot.py"""

import subprocess

import pytest

from acrylic.core.errors import RenderError
from acrylic.core.utils import dot


def fake_run(returncode=0, stdout="", stderr=""):
    calls = []

    def _run(args, **kwargs):
        calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)
    return _run, calls


def test_dot_to_svg_strips_prolog(monkeypatch):
    """The XML prolog before <svg is dropped; the source goes to stdin."""
    run, calls = fake_run(stdout='<?xml version="1.0"?>\n<!DOCTYPE svg>\n<svg>g</svg>\n')
    monkeypatch.setattr(dot.subprocess, "run", run)
    assert dot.dot_to_svg("digraph { a }") == "<svg>g</svg>\n"
    args, kwargs = calls[0]
    assert args == ["dot", "-Tsvg"]
    assert kwargs["input"] == "digraph { a }"


def test_dot_to_svg_nonzero_exit(monkeypatch):
    run, _ = fake_run(returncode=1, stderr="syntax error in line 1")
    monkeypatch.setattr(dot.subprocess, "run", run)
    with pytest.raises(RenderError, match="exited with code 1") as exc:
        dot.dot_to_svg("nope")
    assert "syntax error in line 1" in str(exc.value)


def test_dot_to_svg_missing_binary(monkeypatch):
    def run(*args, **kwargs):
        raise FileNotFoundError("no such file")
    monkeypatch.setattr(dot.subprocess, "run", run)
    with pytest.raises(RenderError, match="failed to start 'dot'"):
        dot.dot_to_svg("digraph {}")


def test_dot_to_svg_timeout(monkeypatch):
    def run(args, **kwargs):
        raise subprocess.TimeoutExpired(args, kwargs["timeout"])
    monkeypatch.setattr(dot.subprocess, "run", run)
    with pytest.raises(RenderError, match="timed out after 2.5s"):
        dot.dot_to_svg("digraph {}", timeout=2.5)
