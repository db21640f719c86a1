"""Unit tests for config.py"""

import pytest

from acrylic.config import MAX_NESTING_LIMIT, Settings, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test in an empty directory with no ACRYLIC_ variables set."""
    monkeypatch.chdir(tmp_path)
    for name in Settings.model_fields:
        monkeypatch.delenv(f"ACRYLIC_{name.upper()}", raising=False)


def test_load_config_defaults():
    """Settings defaults apply with no config.yaml, env var or override."""
    settings = load_config()
    assert settings.output_dir == "dist"
    assert settings.max_nesting == 64
    assert settings.render_dot is True


def test_load_config_reads_config_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("output_dir: site\nkatex_path: /static/katex\n")
    settings = load_config()
    assert settings.output_dir == "site"
    assert settings.katex_path == "/static/katex"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """ACRYLIC_OUTPUT_DIR takes precedence over config.yaml output_dir."""
    (tmp_path / "config.yaml").write_text("output_dir: site\n")
    monkeypatch.setenv("ACRYLIC_OUTPUT_DIR", "public")
    assert load_config().output_dir == "public"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("ACRYLIC_OUTPUT_DIR", "public")
    assert load_config(overrides={"output_dir": "cli"}).output_dir == "cli"
    assert load_config(overrides={"output_dir": None}).output_dir == "public"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


# --- env var coercion ---

def test_load_config_env_max_nesting(monkeypatch):
    """ACRYLIC_MAX_NESTING env var is coerced to int."""
    monkeypatch.setenv("ACRYLIC_MAX_NESTING", "3")
    assert load_config().max_nesting == 3


def test_load_config_env_bool_and_float(monkeypatch):
    monkeypatch.setenv("ACRYLIC_RENDER_DOT", "false")
    monkeypatch.setenv("ACRYLIC_DOT_TIMEOUT", "2.5")
    settings = load_config()
    assert settings.render_dot is False
    assert settings.dot_timeout == 2.5


@pytest.mark.parametrize("value", ["0", str(MAX_NESTING_LIMIT + 1), "100000"])
def test_load_config_rejects_bad_nesting(monkeypatch, value):
    """max_nesting must stay between 1 and the recursion-safe limit."""
    monkeypatch.setenv("ACRYLIC_MAX_NESTING", value)
    with pytest.raises(ValueError, match=r"Invalid settings \(max_nesting\)"):
        load_config()


def test_load_config_accepts_nesting_limit(monkeypatch):
    monkeypatch.setenv("ACRYLIC_MAX_NESTING", str(MAX_NESTING_LIMIT))
    assert load_config().max_nesting == MAX_NESTING_LIMIT


# --- config.yaml validation ---

def test_load_config_rejects_unknown_keys(tmp_path):
    (tmp_path / "config.yaml").write_text("output_dir: site\ndb_url: sqlite:///x.db\n")
    with pytest.raises(ValueError, match=r"unknown setting\(s\) db_url"):
        load_config()


def test_load_config_rejects_non_mapping(tmp_path):
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


def test_load_config_explicit_path(tmp_path):
    cfg = tmp_path / "site.yaml"
    cfg.write_text("katex_path: /k\n")
    assert load_config(path=cfg).katex_path == "/k"
