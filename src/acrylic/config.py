"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "ACRYLIC_"

# parsing recurses about three frames per nesting level
MAX_NESTING_LIMIT = 128


class Settings(BaseModel):
    app_name:     str = "acrylic"
    output_dir:   str = Field(default="dist",  description="Directory for rendered HTML files")
    katex_path:   str = Field(default="katex", description="Relative path or URL prefix of the KaTeX assets")
    max_nesting:  int = Field(default=64, ge=1, le=MAX_NESTING_LIMIT, description="Max argument nesting and indentation depth")
    render_dot:   bool = Field(default=True,  description="Render @dot graphs through the dot binary")
    dot_command:  str = Field(default="dot",  description="Graphviz executable")
    dot_timeout:  float = Field(default=30.0, gt=0, description="Seconds before a dot run is aborted")
    dot_fallback: bool = Field(default=False, description="Emit graph source instead of failing when dot fails")


def _read_config_file(path: Path) -> dict[str, Any]:
    """Settings mapping from a YAML file; unknown keys are rejected."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping of settings, got {type(data).__name__}")

    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ValueError(f"Invalid {path.name}: unknown setting(s) {', '.join(unknown)}")
    return data


def load_config(overrides: Optional[dict[str, Any]] = None, path: Path = Path(CONFIG_FILE)) -> Settings:
    """Load Settings from config.yaml, then ACRYLIC_<FIELD> env vars, then non-None CLI overrides.

    Any value that fails validation (e.g. `max_nesting` out of range) is reported
    as a ValueError naming the offending fields.
    """
    data = _read_config_file(path) if path.exists() else {}

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        fields = ', '.join('.'.join(str(x) for x in err['loc']) for err in e.errors())
        raise ValueError(f"Invalid settings ({fields}): {e}") from e
