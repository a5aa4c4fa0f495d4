"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:        str = "ivpub"
    output_dir:      str = Field(default="dist",       description="Directory for rendered HTML fragments")
    parser_config:   str = Field(default="gfm-like",   description="MarkdownIt parser preset name")
    mechanics_fence: str = Field(default="iron-vault-mechanics", description="Fence info string for mechanics blocks")
    query_fence:     str = Field(default="dataview",   description="Fence info string for query blocks")
    log_level:       str = Field(
        default="WARNING",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level for the CLI",
    )


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then IVPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"IVPUB_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid settings: {e}") from e
