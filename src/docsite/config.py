"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:      str = "docsite"
    db_url:        str = "sqlite:///docsite.db"
    max_versions:  int = Field(default=10, ge=0, description="Max stored versions per doc; 0 disables pruning")
    output_dir:    str = Field(default="site",             description="Directory for rendered HTML + JSON files")
    staging_dir:   str = Field(default=".docsite/staging", description="Staging directory for extracted JSON")
    parser_config: str = Field(default="gfm-like",         description="MarkdownIt parser preset name")
    toc_depth:     int = Field(default=3, ge=1, le=6,     description="Deepest heading level listed in page TOCs")
    required_fields: list[str] = Field(default=["title", "description"], description="Front matter keys that must be non-empty")
    site_title:    str = Field(default="Documentation",    description="Title shown on the index page")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    log_format:    str = Field(default="console", pattern="^(console|json)$")

    @field_validator("required_fields", mode="before")
    @classmethod
    def _split_fields(cls, v):
        """Accept 'title,description' from env vars as well as YAML lists."""
        if isinstance(v, str):
            return [f.strip() for f in v.split(",") if f.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then DOCSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"DOCSITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
