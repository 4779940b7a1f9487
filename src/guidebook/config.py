"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "GUIDEBOOK_"


class Settings(BaseModel):
    app_name:          str = "guidebook"
    db_url:            str = "sqlite:///guidebook.db"
    output_dir:        str = Field(default="dist",            description="Directory for exported HTML files")
    upload_dir:        str = Field(default="uploads/images",  description="Directory for uploaded images")
    upload_url_prefix: str = Field(default="/uploads/images", description="Public URL prefix for uploaded images")
    max_upload_bytes:  int = Field(default=5 * 1024 * 1024, ge=1, description="Max accepted image size in bytes")
    default_tag_color: str = Field(default="#58a6ff", pattern="^#[0-9a-fA-F]{6}$", description="Color for new tags")
    site_name:         str = Field(default="Guidebook",       description="Name shown in exported page titles")
    log_level:         str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping of setting names to values")
    return loaded


def _read_env() -> dict[str, str]:
    """GUIDEBOOK_<FIELD> values for every Settings field that is set and non-empty."""
    env = {}
    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            env[name] = val
    return env


def load_config(overrides: dict[str, Any] = None, config_file: Union[str, Path] = CONFIG_FILE) -> Settings:
    """Load Settings from config_file, then GUIDEBOOK_<FIELD> env vars, then non-None CLI overrides."""
    data = _read_file(Path(config_file))
    data.update(_read_env())
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
