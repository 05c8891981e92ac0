"""YAML configuration for persistent maps.

A config file looks like:

    data_dir: ./data
    db_file: hashmap.db
    namespace: default
    open_timeout: 1.0
    serializer: json
    log_level: WARNING

Every field is optional; missing fields take the defaults below.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("data/config/hashmap_config.yml")


class MapConfig(BaseModel):
    data_dir: str = "./data"
    db_file: str = "hashmap.db"
    namespace: str = Field(default="default", min_length=1)
    open_timeout: float = Field(default=1.0, gt=0)
    serializer: Literal["json", "yaml", "pickle"] = "json"
    log_level: str = "WARNING"


def load_config(path: Optional[Path | str] = None) -> MapConfig:
    """Load a `MapConfig` from YAML; a missing file yields the defaults.

    Raises ValueError if the file exists but cannot be parsed or validated.
    """
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        logger.debug("No config at %s, using defaults", cfg_path)
        return MapConfig()
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid config format: parse error in {cfg_path}") from e
    if not isinstance(data, dict):
        raise ValueError("invalid config format: expected mapping")
    try:
        return MapConfig(**data)
    except ValidationError as e:
        raise ValueError(f"invalid config in {cfg_path}: {e}") from e


def dump_config(cfg: MapConfig) -> str:
    """Render `cfg` as YAML text, e.g. to write a template file."""
    return yaml.safe_dump(cfg.model_dump(), sort_keys=False)
