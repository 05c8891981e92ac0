from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

from hashmap_lib.config.config import DEFAULT_CONFIG_PATH


def configure_logging(config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for a process embedding hashmap_lib.

    The level is read from `log_level` in the YAML config (WARNING when the
    file or the key is missing, or the value is not a logging level name).
    Returns a module logger for the caller.
    """
    level = logging.WARNING

    cfg_path = config_path or DEFAULT_CONFIG_PATH
    if cfg_path.exists():
        try:
            with cfg_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
            _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
            if isinstance(_lvl, str):
                _numeric = getattr(logging, _lvl.upper(), None)
                if isinstance(_numeric, int):
                    level = _numeric
        except (OSError, yaml.YAMLError):
            logging.getLogger(__name__).exception('Failed to read %s for logging setup', cfg_path)

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)
    logger.info("Log level set to %s", logging.getLevelName(level))
    return logger
