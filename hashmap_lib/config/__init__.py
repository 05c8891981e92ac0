from .config import MapConfig, dump_config, load_config

__all__ = ["MapConfig", "dump_config", "load_config"]
