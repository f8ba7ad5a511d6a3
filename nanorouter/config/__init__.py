"""Configuration module for nanorouter."""

from nanorouter.config.loader import get_config_path, load_config, save_config
from nanorouter.config.schema import RouterConfig

__all__ = ["RouterConfig", "load_config", "save_config", "get_config_path"]
