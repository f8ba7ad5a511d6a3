"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any, Optional

import yaml
from loguru import logger
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from nanorouter.config.schema import RouterConfig
from nanorouter.errors import ConfigurationInvalid

YAML_SUFFIXES = (".yaml", ".yml")


class LoaderSettings(BaseSettings):
    """Environment overrides read by the loader (never by the router core)."""

    model_config = SettingsConfigDict(env_prefix="NANOROUTER_")

    config_path: Optional[Path] = None


def get_config_path() -> Path:
    """Get the configuration file path (env override, else ~/.nanorouter/config.json)."""
    settings = LoaderSettings()
    if settings.config_path is not None:
        return settings.config_path.expanduser()
    return Path.home() / ".nanorouter" / "config.json"


def _read(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in YAML_SUFFIXES:
        return yaml.safe_load(text)
    return json.loads(text)


def _format_issues(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in issue['loc']) or '<root>'}: {issue['msg']}"
        for issue in error.errors()
    ]


def parse_config(data: Any) -> RouterConfig:
    """Validate raw configuration data."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationInvalid("Invalid configuration: top level must be a mapping")
    try:
        return RouterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationInvalid("Invalid configuration:", _format_issues(e)) from e


def load_config(config_path: Path | None = None) -> RouterConfig:
    """
    Load and validate configuration.

    Resolution order:
    1. Explicit ``config_path`` argument
    2. ``NANOROUTER_CONFIG_PATH`` environment variable
    3. ``~/.nanorouter/config.json``

    A missing default file yields the default configuration; a missing
    explicit file is an error.

    Raises:
        ConfigurationInvalid: File missing (when explicit), unparsable, or
            failing schema validation.
    """
    explicit = config_path is not None or LoaderSettings().config_path is not None
    path = (config_path or get_config_path()).expanduser()

    if not path.exists():
        if explicit:
            raise ConfigurationInvalid(
                f"Configuration file not found: {path}\n"
                "  Create one with `nanorouter init` or set NANOROUTER_CONFIG_PATH."
            )
        logger.debug(f"No configuration at {path}, using defaults")
        return RouterConfig()

    logger.debug(f"Loading configuration from: {path}")
    try:
        data = _read(path)
    except (OSError, json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigurationInvalid(f"Could not read configuration file {path}: {e}") from e

    config = parse_config(data)
    logger.info(
        f"Configuration loaded: version={config.version} "
        f"dimensions={len(config.dimensions)} profile={config.active_profile.value}"
    )
    return config


def save_config(config: RouterConfig, config_path: Path | None = None) -> Path:
    """
    Save configuration as JSON or YAML (by file suffix).

    Returns:
        The path written.
    """
    path = (config_path or get_config_path()).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True, mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)

    logger.debug(f"Config saved: {path}")
    return path
