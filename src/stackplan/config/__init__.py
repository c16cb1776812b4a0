"""Configuration module: load and validate engine settings."""

from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from ..utils.errors import ConfigError
from ..utils.logging import get_logger
from .manager import load_config, read_yaml_config, save_config, deep_merge
from .paths import get_defaults_path, get_user_config_path, get_project_config_path
from .settings import Settings, ExecutorSettings, StateSettings, ProviderSettings

logger = get_logger("config")


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings: packaged defaults, then user config, then project config,
    then an explicit config file. Later sources win key by key.
    
    Args:
        config_path: Optional explicit YAML config file
        
    Returns:
        Validated Settings
        
    Raises:
        ConfigError: If a config file is invalid
    """
    config = read_yaml_config(get_defaults_path())
    deep_merge(config, load_config())
    
    if config_path is not None:
        deep_merge(config, read_yaml_config(Path(config_path)))
        logger.info(f"Loaded configuration from {config_path}")
    
    try:
        return Settings.model_validate(config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")


__all__ = [
    "load_settings",
    "load_config",
    "save_config",
    "Settings",
    "ExecutorSettings",
    "StateSettings",
    "ProviderSettings",
    "get_user_config_path",
    "get_project_config_path",
]
