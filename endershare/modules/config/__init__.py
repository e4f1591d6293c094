"""Configuration module."""

from .config_manager import (
    AppSettings,
    ConfigManager,
    ShareConfig,
    config_manager,
    get_app_settings,
    get_share_config,
)

__all__ = [
    "AppSettings",
    "ConfigManager",
    "ShareConfig",
    "config_manager",
    "get_app_settings",
    "get_share_config",
]
