"""
Centralized configuration management using Pydantic models.

This module provides a unified configuration system that:
- Uses Pydantic for type validation and environment variable loading
- Reads the sharing options from a YAML config file
- Provides proper error handling with logging tracebacks
- Supports both .env files and direct environment variables
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_INVITATION_TIMEOUT = 60

# AppSettings fields that ShareConfig can override
SHARE_SETTING_FIELDS = ("pending_invitation_timeout", "debounce_delay_seconds")


class ShareConfig(BaseModel):
    """Sharing options read from the YAML config file."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Older config files spell the key "penting_invitation_timeout"
    pending_invitation_timeout: int = Field(
        default=DEFAULT_INVITATION_TIMEOUT,
        validation_alias=AliasChoices("pending_invitation_timeout", "penting_invitation_timeout"),
    )
    debounce_delay_seconds: Optional[float] = None

    @field_validator('pending_invitation_timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Timeouts must be positive."""
        if v <= 0:
            raise ValueError("pending_invitation_timeout must be a positive number of seconds")
        return v

    @field_validator('debounce_delay_seconds')
    @classmethod
    def validate_debounce(cls, v):
        if v is not None and v <= 0:
            raise ValueError("debounce_delay_seconds must be positive")
        return v


class AppSettings(BaseSettings):
    """Main application settings loaded from environment variables."""

    # Application settings
    app_name: str = "EnderShare"
    debug_mode: bool = False
    # Logging settings
    log_level: str = "INFO"  # Override default logging level (DEBUG, INFO, WARNING, ERROR)
    log_dir: Optional[str] = Field(default=None, validation_alias="APP_LOG_DIR")
    feature_metrics_logging_enabled: bool = Field(
        False,
        description="Enable metrics logging for sharing activity (invites, accepts, unshares, restorations)",
        validation_alias=AliasChoices("FEATURE_METRICS_LOGGING_ENABLED"),
    )

    # Storage settings
    data_dir: str = Field(
        default="data",
        description="Directory holding chestdata/ and pendingRestorations.yml",
        validation_alias=AliasChoices("ENDERSHARE_DATA_DIR", "DATA_DIR"),
    )
    config_file: str = Field(
        default="config.yml",
        description="YAML file with sharing options, looked up in the data directory first",
        validation_alias=AliasChoices("ENDERSHARE_CONFIG_FILE", "CONFIG_FILE"),
    )

    # Sharing settings (the YAML config file takes priority)
    pending_invitation_timeout: int = Field(
        default=DEFAULT_INVITATION_TIMEOUT,
        description="Seconds an invitation stays valid",
        validation_alias=AliasChoices("PENDING_INVITATION_TIMEOUT"),
    )
    debounce_delay_seconds: float = Field(
        default=1.0,
        description="Quiet period after the last shared container change before it is saved",
        validation_alias=AliasChoices("DEBOUNCE_DELAY_SECONDS"),
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "env_prefix": "",
    }


class ConfigManager:
    """Centralized configuration manager with proper error handling."""

    def __init__(self, package_root: Optional[Path] = None):
        self._package_root = package_root or Path(__file__).parent.parent.parent
        self._app_settings: Optional[AppSettings] = None
        self._share_config: Optional[ShareConfig] = None

    def _search_paths(self, file_name: str) -> List[Path]:
        """Generate search paths for a configuration file.

        Two-layer lookup:
        1. Data dir (ENDERSHARE_DATA_DIR, default "data/") - user customizations
        2. Package defaults (endershare/config/) - always available as fallback
        """
        data_dir = Path(self.app_settings.data_dir)
        candidates: List[Path] = [
            data_dir / file_name,
            self._package_root / "config" / file_name,
        ]

        seen = set()
        search_paths: List[Path] = []
        for p in candidates:
            if p not in seen:
                seen.add(p)
                search_paths.append(p)

        logger.debug(
            "Config search paths for %s: %s", file_name, [str(p) for p in search_paths]
        )
        return search_paths

    def _load_file_with_error_handling(self, file_paths: List[Path], file_type: str) -> Optional[Dict[str, Any]]:
        """Load a file with comprehensive error handling and logging."""
        for path in file_paths:
            try:
                if not path.exists():
                    continue

                logger.info(f"Found {file_type} config at: {path.absolute()}")

                with open(path, "r", encoding="utf-8") as f:
                    if file_type.lower() == "yaml":
                        data = yaml.safe_load(f)
                    elif file_type.lower() == "json":
                        data = json.load(f)
                    else:
                        raise ValueError(f"Unsupported file type: {file_type}")

                if not isinstance(data, dict):
                    logger.error(
                        f"Invalid {file_type} format in {path}: expected dict, got {type(data)}",
                        exc_info=True
                    )
                    continue

                logger.info(f"Successfully loaded {file_type} config from {path}")
                return data

            except (yaml.YAMLError, json.JSONDecodeError) as e:
                logger.error(f"{file_type} parsing error in {path}: {e}", exc_info=True)
                continue
            except Exception as e:
                logger.error(f"Unexpected error reading {path}: {e}", exc_info=True)
                continue

        logger.warning(f"{file_type} config not found in any of these locations: {[str(p) for p in file_paths]}")
        return None

    @property
    def app_settings(self) -> AppSettings:
        """Get application settings (cached)."""
        if self._app_settings is None:
            try:
                self._app_settings = AppSettings()
                logger.info("Application settings loaded successfully")
            except Exception as e:
                logger.error(f"Failed to load application settings: {e}", exc_info=True)
                # Fall back to defaults, ignoring the broken environment
                self._app_settings = AppSettings.model_construct()
        return self._app_settings

    @property
    def share_config(self) -> ShareConfig:
        """Get sharing configuration (cached).

        Layers, lowest priority first:
        1. Package defaults (endershare/config/<config_file>)
        2. Environment variables (PENDING_INVITATION_TIMEOUT, DEBOUNCE_DELAY_SECONDS)
        3. Data dir config file
        Anything still unset takes the AppSettings default.
        """
        if self._share_config is None:
            settings = self.app_settings
            defaults = {field: getattr(settings, field) for field in SHARE_SETTING_FIELDS}
            try:
                package_path, *user_paths = reversed(self._search_paths(settings.config_file))
                env_values = {f: getattr(settings, f) for f in SHARE_SETTING_FIELDS if f in settings.model_fields_set}
                layers = [
                    self._load_layer(package_path),
                    env_values,
                    *(self._load_layer(path) for path in user_paths),
                ]
                values = dict(defaults)
                for layer in layers:
                    parsed = ShareConfig(**layer)
                    values.update({f: getattr(parsed, f) for f in parsed.model_fields_set})
                self._share_config = ShareConfig(**values)
                logger.info(
                    f"Sharing config: invitation timeout {self._share_config.pending_invitation_timeout}s, "
                    f"debounce {self._share_config.debounce_delay_seconds}s"
                )
            except Exception as e:
                logger.error(f"Failed to parse sharing configuration: {e}", exc_info=True)
                self._share_config = ShareConfig(**defaults)
        return self._share_config

    def _load_layer(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        return self._load_file_with_error_handling([path], "YAML") or {}

    @property
    def invitation_timeout_seconds(self) -> int:
        return self.share_config.pending_invitation_timeout

    @property
    def debounce_delay_seconds(self) -> float:
        return self.share_config.debounce_delay_seconds or self.app_settings.debounce_delay_seconds

    def reload_configs(self) -> None:
        """Reload all configurations from files."""
        self._app_settings = None
        self._share_config = None
        logger.info("Configuration cache cleared, will reload on next access")

    def validate_config(self) -> Dict[str, bool]:
        """Validate all configurations and return status."""
        status = {
            "app_settings": True,
            "share_config": True,
        }

        try:
            AppSettings()
        except Exception as e:
            logger.error(f"App settings validation failed: {e}", exc_info=True)
            status["app_settings"] = False

        try:
            for path in self._search_paths(self.app_settings.config_file):
                ShareConfig(**self._load_layer(path))
        except Exception as e:
            logger.error(f"Sharing config validation failed: {e}", exc_info=True)
            status["share_config"] = False

        return status


# Global configuration manager instance
config_manager = ConfigManager()


# Convenience functions for easy access
def get_app_settings() -> AppSettings:
    """Get application settings."""
    return config_manager.app_settings


def get_share_config() -> ShareConfig:
    """Get sharing configuration."""
    return config_manager.share_config
