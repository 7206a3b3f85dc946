"""Configuration management for the native library loader."""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "NATIVELIB_CONFIG"

DEFAULT_LEFTOVER_MIN_AGE_MS = 5 * 60 * 1000

# Environment variable -> config field
ENV_OVERRIDES: Dict[str, str] = {
    "NATIVELIB_TMPDIR": "tmp_dir",
    "NATIVELIB_LIBRARY_TMPDIR": "library_tmp_dir",
    "NATIVELIB_LEFTOVER_MIN_AGE_MS": "leftover_min_age_ms",
    "NATIVELIB_SYSINFO": "sysinfo",
    "NATIVELIB_LOG_LEVEL": "log_level",
}


class LoaderConfig(BaseModel):
    """Global loader configuration."""

    tmp_dir: Optional[str] = Field(default=None, description="Temp root for staging directories")
    fallback_tmp_dir: str = Field(default="./tmplib", description="Temp root used when no system temp dir exists")
    library_tmp_dir: Optional[str] = Field(default=None, description="Root for the shared staging directory")
    leftover_min_age_ms: int = Field(
        default=DEFAULT_LEFTOVER_MIN_AGE_MS,
        description="Minimum age before a leftover staging directory is deleted",
    )
    sysinfo: Optional[str] = Field(default=None, description="Explicit sysinfo string for manifest lookup")
    search_root: str = Field(default="natives", description="Default bundle root for native libraries")
    log_level: str = Field(default="INFO", description="Logging level")

    def temp_root(self) -> Path:
        """Return the temp root, falling back when the system has none."""
        if self.tmp_dir:
            return Path(self.tmp_dir).expanduser()
        try:
            return Path(tempfile.gettempdir())
        except FileNotFoundError:
            return Path(self.fallback_tmp_dir)


class ConfigManager:
    """Manages loading of configuration from file and environment."""

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        """Initialize the config manager.

        Args:
            config_path: Path to the config file. If None, uses NATIVELIB_CONFIG
                or the default location.
            environ: Environment to read overrides from. Defaults to os.environ.
        """
        self._environ = os.environ if environ is None else environ

        if config_path:
            self.config_path = config_path
        elif self._environ.get(CONFIG_PATH_ENV):
            self.config_path = Path(self._environ[CONFIG_PATH_ENV])
        else:
            self.config_path = Path.home() / ".nativelib" / "config.json"

        self._config: Optional[LoaderConfig] = None

    @property
    def config(self) -> LoaderConfig:
        """Get the current configuration (lazy loading)."""
        if self._config is None:
            self._load()
        return self._config  # type: ignore

    def _load(self) -> None:
        """Load config from file, then apply environment overrides."""
        data: dict = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                    logger.debug(f"Configuration loaded from {self.config_path}")
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid config file, using defaults: {e}")
                data = {}
            except OSError as e:
                logger.warning(f"Cannot read config file {self.config_path}, using defaults: {e}")
                data = {}
            if not isinstance(data, dict):
                logger.warning(f"Config file {self.config_path} is not a JSON object, using defaults")
                data = {}
        else:
            logger.debug("No config file found, using defaults")

        data.update(self._env_overrides())
        try:
            self._config = LoaderConfig(**data)
        except ValidationError as e:
            logger.error(f"Invalid configuration, using defaults: {e}")
            self._config = LoaderConfig()

    def _env_overrides(self) -> dict:
        overrides: dict = {}
        for env_name, field_name in ENV_OVERRIDES.items():
            value = self._environ.get(env_name)
            if value is None or value == "":
                continue
            if field_name == "leftover_min_age_ms":
                try:
                    overrides[field_name] = int(value)
                except ValueError:
                    logger.error(f"Cannot parse {env_name}={value!r}, using default")
                continue
            overrides[field_name] = value
        return overrides

    def get(self) -> LoaderConfig:
        """Get the current configuration."""
        return self.config

    def update(self, **kwargs) -> None:
        """Update configuration values.

        Args:
            **kwargs: Configuration values to update.
        """
        current = self.config.model_dump()
        current.update(kwargs)
        self._config = LoaderConfig(**current)

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self._config = LoaderConfig()


# Lazy singleton pattern
_config_instance: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global config manager instance (lazy initialization)."""
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigManager()
    return _config_instance


def get_config() -> LoaderConfig:
    """Get the current configuration."""
    return get_config_manager().config


def reset_config() -> None:
    """Reset the global config instance. Useful for testing."""
    global _config_instance
    _config_instance = None
