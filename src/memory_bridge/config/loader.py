import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import yaml
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .schema import MemorySettings

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "MEMORY_BRIDGE_CONFIG_PATH"
DEFAULT_CONFIG_FILENAME = "memory_bridge.yml"


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    """
    Determine which YAML file to read.
    Priority:
    1. Explicit argument.
    2. MEMORY_BRIDGE_CONFIG_PATH environment variable.
    3. ./memory_bridge.yml in the current working directory.
    """
    if config_path is not None:
        return Path(config_path)
    env_config = os.getenv(CONFIG_PATH_ENV)
    if env_config:
        return Path(env_config)
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A settings source that loads values from a YAML file.
    """
    def __init__(self, settings_cls: Type[BaseSettings], yaml_path: Path):
        super().__init__(settings_cls)
        self.yaml_path = yaml_path

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        # Not used when returning the whole dict from __call__
        return None, field_name, False

    def __call__(self) -> Dict[str, Any]:
        if not self.yaml_path.exists():
            return {}
        try:
            with open(self.yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            logger.error("Failed to load YAML config from %s: %s", self.yaml_path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring YAML config %s: top level must be a mapping", self.yaml_path)
            return {}
        return data


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> MemorySettings:
    """
    Build settings from all sources.
    Priority: init kwargs > Env > .env > YAML > Defaults
    """
    yaml_path = resolve_config_path(config_path)
    load_dotenv(dotenv_path=Path.cwd() / ".env")

    # Subclass MemorySettings to inject the YAML source dynamically
    class LoadedMemorySettings(MemorySettings):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: Type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (
                init_settings,
                env_settings,
                dotenv_settings,
                YamlConfigSettingsSource(settings_cls, yaml_path),
                file_secret_settings,
            )

    settings = LoadedMemorySettings(**overrides)
    logger.debug("Settings loaded. Priority: Env > .env > YAML (%s) > Defaults", yaml_path)
    return settings


class ConfigManager:
    _instance = None
    _settings: Optional[MemorySettings] = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
        return cls._instance

    def load_config(self, config_path: Optional[Path] = None, force_reload: bool = False) -> None:
        """
        Load configuration using Pydantic Settings.
        Invalid configuration is logged and replaced by defaults.
        """
        if self._initialized and not force_reload:
            return

        try:
            self._settings = load_settings(config_path)
        except Exception as e:
            logger.error("Failed to validate settings: %s", e, exc_info=True)
            self._settings = MemorySettings.model_construct()

        self._initialized = True

    @property
    def settings(self) -> MemorySettings:
        if not self._initialized or self._settings is None:
            self.load_config()
        return self._settings


# Singleton Instance
config_manager = ConfigManager()
