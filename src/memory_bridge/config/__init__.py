from .loader import (
    CONFIG_PATH_ENV,
    ConfigManager,
    YamlConfigSettingsSource,
    config_manager,
    load_settings,
    resolve_config_path,
)
from .schema import (
    BackendKind,
    LoggingConfig,
    MemoryParameters,
    MemorySettings,
)

__all__ = [
    "CONFIG_PATH_ENV",
    "BackendKind",
    "ConfigManager",
    "LoggingConfig",
    "MemoryParameters",
    "MemorySettings",
    "YamlConfigSettingsSource",
    "config_manager",
    "load_settings",
    "resolve_config_path",
]
