"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import CONFIG_PATH_ENV_VAR, ConfigurationError, load_settings
from .runtime_settings import (
    CostSettings,
    DispatchSettings,
    ProcessSettings,
    RetrySettings,
    RunnerSettings,
    StorageSettings,
)

__all__ = [
    "CostSettings",
    "DispatchSettings",
    "ProcessSettings",
    "RetrySettings",
    "RunnerSettings",
    "StorageSettings",
    "CONFIG_PATH_ENV_VAR",
    "ConfigurationError",
    "load_settings",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
