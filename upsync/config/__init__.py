# Upsync Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from upsync.config.defaults import DEFAULT_CONFIG, default_config, generate_default_config
from upsync.config.loader import (
    CONFIG_FILE_NAME,
    find_config_path,
    get_config_candidates,
    load_config,
    validate_config_file,
    write_default_config,
)
from upsync.config.schema import OutputConfig, StoreSettings, SyncOptions, UpsyncConfig

__all__ = [
    # Schema
    "UpsyncConfig",
    "StoreSettings",
    "SyncOptions",
    "OutputConfig",
    # Loader
    "CONFIG_FILE_NAME",
    "load_config",
    "find_config_path",
    "get_config_candidates",
    "validate_config_file",
    "write_default_config",
    # Defaults
    "DEFAULT_CONFIG",
    "default_config",
    "generate_default_config",
]
