"""Configuration management for multisource."""

from multisource.config.paths import (
    config_dir,
    config_file,
    ensure_directories,
)
from multisource.config.settings import (
    Config,
    RetrySettings,
    SourceConfig,
    get_config,
    load_config,
    reload_config,
    save_config,
)

__all__ = [
    # paths
    "config_dir",
    "config_file",
    "ensure_directories",
    # settings
    "Config",
    "RetrySettings",
    "SourceConfig",
    "get_config",
    "load_config",
    "reload_config",
    "save_config",
]
