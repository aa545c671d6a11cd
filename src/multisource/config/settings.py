"""Configuration structures and loading for multisource."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

import msgspec

from multisource.models import DEFAULT_SOURCE_TIMEOUT
from multisource.models import AggregationConfig
from multisource.models import Strategy


# Retry configuration
class RetrySettings(msgspec.Struct, omit_defaults=True):
    """Backoff between attempts of a single source."""

    base_delay: float = 1.0
    max_delay: float = 10.0
    jitter: bool = False

    def to_retry_config(self):
        from multisource.core.retry import RetryConfig

        return RetryConfig(
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            jitter=self.jitter,
        )


# Named HTTP sources, used by the CLI
class SourceConfig(msgspec.Struct, omit_defaults=True):
    """An HTTP JSON endpoint usable as a data source."""

    url: str
    name: str | None = None
    priority: int = 0
    timeout: float = DEFAULT_SOURCE_TIMEOUT
    retries: int = 0
    headers: dict[str, str] = {}
    json_path: str | None = None
    enabled: bool = True


# Main configuration
class Config(msgspec.Struct, omit_defaults=True):
    """Main configuration structure."""

    aggregation: AggregationConfig = msgspec.field(default_factory=AggregationConfig)
    retry: RetrySettings = msgspec.field(default_factory=RetrySettings)
    sources: dict[str, SourceConfig] = msgspec.field(default_factory=dict)

    def get_source_config(self, source_id: str) -> SourceConfig | None:
        """Get config for a named source."""
        return self.sources.get(source_id)

    def enabled_sources(self) -> dict[str, SourceConfig]:
        """Named sources that are not disabled."""
        return {sid: cfg for sid, cfg in self.sources.items() if cfg.enabled}


def _load_from_toml(path: Path) -> dict:
    """Load configuration from TOML file."""
    if not path.exists():
        return {}

    with path.open("rb") as f:
        return tomllib.load(f)


def _save_to_toml(data: dict, path: Path) -> None:
    """Save configuration to TOML file."""
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)


def convert_config(data: dict) -> Config:
    """Convert raw dict to Config struct."""
    return msgspec.convert(data, type=Config)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config.

    MULTISOURCE_STRATEGY: Default resolution strategy
    MULTISOURCE_CACHE_TIMEOUT: Default cache TTL in seconds
    MULTISOURCE_MAX_CONCURRENT: Default source limit for the fastest strategy
    """
    changes = {}

    if "MULTISOURCE_STRATEGY" in os.environ:
        changes["strategy"] = Strategy.parse(os.environ["MULTISOURCE_STRATEGY"].strip())

    if "MULTISOURCE_CACHE_TIMEOUT" in os.environ:
        changes["cache_timeout"] = float(os.environ["MULTISOURCE_CACHE_TIMEOUT"])

    if "MULTISOURCE_MAX_CONCURRENT" in os.environ:
        changes["max_concurrent"] = int(os.environ["MULTISOURCE_MAX_CONCURRENT"])

    if changes:
        aggregation = config.aggregation.override(**changes)
        config = msgspec.structs.replace(config, aggregation=aggregation)

    return config


# Config state storage
_config: Config | None = None


def get_config() -> Config:
    """Get the current configuration (singleton)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = load_config()
    return _config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file with defaults."""
    from .paths import config_file

    config_path = path or config_file()

    raw_data = _load_from_toml(config_path)
    if not raw_data:
        config = Config()
    else:
        config = convert_config(raw_data)

    return _apply_env_overrides(config)


def save_config(config: Config, path: Path | None = None) -> None:
    """Save configuration to file."""
    from .paths import config_file

    config_path = path or config_file()

    data = msgspec.to_builtins(config)

    # Remove None values
    def clean_none(d: dict) -> dict:
        return {
            k: clean_none(v) if isinstance(v, dict) else v
            for k, v in d.items()
            if v is not None
        }

    _save_to_toml(clean_none(data), config_path)

    # Update singleton
    global _config
    _config = config
