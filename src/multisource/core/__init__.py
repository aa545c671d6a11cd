"""Core building blocks for multisource."""

from multisource.core.cache import ResultCache
from multisource.core.fetch import fetch_once, fetch_source, validate_data
from multisource.core.http import (
    cleanup,
    extract_path,
    get_http_client,
    get_timeout_config,
    http_source,
)
from multisource.core.merge import (
    Mergeable,
    concat_lists,
    default_merge,
    first_value,
    merge_mappings,
)
from multisource.core.retry import (
    RetryConfig,
    calculate_retry_delay,
    with_retry,
)

__all__ = [
    # http
    "get_http_client",
    "cleanup",
    "get_timeout_config",
    "http_source",
    "extract_path",
    # retry
    "RetryConfig",
    "calculate_retry_delay",
    "with_retry",
    # fetch
    "fetch_once",
    "fetch_source",
    "validate_data",
    # cache
    "ResultCache",
    # merge
    "Mergeable",
    "concat_lists",
    "merge_mappings",
    "first_value",
    "default_merge",
]
