"""Display utilities for multisource."""

from multisource.display.json import (
    output_json,
    output_json_error,
    output_json_pretty,
    result_to_dict,
)
from multisource.display.rich import (
    format_duration,
    render_cache_stats,
    render_result,
    render_sources_table,
)

__all__ = [
    "output_json",
    "output_json_pretty",
    "output_json_error",
    "result_to_dict",
    "format_duration",
    "render_result",
    "render_sources_table",
    "render_cache_stats",
]
