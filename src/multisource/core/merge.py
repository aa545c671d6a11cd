"""Merge functions for combining values from several sources.

A merge function takes the successfully validated values in the order their
sources settled and returns one value. The built-in functions accept values
of any shape and never raise for a non-empty list. Callers with nested data
should pass their own function to ``DataAggregator.aggregate``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

T = TypeVar("T")

Mergeable = Callable[[list[T]], T]


def concat_lists(values: list[Any]) -> list[Any]:
    """Concatenate list values in order; other values are kept as one item."""
    merged: list[Any] = []
    for value in values:
        if isinstance(value, (list, tuple)):
            merged.extend(value)
        else:
            merged.append(value)
    return merged


def merge_mappings(values: list[Any]) -> dict[str, Any]:
    """Shallow-merge mappings left to right; later keys override earlier ones.

    Values that are not mappings are skipped.
    """
    merged: dict[str, Any] = {}
    for value in values:
        if isinstance(value, Mapping):
            merged.update(value)
    return merged


def first_value(values: list[T]) -> T:
    """Take the first value."""
    return values[0]


def default_merge(values: list[Any]) -> Any:
    """Merge by the shape of the first value.

    Lists and tuples are concatenated, mappings shallow-merged, and anything
    else resolves to the first value. Values of another shape than the first
    are absorbed by the same rules, so mixed payloads never raise.
    """
    if not values:
        raise ValueError("No data to merge")
    if len(values) == 1:
        return values[0]

    first = values[0]
    if isinstance(first, (list, tuple)):
        return concat_lists(values)
    if isinstance(first, Mapping):
        return merge_mappings(values)
    return first_value(values)
