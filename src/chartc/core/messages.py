"""
Warning and error message text.

Keeping message text in one place lets callers and tests match on it without
duplicating strings. Zero-IO; functions only format text.
"""

from __future__ import annotations

__all__ = [
    "selection_not_supported",
    "selection_condition_not_supported",
    "continuous_axis_has_custom_aggregate",
    "empty_field_def",
    "field_def_missing_type",
    "cannot_filter_discrete_field",
    "unsupported_extent",
    "no_continuous_axis",
    "both_axes_aggregated",
    "preaggregated_errorbar_not_supported",
    "errorbar_center_with_wrong_extent",
]


def selection_not_supported(mark: str) -> str:
    return f"Selection not supported for {mark} yet."


def selection_condition_not_supported(channel: str) -> str:
    return f"Parameter condition on channel {channel!r} dropped: selections are not supported."


def continuous_axis_has_custom_aggregate(aggregate: object, mark: str) -> str:
    return (
        f"Continuous axis should not have customized aggregation function {aggregate}; "
        f"{mark} already aggregates the axis."
    )


def empty_field_def(channel: str) -> str:
    return f"Dropping {channel!r} from the encoding because it has no field."


def field_def_missing_type(channel: str, field: object) -> str:
    return (
        f"Field def for channel {channel!r} (field {field!r}) reached the invalid-value "
        "filter without a type."
    )


def value_ref_needs_field_or_datum(channel_def: object) -> str:
    return f"Cannot build a field or datum reference from {channel_def!r}."


def cannot_filter_discrete_field(field: object, type_: object) -> str:
    return f"Field {field!r} of type {type_!r} cannot be filtered for invalid values."


def unsupported_extent(mark: str, extent: object) -> str:
    return f"Unsupported {mark} extent {extent!r}."


def no_continuous_axis(mark: str) -> str:
    return f"Need a valid continuous axis for {mark}s."


def both_axes_aggregated(mark: str) -> str:
    return f"Both x and y cannot have aggregate {mark!r}."


def preaggregated_errorbar_not_supported(channel: str) -> str:
    return f"Pre-aggregated errorbar input via {channel!r} is not supported."


def errorbar_center_with_wrong_extent(center: str, extent: str, mark: str) -> str:
    return f"{center} is not usually used with {extent} for {mark}."
