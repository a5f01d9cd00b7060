"""
Invalid-data policy resolution.

Decides, per scale channel, whether null/NaN/non-finite values reach the scale
("show", "always-valid") or must be filtered first, and which data sources
(marks, scale domains) keep invalid rows.

Examples:
    >>> from chartc.config import Config
    >>> from chartc.core.grammar import ScaleInvalidDataMode
    >>> mode = get_scale_invalid_data_mode(
    ...     scale_channel="y", mark_def={"type": "point"}, config=Config(),
    ...     scale_type="linear", is_count_aggregate=False,
    ... )
    >>> mode is ScaleInvalidDataMode.FILTER
    True
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from chartc.compile.common import get_mark_prop_or_config
from chartc.config import Config
from chartc.core.grammar import (
    InvalidValuesHandling,
    MarkInvalidDataMode,
    ScaleInvalidDataMode,
    has_continuous_domain,
    is_path_mark,
)

__all__ = [
    "DataSourcesForHandlingInvalidValues",
    "normalize_invalid_data_mode",
    "get_scale_invalid_data_mode",
    "get_data_sources_for_handling_invalid_values",
]


@dataclass(frozen=True, slots=True)
class DataSourcesForHandlingInvalidValues:
    """Whether the data feeding marks and scale domains keeps invalid rows."""

    marks: InvalidValuesHandling
    scales: InvalidValuesHandling

    @property
    def includes_all(self) -> bool:
        return (
            self.marks is InvalidValuesHandling.INCLUDE
            and self.scales is InvalidValuesHandling.INCLUDE
        )


def normalize_invalid_data_mode(
    mode: str | MarkInvalidDataMode | None, *, is_path: bool
) -> MarkInvalidDataMode:
    """
    Resolve a mark `invalid` option for one mark.

    `null` means show; `break-paths-show-path-domains` breaks paths for path marks
    and filters for every other mark.
    """
    if mode is None:
        return MarkInvalidDataMode.SHOW
    resolved = MarkInvalidDataMode(mode)
    if resolved is MarkInvalidDataMode.BREAK_PATHS_SHOW_PATH_DOMAINS:
        return (
            MarkInvalidDataMode.BREAK_PATHS_SHOW_DOMAINS if is_path else MarkInvalidDataMode.FILTER
        )
    return resolved


def get_scale_invalid_data_mode(
    *,
    scale_channel: str,
    mark_def: Mapping[str, Any],
    config: Config,
    scale_type: str | None,
    is_count_aggregate: bool,
) -> ScaleInvalidDataMode:
    """
    Invalid-data policy of one scale channel.

    Args:
        scale_channel (str): Scale channel name.
        mark_def (Mapping): Mark definition (reads `type` and `invalid`).
        config (Config): Compiler config (`mark.invalid`, `scale.invalid`).
        scale_type (str | None): Scale type, or None when the channel has no scale.
        is_count_aggregate (bool): Whether the field is a counting aggregate.

    Returns:
        ScaleInvalidDataMode: `always-valid` for discrete or missing scales and for
        counts (they never output invalid values); `show` when config defines an
        output for invalid values on this channel; otherwise the mark's resolved mode.
    """
    if not scale_type or not has_continuous_domain(scale_type) or is_count_aggregate:
        return ScaleInvalidDataMode.ALWAYS_VALID

    invalid_mode = normalize_invalid_data_mode(
        get_mark_prop_or_config("invalid", mark_def, config),
        is_path=is_path_mark(mark_def.get("type")),
    )
    scale_output_for_invalid = (config.scale.invalid or {}).get(scale_channel)
    if scale_output_for_invalid is not None:
        return ScaleInvalidDataMode.SHOW
    return ScaleInvalidDataMode(invalid_mode.value)


def get_data_sources_for_handling_invalid_values(
    invalid: str | MarkInvalidDataMode | None, *, is_path: bool
) -> DataSourcesForHandlingInvalidValues:
    """Which data sources (marks, scale domains) must exclude invalid values."""
    include = InvalidValuesHandling.INCLUDE
    exclude = InvalidValuesHandling.EXCLUDE
    match normalize_invalid_data_mode(invalid, is_path=is_path):
        case MarkInvalidDataMode.FILTER:
            return DataSourcesForHandlingInvalidValues(marks=exclude, scales=exclude)
        case MarkInvalidDataMode.BREAK_PATHS_SHOW_DOMAINS:
            return DataSourcesForHandlingInvalidValues(
                marks=include if is_path else exclude, scales=include
            )
        case MarkInvalidDataMode.BREAK_PATHS_FILTER_DOMAINS:
            return DataSourcesForHandlingInvalidValues(
                marks=include if is_path else exclude, scales=exclude
            )
        case MarkInvalidDataMode.SHOW:
            return DataSourcesForHandlingInvalidValues(marks=include, scales=include)
        case other:
            raise AssertionError(f"unresolved invalid mode {other!r}")
