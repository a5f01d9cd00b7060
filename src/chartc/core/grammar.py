"""
Canonical chart grammar vocabulary and helpers.

Defines field types, invalid-data policy tokens, composite-mark variants, channel
families, scale-type families, and time-unit parts. Includes zero-IO validators used
across normalization and compilation.

Responsibilities
- Define enums whose serialized values match the renderer-facing wire vocabulary.
- Provide channel/scale/aggregate classification helpers.
- Parse loose tokens (e.g. shorthand type codes "Q", "T") into canonical enums.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values (wire): lower-kebab (e.g. "always-valid", "min-max")
   - Channel names keep the grammar's camelCase ("fillOpacity", "strokeWidth").

2) Closed variants:
   - FieldType is closed over {quantitative, temporal, ordinal, nominal}. Code that
     dispatches on it uses `match` with an explicit fallthrough that raises.

Downstream usage
----------------
- `chartc.channeldef` validates `FieldDef.type` with `field_type_from_value`.
- `chartc.compile.invalid` resolves `ScaleInvalidDataMode` from `MarkInvalidDataMode`.
- `chartc.compositemark.boxplot` maps extents onto `BoxPlotType`.

Examples
--------
>>> from chartc.core.grammar import FieldType, field_type_from_value, time_unit_parts
>>> field_type_from_value("Q") == FieldType.QUANTITATIVE
True
>>> time_unit_parts("yearmonth")
['year', 'month']
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Final

__all__ = [
    "FieldType",
    "MarkInvalidDataMode",
    "ScaleInvalidDataMode",
    "InvalidValuesHandling",
    "BoxPlotType",
    "ErrorBarExtent",
    "POSITION_SCALE_CHANNELS",
    "NONPOSITION_SCALE_CHANNELS",
    "SCALE_CHANNELS",
    "SECONDARY_RANGE_CHANNELS",
    "PATH_MARKS",
    "COUNTING_OPS",
    "TIMEUNIT_PARTS",
    # helpers/validators
    "is_lower_kebab",
    "field_type_from_value",
    "is_scale_channel",
    "is_position_scale_channel",
    "is_non_position_scale_channel",
    "is_xor_y",
    "is_path_mark",
    "is_counting_aggregate_op",
    "has_continuous_domain",
    "has_discrete_domain",
    "contains_time_unit",
    "time_unit_parts",
    "ensure_all_enum_values_lower_kebab",
]


# ============================================================================
# FIELD TYPES, INVALID-DATA POLICIES
# ============================================================================


class FieldType(Enum):
    """
    Semantic type of a data field.

    Serialized values appear in:
      - encoding.<channel>.type
      - tooltip field defs synthesized by composite marks
    """

    QUANTITATIVE = "quantitative"
    TEMPORAL = "temporal"
    ORDINAL = "ordinal"
    NOMINAL = "nominal"


class MarkInvalidDataMode(Enum):
    """
    Mark-level `invalid` option as written by users or config.

    Notes:
      `break-paths-show-path-domains` is resolved per mark: path marks break paths
      and show domains, other marks filter. A JSON `null` means "show".
    """

    FILTER = "filter"
    BREAK_PATHS_FILTER_DOMAINS = "break-paths-filter-domains"
    BREAK_PATHS_SHOW_DOMAINS = "break-paths-show-domains"
    BREAK_PATHS_SHOW_PATH_DOMAINS = "break-paths-show-path-domains"
    SHOW = "show"


class ScaleInvalidDataMode(Enum):
    """
    Resolved invalid-data policy for one scale channel.

    Only `show` and `always-valid` let invalid values reach a scale unfiltered.
    """

    SHOW = "show"
    ALWAYS_VALID = "always-valid"
    FILTER = "filter"
    BREAK_PATHS_FILTER_DOMAINS = "break-paths-filter-domains"
    BREAK_PATHS_SHOW_DOMAINS = "break-paths-show-domains"


class InvalidValuesHandling(Enum):
    """Whether a data source feeding marks or scale domains keeps invalid rows."""

    INCLUDE = "include-invalid-values"
    EXCLUDE = "exclude-invalid-values"


# ============================================================================
# COMPOSITE MARK VARIANTS
# ============================================================================


class BoxPlotType(Enum):
    """
    Whisker policy of a boxplot.

    Notes:
      K_IQR (whiskers at Q1 - k*IQR / Q3 + k*IQR clamped by min/max in a single
      aggregation scope) is not reachable from the public `extent` option.
    """

    TUKEY = "tukey"
    MIN_MAX = "min-max"
    K_IQR = "k-iqr"


class ErrorBarExtent(Enum):
    """Extent of an error bar around its center."""

    STDERR = "stderr"
    STDEV = "stdev"
    CI = "ci"
    IQR = "iqr"


# ============================================================================
# CHANNELS, MARKS, SCALES, AGGREGATES, TIME UNITS
# ============================================================================

POSITION_SCALE_CHANNELS: Final[frozenset[str]] = frozenset(
    {"x", "y", "xOffset", "yOffset", "theta", "radius"}
)

NONPOSITION_SCALE_CHANNELS: Final[frozenset[str]] = frozenset(
    {
        "color",
        "fill",
        "stroke",
        "opacity",
        "fillOpacity",
        "strokeOpacity",
        "strokeWidth",
        "strokeDash",
        "size",
        "angle",
        "shape",
    }
)

SCALE_CHANNELS: Final[frozenset[str]] = POSITION_SCALE_CHANNELS | NONPOSITION_SCALE_CHANNELS

SECONDARY_RANGE_CHANNELS: Final[frozenset[str]] = frozenset({"x2", "y2", "theta2", "radius2"})

PATH_MARKS: Final[frozenset[str]] = frozenset({"line", "area", "trail"})

# Aggregates that never output null, so their scales are always valid.
COUNTING_OPS: Final[frozenset[str]] = frozenset({"count", "valid", "missing", "distinct"})

_CONTINUOUS_SCALE_TYPES: Final[frozenset[str]] = frozenset(
    {"linear", "log", "pow", "sqrt", "symlog", "time", "utc", "sequential"}
)
_DISCRETIZING_SCALE_TYPES: Final[frozenset[str]] = frozenset({"quantile", "quantize", "threshold"})
_DISCRETE_SCALE_TYPES: Final[frozenset[str]] = frozenset(
    {"ordinal", "band", "point", "bin-ordinal"}
)

# Order matters: titles list parts in this order.
TIMEUNIT_PARTS: Final[tuple[str, ...]] = (
    "year",
    "quarter",
    "month",
    "week",
    "day",
    "dayofyear",
    "date",
    "hours",
    "minutes",
    "seconds",
    "milliseconds",
)

_TYPE_CODES: Final[dict[str, FieldType]] = {
    "q": FieldType.QUANTITATIVE,
    "t": FieldType.TEMPORAL,
    "o": FieldType.ORDINAL,
    "n": FieldType.NOMINAL,
}

_LOWER_KEBAB_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def is_lower_kebab(value: str) -> bool:
    """
    Check whether a string is lower-kebab.

    Examples:
      >>> is_lower_kebab("always-valid")
      True
      >>> is_lower_kebab("AlwaysValid")
      False
    """
    return bool(_LOWER_KEBAB_RE.match(value or ""))


def field_type_from_value(s: str | FieldType) -> FieldType:
    """
    Parse a type token into a FieldType.

    Args:
      s (str | FieldType): Full name ("quantitative") or one-letter shorthand code
        ("Q"), case-insensitive. FieldType members pass through.

    Returns:
      FieldType: Parsed type.

    Raises:
      ValueError: If the token is not a known field type.
    """
    if isinstance(s, FieldType):
        return s
    token = (s or "").strip().lower()
    if token in _TYPE_CODES:
        return _TYPE_CODES[token]
    allowed = {t.value for t in FieldType}
    if token not in allowed:
        raise ValueError(f"type must be one of {sorted(allowed)} (got {s!r})")
    return FieldType(token)


def is_scale_channel(channel: str) -> bool:
    return channel in SCALE_CHANNELS


def is_position_scale_channel(channel: str) -> bool:
    return channel in POSITION_SCALE_CHANNELS


def is_non_position_scale_channel(channel: str) -> bool:
    return channel in NONPOSITION_SCALE_CHANNELS


def is_xor_y(channel: str) -> bool:
    return channel in ("x", "y")


def is_path_mark(mark: str | None) -> bool:
    return mark in PATH_MARKS


def is_counting_aggregate_op(op: object) -> bool:
    return isinstance(op, str) and op in COUNTING_OPS


def has_continuous_domain(scale_type: str | None) -> bool:
    """True for scale types whose domain is a numeric/temporal interval."""
    return scale_type in _CONTINUOUS_SCALE_TYPES or scale_type in _DISCRETIZING_SCALE_TYPES


def has_discrete_domain(scale_type: str | None) -> bool:
    return scale_type in _DISCRETE_SCALE_TYPES


def contains_time_unit(full_time_unit: str, part: str) -> bool:
    """
    Check whether a (possibly composite) time unit includes a single part.

    Examples:
      >>> contains_time_unit("yearmonthdate", "month")
      True
      >>> contains_time_unit("dayofyear", "day")
      False
      >>> contains_time_unit("secondsmilliseconds", "seconds")
      True
    """
    index = full_time_unit.find(part)
    if index < 0:
        return False
    # "milliseconds" contains "seconds"
    if index > 0 and part == "seconds" and full_time_unit[index - 1] == "i":
        return False
    # "dayofyear" contains "day"
    if len(full_time_unit) > index + 3 and part == "day" and full_time_unit[index + 3] == "o":
        return False
    # "dayofyear" contains "year"
    if index > 0 and part == "year" and full_time_unit[index - 1] == "f":
        return False
    return True


def time_unit_parts(time_unit: str) -> list[str]:
    """Split a composite time unit (optionally "utc"-prefixed) into canonical-order parts."""
    unit = time_unit[3:] if time_unit.startswith("utc") else time_unit
    return [part for part in TIMEUNIT_PARTS if contains_time_unit(unit, part)]


def ensure_all_enum_values_lower_kebab(enums: Iterable[type[Enum]]) -> None:
    """
    Assert that every enum member's value is lower-kebab.

    Args:
      enums (Iterable[type[Enum]]): Iterable of Enum classes to inspect.

    Raises:
      AssertionError: If any enum member has a non-lower-kebab value.
    """
    for E in enums:
        for m in E:
            if not is_lower_kebab(m.value):
                raise AssertionError(
                    f"{E.__name__}.{m.name} has non-lower-kebab value: {m.value!r}"
                )
