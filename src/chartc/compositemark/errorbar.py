"""
Errorbar composite mark (raw data input).

Aggregates the continuous field per group into a center and an extent, then draws
a rule from `lower_<field>` to `upper_<field>` and, when enabled, end ticks.

Extents
- "stderr" / "stdev": center (mean by default) plus/minus the standard error or
  deviation, computed with post-aggregate calculates.
- "ci": bootstrapped 95% confidence interval (`ci0`/`ci1`) around the mean.
- "iqr": first to third quartile around the median.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from chartc.channeldef import FieldDef, default_title
from chartc.compositemark.common import (
    CompositeAggregatePartFactory,
    TooltipSummary,
    composite_mark_continuous_axis,
    composite_mark_orient,
    get_composite_mark_tooltip,
)
from chartc.config import Config
from chartc.core import messages
from chartc.core.errors import SpecError
from chartc.core.grammar import ErrorBarExtent
from chartc.core.typing import JsonDict
from chartc.encoding import extract_transforms_from_encoding, normalize_encoding
from chartc.expr import datum_access

__all__ = ["ERRORBAR", "ERRORBAR_PARTS", "normalize_errorbar"]

logger = logging.getLogger(__name__)

ERRORBAR = "errorbar"
ERRORBAR_PARTS = ("ticks", "rule")

_PREAGGREGATED_CHANNELS = ("x2", "y2", "xError", "yError", "xError2", "yError2")


def _extent(mark_def: Mapping[str, Any], config: Config) -> ErrorBarExtent:
    extent = mark_def.get("extent") or config.errorbar.extent
    try:
        return ErrorBarExtent(extent)
    except ValueError as exc:
        raise SpecError(messages.unsupported_extent(ERRORBAR, extent)) from exc


def _aggregation(
    field: str, center: str, extent: ErrorBarExtent, count_title: str
) -> tuple[list[JsonDict], list[JsonDict], list[TooltipSummary], bool]:
    """Aggregate ops, post-aggregate calculates, tooltip rows, and whether titles name the field."""
    if extent in (ErrorBarExtent.STDERR, ErrorBarExtent.STDEV):
        center_ref = datum_access(f"center_{field}")
        extent_ref = datum_access(f"extent_{field}")
        title_center = center[:1].upper() + center[1:]
        return (
            [
                {"op": extent.value, "field": field, "as": f"extent_{field}"},
                {"op": center, "field": field, "as": f"center_{field}"},
            ],
            [
                {"calculate": f"{center_ref} + {extent_ref}", "as": f"upper_{field}"},
                {"calculate": f"{center_ref} - {extent_ref}", "as": f"lower_{field}"},
            ],
            [
                TooltipSummary("center_", title_center),
                TooltipSummary("upper_", f"{title_center} + {extent.value}"),
                TooltipSummary("lower_", f"{title_center} - {extent.value}"),
            ],
            True,
        )

    if extent is ErrorBarExtent.CI:
        center_op, lower_op, upper_op = "mean", "ci0", "ci1"
    else:
        center_op, lower_op, upper_op = "median", "q1", "q3"

    def op_title(op: str) -> str:
        return default_title(FieldDef(field=field, aggregate=op, type="quantitative"), count_title)

    return (
        [
            {"op": lower_op, "field": field, "as": f"lower_{field}"},
            {"op": upper_op, "field": field, "as": f"upper_{field}"},
            {"op": center_op, "field": field, "as": f"center_{field}"},
        ],
        [],
        [
            TooltipSummary("upper_", op_title(upper_op)),
            TooltipSummary("lower_", op_title(lower_op)),
            TooltipSummary("center_", op_title(center_op)),
        ],
        False,
    )


def normalize_errorbar(spec: Mapping[str, Any], config: Config | None = None) -> JsonDict:
    """
    Expand an errorbar spec.

    Args:
        spec (Mapping): Unit spec with `mark: "errorbar"` (or an errorbar mark def)
            over raw data.
        config (Config | None): Compiler config; defaults to `Config()`.

    Returns:
        JsonDict: Layered spec when both parts are drawn, otherwise a unit spec
        with the single part's mark and encoding. The outer transform is followed
        by the extracted bin/time-unit transforms, the aggregate and the calculates.

    Raises:
        SpecError: For an unknown extent, pre-aggregated input (`x2`, `xError`, …),
            or a spec without a continuous axis.

    Examples:
        >>> out = normalize_errorbar({"mark": "errorbar",
        ...                           "encoding": {"x": "g:N", "y": "v:Q"}})
        >>> out["transform"][0]["aggregate"][0]
        {'op': 'stderr', 'field': 'v', 'as': 'extent_v'}
        >>> out["mark"]["type"]
        'rule'
    """
    config = config or Config()
    spec = {**spec, "encoding": normalize_encoding(spec.get("encoding"))}
    encoding = spec["encoding"]
    for channel in _PREAGGREGATED_CHANNELS:
        if channel in encoding:
            raise SpecError(messages.preaggregated_errorbar_not_supported(channel))

    mark = spec["mark"]
    mark_def: JsonDict = dict(mark) if isinstance(mark, Mapping) else {"type": mark}
    outer_spec = {
        k: v for k, v in spec.items() if k not in ("mark", "encoding", "params", "projection")
    }
    if spec.get("params") is not None:
        logger.warning(messages.selection_not_supported(ERRORBAR))

    extent = _extent(mark_def, config)
    center = mark_def.get("center") or ("median" if extent is ErrorBarExtent.IQR else "mean")
    if (center == "median") != (extent is ErrorBarExtent.IQR):
        logger.warning(messages.errorbar_center_with_wrong_extent(center, extent.value, ERRORBAR))

    orient = composite_mark_orient(spec, ERRORBAR)
    continuous_axis = composite_mark_continuous_axis(spec, orient, ERRORBAR)
    field = continuous_axis.channel_def["field"]
    aggregate_ops, calculates, tooltip_summary, title_with_field = _aggregation(
        field, center, extent, config.count_title
    )

    old_encoding = {ch: v for ch, v in encoding.items() if ch != continuous_axis.axis}
    extracted = extract_transforms_from_encoding(old_encoding, config)
    aggregate = [*extracted.aggregate, *aggregate_ops]
    encoding_without_continuous_axis = {
        ch: v for ch, v in extracted.encoding.items() if ch != "size"
    }
    tooltip_encoding = get_composite_mark_tooltip(
        tooltip_summary,
        continuous_axis.channel_def,
        encoding_without_continuous_axis,
        title_with_field,
    )
    transform = [
        *(outer_spec.get("transform") or []),
        *extracted.bins,
        *extracted.time_units,
        {"aggregate": aggregate, "groupby": extracted.groupby},
        *calculates,
    ]

    part = CompositeAggregatePartFactory(
        mark_def,
        continuous_axis,
        encoding_without_continuous_axis,
        config.errorbar.model_dump(),
    )
    thickness = mark_def.get("thickness")
    size = mark_def.get("size")
    tick = {
        "type": "tick",
        "orient": "horizontal" if orient == "vertical" else "vertical",
        "aria": False,
        "thickness": thickness,
        "size": size,
    }
    rule = {"type": "rule", "ariaRoleDescription": "errorbar", "size": thickness}
    layer = [
        *part.make("ticks", tick, "lower", extra_encoding=tooltip_encoding),
        *part.make("ticks", tick, "upper", extra_encoding=tooltip_encoding),
        *part.make("rule", rule, "lower", "upper", tooltip_encoding),
    ]

    out: JsonDict = {**outer_spec, "transform": transform}
    if len(layer) > 1:
        out["layer"] = layer
    elif layer:
        out.update(layer[0])
    return out
