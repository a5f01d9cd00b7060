"""
Boxplot composite mark.

Expands `{"mark": "boxplot", ...}` into layered primitive marks: a bar for the
box (Q1 to Q3), a tick for the median, rules and ticks for the whiskers and, for
Tukey boxplots, points for outliers.

Extents
- number k: Tukey whiskers, reaching the furthest values within
  `[Q1 - k * IQR, Q3 + k * IQR]`; values outside are outliers.
- "tukey": Tukey whiskers with k = 1.5.
- "min-max": whiskers at the group min/max; no outliers.

Output shape
- min-max: one flat `layer` under the outer transform plus the aggregate.
- Tukey: two layer groups. The first adds quartiles to every row (joinaggregate),
  draws outliers, and re-aggregates the rows inside the whisker bounds for the
  whiskers. The second aggregates once for the box and median.

Examples:
    >>> out = normalize_boxplot(
    ...     {"mark": "boxplot", "encoding": {"x": "category:N", "y": "value:Q"}}, Config()
    ... )
    >>> len(out["layer"])
    2
    >>> out["layer"][1]["transform"][0]["aggregate"][0]
    {'op': 'q1', 'field': 'value', 'as': 'lower_box_value'}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from chartc.compile.common import get_mark_prop_or_config
from chartc.compositemark.common import (
    CompositeAggregatePartFactory,
    ContinuousAxis,
    TooltipSummary,
    composite_mark_continuous_axis,
    composite_mark_orient,
    filter_tooltip_with_aggregated_field,
    get_composite_mark_tooltip,
    get_title,
    part_layer_mixins,
)
from chartc.config import Config
from chartc.core import messages
from chartc.core.constants import DEFAULT_BOX_COLOR, DEFAULT_TUKEY_K
from chartc.core.errors import SpecError
from chartc.core.grammar import BoxPlotType
from chartc.core.typing import Encoding, JsonDict, Orientation
from chartc.encoding import extract_transforms_from_encoding, normalize_encoding
from chartc.expr import flat_access_with_datum, format_number, remove_path_from_field

__all__ = [
    "BOXPLOT",
    "BOXPLOT_PARTS",
    "get_box_plot_type",
    "normalize_boxplot",
]

logger = logging.getLogger(__name__)

BOXPLOT = "boxplot"
BOXPLOT_PARTS = ("box", "median", "outliers", "rule", "ticks")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_box_plot_type(extent: Any) -> BoxPlotType:
    """
    Whisker type of an extent.

    Raises:
        SpecError: If the extent is neither a number, "tukey" nor "min-max".
    """
    if _is_number(extent):
        return BoxPlotType.TUKEY
    if extent in (BoxPlotType.TUKEY.value, BoxPlotType.MIN_MAX.value):
        return BoxPlotType(extent)
    raise SpecError(messages.unsupported_extent(BOXPLOT, extent))


def _quartiles(field: str) -> list[JsonDict]:
    alias = remove_path_from_field(field)
    return [
        {"op": "q1", "field": field, "as": f"lower_box_{alias}"},
        {"op": "q3", "field": field, "as": f"upper_box_{alias}"},
    ]


class _BoxPlotParams:
    """Orientation, continuous axis, and the transforms shared by every layer."""

    def __init__(
        self, spec: Mapping[str, Any], plot_type: BoxPlotType, k: float, config: Config
    ):
        orient: Orientation = composite_mark_orient(spec, BOXPLOT)
        self.continuous_axis: ContinuousAxis = composite_mark_continuous_axis(
            spec, orient, BOXPLOT
        )
        field = self.continuous_axis.channel_def["field"]
        alias = remove_path_from_field(field)
        min_max = plot_type is BoxPlotType.MIN_MAX

        lower_whisker = ("lower_whisker_" if min_max else "min_") + alias
        upper_whisker = ("upper_whisker_" if min_max else "max_") + alias
        boxplot_aggregate = [
            *_quartiles(field),
            {"op": "median", "field": field, "as": f"mid_box_{alias}"},
            {"op": "min", "field": field, "as": lower_whisker},
            {"op": "max", "field": field, "as": upper_whisker},
        ]
        post_aggregate_calculates: list[JsonDict] = []
        if plot_type is BoxPlotType.K_IQR:
            lower_box = flat_access_with_datum(f"lower_box_{alias}")
            upper_box = flat_access_with_datum(f"upper_box_{alias}")
            iqr = flat_access_with_datum(f"iqr_{alias}")
            kk = format_number(k)
            post_aggregate_calculates = [
                {"calculate": f"{upper_box} - {lower_box}", "as": f"iqr_{alias}"},
                {
                    "calculate": f"min({upper_box} + {iqr} * {kk}, "
                    f"{flat_access_with_datum(f'max_{alias}')})",
                    "as": f"upper_whisker_{alias}",
                },
                {
                    "calculate": f"max({lower_box} - {iqr} * {kk}, "
                    f"{flat_access_with_datum(f'min_{alias}')})",
                    "as": f"lower_whisker_{alias}",
                },
            ]

        old_encoding = {
            ch: v for ch, v in spec["encoding"].items() if ch != self.continuous_axis.axis
        }
        self.custom_tooltip_without_aggregated_field, filtered = (
            filter_tooltip_with_aggregated_field(old_encoding)
        )
        extracted = extract_transforms_from_encoding(filtered, config)
        self.bins = extracted.bins
        self.time_units = extracted.time_units
        self.aggregate = extracted.aggregate
        self.groupby = extracted.groupby
        self.encoding_without_continuous_axis: Encoding = extracted.encoding
        self.ticks_orient: Orientation = "horizontal" if orient == "vertical" else "vertical"
        self.box_orient: Orientation = orient
        self.transform: list[JsonDict] = [
            *self.bins,
            *self.time_units,
            {"aggregate": [*self.aggregate, *boxplot_aggregate], "groupby": self.groupby},
            *post_aggregate_calculates,
        ]


class _BoxPlotLayers:
    """Builds the layers of one boxplot expansion, one method per part."""

    def __init__(
        self,
        mark_def: Mapping[str, Any],
        params: _BoxPlotParams,
        plot_type: BoxPlotType,
        config: Config,
    ):
        self.mark_def = mark_def
        self.params = params
        self.plot_type = plot_type
        self.config = config
        self.invalid = mark_def.get("invalid")
        self.size_value = get_mark_prop_or_config("size", mark_def, config)
        self.composite_config = config.boxplot.model_dump()

        cdef = params.continuous_axis.channel_def
        encoding = params.encoding_without_continuous_axis
        self.color = encoding.get("color")
        self.size = encoding.get("size")
        self.encoding_without_size_color = {
            k: v for k, v in encoding.items() if k not in ("color", "size")
        }

        base = CompositeAggregatePartFactory(
            mark_def, params.continuous_axis, encoding, self.composite_config
        )
        self._extent_part = base.with_shared_encoding(self.encoding_without_size_color)
        self._box_part = base

        box_config = config.boxplot.box
        default_box_color = (
            box_config.get("color") if isinstance(box_config, Mapping) else config.mark.color
        ) or DEFAULT_BOX_COLOR
        lower = flat_access_with_datum(f"lower_box_{cdef['field']}")
        upper = flat_access_with_datum(f"upper_box_{cdef['field']}")
        self._mid_tick_part = base.with_shared_encoding(
            {
                **self.encoding_without_size_color,
                **({"size": self.size} if self.size else {}),
                "color": {
                    "condition": {
                        "test": f"{lower} >= {upper}",
                        **(self.color or {"value": default_box_color}),
                    }
                },
            }
        )

        min_max = plot_type is BoxPlotType.MIN_MAX
        self.five_summary_tooltip = get_composite_mark_tooltip(
            [
                TooltipSummary("upper_whisker_" if min_max else "max_", "Max"),
                TooltipSummary("upper_box_", "Q3"),
                TooltipSummary("mid_box_", "Median"),
                TooltipSummary("lower_box_", "Q1"),
                TooltipSummary("lower_whisker_" if min_max else "min_", "Min"),
            ],
            cdef,
            encoding,
        )
        if min_max:
            self.whisker_tooltip = self.five_summary_tooltip
        else:
            self.whisker_tooltip = get_composite_mark_tooltip(
                [
                    TooltipSummary("upper_whisker_", "Upper Whisker"),
                    TooltipSummary("lower_whisker_", "Lower Whisker"),
                ],
                cdef,
                encoding,
            )

    def whisker_rules(self) -> list[JsonDict]:
        rule = {"type": "rule", "invalid": self.invalid, "aria": False}
        return [
            *self._extent_part.make(
                "rule", rule, "lower_whisker", "lower_box", self.whisker_tooltip
            ),
            *self._extent_part.make(
                "rule", rule, "upper_box", "upper_whisker", self.whisker_tooltip
            ),
        ]

    def whisker_ticks(self) -> list[JsonDict]:
        end_tick = {
            "type": "tick",
            "color": "black",
            "opacity": 1,
            "orient": self.params.ticks_orient,
            "invalid": self.invalid,
            "aria": False,
        }
        return [
            *self._extent_part.make(
                "ticks", end_tick, "lower_whisker", extra_encoding=self.whisker_tooltip
            ),
            *self._extent_part.make(
                "ticks", end_tick, "upper_whisker", extra_encoding=self.whisker_tooltip
            ),
        ]

    def whiskers(self) -> list[JsonDict]:
        return [*self.whisker_rules(), *self.whisker_ticks()]

    def box(self) -> list[JsonDict]:
        mark = {
            "type": "bar",
            **({"size": self.size_value} if self.size_value else {}),
            "orient": self.params.box_orient,
            "invalid": self.invalid,
            "ariaRoleDescription": "box",
        }
        return self._box_part.make(
            "box", mark, "lower_box", "upper_box", self.five_summary_tooltip
        )

    def median(self) -> list[JsonDict]:
        median_config = self.config.boxplot.median
        median_color = median_config.get("color") if isinstance(median_config, Mapping) else None
        mark = {
            "type": "tick",
            "invalid": self.invalid,
            **({"color": median_color} if median_color else {}),
            **({"size": self.size_value} if self.size_value else {}),
            "orient": self.params.ticks_orient,
            "aria": False,
        }
        return self._mid_tick_part.make(
            "median", mark, "mid_box", extra_encoding=self.five_summary_tooltip
        )

    def outliers(self, lower_whisker_expr: str, upper_whisker_expr: str) -> JsonDict | None:
        cdef = self.params.continuous_axis.channel_def
        field_expr = flat_access_with_datum(cdef["field"])
        axis_def: JsonDict = {"field": cdef["field"], "type": cdef.get("type")}
        title = get_title(cdef)
        if title is not None:
            axis_def["title"] = title
        if "scale" in cdef:
            axis_def["scale"] = cdef["scale"]
        axis_without_title = {
            k: v for k, v in (cdef.get("axis") or {}).items() if k != "title"
        }
        if axis_without_title:
            axis_def["axis"] = axis_without_title

        custom_tooltip = self.params.custom_tooltip_without_aggregated_field
        encoding: JsonDict = {
            self.params.continuous_axis.axis: axis_def,
            **{k: v for k, v in self.encoding_without_size_color.items() if k != "tooltip"},
            **({"color": self.color} if self.color else {}),
            **({"tooltip": custom_tooltip} if custom_tooltip else {}),
        }
        layers = part_layer_mixins(
            self.mark_def,
            "outliers",
            self.composite_config,
            {
                "transform": [
                    {
                        "filter": f"({field_expr} < {lower_whisker_expr}) || "
                        f"({field_expr} > {upper_whisker_expr})"
                    }
                ],
                "mark": "point",
                "encoding": encoding,
            },
        )
        return layers[0] if layers else None


def normalize_boxplot(
    spec: Mapping[str, Any],
    config: Config | None = None,
    *,
    box_plot_type: BoxPlotType | None = None,
) -> JsonDict:
    """
    Expand a boxplot spec into a layered spec.

    Args:
        spec (Mapping): Unit spec with `mark: "boxplot"` (or a boxplot mark def).
        config (Config | None): Compiler config; defaults to `Config()`.
        box_plot_type (BoxPlotType | None): Force a whisker type. `K_IQR` draws
            whiskers at `[Q1 - k * IQR, Q3 + k * IQR]` clamped to the data
            range, computed in one aggregate pass.

    Returns:
        JsonDict: New spec; the input is not modified. Selection `params` and
        `projection` are dropped.

    Raises:
        SpecError: For an unsupported extent or a spec without a continuous axis.
    """
    config = config or Config()
    spec = {**spec, "encoding": normalize_encoding(spec.get("encoding"))}
    mark = spec["mark"]
    outer_spec = {
        k: v for k, v in spec.items() if k not in ("mark", "encoding", "params", "projection")
    }
    mark_def: JsonDict = dict(mark) if isinstance(mark, Mapping) else {"type": mark}

    if spec.get("params") is not None:
        logger.warning(messages.selection_not_supported(BOXPLOT))

    extent = mark_def.get("extent")
    if extent is None:
        extent = config.boxplot.extent
    plot_type = box_plot_type or get_box_plot_type(extent)
    k = float(extent) if _is_number(extent) else DEFAULT_TUKEY_K

    params = _BoxPlotParams(spec, plot_type, k, config)
    layers = _BoxPlotLayers(mark_def, params, plot_type, config)

    box_layers = [
        *(layers.whiskers() if plot_type is not BoxPlotType.TUKEY else []),
        *layers.box(),
        *layers.median(),
    ]

    if plot_type is not BoxPlotType.TUKEY:
        return {
            **outer_spec,
            "transform": [*(outer_spec.get("transform") or []), *params.transform],
            "layer": box_layers,
        }

    field = params.continuous_axis.channel_def["field"]
    alias = remove_path_from_field(field)
    lower_box = flat_access_with_datum(f"lower_box_{field}")
    upper_box = flat_access_with_datum(f"upper_box_{field}")
    iqr = f"({upper_box} - {lower_box})"
    kk = format_number(k)
    lower_whisker_expr = f"{lower_box} - {kk} * {iqr}"
    upper_whisker_expr = f"{upper_box} + {kk} * {iqr}"
    field_expr = flat_access_with_datum(field)

    joinaggregate = {"joinaggregate": _quartiles(field), "groupby": params.groupby}
    filtered_whisker_spec: JsonDict = {
        "transform": [
            {
                "filter": f"({lower_whisker_expr} <= {field_expr}) && "
                f"({field_expr} <= {upper_whisker_expr})"
            },
            {
                "aggregate": [
                    {"op": "min", "field": field, "as": f"lower_whisker_{alias}"},
                    {"op": "max", "field": field, "as": f"upper_whisker_{alias}"},
                    {"op": "min", "field": f"lower_box_{field}", "as": f"lower_box_{alias}"},
                    {"op": "max", "field": f"upper_box_{field}", "as": f"upper_box_{alias}"},
                    *params.aggregate,
                ],
                "groupby": params.groupby,
            },
        ],
        "layer": layers.whiskers(),
    }

    pre_transforms = [*params.bins, *params.time_units, joinaggregate]
    outlier_layer = layers.outliers(lower_whisker_expr, upper_whisker_expr)
    if outlier_layer is not None:
        filtered_layers: JsonDict = {
            "transform": pre_transforms,
            "layer": [outlier_layer, filtered_whisker_spec],
        }
    else:
        filtered_whisker_spec["transform"] = [*pre_transforms, *filtered_whisker_spec["transform"]]
        filtered_layers = filtered_whisker_spec

    return {
        **outer_spec,
        "layer": [filtered_layers, {"transform": params.transform, "layer": box_layers}],
    }
