"""
Shared pieces of composite mark expansion.

Responsibilities
- Orientation and continuous-axis detection (`composite_mark_orient`,
  `composite_mark_continuous_axis`).
- Tooltip handling: split user tooltips into aggregated / non-aggregated parts and
  synthesize summary tooltips.
- Part layers: `part_layer_mixins` decides whether a part (box, rule, ticks, …) is
  drawn and merges its styling; `CompositeAggregatePartFactory` builds a part layer
  that reads prefixed aggregate fields on the continuous axis.

Notes:
    Part toggles follow the grammar's truthiness: a mapping (even an empty one)
    or True enables a part, False/None disables it; an unset mark property falls
    back to the composite mark's config block.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from chartc.channeldef import (
    field_defs,
    is_datum_def,
    is_field_def,
    is_signal_ref,
    to_string_field_def,
)
from chartc.core import messages
from chartc.core.errors import SpecError
from chartc.core.grammar import FieldType
from chartc.core.hashing import unique
from chartc.core.typing import Encoding, JsonDict, Orientation
from chartc.compositemark.base import get_mark_type

__all__ = [
    "ContinuousAxis",
    "TooltipSummary",
    "composite_mark_orient",
    "composite_mark_continuous_axis",
    "filter_tooltip_with_aggregated_field",
    "get_title",
    "get_composite_mark_tooltip",
    "part_layer_mixins",
    "CompositeAggregatePartFactory",
    "drop_none",
]

logger = logging.getLogger(__name__)

_CONTINUOUS_TYPES = (FieldType.QUANTITATIVE.value, FieldType.TEMPORAL.value)


def drop_none(d: Mapping[str, Any]) -> JsonDict:
    return {k: v for k, v in d.items() if v is not None}


def _enabled(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    return bool(value)


def _is_continuous(channel_def: Any) -> bool:
    if not isinstance(channel_def, Mapping):
        return False
    type_ = channel_def.get("type")
    if is_field_def(channel_def):
        if type_ == FieldType.QUANTITATIVE.value:
            return not channel_def.get("bin")
        return type_ == FieldType.TEMPORAL.value
    if is_datum_def(channel_def):
        if type_ is not None:
            return type_ in _CONTINUOUS_TYPES
        datum = channel_def["datum"]
        return isinstance(datum, (int, float)) and not isinstance(datum, bool)
    return False


def _is_time_format(channel_def: Any) -> bool:
    return isinstance(channel_def, Mapping) and (
        channel_def.get("type") == FieldType.TEMPORAL.value or bool(channel_def.get("timeUnit"))
    )


def composite_mark_orient(spec: Mapping[str, Any], composite_mark: str) -> Orientation:
    """
    Orientation of a composite mark: along its continuous axis.

    An explicit `mark.orient` wins. With two continuous axes, the one aggregated by
    the composite mark (e.g. `aggregate: "boxplot"`) is the continuous axis;
    otherwise a temporal y with a non-temporal x is horizontal, else vertical.

    Raises:
        SpecError: If neither axis is continuous, or both are aggregated by the mark.
    """
    mark, encoding = spec.get("mark"), spec.get("encoding") or {}
    if isinstance(mark, Mapping) and mark.get("orient"):
        return mark["orient"]
    x, y = encoding.get("x"), encoding.get("y")
    if _is_continuous(x):
        if _is_continuous(y):
            x_aggregate = x.get("aggregate") if is_field_def(x) else None
            y_aggregate = y.get("aggregate") if is_field_def(y) else None
            if not x_aggregate and y_aggregate == composite_mark:
                return "vertical"
            if not y_aggregate and x_aggregate == composite_mark:
                return "horizontal"
            if x_aggregate == composite_mark and y_aggregate == composite_mark:
                raise SpecError(messages.both_axes_aggregated(composite_mark))
            if _is_time_format(y) and not _is_time_format(x):
                return "horizontal"
            return "vertical"
        return "horizontal"
    if _is_continuous(y):
        return "vertical"
    raise SpecError(messages.no_continuous_axis(composite_mark))


@dataclass(frozen=True, slots=True)
class ContinuousAxis:
    """Continuous axis channel (`x` or `y`) and its definition, aggregate removed."""

    axis: str
    channel_def: JsonDict


def _filter_aggregate(channel_def: Any, composite_mark: str) -> JsonDict | None:
    if channel_def is None:
        return None
    out = dict(channel_def)
    aggregate = out.pop("aggregate", None)
    if aggregate is not None and aggregate != composite_mark:
        logger.warning(messages.continuous_axis_has_custom_aggregate(aggregate, composite_mark))
    return out


def composite_mark_continuous_axis(
    spec: Mapping[str, Any], orient: Orientation, composite_mark: str
) -> ContinuousAxis:
    """
    Continuous axis of a composite mark for a given orientation.

    The axis definition is copied without its aggregate; an aggregate other than
    the composite mark's own is dropped with a warning.
    """
    encoding = spec.get("encoding") or {}
    axis = "y" if orient == "vertical" else "x"
    channel_def = _filter_aggregate(encoding.get(axis), composite_mark)
    if channel_def is None or not is_field_def(channel_def):
        raise SpecError(messages.no_continuous_axis(composite_mark))
    return ContinuousAxis(axis=axis, channel_def=channel_def)


def filter_tooltip_with_aggregated_field(
    old_encoding: Mapping[str, Any],
) -> tuple[Any, Encoding]:
    """
    Split the tooltip channel into aggregated and non-aggregated definitions.

    Returns:
        tuple: `(custom_tooltip_without_aggregated_field, filtered_encoding)`. The
        first item is None, one definition, or a list; the filtered encoding keeps
        only aggregated tooltip definitions, since those can be computed by the
        composite mark's aggregate.
    """
    filtered: Encoding = {k: v for k, v in old_encoding.items() if k != "tooltip"}
    tooltip = old_encoding.get("tooltip")
    if not tooltip:
        return None, filtered

    without_aggregate: Any = None
    if isinstance(tooltip, list):
        with_aggregate = [t for t in tooltip if isinstance(t, Mapping) and t.get("aggregate")]
        without = [t for t in tooltip if not (isinstance(t, Mapping) and t.get("aggregate"))]
        if with_aggregate:
            filtered["tooltip"] = with_aggregate
        if without:
            without_aggregate = without[0] if len(without) == 1 else without
    elif isinstance(tooltip, Mapping) and tooltip.get("aggregate"):
        filtered["tooltip"] = tooltip
    else:
        without_aggregate = tooltip
    return without_aggregate, filtered


def get_title(channel_def: Mapping[str, Any]) -> Any:
    title = channel_def.get("title")
    return title if title is not None else channel_def.get("field")


@dataclass(frozen=True, slots=True)
class TooltipSummary:
    """One summary row of a synthesized tooltip, e.g. `("upper_box_", "Q3")`."""

    field_prefix: str
    title_prefix: Any


def get_composite_mark_tooltip(
    tooltip_summary: Sequence[TooltipSummary],
    continuous_axis_channel_def: Mapping[str, Any],
    encoding_without_continuous_axis: Mapping[str, Any],
    with_field_name: bool = True,
) -> JsonDict:
    """
    Tooltip encoding for composite mark parts.

    A user tooltip (already reduced to aggregated definitions) is kept as is.
    Otherwise the tooltip lists one summary field per entry ("Q3 of value", …)
    followed by the remaining encoding's fields, de-duplicated in order.
    """
    if "tooltip" in encoding_without_continuous_axis:
        return {"tooltip": encoding_without_continuous_axis["tooltip"]}

    main_title = f" of {get_title(continuous_axis_channel_def)}" if with_field_name else ""
    summary: list[JsonDict] = []
    for row in tooltip_summary:
        if is_signal_ref(row.title_prefix):
            title: Any = {"signal": f'{row.title_prefix["signal"]}"{main_title}"'}
        else:
            title = f"{row.title_prefix}{main_title}"
        summary.append(
            {
                "field": row.field_prefix + continuous_axis_channel_def["field"],
                "type": continuous_axis_channel_def.get("type"),
                "title": title,
            }
        )
    rest = [to_string_field_def(fd) for fd in field_defs(dict(encoding_without_continuous_axis))]
    return {"tooltip": [*summary, *unique(rest)]}


def part_layer_mixins(
    mark_def: Mapping[str, Any],
    part: str,
    composite_config: Mapping[str, Any],
    part_base_spec: Mapping[str, Any],
) -> list[JsonDict]:
    """
    The part's layer in a one-element list, or `[]` when the part is disabled.

    The mark merges, in order: the part's config style, the composite mark's
    `clip`/`color`/`opacity`, the part's base mark, a `<mark>-<part>` style, and the
    part's style from the mark definition.
    """
    part_def = mark_def.get(part)
    config_part = composite_config.get(part)
    if not (_enabled(part_def) or (part_def is None and _enabled(config_part))):
        return []

    base_mark = part_base_spec["mark"]
    mark: JsonDict = dict(config_part) if isinstance(config_part, Mapping) else {}
    for key in ("clip", "color", "opacity"):
        if mark_def.get(key):
            mark[key] = mark_def[key]
    mark.update(base_mark if isinstance(base_mark, Mapping) else {"type": base_mark})
    mark["style"] = f"{get_mark_type(mark_def)}-{part}"
    if isinstance(part_def, Mapping):
        mark.update(part_def)
    return [{**part_base_spec, "mark": mark}]


@dataclass(frozen=True, slots=True)
class CompositeAggregatePartFactory:
    """
    Builds part layers positioned on prefixed aggregate fields.

    Holds the context every part of one expansion shares: the composite mark def,
    the continuous axis and its definition, the encoding shared by the parts, and
    the composite mark's config block.
    """

    mark_def: Mapping[str, Any]
    continuous_axis: ContinuousAxis
    shared_encoding: Mapping[str, Any]
    composite_config: Mapping[str, Any] = field(default_factory=dict)

    def with_shared_encoding(
        self, shared_encoding: Mapping[str, Any]
    ) -> CompositeAggregatePartFactory:
        return CompositeAggregatePartFactory(
            self.mark_def, self.continuous_axis, shared_encoding, self.composite_config
        )

    def make(
        self,
        part_name: str,
        mark: Mapping[str, Any],
        position_prefix: str,
        end_position_prefix: str | None = None,
        extra_encoding: Mapping[str, Any] | None = None,
    ) -> list[JsonDict]:
        """
        Layer (in a list) drawing `part_name` from `<prefix>_<field>`, optionally up
        to `<end_prefix>_<field>` on the secondary axis channel.
        """
        cdef = self.continuous_axis.channel_def
        axis = self.continuous_axis.axis
        axis_def: JsonDict = {
            "field": f"{position_prefix}_{cdef['field']}",
            "type": cdef.get("type"),
        }
        title = get_title(cdef)
        if title is not None:
            axis_def["title"] = title
        for key in ("scale", "axis"):
            if key in cdef:
                axis_def[key] = cdef[key]

        encoding: JsonDict = {axis: axis_def}
        if end_position_prefix is not None:
            encoding[f"{axis}2"] = {"field": f"{end_position_prefix}_{cdef['field']}"}
        encoding.update(self.shared_encoding)
        encoding.update(extra_encoding or {})
        return part_layer_mixins(
            self.mark_def,
            part_name,
            self.composite_config,
            {"mark": drop_none(mark), "encoding": encoding},
        )
