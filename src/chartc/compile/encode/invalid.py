"""
Encode-time handling of invalid values for channels whose policy is "show".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from chartc.channeldef import get_field_def, is_signal_ref, vg_field
from chartc.compile.encode.valueref import scaled_zero_or_min_or_max
from chartc.compile.invalid import get_scale_invalid_data_mode
from chartc.core.grammar import ScaleInvalidDataMode, is_counting_aggregate_op
from chartc.core.typing import ValueRef
from chartc.expr import field_valid_predicate

if TYPE_CHECKING:
    from chartc.compile.model import ScaleComponent
    from chartc.config import Config

__all__ = ["get_conditional_value_ref_for_including_invalid_value"]


def _ref_for_invalid_values(
    include_as: Any, scale: ScaleComponent | None, scale_name: str | None
) -> ValueRef | None:
    if isinstance(include_as, Mapping) and "value" in include_as:
        value = include_as["value"]
        return {"signal": value["signal"]} if is_signal_ref(value) else {"value": value}
    return scaled_zero_or_min_or_max(scale_name=scale_name, scale=scale, mode="zeroOrMin")


def get_conditional_value_ref_for_including_invalid_value(
    *,
    scale_channel: str,
    channel_def: Any,
    scale: ScaleComponent | None,
    scale_name: str | None,
    mark_def: Mapping[str, Any],
    config: Config,
) -> ValueRef | None:
    """
    Conditional ref substituting invalid values of a field, or None.

    Only produced when the channel's invalid-data policy is "show" and the channel
    has a field. The substitute is `config.scale.invalid[channel]` when it is a
    `{"value": ...}` output, otherwise zero (or the domain min) through the scale.

    Examples:
        >>> from chartc.compile.model import UnitModel
        >>> from chartc.config import Config
        >>> cfg = Config.model_validate({"scale": {"invalid": {"color": {"value": "grey"}}}})
        >>> m = UnitModel({"mark": "point", "encoding": {"color": "v:Q"}}, cfg)
        >>> get_conditional_value_ref_for_including_invalid_value(
        ...     scale_channel="color", channel_def=m.encoding["color"],
        ...     scale=m.get_scale_component("color"), scale_name="color",
        ...     mark_def=m.mark_def, config=cfg,
        ... )
        {'test': '!isValid(datum["v"]) || !isFinite(+datum["v"])', 'value': 'grey'}
    """
    fd = get_field_def(channel_def) if not isinstance(channel_def, list) else None
    mode = get_scale_invalid_data_mode(
        scale_channel=scale_channel,
        mark_def=mark_def,
        config=config,
        scale_type=scale.type if scale is not None else None,
        is_count_aggregate=is_counting_aggregate_op(fd.aggregate if fd else None),
    )
    if fd is None or mode is not ScaleInvalidDataMode.SHOW:
        return None

    include_as = (config.scale.invalid or {}).get(scale_channel, "zero-or-min")
    ref = _ref_for_invalid_values(include_as, scale, scale_name)
    return {
        "test": field_valid_predicate(vg_field(fd, expr="datum"), False),
        **(ref or {}),
    }
