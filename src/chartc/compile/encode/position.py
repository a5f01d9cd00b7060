"""
Encode entries for point positions (`x`, `y`, `theta`, `radius`).

Stacking is not modeled; a stacked channel resolves like an unstacked one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from chartc.compile.common import get_mark_prop_or_config
from chartc.compile.encode.invalid import get_conditional_value_ref_for_including_invalid_value
from chartc.compile.encode.valueref import (
    mid_point,
    scaled_zero_or_min_or_max,
    width_height_value_or_signal_ref,
)
from chartc.core.typing import JsonDict, ValueRef

if TYPE_CHECKING:
    from chartc.compile.model import ScaleComponent, UnitModel

__all__ = ["DefaultPosition", "point_position", "point_position_default_ref"]

DefaultPosition = Literal["zeroOrMin", "zeroOrMax", "mid"]

_SIZE_SIGNALS = {"x": "width", "y": "height"}


def _zero_or_min_or_max_position(
    *,
    channel: str,
    scale_name: str | None,
    scale: ScaleComponent | None,
    mode: Literal["zeroOrMin", "zeroOrMax"],
) -> ValueRef | None:
    ref = scaled_zero_or_min_or_max(scale_name=scale_name, scale=scale, mode=mode)
    if ref is not None:
        return ref
    zero_or_min = mode == "zeroOrMin"
    match channel:
        case "radius":
            return {"value": 0} if zero_or_min else {"signal": "min(width,height)/2"}
        case "theta":
            return {"value": 0} if zero_or_min else {"signal": "2*PI"}
        case "x":
            return {"value": 0} if zero_or_min else {"field": {"group": "width"}}
        case "y":
            return {"field": {"group": "height"}} if zero_or_min else {"value": 0}
    return None


def point_position_default_ref(
    channel: str,
    model: UnitModel,
    *,
    default_pos: DefaultPosition,
    vg_channel: str | None = None,
) -> ValueRef | None:
    """Fallback position when the channel has no definition."""
    value = get_mark_prop_or_config(channel, model.mark_def, model.config, vg_channel=vg_channel)
    if value is not None:
        return width_height_value_or_signal_ref(channel, value)
    match default_pos:
        case "zeroOrMin" | "zeroOrMax":
            return _zero_or_min_or_max_position(
                channel=channel,
                scale_name=model.scale_name(channel),
                scale=model.get_scale_component(channel),
                mode=default_pos,
            )
        case "mid":
            size = _SIZE_SIGNALS.get(channel)
            return {"signal": size, "mult": 0.5} if size else None
    return None


def point_position(
    channel: str,
    model: UnitModel,
    *,
    default_pos: DefaultPosition,
    vg_channel: str | None = None,
) -> JsonDict:
    """
    Encode entry for a point position channel.

    A field on a continuous scale whose invalid-data policy is "show" gets a
    leading conditional ref placing invalid values at zero (or the domain min).

    Examples:
        >>> from chartc.compile.model import UnitModel
        >>> m = UnitModel({"mark": "point", "encoding": {"x": "a:N"}})
        >>> point_position("y", m, default_pos="mid")
        {'y': {'signal': 'height', 'mult': 0.5}}
    """
    mark_def, config = model.mark_def, model.config
    channel_def = model.encoding.get(channel)
    scale_name = model.scale_name(channel)
    scale = model.get_scale_component(channel)

    ref = mid_point(
        channel=channel,
        channel_def=channel_def,
        scale_name=scale_name,
        scale=scale,
        mark_def=mark_def,
        config=config,
        default_ref=lambda: point_position_default_ref(
            channel, model, default_pos=default_pos, vg_channel=vg_channel
        ),
    )
    if ref is None:
        return {}
    invalid_value_ref = get_conditional_value_ref_for_including_invalid_value(
        scale_channel=channel,
        channel_def=channel_def,
        scale=scale,
        scale_name=scale_name,
        mark_def=mark_def,
        config=config,
    )
    return {vg_channel or channel: [invalid_value_ref, ref] if invalid_value_ref else ref}
