"""
Encode entries for non-position channels with scales (color, opacity, size, …).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chartc.channeldef import is_conditional_def
from chartc.compile.common import get_mark_prop_or_config, signal_or_value_ref
from chartc.compile.encode.conditional import wrap_condition
from chartc.compile.encode.invalid import get_conditional_value_ref_for_including_invalid_value
from chartc.compile.encode.valueref import mid_point
from chartc.core.typing import JsonDict, ValueRef

if TYPE_CHECKING:
    from chartc.compile.model import UnitModel

__all__ = ["non_position"]

_UNSET: Any = object()


def non_position(
    channel: str,
    model: UnitModel,
    *,
    default_ref: ValueRef | None = _UNSET,
    default_value: Any = None,
    vg_channel: str | None = None,
) -> JsonDict:
    """
    Encode entry for one non-position channel.

    Args:
        channel (str): Channel name, e.g. "color" or "opacity".
        model (UnitModel): Model providing mark def, encoding, config and scales.
        default_ref (ValueRef | None): Explicit fallback reference. When omitted,
            one is built from `default_value` or the mark property / config.
        default_value: Explicit fallback value.
        vg_channel (str | None): Renderer property to emit (e.g. "fill" for "color").

    Returns:
        JsonDict: `{vg_channel: ref}`, `{vg_channel: [conditional refs..., ref]}`,
        or `{}` when nothing defines the channel.

    Examples:
        >>> from chartc.compile.model import UnitModel
        >>> m = UnitModel({"mark": "point", "encoding": {"color": "c:N"}})
        >>> non_position("color", m, vg_channel="fill")
        {'fill': {'scale': 'color', 'field': 'c'}}
    """
    mark_def, encoding, config = model.mark_def, model.encoding, model.config
    channel_def = encoding.get(channel)

    if default_ref is _UNSET:
        default_ref = None
        if default_value is None:
            # Without a condition the renderer applies its own config, so leave it out.
            # A conditional def needs it as the well-defined base value.
            default_value = get_mark_prop_or_config(
                channel,
                mark_def,
                config,
                vg_channel=vg_channel,
                ignore_vg_config=not is_conditional_def(channel_def),
            )
        if default_value is not None:
            default_ref = signal_or_value_ref(default_value)

    scale_name = model.scale_name(channel)
    scale = model.get_scale_component(channel)

    invalid_value_ref = get_conditional_value_ref_for_including_invalid_value(
        scale_channel=channel,
        channel_def=channel_def,
        scale=scale,
        scale_name=scale_name,
        mark_def=mark_def,
        config=config,
    )

    def main_ref(c_def: Any) -> ValueRef | None:
        return mid_point(
            channel=channel,
            channel_def=c_def,
            scale_name=scale_name,
            scale=scale,
            mark_def=mark_def,
            config=config,
            default_ref=default_ref,
        )

    return wrap_condition(
        channel_def=channel_def,
        vg_channel=vg_channel or channel,
        main_ref_fn=main_ref,
        invalid_value_ref=invalid_value_ref,
    )
