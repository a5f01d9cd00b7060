"""
Value references for mark encode entries.

A value reference tells the renderer how to compute one visual property of a mark:
a field through a scale (`{"scale": "color", "field": "a"}`), a literal
(`{"value": 3}`), or an expression (`{"signal": "..."}`).

Responsibilities
- `mid_point` — the reference for a channel's center value, the shared core of
  position and non-position channels.
- `scaled_zero_or_min_or_max` — zero (or the domain edge when zero is outside the
  domain) through a scale; used as the default baseline and as the substitute
  output for invalid values.
- Small builders for field/datum refs, interpolated bin refs and
  width/height group refs.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Literal

from chartc.channeldef import (
    get_field_def,
    is_datum_def,
    is_expr_ref,
    is_field_def,
    is_signal_ref,
    is_value_def,
    is_binning,
    vg_field,
)
from chartc.compile.common import get_mark_config, signal_or_value_ref
from chartc.core import messages
from chartc.core.errors import InvariantViolation
from chartc.core.grammar import FieldType, has_discrete_domain
from chartc.core.typing import JsonDict, ValueRef
from chartc.encoding import bin_requires_range
from chartc.expr import format_number

if TYPE_CHECKING:
    from chartc.channeldef import FieldDef
    from chartc.compile.model import ScaleComponent
    from chartc.config import Config

__all__ = [
    "ZeroOrMinOrMax",
    "width_height_value_or_signal_ref",
    "value_ref_for_field_or_datum_def",
    "interpolated_signal_ref",
    "scaled_zero_or_min_or_max",
    "get_band_position",
    "mid_point",
]

ZeroOrMinOrMax = Literal["zeroOrMin", "zeroOrMax"]

DefaultRef = ValueRef | Callable[[], ValueRef | None] | None


def width_height_value_or_signal_ref(channel: str, value: Any) -> ValueRef:
    """`"width"`/`"height"` on x/y refer to the group size; anything else is a literal or signal."""
    if channel in ("x", "x2") and value == "width":
        return {"field": {"group": "width"}}
    if channel in ("y", "y2") and value == "height":
        return {"field": {"group": "height"}}
    return signal_or_value_ref(value)


def value_ref_for_field_or_datum_def(
    channel_def: Mapping[str, Any] | FieldDef,
    scale_name: str | None,
    *,
    bin_suffix: str | None = None,
    offset: Any = None,
) -> ValueRef:
    ref: ValueRef = {}
    if scale_name:
        ref["scale"] = scale_name
    if is_datum_def(channel_def):
        datum = channel_def["datum"]  # type: ignore[index]
        if is_signal_ref(datum):
            ref["signal"] = datum["signal"]
        elif is_expr_ref(datum):
            ref["signal"] = datum["expr"]
        else:
            ref["value"] = datum
    else:
        fd = get_field_def(channel_def)
        if fd is None:
            raise InvariantViolation(messages.value_ref_needs_field_or_datum(channel_def))
        ref["field"] = vg_field(fd, bin_suffix=bin_suffix)
    if offset:
        ref["offset"] = offset
    return ref


def interpolated_signal_ref(
    *,
    scale_name: str | None,
    field_def: FieldDef,
    band_position: float = 0.5,
    offset: Any = None,
) -> ValueRef:
    """Position between a bin's start and end, e.g. the bin center for 0.5."""
    expr = "datum" if 0 < band_position < 1 else None
    start = vg_field(field_def, expr=expr)
    end = vg_field(field_def, bin_suffix="end", expr=expr)
    ref: ValueRef = {}
    if band_position in (0, 1):
        ref["scale"] = scale_name
        ref["field"] = start if band_position == 0 else end
    else:
        weight = format_number(band_position)
        datum = f"{format_number(1 - band_position)} * {start} + {weight} * {end}"
        ref["signal"] = f'scale("{scale_name}", {datum})'
    if offset:
        ref["offset"] = offset
    return ref


def scaled_zero_or_min_or_max(
    *,
    scale_name: str | None,
    scale: ScaleComponent | None,
    mode: ZeroOrMinOrMax,
) -> ValueRef | None:
    """
    Zero through the scale, or the domain min/max when zero may be outside the domain.

    Returns:
        ValueRef | None: None when there is no scale.
    """
    if scale is None or not scale_name:
        return None
    domain = f"domain('{scale_name}')"
    edge = f"{domain}[0]" if mode == "zeroOrMin" else f"peek({domain})"
    match scale.domain_has_zero():
        case "definitely":
            return {"scale": scale_name, "value": 0}
        case "maybe":
            return {"signal": f"scale('{scale_name}', inrange(0, {domain}) ? 0 : {edge})"}
        case _:
            return {"signal": f"scale('{scale_name}', {edge})"}


def get_band_position(
    field_def: FieldDef, mark_def: Mapping[str, Any], config: Config
) -> float | None:
    explicit = (field_def.model_extra or {}).get("bandPosition")
    if explicit is not None:
        return explicit
    if field_def.time_unit:
        return get_mark_config("timeUnitBandPosition", mark_def, config)
    if is_binning(field_def.bin):
        return 0.5
    return None


def mid_point(
    *,
    channel: str,
    channel_def: Any,
    scale_name: str | None,
    scale: ScaleComponent | None,
    mark_def: Mapping[str, Any],
    config: Config,
    default_ref: DefaultRef = None,
    band_position: float | None = None,
    offset: Any = None,
) -> ValueRef | None:
    """
    Reference for the center value of a channel.

    Args:
        channel (str): Channel being encoded.
        channel_def: Field, datum or value def; a condition-only def (or None)
            falls back to `default_ref`.
        scale_name (str | None): Scale of the channel, if any.
        scale (ScaleComponent | None): Scale component of the channel, if any.
        mark_def (Mapping): Mark definition.
        config (Config): Compiler config.
        default_ref: Fallback reference, or a callable producing one lazily.
        band_position (float | None): Position inside a bin/time-unit band.
        offset: Optional offset copied onto the reference.

    Returns:
        ValueRef | None: The reference, or None when nothing defines the channel.
    """
    if channel_def is not None:
        if is_field_def(channel_def) or is_datum_def(channel_def):
            scale_type = scale.type if scale is not None else None
            fd = get_field_def(channel_def)
            if fd is not None and fd.type is not None:
                if band_position is None:
                    band_position = get_band_position(fd, mark_def, config)
                if is_binning(fd.bin) or (
                    band_position and fd.time_unit and fd.type is FieldType.TEMPORAL
                ):
                    if band_position and not has_discrete_domain(scale_type):
                        return interpolated_signal_ref(
                            scale_name=scale_name,
                            field_def=fd,
                            band_position=band_position,
                            offset=offset,
                        )
                    return value_ref_for_field_or_datum_def(
                        fd,
                        scale_name,
                        bin_suffix="range" if bin_requires_range(fd, channel) else None,
                        offset=offset,
                    )
            return value_ref_for_field_or_datum_def(
                channel_def,
                scale_name,
                bin_suffix="range" if has_discrete_domain(scale_type) else None,
                offset=offset,
            )
        if is_value_def(channel_def):
            ref: JsonDict = width_height_value_or_signal_ref(channel, channel_def["value"])
            if offset:
                ref["offset"] = offset
            return ref

    if callable(default_ref):
        default_ref = default_ref()
    if default_ref:
        return {**default_ref, **({"offset": offset} if offset else {})}
    return default_ref
