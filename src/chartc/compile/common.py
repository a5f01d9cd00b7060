"""
Mark property / config lookup and value-reference helpers shared by compile steps.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from chartc.channeldef import is_expr_ref, is_signal_ref
from chartc.config import Config
from chartc.core.typing import JsonDict, ValueRef

__all__ = [
    "get_mark_config",
    "get_mark_prop_or_config",
    "signal_or_value_ref",
]

_MISSING: Final = object()


def _lookup(block: Mapping[str, Any], key: str | None) -> Any:
    if key is None:
        return _MISSING
    return block.get(key, _MISSING)


def get_mark_config(
    channel: str,
    mark_def: Mapping[str, Any],
    config: Config,
    *,
    vg_channel: str | None = None,
) -> Any:
    """
    Config value of a mark property: per-mark block first, then `config.mark`.

    Returns None when no config level defines the property.
    """
    candidates = (
        (config.mark_config(mark_def["type"]), vg_channel),
        (config.mark_config(mark_def["type"]), channel),
        (config.mark.model_dump(), vg_channel or channel),
    )
    for block, key in candidates:
        value = _lookup(block, key)
        if value is not _MISSING:
            return value
    return None


def get_mark_prop_or_config(
    channel: str,
    mark_def: Mapping[str, Any],
    config: Config,
    *,
    vg_channel: str | None = None,
    ignore_vg_config: bool = False,
) -> Any:
    """
    Value of a mark property from the mark definition, falling back to config.

    Args:
        channel (str): Property / channel name (e.g. "size", "invalid").
        mark_def (Mapping): Mark definition with at least `type`.
        config (Config): Compiler config.
        vg_channel (str | None): Renderer channel name when it differs
            (e.g. "fill" for "color").
        ignore_vg_config (bool): Return None instead of a config default when the
            property name is the renderer's own; the renderer applies its config itself.

    Returns:
        Any: Mark value, config value, or None when neither defines it. An explicit
        null in the mark definition is returned as None.
    """
    if vg_channel and vg_channel in mark_def:
        return mark_def[vg_channel]
    if channel in mark_def:
        return mark_def[channel]
    if ignore_vg_config and (vg_channel is None or vg_channel == channel):
        return None
    return get_mark_config(channel, mark_def, config, vg_channel=vg_channel)


def signal_or_value_ref(value: Any) -> ValueRef:
    """Wrap a literal as `{"value": v}`; signal and expr refs become `{"signal": ...}`."""
    if is_expr_ref(value):
        return {"signal": value["expr"]}
    if is_signal_ref(value):
        out: JsonDict = {"signal": value["signal"]}
        return out
    return {"value": value}
