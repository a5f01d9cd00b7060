"""
Encode blocks for guides (axes and legends).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from chartc.compile.common import signal_or_value_ref
from chartc.compile.encode.conditional import wrap_condition
from chartc.core.typing import JsonDict, ValueRef

if TYPE_CHECKING:
    from chartc.compile.model import UnitModel

__all__ = ["guide_encode_entry"]


def _value_ref(channel_def: Any) -> ValueRef | None:
    if isinstance(channel_def, Mapping) and "value" in channel_def:
        return signal_or_value_ref(channel_def["value"])
    return None


def guide_encode_entry(encoding: Mapping[str, Any], model: UnitModel | None = None) -> JsonDict:
    """
    Encode entry for guide properties given as value defs, conditions included.

    Guides never show invalid values, so no invalid-value override is added.
    `model` is accepted for parity with mark encoders and is currently unused.

    Examples:
        >>> guide_encode_entry({"fill": {"condition": {"test": "datum.value > 0", "value": "red"},
        ...                              "value": "black"}})
        {'fill': [{'test': 'datum.value > 0', 'value': 'red'}, {'value': 'black'}]}
    """
    encode: JsonDict = {}
    for channel, channel_def in encoding.items():
        encode.update(
            wrap_condition(channel_def=channel_def, vg_channel=channel, main_ref_fn=_value_ref)
        )
    return encode
