"""
Conditional encode entries.

`wrap_condition` turns a channel definition with `condition` into an ordered list of
value refs the renderer evaluates top to bottom: per-datum test conditions, then the
invalid-value override, then the main reference.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from chartc.channeldef import is_conditional_def
from chartc.core import messages
from chartc.core.typing import JsonDict, ValueRef
from chartc.expr import predicate_expression

__all__ = ["wrap_condition"]

logger = logging.getLogger(__name__)


def _conditions(channel_def: Any) -> list[Mapping[str, Any]]:
    if not is_conditional_def(channel_def):
        return []
    condition = channel_def["condition"]
    return list(condition) if isinstance(condition, list) else [condition]


def wrap_condition(
    *,
    channel_def: Any,
    vg_channel: str,
    main_ref_fn: Callable[[Any], ValueRef | None],
    invalid_value_ref: ValueRef | None = None,
) -> JsonDict:
    """
    Encode entry `{vg_channel: ref}` or `{vg_channel: [refs...]}` for a channel.

    Args:
        channel_def: Channel definition, possibly carrying `condition`.
        vg_channel (str): Renderer property name to emit.
        main_ref_fn: Builds a value ref from a (condition or main) definition.
        invalid_value_ref: Ref substituting invalid values, placed after the
            per-datum conditions and before the main ref.

    Returns:
        JsonDict: Empty when no reference is defined.

    Notes:
        Parameter (selection) conditions are not supported; they are logged as a
        warning and dropped.
    """
    value_refs: list[ValueRef] = []
    for c in _conditions(channel_def):
        if "param" in c:
            logger.warning(messages.selection_condition_not_supported(vg_channel))
            continue
        ref = main_ref_fn(c)
        value_refs.append({"test": predicate_expression(c["test"]), **(ref or {})})

    if invalid_value_ref is not None:
        value_refs.append(invalid_value_ref)

    main_ref = main_ref_fn(channel_def)
    if main_ref is not None:
        value_refs.append(main_ref)

    if len(value_refs) > 1 or (len(value_refs) == 1 and value_refs[0].get("test")):
        return {vg_channel: value_refs}
    if len(value_refs) == 1:
        return {vg_channel: value_refs[0]}
    return {}
