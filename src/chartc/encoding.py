"""
Encoding normalization and transform extraction.

Responsibilities
- `normalize_encoding` — resolve shorthand strings (`"mean(price):Q"`) through
  altair's shorthand parser, infer missing field types, expand `bin: true`, and
  drop empty channel definitions.
- `extract_transforms_from_encoding` — lift aggregate/bin/time-unit definitions out
  of an encoding into explicit transforms, rewriting the channels to read the
  derived fields. Composite marks use this to group by binned or time-derived fields.

Notes:
    Input encodings are never mutated; outputs are new mappings. Channel insertion
    order is preserved.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from altair.utils import parse_shorthand

from chartc.channeldef import (
    FieldDef,
    get_field_def,
    is_binning,
    is_field_def,
    title,
    vg_field,
)
from chartc.core import messages
from chartc.core.constants import COUNT_TITLE, DEFAULT_MAXBINS, DEFAULT_NONPOSITION_MAXBINS
from chartc.core.errors import SpecError
from chartc.core.grammar import (
    FieldType,
    SECONDARY_RANGE_CHANNELS,
    field_type_from_value,
    is_non_position_scale_channel,
    is_scale_channel,
    is_xor_y,
)
from chartc.core.typing import ChannelDef, Encoding, JsonDict

if TYPE_CHECKING:
    from chartc.config import Config

__all__ = [
    "normalize_encoding",
    "default_type",
    "ExtractedTransforms",
    "extract_transforms_from_encoding",
    "bin_requires_range",
]

logger = logging.getLogger(__name__)


# ============================================================================
# Normalization
# ============================================================================


def default_type(fd: Mapping[str, Any], channel: str) -> FieldType:
    """Type inferred for a field def that does not declare one."""
    if fd.get("timeUnit"):
        return FieldType.TEMPORAL
    if is_binning(fd.get("bin")):
        return FieldType.QUANTITATIVE
    aggregate = fd.get("aggregate")
    if isinstance(aggregate, str):
        return FieldType.QUANTITATIVE
    if channel in ("latitude", "longitude", "latitude2", "longitude2"):
        return FieldType.QUANTITATIVE
    return FieldType.NOMINAL


def _parse_shorthand(shorthand: str) -> JsonDict:
    parsed = parse_shorthand(shorthand)
    if not parsed:
        raise SpecError(f"Cannot parse encoding shorthand {shorthand!r}")
    return dict(parsed)


def _init_field_def(channel: str, fd: Mapping[str, Any]) -> JsonDict:
    out = dict(fd)
    if out.get("type") is None:
        out["type"] = default_type(out, channel).value
    else:
        try:
            out["type"] = field_type_from_value(out["type"]).value
        except ValueError as exc:
            raise SpecError(f"Invalid type for channel {channel!r}: {exc}") from exc
    if out.get("bin") is True:
        maxbins = (
            DEFAULT_NONPOSITION_MAXBINS
            if is_non_position_scale_channel(channel)
            else DEFAULT_MAXBINS
        )
        out["bin"] = {"maxbins": maxbins}
    return out


def _init_channel_def(channel: str, channel_def: Any) -> JsonDict | None:
    if isinstance(channel_def, FieldDef):
        channel_def = channel_def.to_dict()
    if isinstance(channel_def, str):
        channel_def = _parse_shorthand(channel_def)
    if not isinstance(channel_def, Mapping):
        raise SpecError(f"Invalid definition for channel {channel!r}: {channel_def!r}")

    d = dict(channel_def)
    shorthand = d.pop("shorthand", None)
    if isinstance(shorthand, str):
        d = {**_parse_shorthand(shorthand), **d}

    if is_field_def(d):
        return _init_field_def(channel, d)

    condition = d.get("condition")
    if isinstance(condition, list):
        d["condition"] = [
            _init_field_def(channel, c) if is_field_def(c) else dict(c) for c in condition
        ]
    elif is_field_def(condition):
        d["condition"] = _init_field_def(channel, condition)

    if any(k in d for k in ("value", "datum", "condition")):
        return d
    logger.warning(messages.empty_field_def(channel))
    return None


def normalize_encoding(encoding: Encoding | None) -> Encoding:
    """
    Return a normalized copy of an encoding.

    Args:
        encoding (Encoding | None): Raw encoding; values may be shorthand strings,
            mappings, FieldDef instances, or lists of those.

    Returns:
        Encoding: New mapping with typed field defs (`type` set to a full type name)
        and empty definitions removed.

    Raises:
        SpecError: If a definition cannot be parsed or has an unknown type.
    """
    out: Encoding = {}
    for channel, channel_def in (encoding or {}).items():
        if channel_def is None:
            continue
        if isinstance(channel_def, list):
            defs = [_init_channel_def(channel, d) for d in channel_def]
            kept = [d for d in defs if d is not None]
            if kept:
                out[channel] = kept
            continue
        init = _init_channel_def(channel, channel_def)
        if init is not None:
            out[channel] = init
    return out


# ============================================================================
# Transform extraction
# ============================================================================


@dataclass(slots=True)
class ExtractedTransforms:
    """Transforms lifted out of an encoding, plus the rewritten encoding."""

    bins: list[JsonDict] = field(default_factory=list)
    time_units: list[JsonDict] = field(default_factory=list)
    aggregate: list[JsonDict] = field(default_factory=list)
    groupby: list[str] = field(default_factory=list)
    encoding: Encoding = field(default_factory=dict)

    def add_groupby(self, name: str) -> None:
        if name not in self.groupby:
            self.groupby.append(name)


def bin_requires_range(fd: FieldDef, channel: str) -> bool:
    """Discrete binned scales label bins with a "start – end" range field."""
    if not is_binning(fd.bin):
        return False
    return is_scale_channel(channel) and fd.type in (FieldType.ORDINAL, FieldType.NOMINAL)


def _guide_title_defined(d: Mapping[str, Any]) -> bool:
    for key in ("axis", "legend", "header"):
        guide = d.get(key)
        if isinstance(guide, Mapping) and guide.get("title") is not None:
            return True
    return False


def _extract_channel_def(
    channel: str,
    channel_def: ChannelDef,
    acc: ExtractedTransforms,
    count_title: str,
) -> ChannelDef:
    fd = get_field_def(channel_def) if not isinstance(channel_def, list) else None
    if fd is None:
        return channel_def

    raw = fd.to_dict()
    if not (fd.aggregate or fd.time_unit or is_binning(fd.bin)):
        if fd.field:
            acc.add_groupby(fd.field)
        return channel_def

    remaining = {k: v for k, v in raw.items() if k not in ("field", "aggregate", "bin", "timeUnit")}
    new_field = vg_field(fd, for_as=True)
    new_def: JsonDict = {}
    if not _guide_title_defined(raw):
        new_def["title"] = title(fd, count_title)
    new_def.update(remaining)
    new_def["field"] = new_field

    if fd.aggregate:
        aggregate = fd.aggregate
        if isinstance(aggregate, Mapping):
            op = "argmax" if "argmax" in aggregate else "argmin"
            arg_field = aggregate[op]
            new_field = vg_field(FieldDef(field=arg_field, aggregate=op), for_as=True)
            new_def["field"] = f"{new_field}.{fd.field}"
            acc.aggregate.append({"op": op, "field": arg_field, "as": new_field})
        else:
            agg: JsonDict = {"op": aggregate, "as": new_field}
            if fd.field:
                agg["field"] = fd.field
            acc.aggregate.append(agg)
    elif is_binning(fd.bin):
        acc.add_groupby(new_field)
        acc.bins.append({"bin": fd.bin, "field": fd.field, "as": new_field})
        acc.add_groupby(vg_field(fd, bin_suffix="end", for_as=True))
        if bin_requires_range(fd, channel):
            acc.add_groupby(vg_field(fd, bin_suffix="range", for_as=True))
        if is_xor_y(channel):
            acc.encoding[f"{channel}2"] = {"field": f"{new_field}_end"}
        new_def["bin"] = "binned"
        if channel not in SECONDARY_RANGE_CHANNELS:
            new_def["type"] = FieldType.QUANTITATIVE.value
    else:
        acc.add_groupby(new_field)
        acc.time_units.append({"timeUnit": fd.time_unit, "field": fd.field, "as": new_field})
        if fd.type is not FieldType.TEMPORAL:
            if channel in ("text", "tooltip"):
                new_def["formatType"] = "time"
            elif is_non_position_scale_channel(channel):
                new_def["legend"] = {"formatType": "time", **(new_def.get("legend") or {})}
            elif is_xor_y(channel):
                new_def["axis"] = {"formatType": "time", **(new_def.get("axis") or {})}
    return new_def


def extract_transforms_from_encoding(
    old_encoding: Encoding, config: Config | None = None
) -> ExtractedTransforms:
    """
    Lift aggregate/bin/time-unit channel definitions into explicit transforms.

    Args:
        old_encoding (Encoding): Normalized encoding (see `normalize_encoding`).
        config (Config | None): Supplies the count title for derived titles.

    Returns:
        ExtractedTransforms: `bins`, `time_units`, `aggregate` (ops with `as`),
        `groupby` (plain and derived grouping fields, de-duplicated in order),
        and the rewritten `encoding`.

    Examples:
        >>> out = extract_transforms_from_encoding(
        ...     {"x": {"field": "date", "type": "temporal", "timeUnit": "month"}}
        ... )
        >>> out.time_units
        [{'timeUnit': 'month', 'field': 'date', 'as': 'month_date'}]
        >>> out.groupby
        ['month_date']
    """
    count_title = getattr(config, "count_title", None) or COUNT_TITLE
    acc = ExtractedTransforms()
    for channel, channel_def in old_encoding.items():
        if isinstance(channel_def, list):
            acc.encoding[channel] = [
                _extract_channel_def(channel, d, acc, count_title) for d in channel_def
            ]
        else:
            acc.encoding[channel] = _extract_channel_def(channel, channel_def, acc, count_title)
    return acc
