"""
Typed channel definitions and derived field naming.

A channel definition is what an encoding maps a visual channel to: a field def
(`{"field": "a", "type": "quantitative"}`), a value def (`{"value": 3}`), a datum
def (`{"datum": 0}`), or any of those wrapped with a `condition`. Specs carry them
as JSON-like mappings; compilation reads field defs through the immutable
`FieldDef` model.

Responsibilities
- `FieldDef` — frozen pydantic model; `type` is the closed `FieldType` variant.
- Classification helpers (`is_field_def`, `is_value_def`, `is_conditional_def`, …).
- `vg_field` — derived output field name for aggregated/binned/time-unit fields,
  optionally as a `datum[...]` accessor.
- Default verbal titles and string field defs for synthesized tooltips.

Style
- Zero-IO (stdlib + pydantic only).

Examples
--------
>>> from chartc.channeldef import FieldDef, vg_field
>>> fd = FieldDef(field="price", type="Q", aggregate="mean")
>>> vg_field(fd)
'mean_price'
>>> vg_field(fd, expr="datum")
'datum["mean_price"]'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chartc.core.constants import COUNT_FIELD, COUNT_TITLE
from chartc.core.grammar import FieldType, field_type_from_value, time_unit_parts
from chartc.core.typing import ChannelDef, Encoding, JsonDict
from chartc.expr import flat_access_with_datum, remove_path_from_field, replace_path_in_field

__all__ = [
    "FieldDef",
    "is_field_def",
    "is_value_def",
    "is_datum_def",
    "is_conditional_def",
    "is_signal_ref",
    "is_expr_ref",
    "is_binning",
    "get_field_def",
    "bin_to_string",
    "vg_field",
    "default_title",
    "title",
    "to_string_field_def",
    "field_defs",
]


class FieldDef(BaseModel):
    """
    One data field bound to a channel.

    Attributes:
        field (str | None): Field name or access path. Only `count` may omit it.
        type (FieldType | None): Semantic type. None only before encoding normalization.
        aggregate (str | dict | None): Aggregate op (or argmin/argmax mapping).
        bin (bool | dict | str | None): Bin params, True, or "binned" for pre-binned data.
        time_unit (str | dict | None): Time unit, serialized as `timeUnit`.
        title (Any): Explicit title; None means "use the default title".

    Notes:
        Extra keys (`scale`, `axis`, `legend`, `condition`, `format`, …) are kept
        verbatim. Instances are frozen; derive new defs with `model_copy(update=...)`.

    Raises:
        pydantic.ValidationError: If `type` is not a known type token.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    field: str | None = None
    type: FieldType | None = None
    aggregate: str | dict[str, Any] | None = None
    bin: bool | dict[str, Any] | str | None = None
    time_unit: str | dict[str, Any] | None = Field(default=None, alias="timeUnit")
    title: Any = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        if v is None:
            return None
        return field_type_from_value(v)

    def to_dict(self) -> JsonDict:
        """JSON form with aliases (`timeUnit`) and without unset/None keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def is_field_def(channel_def: ChannelDef) -> bool:
    if isinstance(channel_def, FieldDef):
        return True
    return isinstance(channel_def, Mapping) and (
        "field" in channel_def or channel_def.get("aggregate") == "count"
    )


def is_value_def(channel_def: ChannelDef) -> bool:
    return isinstance(channel_def, Mapping) and "value" in channel_def


def is_datum_def(channel_def: ChannelDef) -> bool:
    return isinstance(channel_def, Mapping) and "datum" in channel_def


def is_conditional_def(channel_def: ChannelDef) -> bool:
    if isinstance(channel_def, FieldDef):
        return (channel_def.model_extra or {}).get("condition") is not None
    return isinstance(channel_def, Mapping) and channel_def.get("condition") is not None


def is_signal_ref(value: Any) -> bool:
    return isinstance(value, Mapping) and "signal" in value


def is_expr_ref(value: Any) -> bool:
    return isinstance(value, Mapping) and "expr" in value


def is_binning(bin_: Any) -> bool:
    """True for bin params that ask the compiler to bin (not for pre-binned data)."""
    return bin_ is True or isinstance(bin_, Mapping)


def get_field_def(channel_def: ChannelDef) -> FieldDef | None:
    """Read a channel definition as a FieldDef, or None when it is not a field def."""
    if isinstance(channel_def, FieldDef):
        return channel_def
    if is_field_def(channel_def):
        return FieldDef.model_validate(dict(channel_def))
    return None


def _var_name(s: str) -> str:
    alnum = re.sub(r"\W", "_", s)
    return ("_" if re.match(r"^\d", s) else "") + alnum


def bin_to_string(bin_: bool | Mapping[str, Any]) -> str:
    """
    Encode bin params into a field-name fragment.

    Examples:
        >>> bin_to_string({"maxbins": 10})
        'bin_maxbins_10'
        >>> bin_to_string(True)
        'bin'
    """
    if not isinstance(bin_, Mapping):
        return "bin"
    return "bin" + "".join(_var_name(f"_{k}_{v}") for k, v in bin_.items())


def _time_unit_name(time_unit: str | Mapping[str, Any]) -> str | None:
    if isinstance(time_unit, Mapping):
        unit = time_unit.get("unit")
        return f"utc{unit}" if time_unit.get("utc") and unit else unit
    return time_unit


def vg_field(
    fd: FieldDef,
    *,
    expr: str | None = None,
    bin_suffix: str | None = None,
    for_as: bool = False,
    nofn: bool = False,
) -> str:
    """
    Derived field name of a field def as the renderer sees it.

    Args:
        fd (FieldDef): Field definition.
        expr (str | None): When set (e.g. "datum"), return an accessor expression.
        bin_suffix (str | None): "end", "range" or "mid" suffix for binned fields.
        for_as (bool): Return the flattened name used as an `as` output.
        nofn (bool): Ignore aggregate/bin/time-unit prefixes.

    Returns:
        str: Field name, flattened output name, or accessor expression.
    """
    field = fd.field or ""
    suffix: str | None = None
    if fd.aggregate == "count":
        field = COUNT_FIELD
    elif not nofn:
        fn: str | None = None
        if is_binning(fd.bin):
            fn = bin_to_string(fd.bin)  # type: ignore[arg-type]
            suffix = bin_suffix
        elif isinstance(fd.aggregate, str):
            fn = fd.aggregate
        elif fd.time_unit:
            fn = _time_unit_name(fd.time_unit)
        if fn:
            field = f"{fn}_{field}" if field else fn
    if suffix:
        field = f"{field}_{suffix}"
    if for_as:
        return remove_path_from_field(field)
    if expr:
        return flat_access_with_datum(field, expr)
    return replace_path_in_field(field)


def default_title(fd: FieldDef, count_title: str = COUNT_TITLE) -> str:
    """
    Verbal default title, e.g. "Mean of price", "price (binned)", "date (year-month)".
    """
    field = fd.field or ""
    if fd.aggregate == "count":
        return count_title
    if is_binning(fd.bin):
        return f"{field} (binned)"
    if fd.time_unit:
        unit = _time_unit_name(fd.time_unit)
        parts = time_unit_parts(unit) if unit else []
        if parts:
            return f"{field} ({'-'.join(parts)})"
    if isinstance(fd.aggregate, str):
        return f"{fd.aggregate[:1].upper()}{fd.aggregate[1:]} of {field}"
    return field


def title(fd: FieldDef, count_title: str = COUNT_TITLE) -> Any:
    return fd.title if fd.title is not None else default_title(fd, count_title)


# Keys a string field def (tooltip, text) does not accept.
_NON_STRING_KEYS = (
    "aggregate",
    "bin",
    "timeUnit",
    "condition",
    "axis",
    "legend",
    "header",
    "scale",
    "sort",
)


def to_string_field_def(fd: FieldDef) -> JsonDict:
    """Field def that reads the derived field directly (no aggregate/bin/time unit)."""
    out = fd.to_dict()
    for key in _NON_STRING_KEYS:
        out.pop(key, None)
    out["field"] = vg_field(fd)
    return out


def field_defs(encoding: Encoding) -> list[FieldDef]:
    """All field defs of an encoding, including array entries and conditional field defs."""
    out: list[FieldDef] = []
    for channel_def in encoding.values():
        defs = channel_def if isinstance(channel_def, list) else [channel_def]
        for d in defs:
            fd = get_field_def(d)
            if fd is not None:
                out.append(fd)
            elif isinstance(d, Mapping) and is_field_def(d.get("condition")):
                out.append(FieldDef.model_validate(dict(d["condition"])))
    return out
