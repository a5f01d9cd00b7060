"""
Unit model and scale components consumed by dataflow nodes and channel resolvers.

The model contract the compiler reads is small: `mark_def`, `encoding`, `config`,
`get_scale_component(channel)`, `scale_name(channel)` and `reduce_field_def`.
`UnitModel` implements it for a single-view spec. Scale types are resolved from
explicit `scale.type` or field-type defaults; scale domains are left to the
renderer.

Examples:
    >>> m = UnitModel({"mark": "point", "encoding": {"y": "value:Q", "x": "cat:N"}})
    >>> m.get_scale_component("y").type
    'linear'
    >>> m.get_scale_component("x").type
    'point'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

from chartc.channeldef import FieldDef, get_field_def, is_binning, is_datum_def, is_field_def
from chartc.config import Config
from chartc.core.errors import SpecError
from chartc.core.grammar import FieldType, has_continuous_domain, is_scale_channel, is_xor_y
from chartc.core.typing import Encoding, JsonDict
from chartc.encoding import normalize_encoding

__all__ = [
    "ScaleComponent",
    "UnitModel",
]

T = TypeVar("T")

DomainHasZero = Literal["definitely", "maybe", "definitely-not"]

_BAND_MARKS = frozenset({"bar", "rect", "image", "arc"})
_ZERO_CHANNELS = frozenset({"x", "y", "size", "theta", "radius"})
_ZERO_SCALE_TYPES = frozenset({"linear", "pow", "sqrt", "symlog"})


@dataclass(frozen=True, slots=True)
class ScaleComponent:
    """
    Resolved scale of one channel.

    Attributes:
        name (str): Scale name referenced by value refs.
        type (str): Scale type ("linear", "time", "point", …).
        zero (bool): Whether the domain is forced to include zero.
        domain (tuple | None): Explicit literal domain, if any.
    """

    name: str
    type: str
    zero: bool = False
    domain: tuple[Any, ...] | None = None

    def get(self, prop: str) -> Any:
        return getattr(self, prop, None)

    def domain_has_zero(self) -> DomainHasZero:
        """Whether zero is inside the domain, as far as the compiler can tell."""
        if not has_continuous_domain(self.type):
            return "definitely-not"
        if self.domain is not None:
            numbers = [d for d in self.domain if isinstance(d, (int, float))]
            if len(numbers) == len(self.domain) and numbers:
                return "definitely" if min(numbers) <= 0 <= max(numbers) else "definitely-not"
            return "maybe"
        return "definitely" if self.zero else "maybe"


def _default_scale_type(channel: str, fd: FieldDef | None, datum: Any, mark: str) -> str:
    if fd is None:
        return "linear" if isinstance(datum, (int, float)) else "ordinal"
    match fd.type:
        case FieldType.NOMINAL | FieldType.ORDINAL:
            if channel in ("x", "y", "xOffset", "yOffset"):
                return "band" if mark in _BAND_MARKS else "point"
            return "ordinal"
        case FieldType.TEMPORAL:
            return "time"
        case FieldType.QUANTITATIVE:
            if is_binning(fd.bin) and not is_xor_y(channel):
                return "bin-ordinal"
            return "linear"
        case _:
            raise SpecError(f"Field def on channel {channel!r} has no type")


class UnitModel:
    """
    Single-view model: one mark, one encoding, its scales.

    Args:
        spec (Mapping): Unit spec with `mark` and `encoding`.
        config (Config | None): Compiler config; defaults to `Config()`.
        name (str): Prefix for scale names (empty for a top-level view).
    """

    def __init__(self, spec: Mapping[str, Any], config: Config | None = None, name: str = ""):
        mark = spec.get("mark")
        if mark is None:
            raise SpecError("Unit spec requires a mark")
        self.name = name
        self.config = config or Config()
        self.mark_def: JsonDict = dict(mark) if isinstance(mark, Mapping) else {"type": mark}
        self.encoding: Encoding = normalize_encoding(spec.get("encoding"))
        self._scales: dict[str, ScaleComponent] = {}
        for channel, channel_def in self.encoding.items():
            if not is_scale_channel(channel) or isinstance(channel_def, list):
                continue
            scale = self._init_scale(channel, channel_def)
            if scale is not None:
                self._scales[channel] = scale

    @property
    def mark(self) -> str:
        return self.mark_def["type"]

    def _init_scale(self, channel: str, channel_def: Mapping[str, Any]) -> ScaleComponent | None:
        if not (is_field_def(channel_def) or is_datum_def(channel_def)):
            # A value def with a conditional field def scales the condition's field.
            condition = channel_def.get("condition")
            if not is_field_def(condition):
                return None
            channel_def = condition
        if "scale" in channel_def and channel_def["scale"] is None:
            return None
        scale_def = channel_def.get("scale") or {}
        fd = get_field_def(channel_def)
        scale_type = scale_def.get("type") or _default_scale_type(
            channel, fd, channel_def.get("datum"), self.mark
        )
        domain = scale_def.get("domain")
        zero = scale_def.get("zero")
        if zero is None:
            zero = (
                fd is not None
                and fd.type is FieldType.QUANTITATIVE
                and not is_binning(fd.bin)
                and domain is None
                and channel in _ZERO_CHANNELS
                and scale_type in _ZERO_SCALE_TYPES
            )
        return ScaleComponent(
            name=self._name(channel),
            type=scale_type,
            zero=bool(zero),
            domain=tuple(domain) if isinstance(domain, list) else None,
        )

    def _name(self, channel: str) -> str:
        return f"{self.name}_{channel}" if self.name else channel

    def scale_name(self, channel: str) -> str | None:
        """Name of the channel's scale, or None when the channel has no scale."""
        scale = self._scales.get(channel)
        return scale.name if scale is not None else None

    def get_scale_component(self, channel: str) -> ScaleComponent | None:
        return self._scales.get(channel)

    def channel_has_field(self, channel: str) -> bool:
        channel_def = self.encoding.get(channel)
        if isinstance(channel_def, list):
            return any(is_field_def(d) for d in channel_def)
        return is_field_def(channel_def)

    def reduce_field_def(self, f: Callable[[T, FieldDef, str], T], init: T) -> T:
        """
        Fold over every field def in the encoding (array entries and conditional
        field defs included), in channel order.
        """
        acc = init
        for channel, channel_def in self.encoding.items():
            defs = channel_def if isinstance(channel_def, list) else [channel_def]
            for d in defs:
                fd = get_field_def(d)
                if fd is None and isinstance(d, Mapping) and is_field_def(d.get("condition")):
                    fd = get_field_def(d["condition"])
                if fd is not None:
                    acc = f(acc, fd, channel)
        return acc
