"""
Composite marks: registry and dispatch.

Composite marks (`boxplot`, `errorbar`) are high-level mark types that expand into
layers of primitive marks. Each registers a normalizer and the names of its parts;
`normalize` expands a spec whose mark is registered and returns any other spec
unchanged.

Examples:
    >>> from chartc.compositemark import get_all_composite_marks, normalize
    >>> get_all_composite_marks()
    ['boxplot', 'errorbar']
    >>> normalize({"mark": "point", "encoding": {}})
    {'mark': 'point', 'encoding': {}}
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from chartc.compositemark.base import CompositeMarkNormalizer, NormalizeFn
from chartc.compositemark.boxplot import BOXPLOT, BOXPLOT_PARTS, normalize_boxplot
from chartc.compositemark.errorbar import ERRORBAR, ERRORBAR_PARTS, normalize_errorbar
from chartc.config import Config
from chartc.core.typing import JsonDict

__all__ = [
    "CompositeMarkNormalizer",
    "add",
    "remove",
    "get_all_composite_marks",
    "get_composite_mark_parts",
    "normalize",
    "normalize_boxplot",
    "normalize_errorbar",
]


@dataclass(frozen=True, slots=True)
class _Registration:
    normalizer: CompositeMarkNormalizer
    parts: tuple[str, ...]


_registry: dict[str, _Registration] = {}


def add(mark: str, run: NormalizeFn, parts: Sequence[str]) -> None:
    """Register (or replace) the normalizer of a composite mark type."""
    _registry[mark] = _Registration(CompositeMarkNormalizer(mark, run), tuple(parts))


def remove(mark: str) -> None:
    _registry.pop(mark, None)


def get_all_composite_marks() -> list[str]:
    return list(_registry)


def get_composite_mark_parts(mark: str) -> tuple[str, ...]:
    registration = _registry.get(mark)
    return registration.parts if registration is not None else ()


def normalize(
    spec: Mapping[str, Any], config: Config | None = None
) -> JsonDict | Mapping[str, Any]:
    """
    Expand `spec` when its mark is a registered composite mark.

    Returns:
        The expanded spec, or `spec` itself (not a copy) for any other mark.
    """
    for registration in _registry.values():
        if registration.normalizer.has_matching_type(spec):
            return registration.normalizer.run(spec, config or Config())
    return spec


add(BOXPLOT, normalize_boxplot, BOXPLOT_PARTS)
add(ERRORBAR, normalize_errorbar, ERRORBAR_PARTS)
