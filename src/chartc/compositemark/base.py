"""
Composite mark normalizer type.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from chartc.config import Config
from chartc.core.typing import JsonDict

__all__ = ["NormalizeFn", "CompositeMarkNormalizer", "get_mark_type"]

NormalizeFn = Callable[[Mapping[str, Any], Config], JsonDict]


def get_mark_type(mark: Any) -> str | None:
    if isinstance(mark, Mapping):
        return mark.get("type")
    return mark if isinstance(mark, str) else None


@dataclass(frozen=True, slots=True)
class CompositeMarkNormalizer:
    """
    Expands one composite mark type into layered primitive marks.

    Attributes:
        name (str): Composite mark type handled, e.g. "boxplot".
        run (NormalizeFn): `(spec, config) -> expanded spec`.
    """

    name: str
    run: NormalizeFn

    def has_matching_type(self, spec: Mapping[str, Any]) -> bool:
        """True for unit specs whose mark type is this normalizer's mark."""
        if "mark" not in spec:
            return False
        return get_mark_type(spec["mark"]) == self.name
