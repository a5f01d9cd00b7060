"""
Lightweight typing aliases used across normalization and compilation.

Specs, encodings and renderer output are plain JSON-like values; these aliases only
name their roles in annotations. This module contains no runtime logic and is zero-IO.

Examples:
    >>> from chartc.core.typing import JsonDict, Encoding
    >>> def first_channel(encoding: Encoding) -> str:
    ...     return next(iter(encoding))
    >>> first_channel({"x": {"field": "a", "type": "nominal"}})
    'x'
"""

from __future__ import annotations

from typing import Any, Literal

__all__ = [
    "JsonDict",
    "Encoding",
    "ChannelDef",
    "ValueRef",
    "Orientation",
]

# Convenient JSON-like mapping alias. Kept intentionally broad for spec boundaries.
JsonDict = dict[str, Any]

# Channel name -> field/value/datum/condition def, or a list of them (tooltip, detail).
ChannelDef = Any
Encoding = dict[str, ChannelDef]

# Renderer value reference, e.g. {"scale": "color", "field": "a"} or {"signal": "width"}.
ValueRef = dict[str, Any]

Orientation = Literal["vertical", "horizontal"]
