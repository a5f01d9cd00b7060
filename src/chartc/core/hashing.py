"""
Canonical JSON serialization and hashing helpers for specs and dataflow nodes.

Provides a single canonical JSON policy and SHA-256 helpers so that structurally
identical specs and nodes hash identically regardless of key order. Used by
dataflow nodes (`DataflowNode.hash`) and by tooltip de-duplication in composite
marks. This module is zero-IO and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - pydantic models are dumped with `model_dump(by_alias=True, exclude_none=True)`
      before serialization, so a FieldDef and its dict form hash identically.
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

__all__ = [
    "json_dumps_canonical",
    "hash_spec",
    "unique",
]


def _to_jsonable(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(obj, Mapping):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(v) for v in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(_to_jsonable(v) for v in obj)
    return obj


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object; pydantic models, sets and tuples are
            converted first.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.
    """
    return json.dumps(
        _to_jsonable(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def _sha256_hexdigest(s: str) -> str:
    """Compute SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_spec(obj: Any) -> str:
    """
    Compute a stable content hash for a spec fragment.

    Args:
        obj (Any): Mapping, list, scalar or pydantic model.

    Returns:
        str: SHA-256 hex digest over the canonical JSON serialization.

    Examples:
        >>> from chartc.core.hashing import hash_spec
        >>> hash_spec({"a": 1, "b": 2}) == hash_spec({"b": 2, "a": 1})
        True
    """
    return _sha256_hexdigest(json_dumps_canonical(obj))


def unique(items: list[Any]) -> list[Any]:
    """Drop items whose canonical hash was already seen, keeping first occurrences in order."""
    seen: set[str] = set()
    out: list[Any] = []
    for item in items:
        h = hash_spec(item)
        if h not in seen:
            seen.add(h)
            out.append(item)
    return out
