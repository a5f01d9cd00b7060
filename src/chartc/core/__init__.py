"""
Core package aggregator for chartc contracts (grammar, errors, hashing, typing, constants, messages).

## Contracts (single source of truth)
- Grammar — enums for field types and invalid-data policies, channel/scale/time-unit helpers.
- Errors — typed exceptions for spec, invariant and config failures.
- Hashing — canonical JSON and content hashes for dataflow nodes.
- Typing/Constants — JSON aliases and compiler-wide defaults.
- Messages — warning/error text shared by callers and tests.

## Notes
- Zero‑IO policy: stdlib + pydantic only.
- Enum `.value` strings use the renderer wire vocabulary (lower-kebab).

## Downstream usage
- chartc.channeldef / chartc.encoding — parse field types via `grammar`.
- chartc.compile — resolves invalid-data policies and hashes nodes via `hashing`.
- chartc.compositemark — raises `SpecError` for unsupported extents and logs `messages`.

## Examples
```python
from chartc.core.grammar import ScaleInvalidDataMode
from chartc.core.hashing import hash_spec
ScaleInvalidDataMode("always-valid") is ScaleInvalidDataMode.ALWAYS_VALID  # True
hash_spec({"b": 1, "a": 2}) == hash_spec({"a": 2, "b": 1})  # True
```
"""
