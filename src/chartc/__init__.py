"""
chartc — a chart-specification compiler.

Compiles a high-level visualization grammar (marks, encodings, composite marks;
Vega-Lite vocabulary) into lower-level renderer pieces (Vega vocabulary):
dataflow transforms and per-channel encode entries.

## Layers
- chartc.core — grammar enums, errors, canonical hashing, constants, messages.
- chartc.expr / chartc.channeldef / chartc.encoding — expressions, typed field
  defs, encoding normalization and transform extraction.
- chartc.config — pydantic config with env > TOML > defaults loading.
- chartc.compile — unit model, invalid-data policies, dataflow nodes, encode
  resolvers and guide encode entries.
- chartc.compositemark — boxplot and errorbar expansion and their registry.
- chartc.altair — schema validation and altair charts for expanded specs.

## Import DAG discipline
- core depends on nothing above it; compile and compositemark depend on core,
  expr, channeldef, encoding and config; altair depends on compositemark.

## Examples
```python
from chartc import Config, normalize
spec = {"mark": "boxplot", "encoding": {"x": "category:N", "y": "value:Q"}}
layered = normalize(spec, Config.load())
```

## Notes
- Compilation is pure and synchronous; outputs are plain dicts/lists.
- The library logs through `logging.getLogger("chartc...")` and installs no handlers.
"""

from __future__ import annotations

from .compile import FilterInvalidNode, UnitModel, guide_encode_entry, non_position, point_position
from .compositemark import normalize, normalize_boxplot, normalize_errorbar
from .config import Config
from .core.errors import ChartcError, ConfigError, InvariantViolation, SpecError

__all__ = [
    "Config",
    "ChartcError",
    "SpecError",
    "InvariantViolation",
    "ConfigError",
    "UnitModel",
    "FilterInvalidNode",
    "non_position",
    "point_position",
    "guide_encode_entry",
    "normalize",
    "normalize_boxplot",
    "normalize_errorbar",
]
