"""
chartc.compile — unit-model compilation steps.

## Responsibilities
- Resolve mark properties against config (`common`).
- Resolve invalid-data policies per scale channel (`invalid`).
- Build dataflow nodes (`data`) and encode entries (`encode`, `guide`) from a
  `UnitModel`.

## Model contract
Nodes and resolvers read `mark_def`, `encoding`, `config`,
`get_scale_component(channel)`, `scale_name(channel)` and `reduce_field_def` from
the model; `chartc.compile.model.UnitModel` implements it for single views.
"""

from __future__ import annotations

from .common import get_mark_prop_or_config, signal_or_value_ref
from .data import DataflowNode, FilterInvalidNode, OutputNode
from .encode import non_position, point_position
from .guide import guide_encode_entry
from .invalid import (
    DataSourcesForHandlingInvalidValues,
    get_data_sources_for_handling_invalid_values,
    get_scale_invalid_data_mode,
    normalize_invalid_data_mode,
)
from .model import ScaleComponent, UnitModel

__all__ = [
    "get_mark_prop_or_config",
    "signal_or_value_ref",
    "DataflowNode",
    "OutputNode",
    "FilterInvalidNode",
    "non_position",
    "point_position",
    "guide_encode_entry",
    "DataSourcesForHandlingInvalidValues",
    "get_data_sources_for_handling_invalid_values",
    "get_scale_invalid_data_mode",
    "normalize_invalid_data_mode",
    "ScaleComponent",
    "UnitModel",
]
