"""Channel resolvers producing mark encode entries."""

from __future__ import annotations

from .conditional import wrap_condition
from .invalid import get_conditional_value_ref_for_including_invalid_value
from .nonposition import non_position
from .position import point_position
from .valueref import mid_point, scaled_zero_or_min_or_max

__all__ = [
    "wrap_condition",
    "get_conditional_value_ref_for_including_invalid_value",
    "non_position",
    "point_position",
    "mid_point",
    "scaled_zero_or_min_or_max",
]
