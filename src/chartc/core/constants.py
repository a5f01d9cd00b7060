"""
Compiler-wide defaults.

Defines fallback values consumed by config models and composite-mark normalizers.
This module is zero-IO and uses only the Python standard library.

Notes:
    - Config models in chartc.config take their defaults from here; changing a
      default should be done in this module.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_TUKEY_K",
    "DEFAULT_BOX_COLOR",
    "DEFAULT_BOXPLOT_SIZE",
    "DEFAULT_MAXBINS",
    "DEFAULT_NONPOSITION_MAXBINS",
    "COUNT_TITLE",
    "COUNT_FIELD",
]

# IQR multiplier for Tukey whiskers when the extent does not name one.
DEFAULT_TUKEY_K: float = 1.5

# Box fill when neither config.boxplot.box.color nor config.mark.color is set.
DEFAULT_BOX_COLOR: str = "#4c78a8"

DEFAULT_BOXPLOT_SIZE: int = 14

# bin=True resolves to these maxbins values.
DEFAULT_MAXBINS: int = 10
DEFAULT_NONPOSITION_MAXBINS: int = 6

COUNT_TITLE: str = "Count of Records"

# Output field name of the count aggregate.
COUNT_FIELD: str = "__count"
