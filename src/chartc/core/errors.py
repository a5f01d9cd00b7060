"""
Core exception types raised by spec normalization, dataflow construction, and config loading.

Provides typed exceptions for compiler failures:
- SpecError for user specs the compiler cannot expand (unsupported extent, no continuous axis).
- InvariantViolation for defect signals (states upstream validation should make impossible).
- ConfigError for configuration values outside their allowed set.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Unsupported-but-recoverable features (e.g., selection params on composite marks)
      never raise; they are logged as warnings and dropped.
    - Empty results ("no node needed", "no layer") are returned as None / [] rather than raised.

Examples:
    Catch an unsupported extent.

    >>> from chartc.core.errors import SpecError
    >>> def extent_demo(extent: object) -> str:
    ...     if extent not in ("min-max", "tukey"):
    ...         raise SpecError(f"unsupported extent {extent!r}")
    ...     return str(extent)
    >>> try:
    ...     extent_demo("q95")
    ... except SpecError as e:
    ...     msg = str(e)
    >>> "q95" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "ChartcError",
    "SpecError",
    "InvariantViolation",
    "ConfigError",
]


class ChartcError(Exception):
    """Base class for all compiler errors raised by chartc."""


class SpecError(ChartcError, ValueError):
    """Input spec cannot be compiled (invalid combination or unsupported option)."""


class InvariantViolation(ChartcError, AssertionError):
    """Internal invariant broken; indicates a defect upstream rather than bad user input."""


class ConfigError(ChartcError, ValueError):
    """Configuration value is invalid or unsupported."""
