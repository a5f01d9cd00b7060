"""
Altair bridge for expanded specs.

Validates chartc output against the Vega-Lite JSON schema bundled with altair and
wraps it as an altair chart, so expanded composite marks can be displayed or
saved with altair's tooling.

Notes:
    - Composite marks are expanded with `chartc.compositemark.normalize` before
      validation; other specs pass through unchanged.
    - Schema violations surface as `chartc.core.errors.SpecError`.

Examples:
    >>> from chartc.altair import to_chart
    >>> chart = to_chart({  # doctest: +SKIP
    ...     "data": {"values": [{"g": "a", "v": 1}, {"g": "a", "v": 3}]},
    ...     "mark": "boxplot",
    ...     "encoding": {"x": "g:N", "y": "v:Q"},
    ... })
    >>> chart.to_dict()["layer"][1]["layer"][0]["mark"]["type"]  # doctest: +SKIP
    'bar'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import altair as alt
import jsonschema

from chartc.compositemark import normalize
from chartc.config import Config
from chartc.core.errors import SpecError
from chartc.core.typing import JsonDict

__all__ = ["expand", "validate", "to_chart"]


def expand(spec: Mapping[str, Any], config: Config | None = None) -> JsonDict:
    """Expand composite marks into a plain JSON dict."""
    return dict(normalize(spec, config))


def validate(spec: Mapping[str, Any]) -> None:
    """
    Validate a spec against the Vega-Lite schema.

    Raises:
        SpecError: If the spec does not conform.
    """
    to_chart(spec, expand_composite=False)


def to_chart(
    spec: Mapping[str, Any],
    config: Config | None = None,
    *,
    expand_composite: bool = True,
) -> alt.TopLevelMixin:
    """
    Build an altair chart from a spec.

    Args:
        spec (Mapping): Unit or layered spec.
        config (Config | None): Compiler config used for composite expansion.
        expand_composite (bool): Expand composite marks first.

    Returns:
        alt.TopLevelMixin: `alt.Chart`, `alt.LayerChart`, or the schema root wrapper.

    Raises:
        SpecError: If the (expanded) spec fails schema validation.
    """
    out = expand(spec, config) if expand_composite else dict(spec)
    try:
        return alt.Chart.from_dict(out, validate=True)
    except jsonschema.ValidationError as exc:
        raise SpecError(f"Spec does not conform to the Vega-Lite schema: {exc.message}") from exc
