import altair as alt
import pytest

from chartc.altair import expand, to_chart, validate
from chartc.core.errors import SpecError

DATA = {"values": [{"g": "a", "v": 1}, {"g": "a", "v": 3}, {"g": "b", "v": 2}]}


def test_expand_leaves_primitive_marks_alone() -> None:
    spec = {"data": DATA, "mark": "point", "encoding": {"x": {"field": "g", "type": "nominal"}}}
    assert expand(spec) == spec


def test_boxplot_expands_to_valid_layer_chart() -> None:
    chart = to_chart(
        {
            "data": DATA,
            "mark": "boxplot",
            "encoding": {
                "x": {"field": "g", "type": "nominal"},
                "y": {"field": "v", "type": "quantitative"},
            },
        }
    )
    assert isinstance(chart, alt.LayerChart)


def test_errorbar_expands_to_valid_chart() -> None:
    chart = to_chart(
        {
            "data": DATA,
            "mark": "errorbar",
            "encoding": {
                "x": {"field": "g", "type": "nominal"},
                "y": {"field": "v", "type": "quantitative"},
            },
        }
    )
    assert isinstance(chart, alt.Chart)


def test_schema_violations_raise_spec_error() -> None:
    with pytest.raises(SpecError):
        validate({"data": DATA, "mark": {"type": "point", "size": "big"}})
