import logging

import pytest

from chartc.compile.encode import non_position
from chartc.compile.model import UnitModel
from chartc.config import Config

INVALID_V = '!isValid(datum["v"]) || !isFinite(+datum["v"])'


def _model(encoding: dict, mark: object = "point", config: Config | None = None) -> UnitModel:
    return UnitModel({"mark": mark, "encoding": encoding}, config)


def test_field_through_scale() -> None:
    m = _model({"color": "c:N"})
    assert non_position("color", m, vg_channel="fill") == {
        "fill": {"scale": "color", "field": "c"}
    }


def test_mark_property_is_used() -> None:
    assert non_position("opacity", _model({}, {"type": "point", "opacity": 0.5})) == {
        "opacity": {"value": 0.5}
    }
    assert non_position("size", _model({}, {"type": "point", "size": 40}), vg_channel="size") == {
        "size": {"value": 40}
    }


def test_config_defaults_are_left_to_the_renderer() -> None:
    cfg = Config.model_validate({"point": {"opacity": 0.3, "size": 60}})
    assert non_position("color", _model({})) == {}
    assert non_position("opacity", _model({}, config=cfg)) == {}
    assert non_position("size", _model({}, config=cfg), vg_channel="size") == {}


def test_renamed_renderer_channel_reads_config() -> None:
    cfg = Config.model_validate({"point": {"color": "teal"}})
    assert non_position("color", _model({}, config=cfg), vg_channel="fill") == {
        "fill": {"value": "teal"}
    }


def test_conditional_def_gets_config_default_as_base() -> None:
    m = _model({"color": {"condition": {"test": "datum.v > 0", "value": "red"}}})
    assert non_position("color", m) == {
        "color": [{"test": "datum.v > 0", "value": "red"}, {"value": "#4c78a8"}]
    }


def test_explicit_defaults() -> None:
    assert non_position("size", _model({}), default_value=30) == {"size": {"value": 30}}
    assert non_position("size", _model({}), default_ref=None) == {}
    assert non_position("size", _model({}), default_ref={"signal": "s"}) == {
        "size": {"signal": "s"}
    }


def test_test_conditions_precede_main_value() -> None:
    m = _model({"color": {"condition": {"test": "datum.v > 0", "value": "red"}, "value": "blue"}})
    assert non_position("color", m) == {
        "color": [{"test": "datum.v > 0", "value": "red"}, {"value": "blue"}]
    }


def test_conditional_field_def_reads_its_scale() -> None:
    m = _model(
        {
            "color": {
                "condition": {"test": {"field": "v", "gt": 0}, "field": "c", "type": "nominal"},
                "value": "grey",
            }
        }
    )
    assert non_position("color", m) == {
        "color": [
            {"test": 'datum["v"]>0', "scale": "color", "field": "c"},
            {"value": "grey"},
        ]
    }


def test_show_invalid_values_with_configured_output() -> None:
    cfg = Config.model_validate({"scale": {"invalid": {"color": {"value": "grey"}}}})
    m = _model({"color": "v:Q"}, config=cfg)
    assert non_position("color", m) == {
        "color": [
            {"test": INVALID_V, "value": "grey"},
            {"scale": "color", "field": "v"},
        ]
    }


def test_show_invalid_values_with_scaled_zero_or_min() -> None:
    cfg = Config.model_validate({"scale": {"invalid": {"size": "zero-or-min"}}})
    m = _model({"size": "v:Q"}, config=cfg)
    assert non_position("size", m) == {
        "size": [
            {"test": INVALID_V, "scale": "size", "value": 0},
            {"scale": "size", "field": "v"},
        ]
    }


def test_filtered_channels_have_no_invalid_override() -> None:
    assert non_position("size", _model({"size": "v:Q"})) == {"size": {"scale": "size", "field": "v"}}


def test_param_conditions_are_dropped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="chartc.compile.encode.conditional")
    m = _model({"color": {"condition": {"param": "brush", "value": "red"}, "value": "grey"}})
    assert non_position("color", m) == {"color": {"value": "grey"}}
    assert "brush" not in caplog.text
    assert "selections are not supported" in caplog.text
