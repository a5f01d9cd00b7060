from chartc.compile.encode import point_position
from chartc.compile.model import UnitModel
from chartc.config import Config


def _model(encoding: dict, mark: object = "point", config: Config | None = None) -> UnitModel:
    return UnitModel({"mark": mark, "encoding": encoding}, config)


def test_field_position() -> None:
    m = _model({"x": "a:N", "y": "value:Q"})
    assert point_position("x", m, default_pos="mid") == {"x": {"scale": "x", "field": "a"}}
    assert point_position("y", m, default_pos="zeroOrMin") == {
        "y": {"scale": "y", "field": "value"}
    }


def test_binned_field_is_centered_in_its_bin() -> None:
    m = _model({"x": {"field": "v", "type": "quantitative", "bin": True}})
    assert point_position("x", m, default_pos="mid") == {
        "x": {
            "signal": 'scale("x", 0.5 * datum["bin_maxbins_10_v"] '
            '+ 0.5 * datum["bin_maxbins_10_v_end"])'
        }
    }


def test_mid_default_without_definition() -> None:
    m = _model({"x": "a:N"})
    assert point_position("y", m, default_pos="mid") == {"y": {"signal": "height", "mult": 0.5}}
    assert point_position("x", _model({}), default_pos="mid") == {
        "x": {"signal": "width", "mult": 0.5}
    }


def test_zero_or_min_max_defaults_without_scale() -> None:
    m = _model({})
    assert point_position("x", m, default_pos="zeroOrMin") == {"x": {"value": 0}}
    assert point_position("x", m, default_pos="zeroOrMax") == {
        "x": {"field": {"group": "width"}}
    }
    assert point_position("y", m, default_pos="zeroOrMin") == {
        "y": {"field": {"group": "height"}}
    }
    assert point_position("theta", m, default_pos="zeroOrMax") == {"theta": {"signal": "2*PI"}}


def test_mark_position_value_wins_over_default() -> None:
    m = _model({}, {"type": "point", "x": "width", "y": 10})
    assert point_position("x", m, default_pos="mid") == {"x": {"field": {"group": "width"}}}
    assert point_position("y", m, default_pos="mid") == {"y": {"value": 10}}


def test_shown_invalid_values_are_placed_at_zero() -> None:
    cfg = Config.model_validate({"scale": {"invalid": {"y": "zero-or-min"}}})
    m = _model({"y": "value:Q"}, config=cfg)
    assert point_position("y", m, default_pos="zeroOrMin") == {
        "y": [
            {
                "test": '!isValid(datum["value"]) || !isFinite(+datum["value"])',
                "scale": "y",
                "value": 0,
            },
            {"scale": "y", "field": "value"},
        ]
    }


def test_vg_channel_renames_output() -> None:
    m = _model({"x": "a:N"})
    assert point_position("x", m, default_pos="mid", vg_channel="xc") == {
        "xc": {"scale": "x", "field": "a"}
    }
