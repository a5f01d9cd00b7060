import pytest

from chartc.compile.encode.valueref import (
    interpolated_signal_ref,
    scaled_zero_or_min_or_max,
    value_ref_for_field_or_datum_def,
)
from chartc.compile.model import ScaleComponent
from chartc.channeldef import FieldDef
from chartc.core.errors import InvariantViolation


def test_scaled_zero_when_domain_definitely_has_zero() -> None:
    scale = ScaleComponent("y", "linear", zero=True)
    assert scaled_zero_or_min_or_max(scale_name="y", scale=scale, mode="zeroOrMin") == {
        "scale": "y",
        "value": 0,
    }


def test_scaled_zero_or_domain_edge_when_unknown() -> None:
    scale = ScaleComponent("x", "linear")
    assert scaled_zero_or_min_or_max(scale_name="x", scale=scale, mode="zeroOrMin") == {
        "signal": "scale('x', inrange(0, domain('x')) ? 0 : domain('x')[0])"
    }
    assert scaled_zero_or_min_or_max(scale_name="x", scale=scale, mode="zeroOrMax") == {
        "signal": "scale('x', inrange(0, domain('x')) ? 0 : peek(domain('x')))"
    }


def test_domain_edge_when_zero_is_outside_domain() -> None:
    scale = ScaleComponent("x", "linear", domain=(1, 5))
    assert scaled_zero_or_min_or_max(scale_name="x", scale=scale, mode="zeroOrMin") == {
        "signal": "scale('x', domain('x')[0])"
    }


def test_no_scale_no_ref() -> None:
    assert scaled_zero_or_min_or_max(scale_name=None, scale=None, mode="zeroOrMin") is None


def test_interpolated_bin_center() -> None:
    fd = FieldDef(field="v", type="Q", bin={"maxbins": 10})
    assert interpolated_signal_ref(scale_name="x", field_def=fd) == {
        "signal": 'scale("x", 0.5 * datum["bin_maxbins_10_v"] + 0.5 * datum["bin_maxbins_10_v_end"])'
    }
    assert interpolated_signal_ref(scale_name="x", field_def=fd, band_position=0) == {
        "scale": "x",
        "field": "bin_maxbins_10_v",
    }


def test_field_and_datum_refs() -> None:
    assert value_ref_for_field_or_datum_def({"field": "a", "type": "quantitative"}, "x") == {
        "scale": "x",
        "field": "a",
    }
    assert value_ref_for_field_or_datum_def({"datum": 5}, "y", offset=2) == {
        "scale": "y",
        "value": 5,
        "offset": 2,
    }


def test_value_def_cannot_become_field_ref() -> None:
    with pytest.raises(InvariantViolation, match="field or datum reference"):
        value_ref_for_field_or_datum_def({"value": 3}, "x")
