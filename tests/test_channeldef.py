import pytest
from pydantic import ValidationError

from chartc.channeldef import (
    FieldDef,
    default_title,
    field_defs,
    is_conditional_def,
    is_field_def,
    is_value_def,
    title,
    to_string_field_def,
    vg_field,
)
from chartc.core.grammar import FieldType


def test_field_def_type_accepts_shorthand_codes() -> None:
    assert FieldDef(field="a", type="Q").type is FieldType.QUANTITATIVE
    assert FieldDef(field="a", type="temporal").type is FieldType.TEMPORAL
    with pytest.raises(ValidationError):
        FieldDef(field="a", type="geo")


def test_field_def_is_frozen() -> None:
    fd = FieldDef(field="a", type="N")
    with pytest.raises(ValidationError):
        fd.field = "b"  # type: ignore[misc]
    assert fd.model_copy(update={"field": "b"}).field == "b"


def test_vg_field_prefixes() -> None:
    assert vg_field(FieldDef(field="price", aggregate="mean")) == "mean_price"
    assert vg_field(FieldDef(aggregate="count")) == "__count"
    assert vg_field(FieldDef(field="date", timeUnit="yearmonth")) == "yearmonth_date"
    binned = FieldDef(field="v", bin={"maxbins": 10})
    assert vg_field(binned) == "bin_maxbins_10_v"
    assert vg_field(binned, bin_suffix="end") == "bin_maxbins_10_v_end"
    assert vg_field(binned, nofn=True) == "v"


def test_vg_field_nested_path_forms() -> None:
    fd = FieldDef(field="a.b", aggregate="mean")
    assert vg_field(fd) == "mean_a\\.b"
    assert vg_field(fd, for_as=True) == "mean_a.b"
    assert vg_field(fd, expr="datum") == 'datum["mean_a.b"]'


def test_default_titles() -> None:
    assert default_title(FieldDef(field="price", aggregate="mean")) == "Mean of price"
    assert default_title(FieldDef(aggregate="count")) == "Count of Records"
    assert default_title(FieldDef(aggregate="count"), "Rows") == "Rows"
    assert default_title(FieldDef(field="v", bin=True)) == "v (binned)"
    assert default_title(FieldDef(field="date", timeUnit="yearmonth")) == "date (year-month)"
    assert default_title(FieldDef(field="price")) == "price"
    assert title(FieldDef(field="price", title="Price ($)")) == "Price ($)"


def test_channel_def_classification() -> None:
    assert is_field_def({"field": "a"})
    assert is_field_def({"aggregate": "count"})
    assert not is_field_def({"value": 3})
    assert is_value_def({"value": 3})
    assert is_conditional_def({"condition": {"test": "true", "value": 1}, "value": 0})
    assert not is_conditional_def({"value": 0})


def test_to_string_field_def_reads_derived_field() -> None:
    fd = FieldDef(field="v", type="Q", aggregate="mean", scale={"zero": False})
    assert to_string_field_def(fd) == {"field": "mean_v", "type": "quantitative"}


def test_field_defs_include_arrays_and_conditions() -> None:
    encoding = {
        "x": {"field": "a", "type": "nominal"},
        "tooltip": [{"field": "b", "type": "nominal"}, {"field": "c", "type": "nominal"}],
        "color": {"condition": {"test": "true", "field": "d", "type": "nominal"}, "value": "x"},
        "size": {"value": 3},
    }
    assert [fd.field for fd in field_defs(encoding)] == ["a", "b", "c", "d"]
