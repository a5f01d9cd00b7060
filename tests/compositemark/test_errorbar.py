import logging

import pytest

from chartc.compositemark import normalize_errorbar
from chartc.config import Config
from chartc.core.errors import SpecError

G = {"field": "g", "type": "nominal"}
SPEC = {"mark": "errorbar", "encoding": {"x": G, "y": {"field": "v", "type": "quantitative"}}}


def _tooltip(prefix: str, title: str) -> dict:
    return {"field": f"{prefix}v", "type": "quantitative", "title": title}


def test_stderr_errorbar_expansion() -> None:
    assert normalize_errorbar(SPEC) == {
        "transform": [
            {
                "aggregate": [
                    {"op": "stderr", "field": "v", "as": "extent_v"},
                    {"op": "mean", "field": "v", "as": "center_v"},
                ],
                "groupby": ["g"],
            },
            {"calculate": 'datum["center_v"] + datum["extent_v"]', "as": "upper_v"},
            {"calculate": 'datum["center_v"] - datum["extent_v"]', "as": "lower_v"},
        ],
        "mark": {"type": "rule", "ariaRoleDescription": "errorbar", "style": "errorbar-rule"},
        "encoding": {
            "y": {"field": "lower_v", "type": "quantitative", "title": "v"},
            "y2": {"field": "upper_v"},
            "x": G,
            "tooltip": [
                _tooltip("center_", "Mean of v"),
                _tooltip("upper_", "Mean + stderr of v"),
                _tooltip("lower_", "Mean - stderr of v"),
                G,
            ],
        },
    }


def test_ci_extent_aggregates_bounds_directly() -> None:
    out = normalize_errorbar({**SPEC, "mark": {"type": "errorbar", "extent": "ci"}})
    assert out["transform"] == [
        {
            "aggregate": [
                {"op": "ci0", "field": "v", "as": "lower_v"},
                {"op": "ci1", "field": "v", "as": "upper_v"},
                {"op": "mean", "field": "v", "as": "center_v"},
            ],
            "groupby": ["g"],
        }
    ]
    assert out["encoding"]["tooltip"][0] == _tooltip("upper_", "Ci1 of v")


def test_iqr_extent_is_centered_on_median() -> None:
    out = normalize_errorbar({**SPEC, "mark": {"type": "errorbar", "extent": "iqr"}})
    ops = [agg["op"] for agg in out["transform"][0]["aggregate"]]
    assert ops == ["q1", "q3", "median"]
    titles = [t.get("title") for t in out["encoding"]["tooltip"]]
    assert titles == ["Q3 of v", "Q1 of v", "Median of v", None]


def test_config_extent_is_used_when_mark_has_none() -> None:
    cfg = Config.model_validate({"errorbar": {"extent": "stdev"}})
    out = normalize_errorbar(SPEC, cfg)
    assert out["transform"][0]["aggregate"][0]["op"] == "stdev"


def test_ticks_add_layers() -> None:
    out = normalize_errorbar({**SPEC, "mark": {"type": "errorbar", "ticks": True, "thickness": 2}})
    assert "mark" not in out
    lower, upper, rule = out["layer"]
    assert lower["mark"] == {
        "type": "tick",
        "orient": "horizontal",
        "aria": False,
        "thickness": 2,
        "style": "errorbar-ticks",
    }
    assert lower["encoding"]["y"]["field"] == "lower_v"
    assert upper["encoding"]["y"]["field"] == "upper_v"
    assert rule["mark"]["size"] == 2


def test_horizontal_errorbar_and_dropped_size() -> None:
    out = normalize_errorbar(
        {"mark": "errorbar", "encoding": {"x": "v:Q", "y": "g:N", "size": {"value": 3}}}
    )
    assert out["encoding"]["x"]["field"] == "lower_v"
    assert out["encoding"]["x2"] == {"field": "upper_v"}
    assert "size" not in out["encoding"]


def test_time_unit_group_is_extracted_before_aggregate() -> None:
    out = normalize_errorbar(
        {"mark": "errorbar", "encoding": {"x": {"field": "d", "timeUnit": "year"}, "y": "v:Q"}}
    )
    assert out["transform"][0] == {"timeUnit": "year", "field": "d", "as": "year_d"}
    assert out["transform"][1]["groupby"] == ["year_d"]
    assert out["encoding"]["x"]["field"] == "year_d"


def test_center_extent_mismatch_warns(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="chartc.compositemark.errorbar")
    normalize_errorbar({**SPEC, "mark": {"type": "errorbar", "extent": "iqr", "center": "mean"}})
    assert "mean is not usually used with iqr for errorbar." in caplog.text


def test_unsupported_inputs_raise() -> None:
    with pytest.raises(SpecError):
        normalize_errorbar({**SPEC, "mark": {"type": "errorbar", "extent": "q95"}})
    with pytest.raises(SpecError):
        normalize_errorbar({"mark": "errorbar", "encoding": {"x": G, "y": "v:Q", "y2": "w:Q"}})
    with pytest.raises(SpecError):
        normalize_errorbar({"mark": "errorbar", "encoding": {"x": G, "y": "h:N"}})
