from chartc.compositemark import (
    add,
    get_all_composite_marks,
    get_composite_mark_parts,
    normalize,
    remove,
)


def test_builtin_composite_marks() -> None:
    assert get_all_composite_marks() == ["boxplot", "errorbar"]
    assert get_composite_mark_parts("boxplot") == ("box", "median", "outliers", "rule", "ticks")
    assert get_composite_mark_parts("errorbar") == ("ticks", "rule")
    assert get_composite_mark_parts("point") == ()


def test_non_composite_specs_pass_through_unchanged() -> None:
    spec = {"mark": "point", "encoding": {"x": "a:N"}}
    assert normalize(spec) is spec
    layered = {"layer": [{"mark": "boxplot"}]}
    assert normalize(layered) is layered


def test_dispatch_by_mark_type_or_mark_def() -> None:
    out = normalize({"mark": {"type": "boxplot"}, "encoding": {"x": "a:N", "y": "v:Q"}})
    assert len(out["layer"]) == 2
    out = normalize({"mark": "errorbar", "encoding": {"x": "a:N", "y": "v:Q"}})
    assert out["mark"]["type"] == "rule"


def test_register_and_remove_custom_mark() -> None:
    add("halo", lambda spec, config: {**spec, "mark": "circle"}, ["ring"])
    try:
        assert "halo" in get_all_composite_marks()
        assert get_composite_mark_parts("halo") == ("ring",)
        assert normalize({"mark": "halo"}) == {"mark": "circle"}
    finally:
        remove("halo")
    assert "halo" not in get_all_composite_marks()
