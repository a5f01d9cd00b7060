from chartc.compile.invalid import (
    get_data_sources_for_handling_invalid_values,
    get_scale_invalid_data_mode,
    normalize_invalid_data_mode,
)
from chartc.config import Config
from chartc.core.grammar import InvalidValuesHandling, MarkInvalidDataMode, ScaleInvalidDataMode


def _mode(mark_def: dict, config: Config | None = None, **kwargs) -> ScaleInvalidDataMode:
    args = {"scale_channel": "y", "scale_type": "linear", "is_count_aggregate": False}
    args.update(kwargs)
    return get_scale_invalid_data_mode(mark_def=mark_def, config=config or Config(), **args)


def test_default_mode_filters_non_path_marks_and_breaks_paths() -> None:
    assert _mode({"type": "point"}) is ScaleInvalidDataMode.FILTER
    assert _mode({"type": "line"}) is ScaleInvalidDataMode.BREAK_PATHS_SHOW_DOMAINS


def test_discrete_missing_and_count_scales_are_always_valid() -> None:
    assert _mode({"type": "point"}, scale_type="point") is ScaleInvalidDataMode.ALWAYS_VALID
    assert _mode({"type": "point"}, scale_type=None) is ScaleInvalidDataMode.ALWAYS_VALID
    assert _mode({"type": "point"}, is_count_aggregate=True) is ScaleInvalidDataMode.ALWAYS_VALID


def test_scale_output_for_invalid_means_show() -> None:
    cfg = Config.model_validate({"scale": {"invalid": {"y": "zero-or-min"}}})
    assert _mode({"type": "point"}, cfg) is ScaleInvalidDataMode.SHOW
    assert _mode({"type": "point"}, cfg, scale_channel="x") is ScaleInvalidDataMode.FILTER


def test_explicit_null_invalid_on_mark_means_show() -> None:
    assert _mode({"type": "point", "invalid": None}) is ScaleInvalidDataMode.SHOW
    assert _mode({"type": "point", "invalid": "filter"}) is ScaleInvalidDataMode.FILTER


def test_normalize_invalid_data_mode() -> None:
    assert normalize_invalid_data_mode(None, is_path=False) is MarkInvalidDataMode.SHOW
    assert (
        normalize_invalid_data_mode("break-paths-show-path-domains", is_path=True)
        is MarkInvalidDataMode.BREAK_PATHS_SHOW_DOMAINS
    )


def test_data_sources_for_handling_invalid_values() -> None:
    include = InvalidValuesHandling.INCLUDE
    exclude = InvalidValuesHandling.EXCLUDE

    filter_ = get_data_sources_for_handling_invalid_values("filter", is_path=False)
    assert (filter_.marks, filter_.scales) == (exclude, exclude)

    show = get_data_sources_for_handling_invalid_values(None, is_path=False)
    assert show.includes_all

    paths = get_data_sources_for_handling_invalid_values("break-paths-show-domains", is_path=True)
    assert paths.includes_all
    bars = get_data_sources_for_handling_invalid_values("break-paths-show-domains", is_path=False)
    assert (bars.marks, bars.scales) == (exclude, include)

    domains = get_data_sources_for_handling_invalid_values(
        "break-paths-filter-domains", is_path=True
    )
    assert (domains.marks, domains.scales) == (include, exclude)
