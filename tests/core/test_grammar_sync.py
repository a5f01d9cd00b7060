"""Mark and scale invalid modes share their non-mark-specific values."""

from chartc.core.grammar import MarkInvalidDataMode, ScaleInvalidDataMode


def test_scale_modes_cover_resolved_mark_modes() -> None:
    scale_values = {m.value for m in ScaleInvalidDataMode}
    for mode in MarkInvalidDataMode:
        if mode is MarkInvalidDataMode.BREAK_PATHS_SHOW_PATH_DOMAINS:
            continue
        assert mode.value in scale_values


def test_always_valid_is_scale_only() -> None:
    assert "always-valid" not in {m.value for m in MarkInvalidDataMode}
