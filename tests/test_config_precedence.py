from __future__ import annotations

from pathlib import Path

import pytest

from chartc.config import Config
from chartc.core.errors import ConfigError

_ENV_KEYS = [
    "CHARTC_BOXPLOT_EXTENT",
    "CHARTC_ERRORBAR_EXTENT",
    "CHARTC_MARK_INVALID",
    "CHARTC_MARK_COLOR",
]


def _write_chartc_toml(tmp: Path, content: str) -> Path:
    p = tmp / "chartc.toml"
    p.write_text(content)
    return p


def _clear_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_config_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    _write_chartc_toml(
        tmp_path,
        """
        [chartc.boxplot]
        extent = 2.0

        [chartc.errorbar]
        extent = "ci"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("CHARTC_BOXPLOT_EXTENT", "3")
    monkeypatch.setenv("CHARTC_MARK_INVALID", "null")

    c = Config.load()

    assert c.boxplot.extent == 3.0  # env override
    assert c.errorbar.extent == "ci"  # from TOML
    assert c.mark.invalid is None


def test_config_from_toml_when_no_env(tmp_path: Path, monkeypatch) -> None:
    _write_chartc_toml(
        tmp_path,
        """
        countTitle = "Rows"

        [boxplot]
        extent = "min-max"
        ticks = false
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    c = Config.load()

    assert c.boxplot.extent == "min-max"
    assert c.boxplot.ticks is False
    assert c.boxplot.median == {"color": "white"}  # untouched defaults survive the merge
    assert c.count_title == "Rows"


def test_config_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.chartc.mark]
        color = "#222222"
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    assert Config.load().mark.color == "#222222"


def test_config_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    c = Config.load()

    # Defaults from Config / chartc.core.constants
    assert c.boxplot.extent == 1.5
    assert c.boxplot.size == 14
    assert c.errorbar.extent == "stderr"
    assert c.mark.invalid == "break-paths-show-path-domains"
    assert c.count_title == "Count of Records"


def test_invalid_values_raise_config_error(tmp_path: Path, monkeypatch) -> None:
    _write_chartc_toml(tmp_path, '[errorbar]\nextent = "q95"\n')
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    with pytest.raises(ConfigError):
        Config.load()

    (tmp_path / "chartc.toml").unlink()
    monkeypatch.setenv("CHARTC_MARK_INVALID", "sometimes")
    with pytest.raises(ConfigError):
        Config.load()


def test_unparseable_toml_raises_config_error(tmp_path: Path, monkeypatch) -> None:
    _write_chartc_toml(tmp_path, "[boxplot\nextent = 1")
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError):
        Config.from_toml()
