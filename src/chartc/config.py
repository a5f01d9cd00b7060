"""
Compiler configuration.

Defines `Config`, the pydantic model the compiler reads mark defaults, composite-mark
part styling, and scale invalid-value outputs from. Defaults come from
chartc.core.constants (the single source of truth).

Shape
- Mirrors the grammar's config object: `mark`, per-mark blocks (`bar`, `tick`, …),
  `boxplot`, `errorbar`, `scale`, `countTitle`.
- Unknown keys are kept (`extra="allow"`) so renderer-only properties pass through.

Loading
- `Config.load()` applies precedence env > TOML > defaults, like the rest of the
  stack: `./chartc.toml` (top-level keys or a `[chartc]` table) or
  `./pyproject.toml` under `[tool.chartc]`, then `CHARTC_*` environment variables.

Notes
- Invalid values raise `chartc.core.errors.ConfigError` from the loaders and
  `pydantic.ValidationError` from direct construction.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from chartc.core.constants import (
    COUNT_TITLE,
    DEFAULT_BOX_COLOR,
    DEFAULT_BOXPLOT_SIZE,
    DEFAULT_TUKEY_K,
)
from chartc.core.errors import ConfigError
from chartc.core.grammar import BoxPlotType, ErrorBarExtent, MarkInvalidDataMode

__all__ = [
    "MarkConfig",
    "BoxPlotConfig",
    "ErrorBarConfig",
    "ScaleConfig",
    "Config",
]

PartConfig = bool | dict[str, Any] | None


class MarkConfig(BaseModel):
    """
    Defaults shared by every mark.

    Attributes:
        color (str | None): Default mark color.
        invalid (str | None): Mark invalid-data mode; None means "show".
    """

    model_config = ConfigDict(extra="allow")

    color: str | None = DEFAULT_BOX_COLOR
    invalid: str | None = MarkInvalidDataMode.BREAK_PATHS_SHOW_PATH_DOMAINS.value

    @field_validator("invalid")
    @classmethod
    def _check_invalid(cls, v: str | None) -> str | None:
        if v is not None:
            MarkInvalidDataMode(v)
        return v


class BoxPlotConfig(BaseModel):
    """
    Boxplot defaults.

    Attributes:
        extent (float | str): IQR multiplier for Tukey whiskers, "tukey", or "min-max".
        size (float | None): Box and median tick size.
        box, median, outliers, rule, ticks: Part toggles/styles. A mapping (even an
            empty one) or True enables the part; False/None disables it.
    """

    model_config = ConfigDict(extra="allow")

    extent: float | str = DEFAULT_TUKEY_K
    size: float | None = DEFAULT_BOXPLOT_SIZE
    box: PartConfig = Field(default_factory=dict)
    median: PartConfig = Field(default_factory=lambda: {"color": "white"})
    outliers: PartConfig = Field(default_factory=dict)
    rule: PartConfig = Field(default_factory=dict)
    ticks: PartConfig = Field(default_factory=dict)

    @field_validator("extent")
    @classmethod
    def _check_extent(cls, v: float | str) -> float | str:
        if isinstance(v, str) and v not in (BoxPlotType.TUKEY.value, BoxPlotType.MIN_MAX.value):
            raise ValueError(f"boxplot extent must be a number, 'tukey' or 'min-max' (got {v!r})")
        return v


class ErrorBarConfig(BaseModel):
    """Errorbar defaults: extent, and the `rule`/`ticks` part toggles."""

    model_config = ConfigDict(extra="allow")

    extent: str = ErrorBarExtent.STDERR.value
    rule: PartConfig = True
    ticks: PartConfig = False

    @field_validator("extent")
    @classmethod
    def _check_extent(cls, v: str) -> str:
        ErrorBarExtent(v)
        return v


class ScaleConfig(BaseModel):
    """
    Scale defaults.

    Attributes:
        invalid (dict | None): Per scale channel output for invalid values, either
            "zero-or-min" or {"value": ...}. Any entry makes that channel "show"
            invalid values instead of filtering them.
    """

    model_config = ConfigDict(extra="allow")

    invalid: dict[str, Any] | None = None


class Config(BaseModel):
    """
    Compiler configuration.

    Examples:
        >>> from chartc.config import Config
        >>> Config().boxplot.extent
        1.5
        >>> Config.model_validate({"boxplot": {"extent": "min-max"}}).boxplot.extent
        'min-max'
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    mark: MarkConfig = Field(default_factory=MarkConfig)
    boxplot: BoxPlotConfig = Field(default_factory=BoxPlotConfig)
    errorbar: ErrorBarConfig = Field(default_factory=ErrorBarConfig)
    scale: ScaleConfig = Field(default_factory=ScaleConfig)
    count_title: str = Field(default=COUNT_TITLE, alias="countTitle")

    bar: dict[str, Any] = Field(default_factory=dict)
    tick: dict[str, Any] = Field(default_factory=lambda: {"thickness": 1})
    rule: dict[str, Any] = Field(default_factory=dict)
    point: dict[str, Any] = Field(default_factory=dict)
    line: dict[str, Any] = Field(default_factory=dict)
    area: dict[str, Any] = Field(default_factory=dict)
    rect: dict[str, Any] = Field(default_factory=dict)
    text: dict[str, Any] = Field(default_factory=dict)

    def mark_config(self, mark_type: str) -> Mapping[str, Any]:
        """Config block of one mark type (`bar`, `boxplot`, …); empty when unknown."""
        block = getattr(self, mark_type, None)
        if block is None:
            block = (self.model_extra or {}).get(mark_type)
        if isinstance(block, BaseModel):
            return block.model_dump(exclude_none=True)
        return block if isinstance(block, Mapping) else {}

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: Config, cfg: Mapping[str, Any] | None) -> Config:
        """Deep-merge a loose config mapping onto `base`, returning a new instance."""
        if not isinstance(cfg, Mapping) or not cfg:
            return base
        merged = _deep_merge(base.model_dump(by_alias=True), cfg)
        try:
            return cls.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    @classmethod
    def from_env(cls, base: Config | None = None, prefix: str = "CHARTC_") -> Config:
        """
        Build a Config from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - CHARTC_BOXPLOT_EXTENT (number, "tukey" or "min-max")
            - CHARTC_ERRORBAR_EXTENT ("stderr" | "stdev" | "ci" | "iqr")
            - CHARTC_MARK_INVALID (a mark invalid mode, or "null")
            - CHARTC_MARK_COLOR
        """
        s = base or cls()

        def get(name: str) -> str | None:
            return os.getenv(prefix + name)

        mapping: dict[str, Any] = {}
        v = get("BOXPLOT_EXTENT")
        if v:
            mapping.setdefault("boxplot", {})["extent"] = _number_or_token(v)
        v = get("ERRORBAR_EXTENT")
        if v:
            mapping.setdefault("errorbar", {})["extent"] = v.strip().lower()
        v = get("MARK_INVALID")
        if v:
            token = v.strip().lower()
            mapping.setdefault("mark", {})["invalid"] = None if token == "null" else token
        v = get("MARK_COLOR")
        if v:
            mapping.setdefault("mark", {})["color"] = v.strip()

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> Config:
        """
        Build a Config from a TOML file.

        Search order when `path` is None:
            1) ./chartc.toml (with either a top-level [chartc] table or direct keys)
            2) ./pyproject.toml under [tool.chartc]

        Returns defaults if no file is present.
        """
        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "chartc.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: Mapping[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"Cannot parse {p}: {exc}") from exc
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("chartc") if isinstance(tool, dict) else None
            elif isinstance(data.get("chartc"), dict):
                cfg = data["chartc"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(cls(), cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> Config:
        """
        Load a Config applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (chartc.toml, pyproject.toml).
        """
        return cls.from_env(base=cls.from_toml(path))


def _number_or_token(v: str) -> float | str:
    try:
        return float(v)
    except ValueError:
        return v.strip().lower()


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        current = out.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            out[key] = _deep_merge(current, value)
        else:
            out[key] = value
    return out
