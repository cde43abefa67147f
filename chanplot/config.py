from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import tomllib
from typing import TYPE_CHECKING, Any

from chanplot.channels import ValueKind
from chanplot.geometry import GeometryKind
from chanplot.surface.base import WindowKind

if TYPE_CHECKING:
    from chanplot.master import PlotMaster


RENDER_FLAGS = (
    "line",
    "point",
    "mark",
    "show_status",
    "fill_under",
    "wrap_x",
    "x_label",
    "x_annot",
    "y_label",
    "y_annot",
    "mono",
)
RENDER_COLORS = ("fg1", "fg2")
TITLE_KEYS = ("top", "left", "bottom", "right")


@dataclass(frozen=True)
class WindowConfig:
    kind: WindowKind = WindowKind.SCREEN
    title: str = ""
    width: int = 800
    height: int = 600
    path: str = ""


@dataclass(frozen=True)
class ChannelConfig:
    name: str
    kind: ValueKind = ValueKind.DOUBLE
    el_count: int = 1
    display_low: float = 0.0
    display_high: float = 0.0
    states: tuple[str, ...] = ()
    x_channel: bool = False
    foreground: str | None = None


@dataclass(frozen=True)
class PlotConfig:
    geometry: GeometryKind
    window: WindowConfig = field(default_factory=WindowConfig)
    titles: dict[str, str] = field(default_factory=dict)
    render: dict[str, Any] = field(default_factory=dict)
    channels: tuple[ChannelConfig, ...] = ()

    def apply(self, master: PlotMaster) -> None:
        """Push geometry, titles, render attributes and channels into an opened master."""
        master.set_geometry(self.geometry)
        master.set_titles(**self.titles)
        for name, value in self.render.items():
            master.set_attr(name, value)
        for entry in self.channels:
            channel = master.samples.channels.get(entry.name)
            if channel is None:
                channel = master.samples.add_channel(
                    entry.name,
                    entry.kind,
                    el_count=entry.el_count,
                    display_low=entry.display_low,
                    display_high=entry.display_high,
                    states=entry.states,
                )
            slave = master.add_channel(channel)
            if entry.x_channel:
                slave.set_attr("x_channel", True)
            if entry.foreground:
                slave.set_attr("foreground", entry.foreground)


def load_plot_config(path: str | Path) -> PlotConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"plot config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    return parse_plot_config(raw)


def parse_plot_config(raw: dict[str, Any]) -> PlotConfig:
    try:
        geometry_name = raw["geometry"]
    except KeyError as exc:
        raise ValueError(f"plot config missing required field: {exc.args[0]}") from exc
    geometry = GeometryKind.parse(_coerce_str(geometry_name, "geometry"))

    window = _parse_window(_coerce_table(raw.get("window", {}), "window"))
    titles_raw = _coerce_table(raw.get("titles", {}), "titles")
    titles = {key: _coerce_str(value, f"titles.{key}") for key, value in titles_raw.items() if key in TITLE_KEYS}
    _reject_unknown(titles_raw, TITLE_KEYS, "titles")

    render_raw = _coerce_table(raw.get("render", {}), "render")
    _reject_unknown(render_raw, RENDER_FLAGS + RENDER_COLORS, "render")
    render: dict[str, Any] = {}
    for key, value in render_raw.items():
        if key in RENDER_COLORS:
            render[key] = _coerce_str(value, f"render.{key}")
        else:
            render[key] = _coerce_bool(value, f"render.{key}")

    channels_raw = raw.get("channels", [])
    if not isinstance(channels_raw, list):
        raise ValueError("channels must be an array of tables")
    channels = tuple(_parse_channel(_coerce_table(entry, "channels"), i) for i, entry in enumerate(channels_raw))
    return PlotConfig(geometry=geometry, window=window, titles=titles, render=render, channels=channels)


def _parse_window(raw: dict[str, Any]) -> WindowConfig:
    kind_name = _coerce_str(raw.get("kind", "screen"), "window.kind")
    try:
        kind = WindowKind(kind_name.lower())
    except ValueError:
        raise ValueError(f"window.kind must be one of screen/print/eps, got {kind_name!r}") from None
    width = _coerce_int(raw.get("width", 800), "window.width")
    height = _coerce_int(raw.get("height", 600), "window.height")
    if width <= 0 or height <= 0:
        raise ValueError("window.width/window.height must be > 0")
    path = _coerce_str(raw.get("path", ""), "window.path")
    if kind.is_document and not path:
        raise ValueError(f"window.path is required for {kind.value} output")
    return WindowConfig(
        kind=kind,
        title=_coerce_str(raw.get("title", ""), "window.title"),
        width=width,
        height=height,
        path=path,
    )


def _parse_channel(raw: dict[str, Any], index: int) -> ChannelConfig:
    prefix = f"channels[{index}]"
    try:
        name = _coerce_str(raw["name"], f"{prefix}.name")
    except KeyError as exc:
        raise ValueError(f"plot config missing required field: {prefix}.{exc.args[0]}") from exc
    states = raw.get("states", [])
    if not isinstance(states, list) or not all(isinstance(s, str) for s in states):
        raise ValueError(f"{prefix}.states must be a list of strings")
    foreground = raw.get("foreground")
    return ChannelConfig(
        name=name,
        kind=ValueKind.parse(_coerce_str(raw.get("kind", "double"), f"{prefix}.kind")),
        el_count=_coerce_int(raw.get("el_count", 1), f"{prefix}.el_count"),
        display_low=_coerce_float(raw.get("display_low", 0.0), f"{prefix}.display_low"),
        display_high=_coerce_float(raw.get("display_high", 0.0), f"{prefix}.display_high"),
        states=tuple(states),
        x_channel=_coerce_bool(raw.get("x_channel", False), f"{prefix}.x_channel"),
        foreground=None if foreground is None else _coerce_str(foreground, f"{prefix}.foreground"),
    )


def _reject_unknown(raw: dict[str, Any], allowed: tuple[str, ...], section: str) -> None:
    unknown = sorted(set(raw) - set(allowed))
    if unknown:
        raise ValueError(f"unknown {section} field(s): {', '.join(unknown)}")


def _coerce_table(value: Any, field_name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table")
    return value


def _coerce_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


def _coerce_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return value


def _coerce_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


def _coerce_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number")
    return float(value)
