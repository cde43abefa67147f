from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import Sequence

from chanplot.axis import auto_ends_and_interval
from chanplot.channels import Channel, SampleSet
from chanplot.config import PlotConfig, load_plot_config
from chanplot.errors import PlotError
from chanplot.master import PlotMaster
from chanplot.surface.base import SurfaceError, WindowGeometry, WindowKind
from chanplot.surface.raster import RasterSurface


LOGGER = logging.getLogger(__name__)
SUFFIX_KINDS = {".pdf": WindowKind.PRINT, ".eps": WindowKind.EPS}


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="chanplot")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a configured plot of synthetic channel data.")
    render.add_argument("config", type=Path)
    render.add_argument("--out", type=Path, default=None, help="Output file (.pdf, .eps or an image format).")
    render.add_argument("--samples", type=int, default=200)
    render.add_argument("--interval", type=float, default=0.5, help="Seconds between samples.")
    render.add_argument(
        "--batch",
        type=int,
        default=0,
        help="Stream samples incrementally in batches of this size. Default: one batch replot.",
    )
    render.add_argument("--log-level", default="WARNING")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))

    if args.command == "render":
        try:
            return _render(args)
        except (PlotError, SurfaceError, ValueError, FileNotFoundError) as exc:
            LOGGER.error("render failed: %s", exc)
            return 2
    return 1


def _render(args: argparse.Namespace) -> int:
    if args.samples <= 0:
        raise ValueError("--samples must be > 0")
    if args.interval <= 0:
        raise ValueError("--interval must be > 0")
    if args.batch < 0:
        raise ValueError("--batch must be >= 0")

    config = load_plot_config(args.config)
    kind, path = _resolve_output(config, args.out)
    samples = SampleSet(capacity=args.samples)
    surface = RasterSurface(
        kind,
        WindowGeometry(0, 0, config.window.width, config.window.height),
        path=path if kind.is_document else None,
    )
    master = PlotMaster(samples).attach(surface)
    config.apply(master)
    origin, extent, n_int = auto_ends_and_interval(0.0, (args.samples - 1) * args.interval)
    master.set_x_domain(origin, extent, n_int, f"sec past {samples.ref_label}")

    if args.batch:
        _stream(master, args.samples, args.interval, args.batch)
        surface.publish()
    else:
        for n in range(args.samples):
            _push_synthetic(samples, n, args.interval)
        master.win_replot()

    if not kind.is_document and path is not None:
        surface.save(path)
    master.done(quit=True)
    LOGGER.info("rendered %d samples of %d channel(s)", samples.sample_count, len(samples.channels))
    return 0


def _stream(master: PlotMaster, count: int, interval: float, batch: int) -> None:
    samples = master.samples
    master.draw_grid()
    n = 0
    while n < count:
        begin = None
        for _ in range(min(batch, count - n)):
            index = _push_synthetic(samples, n, interval)
            begin = index if begin is None else begin
            n += 1
        master.plot_samples(begin, samples.last_data, incremental=True)


def _resolve_output(config: PlotConfig, out: Path | None) -> tuple[WindowKind, Path | None]:
    if out is None:
        return config.window.kind, Path(config.window.path) if config.window.path else None
    return SUFFIX_KINDS.get(out.suffix.lower(), WindowKind.SCREEN), out


def _push_synthetic(samples: SampleSet, n: int, interval: float) -> int:
    t = n * interval
    values = {name: _synthetic_value(channel, n) for name, channel in samples.channels.items()}
    return samples.push(t, values)


def _synthetic_value(channel: Channel, n: int) -> float | list[float]:
    if channel.kind.is_enum:
        return (n // 10) % max(1, len(channel.states))
    lo, hi = channel.display_low, channel.display_high
    if lo == hi:
        lo, hi = -1.0, 1.0
    mid = (lo + hi) / 2.0
    amp = (hi - lo) * 0.4
    phase = n / 15.0 + len(channel.name)
    if channel.el_count > 1:
        return [mid + amp * math.sin(phase + k / 3.0) for k in range(channel.el_count)]
    return mid + amp * math.sin(phase)
