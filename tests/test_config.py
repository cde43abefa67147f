from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from chanplot.channels import SampleSet, ValueKind
from chanplot.config import load_plot_config, parse_plot_config
from chanplot.errors import PlotConfigError
from chanplot.geometry import GeometryKind
from chanplot.master import PlotMaster
from chanplot.surface import RecordingSurface, WindowKind


CONFIG = """
geometry = "xyy"

[window]
kind = "print"
title = "Bench run"
width = 1024
height = 768
path = "bench.pdf"

[titles]
top = "Bench run"
left = "volts"

[render]
mark = true
line = false
fg1 = "navy"

[[channels]]
name = "sweep"
display_low = -1.0
display_high = 1.0
x_channel = true

[[channels]]
name = "response"
kind = "float"
display_high = 10
foreground = "red"

[[channels]]
name = "mode"
kind = "enum"
states = ["idle", "run", "fault"]
"""


class PlotConfigTests(unittest.TestCase):
    def test_load_plot_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "plot.toml"
            path.write_text(CONFIG, encoding="utf-8")
            config = load_plot_config(path)

        self.assertIs(config.geometry, GeometryKind.XYY)
        self.assertIs(config.window.kind, WindowKind.PRINT)
        self.assertEqual((config.window.width, config.window.height, config.window.path), (1024, 768, "bench.pdf"))
        self.assertEqual(config.titles, {"top": "Bench run", "left": "volts"})
        self.assertEqual(config.render, {"mark": True, "line": False, "fg1": "navy"})
        sweep, response, mode = config.channels
        self.assertTrue(sweep.x_channel)
        self.assertEqual((response.kind, response.display_high, response.foreground), (ValueKind.FLOAT, 10.0, "red"))
        self.assertEqual(mode.states, ("idle", "run", "fault"))

    def test_apply_configures_the_master(self) -> None:
        config = parse_plot_config(
            {
                "geometry": "xyy",
                "render": {"mark": True, "fg1": "navy"},
                "titles": {"top": "Bench"},
                "channels": [
                    {"name": "sweep", "x_channel": True},
                    {"name": "response", "foreground": "red"},
                ],
            }
        )
        samples = SampleSet(capacity=8)
        master = PlotMaster(samples).attach(RecordingSurface())
        config.apply(master)
        self.assertIs(master.geometry, GeometryKind.XYY)
        self.assertEqual(master.titles.top, "Bench")
        self.assertTrue(master.options.mark)
        self.assertEqual(master.alt_fg1, "navy")
        self.assertEqual(sorted(samples.channels), ["response", "sweep"])
        self.assertIs(master.x_slave().channel, samples.channels["sweep"])
        self.assertEqual(master.slaves[1].fg, "red")

    def test_apply_reuses_existing_channels(self) -> None:
        samples = SampleSet(capacity=8)
        existing = samples.add_channel("v", display_low=0.0, display_high=3.0)
        master = PlotMaster(samples).attach(RecordingSurface())
        parse_plot_config({"geometry": "time_y", "channels": [{"name": "v"}]}).apply(master)
        self.assertIs(master.slaves[0].channel, existing)

    def test_missing_geometry(self) -> None:
        with self.assertRaisesRegex(ValueError, "plot config missing required field: geometry"):
            parse_plot_config({})

    def test_invalid_values_raise(self) -> None:
        bad = (
            {"geometry": "time_y", "render": {"sparkle": True}},
            {"geometry": "time_y", "render": {"mark": "yes"}},
            {"geometry": "time_y", "titles": {"middle": "x"}},
            {"geometry": "time_y", "window": {"kind": "hologram"}},
            {"geometry": "time_y", "window": {"kind": "eps"}},
            {"geometry": "time_y", "window": {"width": 0}},
            {"geometry": "time_y", "channels": [{"kind": "double"}]},
            {"geometry": "time_y", "channels": [{"name": "v", "kind": "quaternion"}]},
            {"geometry": "time_y", "channels": [{"name": "v", "el_count": 2.5}]},
            {"geometry": "time_y", "channels": {"name": "v"}},
        )
        for raw in bad:
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    parse_plot_config(raw)

    def test_unknown_geometry_is_a_config_error(self) -> None:
        with self.assertRaises(PlotConfigError):
            parse_plot_config({"geometry": "polar"})

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_plot_config("/nonexistent/plot.toml")


if __name__ == "__main__":
    unittest.main()
