from __future__ import annotations

import unittest

from chanplot.channels import SampleSet
from chanplot.geometry import GeometryKind
from chanplot.master import PlotMaster
from chanplot.smith import ADMITTANCE_ARCS, IMPEDANCE_ARCS, draw_admittance_family, draw_impedance_family
from chanplot.surface import RecordingSurface, WindowGeometry


def _master(kind: GeometryKind, *, mono: bool = False) -> tuple[PlotMaster, RecordingSurface]:
    surface = RecordingSurface(geometry=WindowGeometry(0, 0, 600, 600), mono=mono)
    master = PlotMaster(SampleSet(capacity=8)).attach(surface)
    samples = master.samples
    master.add_channel(samples.add_channel("re", display_low=0.0, display_high=1.0))
    master.add_channel(samples.add_channel("im", display_low=0.0, display_high=1.0))
    master.set_geometry(kind)
    return master, surface


class SmithChartTests(unittest.TestCase):
    def test_impedance_family(self) -> None:
        surface = RecordingSurface()
        area = surface.open_area((0.0, 0.0, 1.0, 1.0), (0.0, 0.0, 1.0, 1.0))
        draw_impedance_family(area)
        self.assertEqual(len(surface.ops_named("arc")), 6 + len(IMPEDANCE_ARCS))
        self.assertEqual(len(surface.ops_named("text")), 6 + len(IMPEDANCE_ARCS))
        self.assertEqual([op.args for op in surface.ops_named("line")], [(0.0, 0.5, 1.0, 0.5)])
        outer = surface.ops_named("arc")[0].args
        self.assertEqual(outer, (0.5, 0.5, 0.5, 0.0, 360.0, 5.0))

    def test_secondary_admittance_family_omits_outer_circle_and_labels(self) -> None:
        surface = RecordingSurface()
        area = surface.open_area((0.0, 0.0, 1.0, 1.0), (0.0, 0.0, 1.0, 1.0))
        draw_admittance_family(area, primary=False)
        self.assertEqual(len(surface.ops_named("arc")), 5 + len(ADMITTANCE_ARCS))
        self.assertEqual(surface.ops_named("text"), [])
        self.assertEqual(surface.ops_named("line"), [])

    def test_immittance_overlay_in_monochrome(self) -> None:
        master, surface = _master(GeometryKind.SMITH_IMMITTANCE, mono=True)
        master.draw_grid()
        overlay = surface.areas[2]
        self.assertTrue(overlay.closed)
        keys = [op.args for op in surface.ops_named("set_line_key", overlay.area_id)]
        self.assertEqual(keys, [(1,), (0,)])
        arcs = surface.ops_named("arc", overlay.area_id)
        self.assertEqual(len(arcs), 5 + len(ADMITTANCE_ARCS) + 6 + len(IMPEDANCE_ARCS))

    def test_admittance_overlay_uses_alternate_foreground(self) -> None:
        master, surface = _master(GeometryKind.SMITH_ADMITTANCE)
        master.set_attr("fg2", "darkgreen")
        master.draw_grid()
        overlay = surface.areas[2]
        self.assertEqual([op.args for op in surface.ops_named("set_foreground", overlay.area_id)], [("darkgreen",)])
        self.assertEqual(surface.ops_named("set_line_key", overlay.area_id), [])
        self.assertEqual(len(surface.ops_named("text", overlay.area_id)), 6 + len(ADMITTANCE_ARCS))

    def test_y_channels_get_a_region_over_the_chart(self) -> None:
        master, surface = _master(GeometryKind.SMITH_IMPEDANCE)
        master.draw_grid()
        x_slave, y_slave = master.slaves
        self.assertIsNone(x_slave.area)
        overlay = surface.areas[2]
        self.assertEqual(y_slave.area.frac, overlay.frac)
        self.assertEqual(y_slave.area.world, (0.0, 0.0, 1.0, 1.0))
        self.assertEqual(surface.open_areas, {y_slave.area.area_id})

    def test_samples_plot_against_the_x_channel(self) -> None:
        master, surface = _master(GeometryKind.SMITH_IMMITTANCE)
        samples = master.samples
        samples.push(0.0, {"re": 0.2, "im": 0.4})
        samples.push(1.0, {"re": 0.6, "im": 0.8})
        master.draw_grid()
        y_slave = master.slaves[1]
        master.plot_samples(0, 1, incremental=False)
        self.assertEqual(surface.segments(y_slave.area.area_id), [(0.2, 0.4, 0.6, 0.8)])


if __name__ == "__main__":
    unittest.main()
