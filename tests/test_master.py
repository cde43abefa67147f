from __future__ import annotations

import unittest
from unittest import mock

from chanplot.channels import SampleSet, ValueKind
from chanplot.errors import PlotConfigError, PlotResourceError, PlotSurfaceError
from chanplot.geometry import GeometryKind
from chanplot.master import PlotMaster
from chanplot.surface import (
    RasterSurface,
    RecordingSurface,
    SurfaceError,
    SurfaceEvent,
    SurfaceEventKind,
    WindowGeometry,
    WindowKind,
)


DEFAULT_GEOMETRY = WindowGeometry(10, 20, 640, 480)


def _two_channel_master(surface: RecordingSurface) -> PlotMaster:
    samples = SampleSet(capacity=16)
    samples.add_channel("a", display_low=0.0, display_high=100.0)
    samples.add_channel("b", display_low=-5.0, display_high=5.0)
    samples.push(0.0, {"a": 50.0, "b": 1.0})
    master = PlotMaster(samples).attach(surface)
    master.add_channel(samples.channels["a"])
    master.add_channel(samples.channels["b"])
    master.set_geometry(GeometryKind.TIME_YY)
    return master


class _Opener:
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[tuple[WindowKind, WindowGeometry, str, str]] = []
        self.surfaces: list[RecordingSurface] = []
        self.fail = fail

    def __call__(self, kind, geometry, name, title):
        self.calls.append((kind, geometry, name, title))
        if self.fail:
            raise SurfaceError("no display")
        surface = RecordingSurface(kind, geometry)
        self.surfaces.append(surface)
        return surface


class PlotMasterTests(unittest.TestCase):
    def test_single_sample_batch_draws_one_anchor_per_channel(self) -> None:
        surface = RecordingSurface()
        master = _two_channel_master(surface)
        master.set_attr("point", True)
        master.draw_grid()
        master.plot_samples(0, 0, incremental=False)

        a, b = master.slaves
        self.assertEqual(surface.segments(), [])
        self.assertEqual([op.args for op in surface.ops_named("point", a.area.area_id)], [(0.0, 50.0)])
        self.assertEqual([op.args for op in surface.ops_named("point", b.area.area_id)], [(0.0, 1.0)])
        self.assertEqual((a.continuity.first, a.continuity.last_y), (False, 50.0))
        self.assertEqual(a.area.world, (0.0, 0.0, 100.0, 100.0))
        self.assertEqual(b.area.world, (0.0, -5.0, 100.0, 5.0))

    def test_incremental_streaming_continues_each_line(self) -> None:
        surface = RecordingSurface()
        master = _two_channel_master(surface)
        master.draw_grid()
        master.plot_samples(0, 0)
        master.samples.push(1.0, {"a": 60.0, "b": 2.0})
        master.plot_samples(1, 1)
        a, b = master.slaves
        self.assertEqual(surface.segments(a.area.area_id), [(0.0, 50.0, 1.0, 60.0)])
        self.assertEqual(surface.segments(b.area.area_id), [(0.0, 1.0, 1.0, 2.0)])

    def test_done_releases_every_region_before_the_surface(self) -> None:
        surface = RecordingSurface()
        master = _two_channel_master(surface)
        master.win_replot()
        master.done(quit=True)
        self.assertTrue(surface.closed)
        self.assertEqual(surface.leaked_areas, set())
        self.assertIsNone(master.surface)
        self.assertEqual(master.slaves, [])
        self.assertEqual(master.window, surface.geometry)

    def test_done_without_quit_keeps_the_surface(self) -> None:
        surface = RecordingSurface()
        master = _two_channel_master(surface)
        master.done()
        self.assertFalse(surface.closed)
        self.assertIs(master.surface, surface)

    def test_win_loop_redraws_per_event_and_tracks_resize(self) -> None:
        events = [
            SurfaceEvent(SurfaceEventKind.EXPOSE),
            SurfaceEvent(SurfaceEventKind.RESIZE, 1000, 500),
            SurfaceEvent(SurfaceEventKind.CLOSE),
        ]
        surface = RecordingSurface(events=events)
        master = _two_channel_master(surface)
        master.win_loop()
        self.assertTrue(surface.mapped)
        self.assertEqual(surface.draw_count, 2)
        self.assertEqual((master.window.width, master.window.height), (1000, 500))
        # A redraw replaces each channel's region rather than stacking new ones.
        self.assertEqual(len(surface.open_areas), 2)
        master.done(quit=True)
        self.assertEqual(surface.leaked_areas, set())

    def test_replot_resolves_time_axis_from_samples(self) -> None:
        surface = RecordingSurface()
        master = _two_channel_master(surface)
        master.samples.push(9.5, {"a": 1.0, "b": 1.0})
        master.set_x_domain(0.0, 1.0, 1, "")
        master.win_replot()
        self.assertEqual((master.origin, master.extent, master.n_int), (0.0, 10.0, 5))
        self.assertTrue(master.label.startswith("sec past "))
        self.assertEqual(len(surface.ops_named("erase_surface")), 1)

    def test_erase_samples_resets_continuity(self) -> None:
        surface = RecordingSurface()
        master = _two_channel_master(surface)
        master.draw_grid()
        master.plot_samples(0, 0)
        master.erase_samples()
        self.assertTrue(all(slave.continuity.first for slave in master.slaves))
        self.assertEqual(len(surface.ops_named("erase")), 2)

    def test_auto_range_on_constant_data_keeps_the_grid_drawable(self) -> None:
        samples = SampleSet(capacity=8)
        samples.add_channel("a")
        for t in range(4):
            samples.push(float(t), {"a": 5.0})
        master = PlotMaster(samples).attach(RasterSurface(WindowKind.SCREEN, WindowGeometry(0, 0, 320, 240)))
        master.add_channel(samples.channels["a"])
        master.set_geometry(GeometryKind.TIME_YY)
        slave = master.slaves[0]

        axis = slave.auto_range()
        self.assertEqual((axis.origin, axis.extent), (0.0, 5.0))
        master.draw_grid()
        self.assertIsNotNone(slave.area)
        master.done(quit=True)

    def test_string_channels_are_rejected(self) -> None:
        samples = SampleSet(capacity=4)
        channel = samples.add_channel("note", kind=ValueKind.STRING)
        master = PlotMaster(samples).attach(RecordingSurface())
        with self.assertLogs("chanplot.master", level="WARNING"):
            with self.assertRaises(PlotConfigError):
                master.add_channel(channel)
        self.assertEqual(master.slaves, [])

    def test_channel_order_assigns_marks_and_line_keys(self) -> None:
        master = _two_channel_master(RecordingSurface())
        self.assertEqual([(s.mark_num, s.line_key) for s in master.slaves], [(0, 1), (1, 2)])

    def test_attributes(self) -> None:
        master = _two_channel_master(RecordingSurface(mono=True))
        master.set_attr("fg1", "navy").set_attr("wrap_x", True)
        self.assertEqual(master.alt_fg1, "navy")
        self.assertTrue(master.options.wrap_x)
        self.assertTrue(master.no_color)
        with self.assertRaises(PlotConfigError):
            master.set_attr("sparkle", True)
        with self.assertRaises(PlotConfigError):
            master.slaves[0].set_attr("sparkle", True)

    def test_x_slave_selection_and_hit_testing(self) -> None:
        master = _two_channel_master(RecordingSurface())
        a, b = master.slaves
        self.assertIs(master.x_slave(), a)
        b.set_attr("x_channel", True)
        self.assertIs(master.x_slave(), b)
        self.assertEqual(master.y_slaves(), [a])
        master.draw_grid()
        x0, y0, x1, y1 = a.frac
        self.assertIs(master.slave_at((x0 + x1) / 2.0, (y0 + y1) / 2.0), a)
        self.assertIsNone(master.slave_at(-1.0, -1.0))

    def test_drawing_without_a_surface_raises(self) -> None:
        master = PlotMaster(SampleSet(capacity=4)).set_geometry("time_y")
        with self.assertRaises(PlotConfigError):
            master.draw_grid()

    def test_surface_failures_surface_as_plot_errors(self) -> None:
        surface = RecordingSurface()
        master = _two_channel_master(surface)
        surface.close()
        with self.assertRaises(PlotSurfaceError):
            master.draw_grid()
        with self.assertRaises(PlotSurfaceError):
            master.win_replot()
        with self.assertRaises(PlotResourceError):
            master.slaves[0].open_area(surface, (0.0, 0.0, 1.0, 1.0), (0.0, 0.0, 1.0, 1.0))


@mock.patch("chanplot.master.resolve_default_geometry", return_value=DEFAULT_GEOMETRY)
class PlotMasterOpenTests(unittest.TestCase):
    def test_open_uses_default_geometry_and_opener(self, _geometry) -> None:
        opener = _Opener()
        master = PlotMaster(SampleSet(capacity=4), opener=opener)
        master.open(WindowKind.PRINT, name="plot.pdf", title="Run 7")
        self.assertEqual(opener.calls, [(WindowKind.PRINT, DEFAULT_GEOMETRY, "plot.pdf", "Run 7")])
        self.assertIs(master.surface, opener.surfaces[0])
        self.assertIs(master.kind, WindowKind.PRINT)

    def test_partial_init_reopens_at_saved_geometry(self, _geometry) -> None:
        opener = _Opener()
        master = PlotMaster(SampleSet(capacity=4), opener=opener)
        master.open()
        opener.surfaces[0].geometry = WindowGeometry(5, 5, 320, 240)
        master.done(quit=True)
        master.open(full_init=False)
        self.assertEqual(opener.calls[-1][1], WindowGeometry(5, 5, 320, 240))

    def test_reopening_shuts_the_previous_surface(self, _geometry) -> None:
        opener = _Opener()
        master = PlotMaster(SampleSet(capacity=4), opener=opener)
        master.open()
        master.open()
        self.assertTrue(opener.surfaces[0].closed)
        self.assertFalse(opener.surfaces[1].closed)

    def test_open_failure_is_a_resource_error(self, _geometry) -> None:
        master = PlotMaster(SampleSet(capacity=4), opener=_Opener(fail=True))
        with self.assertRaises(PlotResourceError):
            master.open()
        self.assertIsNone(master.surface)


if __name__ == "__main__":
    unittest.main()
