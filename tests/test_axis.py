from __future__ import annotations

from datetime import datetime
import unittest

from chanplot.axis import AxisRange, auto_ends_and_interval, auto_range, resolve_time_axis, setup_axis
from chanplot.channels import Channel, SampleSet, ValueKind


class AxisTests(unittest.TestCase):
    def test_enum_axis_spans_state_indices(self) -> None:
        channel = Channel("mode", kind=ValueKind.ENUM, states=["a", "b", "c"])
        axis = setup_axis(channel)
        self.assertEqual(axis, AxisRange(0.0, 2.0, 2, ("a", "b", "c")))

    def test_enum_axis_with_one_state_gets_two_blank_states(self) -> None:
        channel = Channel("mode", kind=ValueKind.ENUM, states=["only"])
        axis = setup_axis(channel)
        self.assertEqual(axis, AxisRange(0.0, 1.0, 1, (" ", " ")))

    def test_numeric_axis_uses_display_limits(self) -> None:
        channel = Channel("v", display_low=-5.0, display_high=5.0)
        self.assertEqual(setup_axis(channel), AxisRange(-5.0, 5.0, 5, None))

    def test_degenerate_limits_fall_back_to_observed_range(self) -> None:
        channel = Channel("v", capacity=4)
        channel.store(0, 3.0)
        channel.store(1, 7.0)
        axis = setup_axis(channel)
        self.assertEqual((axis.origin, axis.extent), (3.0, 7.0))

    def test_degenerate_everything_anchors_at_zero(self) -> None:
        self.assertEqual(setup_axis(Channel("v")).extent, 10.0)

        negative = Channel("v", capacity=2)
        negative.store(0, -4.0)
        axis = setup_axis(negative)
        self.assertEqual((axis.origin, axis.extent), (-4.0, 0.0))

        positive = Channel("v", capacity=2)
        positive.store(0, 6.0)
        axis = setup_axis(positive)
        self.assertEqual((axis.origin, axis.extent), (0.0, 6.0))

    def test_auto_range_keeps_interval_count(self) -> None:
        channel = Channel("v", capacity=4, display_low=0.0, display_high=100.0)
        channel.store(0, 12.0)
        channel.store(1, 40.0)
        axis = auto_range(channel, AxisRange(0.0, 100.0, 4))
        self.assertEqual(axis, AxisRange(12.0, 40.0, 4, None))

    def test_auto_range_widens_a_single_value(self) -> None:
        constant = Channel("v", capacity=4)
        for i in range(4):
            constant.store(i, 5.0)
        axis = auto_range(constant, AxisRange(0.0, 1.0, 3))
        self.assertEqual(axis, AxisRange(0.0, 5.0, 3, None))

        negative = Channel("v", capacity=2)
        negative.store(0, -2.5)
        self.assertEqual(auto_range(negative, AxisRange(0.0, 1.0)), AxisRange(-2.5, 0.0))

        empty = auto_range(Channel("v"), AxisRange(0.0, 1.0))
        self.assertEqual((empty.origin, empty.extent), (0.0, 10.0))

    def test_auto_ends_round_outwards(self) -> None:
        self.assertEqual(auto_ends_and_interval(0.0, 99.5), (0.0, 100.0, 5))
        self.assertEqual(auto_ends_and_interval(2.0, 7.0), (2.0, 7.0, 5))

    def test_time_axis_from_buffered_samples(self) -> None:
        samples = SampleSet(capacity=4, ref_time=datetime(2024, 3, 4, 5, 6, 7))
        samples.add_channel("v")
        samples.push(2.0, {"v": 1.0})
        samples.push(7.0, {"v": 1.0})
        axis = resolve_time_axis(samples, 0.0, 1.0)
        self.assertEqual((axis.origin, axis.extent, axis.n_int), (2.0, 7.0, 5))
        self.assertEqual(axis.label, "sec past 03/04/24 05:06:07")
        self.assertEqual(axis.ref_text, "03/04/24 05:06:07")

    def test_time_axis_without_a_span_is_elapsed_seconds(self) -> None:
        samples = SampleSet(capacity=4)
        samples.add_channel("v")
        samples.push(2.0, {"v": 1.0})
        axis = resolve_time_axis(samples, 0.0, 1.0)
        self.assertEqual((axis.origin, axis.extent, axis.n_int, axis.label), (0.0, 100.0, 5, "elapsed seconds"))

        samples.push(3.0, {"v": 1.0})
        axis = resolve_time_axis(samples, 5.0, 5.0)
        self.assertEqual(axis.label, "elapsed seconds")


if __name__ == "__main__":
    unittest.main()
