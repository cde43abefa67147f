from __future__ import annotations

from datetime import datetime
import unittest

import numpy as np

from chanplot.channels import Channel, SampleSet, ValueKind


class ChannelTests(unittest.TestCase):
    def test_new_channel_is_entirely_missing(self) -> None:
        channel = Channel("v", capacity=4)
        self.assertTrue(all(channel.is_missing(i) for i in range(4)))
        self.assertEqual(channel.label, "v")

    def test_store_clears_missing_and_filled_and_tracks_range(self) -> None:
        channel = Channel("v", capacity=4)
        channel.mark_filled(0, 3)
        channel.store(1, 5.0, status="Hx")
        channel.store(2, -2.0)
        self.assertFalse(channel.is_missing(1))
        self.assertFalse(channel.is_filled(1))
        self.assertTrue(channel.is_filled(0))
        self.assertEqual(channel.status_code(1), "H")
        self.assertEqual(channel.status_code(2), " ")
        self.assertEqual((channel.observed_min, channel.observed_max), (-2.0, 5.0))

    def test_enum_accepts_state_names(self) -> None:
        channel = Channel("mode", kind=ValueKind.ENUM, capacity=2, states=["idle", "run"])
        channel.store(0, "run")
        self.assertEqual(channel.value_at(0), 1.0)

    def test_array_values_widen_to_float64(self) -> None:
        channel = Channel("arr", kind=ValueKind.SHORT, capacity=2, el_count=3)
        channel.store(0, [1, 2, 3])
        elements = channel.elements_at(0)
        self.assertEqual(elements.dtype, np.float64)
        self.assertEqual(elements.tolist(), [1.0, 2.0, 3.0])

    def test_mark_filled_wraps(self) -> None:
        channel = Channel("v", capacity=3)
        channel.mark_filled(2, 0)
        self.assertEqual(channel.filled.tolist(), [True, False, True])

    def test_index_outside_capacity_raises(self) -> None:
        channel = Channel("v", capacity=3)
        with self.assertRaises(ValueError):
            channel.store(3, 1.0)
        with self.assertRaises(ValueError):
            channel.mark_missing(-1)

    def test_invalid_shape_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Channel("v", capacity=0)
        with self.assertRaises(ValueError):
            Channel("v", el_count=0)

    def test_value_kind_parse(self) -> None:
        self.assertIs(ValueKind.parse(" Enum "), ValueKind.ENUM)
        self.assertFalse(ValueKind.STRING.is_numeric)
        self.assertTrue(ValueKind.CHAR.is_numeric)
        with self.assertRaises(ValueError):
            ValueKind.parse("complex")


class SampleSetTests(unittest.TestCase):
    def test_push_wraps_and_tracks_valid_range(self) -> None:
        samples = SampleSet(capacity=3)
        samples.add_channel("v")
        indices = [samples.push(float(t), {"v": float(t)}) for t in range(4)]
        self.assertEqual(indices, [0, 1, 2, 0])
        self.assertEqual((samples.first_data, samples.last_data, samples.sample_count), (1, 0, 3))
        self.assertEqual(samples.delta_sec.tolist(), [3.0, 1.0, 2.0])
        self.assertEqual(samples.ordinal(0), 2)

    def test_absent_channels_are_marked_missing(self) -> None:
        samples = SampleSet(capacity=4)
        samples.add_channel("a")
        b = samples.add_channel("b")
        samples.push(0.0, {"a": 1.0, "b": 2.0})
        samples.push(1.0, {"a": 1.0})
        samples.push(2.0, {"a": 1.0, "b": None})
        self.assertFalse(b.is_missing(0))
        self.assertTrue(b.is_missing(1))
        self.assertTrue(b.is_missing(2))

    def test_restart_and_status_are_per_channel(self) -> None:
        samples = SampleSet(capacity=4)
        a = samples.add_channel("a")
        b = samples.add_channel("b")
        samples.push(0.0, {"a": 1.0, "b": 2.0}, restart=("b",), status={"a": "L"})
        self.assertFalse(a.is_restart(0))
        self.assertTrue(b.is_restart(0))
        self.assertEqual(a.status_code(0), "L")

    def test_unknown_and_duplicate_channels_raise(self) -> None:
        samples = SampleSet(capacity=4)
        samples.add_channel("a")
        with self.assertRaises(ValueError):
            samples.add_channel("a")
        with self.assertRaises(ValueError):
            samples.push(0.0, {"nope": 1.0})

    def test_requested_count_defaults_to_capacity(self) -> None:
        self.assertEqual(SampleSet(capacity=7).requested_count, 7)
        self.assertEqual(SampleSet(capacity=7, requested_count=3).requested_count, 3)

    def test_reference_label(self) -> None:
        samples = SampleSet(capacity=2, ref_time=datetime(2024, 3, 4, 5, 6, 7))
        self.assertEqual(samples.ref_label, "03/04/24 05:06:07")


if __name__ == "__main__":
    unittest.main()
