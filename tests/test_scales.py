from __future__ import annotations

import math
import unittest

import numpy as np

from calcpal_graph.scales import CoordinateMapper, axis_ticks, format_axis_label, format_tick, tick_interval
from calcpal_graph.viewport import Viewport


class TickIntervalTests(unittest.TestCase):
    def test_exact_intervals(self) -> None:
        self.assertEqual(tick_interval(10.0), 5.0)
        self.assertEqual(tick_interval(1.0), 0.5)
        self.assertEqual(tick_interval(100.0), 50.0)
        self.assertEqual(tick_interval(7.0), 2.5)
        self.assertEqual(tick_interval(30.0), 10.0)
        self.assertAlmostEqual(tick_interval(0.3), 0.1, places=12)
        self.assertEqual(tick_interval(360.0), 100.0)

    def test_divisions_stay_in_band(self) -> None:
        # The 1/2/5 base interval leaves range/interval in [1, 2.5), so the
        # adjustment always halves it, giving between 2 and 5 divisions.
        ranges = list(np.geomspace(1e-4, 1e7, 301)) + [
            0.1,
            0.2,
            0.5,
            1.0,
            2.0,
            5.0,
            10.0,
            20.0,
            50.0,
            100.0,
            200.0,
            500.0,
            1000.0,
        ]
        for value_range in ranges:
            with self.subTest(range=value_range):
                interval = tick_interval(float(value_range))
                self.assertGreater(interval, 0.0)
                ratio = value_range / interval
                self.assertGreaterEqual(ratio, 2.0 - 1e-9)
                self.assertLessEqual(ratio, 5.0 + 1e-9)

    def test_boundary_multiples_pick_a_nice_interval(self) -> None:
        for value_range, allowed in ((20.0, (5.0, 10.0)), (50.0, (10.0, 25.0)), (2.0, (0.5, 1.0)), (5.0, (1.0, 2.5))):
            with self.subTest(range=value_range):
                self.assertIn(tick_interval(value_range), allowed)

    def test_rejects_non_positive_or_non_finite_range(self) -> None:
        for bad in (0.0, -1.0, math.inf, math.nan):
            with self.subTest(range=bad):
                with self.assertRaises(ValueError):
                    tick_interval(bad)


class AxisTicksTests(unittest.TestCase):
    def test_ticks_are_integer_multiples_with_exact_zero(self) -> None:
        ticks = axis_ticks(-10.0, 10.0, 5.0)
        self.assertEqual(ticks.tolist(), [-10.0, -5.0, 0.0, 5.0, 10.0])
        halves = axis_ticks(-1.0, 1.0, 0.5)
        self.assertEqual(halves.tolist(), [-1.0, -0.5, 0.0, 0.5, 1.0])

    def test_starts_at_first_multiple_above_lower_bound(self) -> None:
        ticks = axis_ticks(-7.0, 7.0, 5.0)
        self.assertEqual(ticks.tolist(), [-5.0, 0.0, 5.0])

    def test_range_without_multiples_is_empty(self) -> None:
        self.assertEqual(axis_ticks(0.5, 0.9, 1.0).size, 0)

    def test_rejects_bad_interval(self) -> None:
        with self.assertRaises(ValueError):
            axis_ticks(0.0, 1.0, 0.0)


class CoordinateMapperTests(unittest.TestCase):
    def test_viewport_corners_map_to_surface_edges(self) -> None:
        cases = [
            (Viewport(-10.0, 10.0, -5.0, 5.0, 1.0), 800, 600),
            (Viewport(0.0, 1.0, 100.0, 250.0, 0.01), 320, 200),
            (Viewport(-1e3, -1.0, -3.5, 7.25, 2.0), 17, 9),
        ]
        for vp, width, height in cases:
            with self.subTest(viewport=vp, width=width, height=height):
                mapper = CoordinateMapper(vp, width, height)
                self.assertAlmostEqual(mapper.x_to_pixel(vp.x_min), 0.0)
                self.assertAlmostEqual(mapper.x_to_pixel(vp.x_max), float(width))
                self.assertAlmostEqual(mapper.y_to_pixel(vp.y_min), float(height))
                self.assertAlmostEqual(mapper.y_to_pixel(vp.y_max), 0.0)

    def test_y_axis_is_inverted(self) -> None:
        mapper = CoordinateMapper(Viewport(-10.0, 10.0, -10.0, 10.0, 1.0), 800, 600)
        self.assertEqual(mapper.to_pixel(0.0, 0.0), (400.0, 300.0))
        self.assertLess(mapper.y_to_pixel(5.0), mapper.y_to_pixel(-5.0))

    def test_maps_numpy_arrays(self) -> None:
        mapper = CoordinateMapper(Viewport(-10.0, 10.0, -10.0, 10.0, 1.0), 800, 600)
        px = mapper.x_to_pixel(np.asarray([-10.0, 0.0, 10.0]))
        self.assertTrue(np.allclose(px, [0.0, 400.0, 800.0]))

    def test_rejects_empty_surface(self) -> None:
        with self.assertRaises(ValueError):
            CoordinateMapper(Viewport(), 0, 600)


class TickLabelTests(unittest.TestCase):
    def test_labels_use_interval_decimals(self) -> None:
        self.assertEqual(format_axis_label(2.0, 1.0), "2")
        self.assertEqual(format_axis_label(-2.5, 2.5), "-2.5")
        self.assertEqual(format_axis_label(3 * 0.1, 0.1), "0.3")
        self.assertEqual(format_axis_label(20.0, 10.0), "20")

    def test_degree_marker(self) -> None:
        self.assertEqual(format_axis_label(90.0, 45.0, degrees=True), "90°")
        self.assertEqual(format_axis_label(-100.0, 100.0, degrees=True), "-100°")

    def test_near_zero_snaps_to_zero(self) -> None:
        self.assertEqual(format_tick(-4.4409e-16, step=1.0), "0")


if __name__ == "__main__":
    unittest.main()
