from __future__ import annotations

import math
import unittest

import numpy as np

from luvatrix_graphing import JET_DARK, Bounds, ContourMask, GraphDataError, GraphKind, GriddedSurface, ValuesChanged
from luvatrix_graphing.colormap import CLEAR


GRID = [[0.0, 1.0], [2.0, 3.0]]


class GriddedSurfaceTests(unittest.TestCase):
    def test_bounds_z_range_and_color_bounds(self) -> None:
        surface = GriddedSurface(GRID, 0.0, 1.0, 0.0, 10.0, name="heat")
        self.assertIs(surface.kind, GraphKind.SURFACE)
        self.assertEqual(surface.shape, (2, 2))
        self.assertEqual(surface.bounds, Bounds(0.0, 1.0, 0.0, 10.0))
        self.assertEqual(surface.z_bounds(), (0.0, 3.0))
        self.assertEqual((surface.cmin, surface.cmax), (0.0, 3.0))
        self.assertIs(surface.color_map, JET_DARK)

    def test_bilinear_lookup_and_clamping(self) -> None:
        surface = GriddedSurface(GRID, 0.0, 1.0, 0.0, 10.0)
        self.assertEqual(surface.value_at(0.5, 5.0), 1.5)
        self.assertEqual(surface.value_at(0.0, 5.0), 0.5)
        self.assertEqual(surface.value_at(5.0, 20.0), 3.0)
        self.assertEqual(surface.value_at(-5.0, -20.0), 0.0)

    def test_transpose_swaps_query_axes(self) -> None:
        surface = GriddedSurface(GRID, 0.0, 1.0, 0.0, 10.0)
        surface.transpose = True
        self.assertEqual(surface.value_at(5.0, 0.5), 1.5)
        self.assertEqual(surface.value_at(10.0, 0.0), 1.0)

    def test_sample_grid_matches_point_lookup(self) -> None:
        surface = GriddedSurface(GRID, 0.0, 1.0, 0.0, 10.0)
        out = surface.sample_grid([0.0, 0.5, 1.0], [0.0, 10.0])
        np.testing.assert_allclose(out, [[0.0, 1.0], [1.0, 2.0], [2.0, 3.0]])
        surface.transpose = True
        out = surface.sample_grid([0.0, 10.0], [0.0, 0.5, 1.0])
        np.testing.assert_allclose(out, [[0.0, 1.0, 2.0], [1.0, 2.0, 3.0]])

    def test_color_bounds_drive_normalization(self) -> None:
        surface = GriddedSurface(GRID, 0.0, 1.0, 0.0, 10.0)
        events: list[ValuesChanged] = []
        surface.subscribe(events.append)
        self.assertEqual(surface.normalized_value(1.5), 0.5)
        surface.set_color_bounds(1.0, 2.0)
        self.assertEqual(len(events), 1)
        self.assertEqual(surface.normalized_value(1.5), 0.5)
        self.assertEqual(surface.normalized_value(3.0), 2.0)
        self.assertEqual(surface.normalized_value(3.0, 0.0, 6.0), 0.5)
        self.assertEqual(surface.normalized_value(3.0, 2.0, 2.0), 0.0)

    def test_replacing_values_resets_color_bounds(self) -> None:
        surface = GriddedSurface(GRID, 0.0, 1.0, 0.0, 10.0)
        surface.set_color_bounds(1.0, 2.0)
        surface.set_values([[5.0, 6.0], [7.0, 9.0]], 0.0, 1.0, 0.0, 1.0)
        self.assertEqual((surface.cmin, surface.cmax), (5.0, 9.0))

    def test_color_at_uses_filter_then_color_map(self) -> None:
        surface = GriddedSurface([[math.nan, 1.0], [2.0, 3.0]], 0.0, 1.0, 0.0, 10.0)
        self.assertEqual((surface.zmin, surface.zmax), (1.0, 3.0))
        self.assertEqual(surface.color_at(0.0, 0.0), CLEAR)
        half = 128.0 / 255.0
        self.assertEqual(surface.color_at(1.0, 10.0), (1.0, half, half, 1.0))

    def test_color_at_nan_cell_with_permissive_filter(self) -> None:
        permissive = JET_DARK.with_filter(lambda v: True)
        surface = GriddedSurface([[math.nan, 1.0], [2.0, 3.0]], 0.0, 1.0, 0.0, 10.0, color=permissive)
        self.assertEqual(surface.color_at(0.0, 0.0), JET_DARK.lookup(0.0))

    def test_auto_bounds_trim_to_accepted_samples(self) -> None:
        values = np.full((3, 3), np.nan)
        values[1, 1] = 1.0
        values[2, 1] = 2.0
        surface = GriddedSurface(values, 0.0, 2.0, 0.0, 4.0)
        self.assertEqual(surface.auto_bounds(Bounds()), Bounds(1.0, 2.0, 2.0, 2.0))
        empty = GriddedSurface(np.full((3, 3), np.nan), 0.0, 2.0, 0.0, 4.0)
        self.assertEqual(empty.auto_bounds(Bounds()), Bounds(0.0, 2.0, 0.0, 4.0))

    def test_empty_grid_reads_zero(self) -> None:
        surface = GriddedSurface([], 0.0, 1.0, 0.0, 1.0)
        self.assertFalse(surface.has_values())
        self.assertEqual(surface.z_bounds(), (0.0, 0.0))
        self.assertEqual(surface.value_at(0.5, 0.5), 0.0)
        self.assertEqual(surface.describe_at(0.5, 0.5), "")

    def test_non_finite_edges_are_rejected(self) -> None:
        with self.assertRaises(GraphDataError):
            GriddedSurface(GRID, 0.0, math.inf, 0.0, 1.0)
        with self.assertRaises(GraphDataError):
            GriddedSurface([1.0, 2.0], 0.0, 1.0, 0.0, 1.0)

    def test_reading_uses_z_unit_and_names(self) -> None:
        surface = GriddedSurface(GRID, 0.0, 1.0, 0.0, 10.0, name="heat")
        surface.z_unit = " K"
        self.assertEqual(surface.describe_at(0.5, 5.0, with_name=True), "heat: 1.5 K")
        self.assertEqual(surface.z_name, "heat")
        self.assertEqual(surface.y_name, "")


class ContourMaskTests(unittest.TestCase):
    def _mask(self, **kwargs) -> ContourMask:
        values = np.full((3, 3), -1.0)
        values[1, 1] = 1.0
        return ContourMask(values, 0.0, 2.0, 0.0, 2.0, name="edge", **kwargs)

    def test_outline_marks_failing_neighbours_of_passing_samples(self) -> None:
        mask = self._mask()
        self.assertIs(mask.kind, GraphKind.CONTOUR)
        out = mask.sample_mask(3, 3, 0.0, 2.0, 0.0, 2.0)
        np.testing.assert_array_equal(out, [[False, True, False], [True, False, True], [False, True, False]])

    def test_filled_mode_covers_failing_samples(self) -> None:
        out = self._mask(line_only=False).sample_mask(3, 3, 0.0, 2.0, 0.0, 2.0)
        expected = np.ones((3, 3), dtype=bool)
        expected[1, 1] = False
        np.testing.assert_array_equal(out, expected)

    def test_filled_mode_covers_view_outside_grid(self) -> None:
        mask = ContourMask(np.ones((3, 3)), 0.0, 2.0, 0.0, 2.0, line_only=False)
        out = mask.sample_mask(5, 3, 0.0, 4.0, 0.0, 2.0)
        np.testing.assert_array_equal(out, [[False, False, False, True, True]] * 3)

    def test_mask_rows_start_at_bottom_and_respect_transpose(self) -> None:
        mask = ContourMask([[1.0, -1.0], [1.0, -1.0]], 0.0, 1.0, 0.0, 1.0, line_only=False)
        np.testing.assert_array_equal(mask.sample_mask(2, 2, 0.0, 1.0, 0.0, 1.0), [[False, False], [True, True]])
        mask.transpose = True
        np.testing.assert_array_equal(mask.sample_mask(2, 2, 0.0, 1.0, 0.0, 1.0), [[False, True], [False, True]])

    def test_custom_criteria_and_point_queries(self) -> None:
        mask = self._mask(mask_criteria=lambda v: v > 0.5)
        self.assertTrue(mask.mask_at(1.0, 1.0))
        self.assertFalse(mask.mask_at(0.0, 0.0))
        self.assertEqual(mask.value_at(1.0, 1.0), 1.0)

    def test_mask_never_describes_or_widens_bounds(self) -> None:
        mask = self._mask()
        running = Bounds(-5.0, 5.0, -5.0, 5.0)
        self.assertIs(mask.auto_bounds(running), running)
        self.assertEqual(mask.describe_at(1.0, 1.0, with_name=True), "")
        self.assertIsNone(mask.z_bounds())

    def test_degenerate_view_returns_empty_mask(self) -> None:
        self.assertEqual(self._mask().sample_mask(0, 4, 0.0, 1.0, 0.0, 1.0).shape, (4, 0))


if __name__ == "__main__":
    unittest.main()
