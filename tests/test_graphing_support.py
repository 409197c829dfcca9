from __future__ import annotations

from decimal import Decimal
import math
import os
import unittest
from unittest import mock

import numpy as np

from luvatrix_graphing import (
    UNSET,
    ZERO,
    AxesChangeRequest,
    AxisLimitError,
    Bounds,
    ChangeNotifier,
    ExternalValueChange,
    GraphDataError,
    GraphingConfig,
)
from luvatrix_graphing.adapters.normalize import as_channels, as_grid, as_points, as_vector
from luvatrix_graphing.bounds import finite_range, include_range
from luvatrix_graphing.events import resolve_axis_index
from luvatrix_graphing.interpolation import (
    MISSING,
    SegmentHit,
    bilinear,
    bilinear_grid,
    locate_equal_steps,
    locate_nearest_segment,
    locate_sorted,
    snap_coordinate,
)


class GraphingConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = GraphingConfig()
        self.assertEqual(config.value_format, "g")
        self.assertEqual(config.bound_margin, 1.05)
        self.assertEqual(config.forced_tick_divisions, 10)

    def test_invalid_construction_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            GraphingConfig(bound_margin=0.5)
        with self.assertRaises(ValueError):
            GraphingConfig(forced_tick_divisions=0)
        with self.assertRaises(ValueError):
            GraphingConfig(value_format="q")

    def test_from_env_reads_prefixed_variables(self) -> None:
        env = {
            "LUVATRIX_GRAPHING_VALUE_FORMAT": ".3f",
            "LUVATRIX_GRAPHING_BOUND_MARGIN": "1.1",
            "LUVATRIX_GRAPHING_FORCED_TICK_DIVISIONS": "8",
        }
        with mock.patch.dict(os.environ, env, clear=False):
            config = GraphingConfig.from_env()
        self.assertEqual(config, GraphingConfig(value_format=".3f", bound_margin=1.1, forced_tick_divisions=8))

    def test_from_env_falls_back_with_warning_on_bad_values(self) -> None:
        env = {
            "LUVATRIX_GRAPHING_VALUE_FORMAT": "not-a-format",
            "LUVATRIX_GRAPHING_BOUND_MARGIN": "0.2",
            "LUVATRIX_GRAPHING_FORCED_TICK_DIVISIONS": "many",
        }
        with mock.patch.dict(os.environ, env, clear=False):
            with self.assertLogs("luvatrix_graphing.config", level="WARNING") as logs:
                config = GraphingConfig.from_env()
        self.assertEqual(config, GraphingConfig())
        self.assertEqual(len(logs.records), 3)


class EventsTests(unittest.TestCase):
    def test_notifier_delivers_until_cancelled(self) -> None:
        notifier: ChangeNotifier[int] = ChangeNotifier()
        seen: list[int] = []
        sub = notifier.subscribe(seen.append)
        notifier.emit(1)
        sub.cancel()
        sub.cancel()
        notifier.emit(2)
        self.assertEqual(seen, [1])
        self.assertFalse(sub.active)
        self.assertEqual(len(notifier), 0)

    def test_callback_may_cancel_another_subscription_mid_emit(self) -> None:
        notifier: ChangeNotifier[str] = ChangeNotifier()
        seen: list[str] = []
        later = None

        def first(event: str) -> None:
            seen.append("first")
            assert later is not None
            later.cancel()

        notifier.subscribe(first)
        later = notifier.subscribe(lambda event: seen.append("later"))
        notifier.emit("go")
        self.assertEqual(seen, ["first"])

    def test_axis_index_resolution(self) -> None:
        self.assertEqual(resolve_axis_index("x"), 0)
        self.assertEqual(resolve_axis_index(" Z "), 2)
        self.assertEqual(resolve_axis_index(1), 1)
        for bad in (3, -1, "w", True, 1.0):
            with self.subTest(bad=bad):
                with self.assertRaises(AxisLimitError):
                    resolve_axis_index(bad)  # type: ignore[arg-type]

    def test_requests_reject_non_finite_limits(self) -> None:
        with self.assertRaises(AxisLimitError):
            AxesChangeRequest(0, math.nan, 1.0)
        with self.assertRaises(AxisLimitError):
            ExternalValueChange(1, 0.0, math.inf)
        request = AxesChangeRequest("y", 0.0, 1.0)
        self.assertEqual(request.axis_index, 1)
        self.assertEqual(request.axis, "y")

    def test_axis_limit_error_is_a_value_error(self) -> None:
        self.assertTrue(issubclass(AxisLimitError, ValueError))
        self.assertTrue(issubclass(GraphDataError, ValueError))


class BoundsTests(unittest.TestCase):
    def test_include_treats_nan_as_unset(self) -> None:
        merged = UNSET.include(Bounds(1.0, 2.0, math.nan, 4.0))
        self.assertTrue(merged.same_as(Bounds(1.0, 2.0, math.nan, 4.0)))
        merged = merged.include(Bounds(-1.0, 1.5, 0.0, 3.0))
        self.assertEqual(merged, Bounds(-1.0, 2.0, 0.0, 4.0))

    def test_incomplete_bounds_collapse_to_zero(self) -> None:
        self.assertIs(Bounds(1.0, 2.0, math.nan, 4.0).collapsed(), ZERO)
        complete = Bounds(1.0, 2.0, 3.0, 4.0)
        self.assertIs(complete.collapsed(), complete)
        self.assertEqual((complete.width, complete.height), (1.0, 1.0))

    def test_same_as_is_nan_aware(self) -> None:
        separate_nan = Bounds(float("nan"), float("nan"), float("nan"), float("nan"))
        self.assertTrue(UNSET.same_as(Bounds()))
        self.assertTrue(UNSET.same_as(separate_nan))
        self.assertTrue(separate_nan.same_as(UNSET))
        self.assertFalse(UNSET.same_as(ZERO))

    def test_scaled_applies_axis_functions(self) -> None:
        scaled = Bounds(1.0, 100.0, 0.0, 1.0).scaled(math.log10, lambda v: v * 2.0)
        self.assertEqual(scaled, Bounds(0.0, 2.0, 0.0, 2.0))

    def test_finite_range_skips_non_finite(self) -> None:
        self.assertEqual(finite_range(np.asarray([np.nan, 3.0, -np.inf, 1.0])), (1.0, 3.0))
        lo, hi = finite_range(np.asarray([np.nan]))
        self.assertTrue(math.isnan(lo) and math.isnan(hi))
        self.assertEqual(include_range((math.nan, math.nan), (1.0, 2.0)), (1.0, 2.0))
        self.assertEqual(include_range((0.0, 1.5), (1.0, 2.0)), (0.0, 2.0))


class InterpolationTests(unittest.TestCase):
    def test_snap_coordinate_snaps_near_knots(self) -> None:
        self.assertEqual(snap_coordinate(2.0 + 1e-12), (2, 0.0))
        index, fraction = snap_coordinate(2.25)
        self.assertEqual(index, 2)
        self.assertAlmostEqual(fraction, 0.25)

    def test_equal_steps_clamps_and_interpolates(self) -> None:
        self.assertEqual(locate_equal_steps(-1.0, 0.0, 3.0, 4), SegmentHit(0))
        self.assertEqual(locate_equal_steps(9.0, 0.0, 3.0, 4), SegmentHit(3))
        self.assertEqual(locate_equal_steps(1.5, 0.0, 3.0, 4), SegmentHit(1, 0.5))
        self.assertEqual(locate_equal_steps(2.0, 0.0, 3.0, 4), SegmentHit(2))
        self.assertIs(locate_equal_steps(math.nan, 0.0, 3.0, 4), MISSING)

    def test_sorted_lookup_uses_last_sample_below(self) -> None:
        xs = np.asarray([0.0, 1.0, 2.0, 4.0])
        hit = locate_sorted(2.5, xs)
        self.assertEqual(hit, SegmentHit(2, 0.25))
        self.assertEqual(hit.blend(np.asarray([0.0, 10.0, 20.0, 40.0])), 25.0)
        self.assertEqual(locate_sorted(-3.0, xs), SegmentHit(0))
        self.assertEqual(locate_sorted(4.0, xs), SegmentHit(3))

    def test_missing_hit_blends_to_nan(self) -> None:
        self.assertTrue(math.isnan(MISSING.blend(np.asarray([1.0, 2.0]))))

    def test_nearest_segment_picks_visually_closest(self) -> None:
        xs = np.asarray([0.0, 1.0, 0.0])
        ys = np.asarray([0.0, 0.0, 1.0])
        hit = locate_nearest_segment(0.5, 0.1, xs, ys)
        self.assertEqual(hit.index, 0)
        self.assertAlmostEqual(hit.fraction, 0.5)

    def test_nearest_segment_endpoint_moves_to_next_index(self) -> None:
        xs = np.asarray([0.0, 1.0])
        ys = np.asarray([0.0, 0.0])
        self.assertEqual(locate_nearest_segment(5.0, 0.0, xs, ys), SegmentHit(1))

    def test_bilinear_uses_axis_interpolation_on_exact_lines(self) -> None:
        grid = np.asarray([[0.0, 1.0], [2.0, 3.0]])
        self.assertEqual(bilinear(grid, 0.5, 0.5, 0.0, 1.0, 0.0, 1.0), 1.5)
        self.assertEqual(bilinear(grid, 1.0, 0.0, 0.0, 1.0, 0.0, 1.0), 2.0)
        self.assertEqual(bilinear(grid, 0.0, 0.5, 0.0, 1.0, 0.0, 1.0), 0.5)
        self.assertEqual(bilinear(np.empty((0, 0)), 0.5, 0.5, 0.0, 1.0, 0.0, 1.0), 0.0)

    def test_bilinear_grid_matches_scalar_lookup(self) -> None:
        grid = np.asarray([[0.0, 1.0], [2.0, 3.0]])
        out = bilinear_grid(grid, np.asarray([0.0, 0.5, 1.0]), np.asarray([0.0, 1.0]), 0.0, 1.0, 0.0, 1.0)
        np.testing.assert_allclose(out, [[0.0, 1.0], [1.0, 2.0], [2.0, 3.0]])
        for i, x in enumerate((0.0, 0.5, 1.0)):
            for j, y in enumerate((0.0, 1.0)):
                self.assertAlmostEqual(out[i, j], bilinear(grid, x, y, 0.0, 1.0, 0.0, 1.0))


class NormalizeTests(unittest.TestCase):
    def test_vector_accepts_none_and_decimal(self) -> None:
        out = as_vector([Decimal("1.5"), None, 3], label="values")
        self.assertEqual(out[0], 1.5)
        self.assertTrue(math.isnan(out[1]))
        self.assertEqual(out.dtype, np.float64)

    def test_vector_copies_input(self) -> None:
        source = np.asarray([1.0, 2.0])
        out = as_vector(source, label="values")
        out[0] = 9.0
        self.assertEqual(source[0], 1.0)

    def test_rejects_bad_shapes_and_types(self) -> None:
        with self.assertRaises(GraphDataError):
            as_vector([[1.0, 2.0]], label="values")
        with self.assertRaises(GraphDataError):
            as_vector("abc", label="values")
        with self.assertRaisesRegex(GraphDataError, "non-numeric"):
            as_vector(["a", "b"], label="values")
        with self.assertRaises(GraphDataError):
            as_points([[1.0, 2.0, 3.0]], dims=2, label="points")
        with self.assertRaises(GraphDataError):
            as_grid([1.0, 2.0], label="grid")

    def test_empty_inputs_keep_their_shape(self) -> None:
        self.assertEqual(as_points([], dims=3, label="points").shape, (0, 3))
        self.assertEqual(as_grid([], label="grid").shape, (0, 0))
        self.assertEqual(as_channels(None, length=4, label="metadata").shape, (0, 4))

    def test_channels_must_match_series_length(self) -> None:
        channels = as_channels([[1, 2, 3], np.asarray([4.0, 5.0, 6.0])], length=3, label="metadata")
        self.assertEqual(channels.shape, (2, 3))
        with self.assertRaisesRegex(GraphDataError, "does not match"):
            as_channels([[1, 2]], length=3, label="metadata")

    def test_torch_inputs_are_accepted(self) -> None:
        try:
            import torch
        except ImportError:
            self.skipTest("torch is not installed")
        out = as_points(torch.tensor([[0.0, 1.0], [2.0, 3.0]], dtype=torch.float32), dims=2, label="points")
        np.testing.assert_allclose(out, [[0.0, 1.0], [2.0, 3.0]])

    def test_pandas_inputs_are_accepted(self) -> None:
        try:
            import pandas as pd
        except ImportError:
            self.skipTest("pandas is not installed")
        out = as_vector(pd.Series([1.0, None, 2.0]), label="values")
        self.assertTrue(math.isnan(out[1]))
        frame = pd.DataFrame({"speed": [1.0, 2.0], "load": [3.0, 4.0]})
        np.testing.assert_allclose(as_channels(frame, length=2, label="metadata"), [[1.0, 2.0], [3.0, 4.0]])
        with self.assertRaises(GraphDataError):
            as_vector(frame, label="values")


if __name__ == "__main__":
    unittest.main()
