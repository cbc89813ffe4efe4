from __future__ import annotations

import datetime as dt
import math
import unittest
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import numpy as np

from plotgeom import (
    GeneratedTicks,
    NumericScalar,
    Period,
    PlotDataError,
    Range,
    TemporalScalar,
    TickLabels,
    generate_ticks,
)
from plotgeom.scales import MAX_TICKS, NumericTickState, format_tick, generate_nice_ticks


class NumericTickTests(unittest.TestCase):
    def test_round_steps_fill_available_space(self) -> None:
        ticks = generate_ticks(Range(0.0, 10.0), 300.0)
        self.assertEqual(ticks.values, [0.0, 2.0, 4.0, 6.0, 8.0, 10.0])
        self.assertEqual(ticks.labels, ["0", "2", "4", "6", "8", "10"])

    def test_labels_share_decimals(self) -> None:
        ticks = generate_ticks(Range(1.5, 3.0), 200.0)
        self.assertEqual(ticks.labels, ["1.5", "2.0", "2.5", "3.0"])
        self.assertEqual(ticks.format(4.0), "4.0")

    def test_ticks_never_leave_the_range(self) -> None:
        rng = np.random.default_rng(11)
        for _ in range(200):
            lo = float(rng.uniform(-1e4, 1e4))
            hi = lo + float(rng.uniform(1e-3, 1e4))
            pixels = float(rng.uniform(1.0, 2000.0))
            ticks = generate_ticks(Range(lo, hi), pixels)
            values = ticks.values
            self.assertGreaterEqual(len(values), 1)
            self.assertLessEqual(len(values), max(TickLabels().target_count(pixels), 2))
            for v in values:
                self.assertTrue(lo <= v <= hi, f"{v} outside [{lo}, {hi}]")
            self.assertEqual(values, sorted(set(values)))

    def test_overshooting_end_is_clamped(self) -> None:
        ticks = generate_ticks(Range(-0.3, 0.3), 350.0)
        self.assertEqual(ticks.values[0], -0.3)
        self.assertEqual(ticks.values[-1], 0.3)
        self.assertIn("0.0", ticks.labels)

    def test_degenerate_range_gives_single_tick(self) -> None:
        ticks = generate_ticks(Range(5.0, 5.0), 400.0)
        self.assertEqual(ticks.values, [5.0])
        self.assertEqual(ticks.labels, ["5"])

    def test_empty_range_gives_no_ticks(self) -> None:
        ticks = generate_ticks(Range(), 400.0)
        self.assertEqual(len(ticks), 0)
        self.assertEqual(ticks, GeneratedTicks.none())

    def test_no_pixels_gives_single_tick(self) -> None:
        for pixels in (0.0, -25.0, math.nan):
            ticks = generate_ticks(Range(2.0, 8.0), pixels)
            self.assertEqual(ticks.values, [2.0])

    def test_fixed_ticks_outside_range_are_dropped(self) -> None:
        config = TickLabels.from_ticks([20.0, 0.0, 5.0, 10.0])
        ticks = generate_ticks(Range(0.0, 12.0), 400.0, config)
        self.assertEqual(ticks.values, [0.0, 5.0, 10.0])
        self.assertEqual(ticks.labels, ["0", "5", "10"])

    def test_formatter_overrides_labels_only(self) -> None:
        config = TickLabels().with_formatter(lambda v: f"{v:g} ms")
        ticks = generate_ticks(Range(0.0, 10.0), 300.0, config)
        self.assertEqual(ticks.values[:2], [0.0, 2.0])
        self.assertEqual(ticks.labels[:2], ["0 ms", "2 ms"])

    def test_label_spacing_must_be_positive(self) -> None:
        with self.assertRaises(PlotDataError):
            TickLabels(min_label_spacing=0.0)

    def test_denser_spacing_gives_more_ticks(self) -> None:
        sparse = generate_ticks(Range(0.0, 100.0), 500.0, TickLabels(min_label_spacing=100.0))
        dense = generate_ticks(Range(0.0, 100.0), 500.0, TickLabels(min_label_spacing=25.0))
        self.assertGreater(len(dense), len(sparse))


class TickFormattingTests(unittest.TestCase):
    def test_tick_formatting_uses_consistent_decimals_from_step(self) -> None:
        state = NumericTickState(step=0.5)
        self.assertEqual([state.format(v) for v in (1.5, 2.0, 2.5, 3.0)], ["1.5", "2.0", "2.5", "3.0"])

    def test_tick_formatting_preserves_integer_trailing_zeros(self) -> None:
        state = NumericTickState(step=10.0)
        self.assertEqual([state.format(v) for v in (20.0, 30.0, 40.0)], ["20", "30", "40"])

    def test_tick_formatting_snaps_near_zero(self) -> None:
        self.assertEqual(NumericTickState(step=1.0).format(-4.4409e-16), "0")
        self.assertEqual(format_tick(-0.0, step=0.5), "0.0")

    def test_large_values_stay_fixed_point_while_the_step_allows(self) -> None:
        self.assertEqual(format_tick(2.5e7, step=5e6), "25000000")
        self.assertEqual(format_tick(1_000_003.0, step=1.0), "1000003")

    def test_extreme_steps_use_scientific_notation(self) -> None:
        self.assertEqual(format_tick(2.5e10, step=5e9), "2.5e+10")
        self.assertEqual(format_tick(0.0, step=5e9), "0")
        self.assertEqual(format_tick(5e-8, step=5e-8), "5e-08")
        self.assertEqual(format_tick(2.5e10), "2.5e+10")

    def test_adjacent_labels_stay_distinct(self) -> None:
        for lo, hi in ((1e6, 1e6 + 5.0), (1.0, 1.0002), (0.0, 2e-7), (0.0, 5e9), (1e12, 1e12 + 3.0)):
            ticks = generate_ticks(Range(lo, hi), 300.0)
            self.assertGreater(len(ticks), 1)
            self.assertEqual(len(set(ticks.labels)), len(ticks), ticks.labels)
        near_one = generate_ticks(Range(1.0, 1.0002), 300.0)
        self.assertEqual(near_one.labels[0], "1.00000")
        self.assertEqual(near_one.labels[-1], "1.00020")
        self.assertEqual(generate_ticks(Range(1e6, 1e6 + 5.0), 300.0).labels[:2], ["1000000", "1000001"])

    def test_state_formats_further_values(self) -> None:
        state = NumericTickState(step=0.25)
        self.assertEqual(state.format(1.0), "1.00")

    def test_nice_ticks_step_is_reported(self) -> None:
        ticks, step = generate_nice_ticks(0.0, 1.0, 6)
        self.assertEqual(step, 0.2)
        self.assertEqual(ticks.size, 6)

    def test_tick_count_is_capped(self) -> None:
        ticks, _ = generate_nice_ticks(0.0, 1.0, 10**9)
        self.assertLessEqual(ticks.size, MAX_TICKS)
        huge = generate_ticks(Range(0.0, 1.0), 5e7)
        self.assertGreater(len(huge), 2)
        self.assertLessEqual(len(huge), MAX_TICKS)


class TemporalTickTests(unittest.TestCase):
    def test_positions_are_utc_seconds(self) -> None:
        scalar = TemporalScalar()
        self.assertEqual(scalar.position(dt.datetime(1970, 1, 2)), 86400.0)
        self.assertEqual(scalar.from_position(86400.0), dt.datetime(1970, 1, 2))
        aware = TemporalScalar(tz=dt.timezone.utc)
        moment = dt.datetime(2024, 5, 1, 12, tzinfo=dt.timezone.utc)
        self.assertEqual(aware.from_position(aware.position(moment)), moment)

    def test_month_span_uses_week_boundaries(self) -> None:
        r = Range(dt.datetime(2024, 1, 1), dt.datetime(2024, 1, 31))
        ticks = generate_ticks(r, 500.0, scalar=TemporalScalar())
        self.assertEqual(ticks.state.period, Period.WEEK)
        self.assertEqual(ticks.values, [dt.datetime(2024, 1, d) for d in (1, 8, 15, 22, 29)])
        self.assertEqual(ticks.labels[0], "2024-01-01")

    def test_year_span_uses_quarter_months(self) -> None:
        r = Range(dt.datetime(2024, 1, 15), dt.datetime(2024, 12, 20))
        ticks = generate_ticks(r, 600.0, scalar=TemporalScalar())
        self.assertEqual(ticks.labels, ["2024-04", "2024-07", "2024-10"])

    def test_hours_within_one_day_omit_the_date(self) -> None:
        r = Range(dt.datetime(2024, 3, 10, 0, 30), dt.datetime(2024, 3, 10, 6, 10))
        ticks = generate_ticks(r, 400.0, scalar=TemporalScalar())
        self.assertEqual(ticks.labels, ["01:00", "02:00", "03:00", "04:00", "05:00", "06:00"])

    def test_decades_use_multi_year_steps(self) -> None:
        r = Range(dt.datetime(1990, 6, 1), dt.datetime(2024, 6, 1))
        ticks = generate_ticks(r, 400.0, scalar=TemporalScalar())
        self.assertEqual(ticks.labels, ["1995", "2000", "2005", "2010", "2015", "2020"])

    def test_restricted_periods_still_fit(self) -> None:
        r = Range(dt.datetime(2024, 1, 1), dt.datetime(2024, 1, 31))
        ticks = generate_ticks(r, 500.0, scalar=TemporalScalar(periods={Period.DAY}))
        values = ticks.values
        self.assertGreaterEqual(len(values), 2)
        self.assertLessEqual(len(values), 10)
        for v in values:
            self.assertTrue(r.contains_pos(v))
            self.assertEqual((v - values[0]).days % 5, 0)

    def test_degenerate_temporal_range(self) -> None:
        moment = dt.datetime(2024, 1, 1)
        ticks = generate_ticks(Range(moment, moment), 300.0, scalar=TemporalScalar())
        self.assertEqual(ticks.values, [moment])
        self.assertEqual(ticks.labels, ["2024-01-01 00:00:00"])

    def test_dst_gap_does_not_repeat_ticks(self) -> None:
        try:
            new_york = ZoneInfo("America/New_York")
        except ZoneInfoNotFoundError:
            self.skipTest("timezone database not available")
        scalar = TemporalScalar(tz=new_york)
        r = Range(dt.datetime(2024, 3, 10, 0, tzinfo=new_york), dt.datetime(2024, 3, 10, 6, tzinfo=new_york))
        ticks = generate_ticks(r, 350.0, scalar=scalar)
        self.assertEqual(ticks.state.period, Period.HOUR)
        positions = [scalar.position(v) for v in ticks.values]
        self.assertTrue(all(b > a for a, b in zip(positions, positions[1:])), positions)
        self.assertNotIn("02:00", ticks.labels)
        self.assertEqual(ticks.labels[:2], ["00:00", "01:00"])
        self.assertEqual(ticks.labels[-1], "06:00")

    def test_temporal_tick_count_is_capped(self) -> None:
        r = Range(dt.datetime(2024, 1, 1), dt.datetime(2024, 1, 2))
        ticks = generate_ticks(r, 1e9, scalar=TemporalScalar())
        self.assertEqual(ticks.state.period, Period.SECOND)
        self.assertEqual(len(ticks), MAX_TICKS)

    def test_numeric_and_temporal_scalars_are_interchangeable(self) -> None:
        for scalar, r in (
            (NumericScalar(), Range(0.0, 1.0)),
            (TemporalScalar(), Range(dt.datetime(2024, 1, 1), dt.datetime(2024, 1, 2))),
        ):
            ticks = generate_ticks(r, 300.0, scalar=scalar)
            self.assertGreater(len(ticks), 1)
            positions = [scalar.position(v) for v in ticks.values]
            self.assertEqual(positions, sorted(positions))


if __name__ == "__main__":
    unittest.main()
