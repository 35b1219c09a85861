import unittest
from datetime import date

import streaks_engine
from streaks_store import MemoryStore

SUNDAY = date(2026, 10, 18)
WEDNESDAY = date(2026, 10, 14)


def _store(checkins, excluded_days=()):
    return MemoryStore(
        [{"name": "Run", "checkins": list(checkins), "excluded_days": list(excluded_days)}]
    )


class ComputeStreakTests(unittest.TestCase):
    def test_fresh_habit_has_no_streak(self):
        store = _store([])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 0)

    def test_unknown_habit_has_no_streak(self):
        self.assertEqual(streaks_engine.compute_streak(MemoryStore(), "Nope", SUNDAY), 0)

    def test_three_consecutive_days_including_today(self):
        store = _store(["2026-10-18", "2026-10-17", "2026-10-16", "2026-10-14"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 3)

    def test_unmarked_today_keeps_yesterdays_run(self):
        store = _store(["2026-10-17", "2026-10-16"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 2)

    def test_unmarked_yesterday_breaks_run(self):
        store = _store(["2026-10-18", "2026-10-16", "2026-10-15"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 1)

    def test_excluded_today_unmarked(self):
        store = _store(["2026-10-17", "2026-10-16"], excluded_days=["su"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 2)

    def test_excluded_today_marked_still_counts(self):
        store = _store(["2026-10-18", "2026-10-17"], excluded_days=["su"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 2)

    def test_excluded_gap_does_not_break_run(self):
        # Monday 2026-10-12 is unmarked but excluded.
        store = _store(["2026-10-13", "2026-10-11"], excluded_days=["Monday"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", WEDNESDAY), 2)

    def test_excluded_marked_day_does_not_extend_run(self):
        store = _store(["2026-10-13", "2026-10-12", "2026-10-11"], excluded_days=["m"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", WEDNESDAY), 2)

    def test_weekend_exclusion_spans_weeks(self):
        checkins = [
            "2026-10-16",
            "2026-10-15",
            "2026-10-14",
            "2026-10-13",
            "2026-10-12",
            "2026-10-09",
        ]
        store = _store(checkins, excluded_days=["sa", "su"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 6)

    def test_run_across_year_boundary(self):
        store = _store(["2026-01-01", "2025-12-31", "2025-12-30"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", date(2026, 1, 2)), 3)

    def test_walk_stops_at_lookback_bound(self):
        checkins = ["2026-10-%02d" % day for day in range(1, 19)]
        store = _store(checkins)
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY, max_days=5), 6)
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY), 18)

    def test_every_weekday_excluded_terminates(self):
        store = _store(["2026-10-18", "2026-10-17"], excluded_days=["su", "m", "tu", "w", "th", "f", "sa"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", SUNDAY, max_days=400), 1)

    def test_walk_stops_at_first_calendar_day(self):
        self.assertEqual(streaks_engine.compute_streak(_store([]), "Run", date.min), 0)
        store = _store(["0001-01-02", "0001-01-01"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", date(1, 1, 3)), 2)

    def test_every_weekday_excluded_in_early_years(self):
        store = _store(["0050-01-01"], excluded_days=["su", "m", "tu", "w", "th", "f", "sa"])
        self.assertEqual(streaks_engine.compute_streak(store, "Run", date(50, 1, 1)), 1)

    def test_streak_is_idempotent(self):
        store = _store(["2026-10-18", "2026-10-17"], excluded_days=["f"])
        first = streaks_engine.compute_streak(store, "Run", SUNDAY)
        second = streaks_engine.compute_streak(store, "Run", SUNDAY)
        self.assertEqual(first, second)


class RenderWeekStripTests(unittest.TestCase):
    def test_fresh_habit_is_all_missed(self):
        store = _store([])
        strip = streaks_engine.render_week_strip(store, "Run", SUNDAY)
        self.assertEqual(strip, streaks_engine.MISSED_GLYPH * 7)

    def test_strip_orders_oldest_to_today(self):
        store = _store(["2026-10-12", "2026-10-14", "2026-10-18", "2026-10-11"], excluded_days=["sa"])
        self.assertEqual(streaks_engine.render_week_strip(store, "Run", SUNDAY), "X X  /X")

    def test_exclusion_dominates_today(self):
        store = _store(["2026-10-18"], excluded_days=["SU"])
        strip = streaks_engine.render_week_strip(store, "Run", SUNDAY)
        self.assertEqual(len(strip), 7)
        self.assertEqual(strip[-1], streaks_engine.EXCLUDED_GLYPH)
        self.assertEqual(strip[0], streaks_engine.MISSED_GLYPH)

    def test_days_before_first_calendar_day_are_missed(self):
        self.assertEqual(streaks_engine.render_week_strip(_store([]), "Run", date.min), " " * 7)
        store = _store(["0001-01-01"])
        self.assertEqual(streaks_engine.render_week_strip(store, "Run", date.min), "      X")
        self.assertEqual(streaks_engine.render_week_strip(store, "Run", date(1, 1, 3)), "    X  ")

    def test_glyphs_are_distinct(self):
        glyphs = {
            streaks_engine.EXCLUDED_GLYPH,
            streaks_engine.COMPLETED_GLYPH,
            streaks_engine.MISSED_GLYPH,
        }
        self.assertEqual(len(glyphs), 3)
        self.assertEqual(streaks_engine.MISSED_GLYPH, " ")

    def test_strip_is_idempotent(self):
        store = _store(["2026-10-15"], excluded_days=["m"])
        first = streaks_engine.render_week_strip(store, "Run", SUNDAY)
        self.assertEqual(first, streaks_engine.render_week_strip(store, "Run", SUNDAY))

    def test_habit_summary(self):
        store = _store(["2026-10-18", "2026-10-17"])
        summary = streaks_engine.habit_summary(store, "Run", SUNDAY)
        self.assertEqual(summary, {"name": "Run", "strip": "     XX", "streak": 2})


if __name__ == "__main__":
    unittest.main()
