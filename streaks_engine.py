from datetime import date
from typing import Any, Dict, Optional

from streaks_calendar import day_at_offset, today_local

EXCLUDED_GLYPH = "/"
COMPLETED_GLYPH = "X"
MISSED_GLYPH = " "

STRIP_DAYS = 7
MAX_LOOKBACK_DAYS = 36500


def compute_streak(
    store: Any,
    habit: str,
    today: Optional[date] = None,
    max_days: int = MAX_LOOKBACK_DAYS,
) -> int:
    """Count the current run of completed days for a habit.

    Past days are walked from yesterday backward. Excluded weekdays are skipped
    without counting, the first unmarked non-excluded day ends the walk, and the
    walk gives up after ``max_days`` calendar days. Today is added on top when it
    is marked, whether or not its weekday is excluded.
    """
    base = today_local() if today is None else today
    streak = 0
    # The walk cannot go past the first representable calendar day.
    max_days = min(max_days, (base - date.min).days)
    for offset in range(-1, -max_days - 1, -1):
        date_key, weekday = day_at_offset(offset, base)
        if store.is_weekday_excluded(habit, weekday):
            continue
        if not store.marker_exists(habit, date_key):
            break
        streak += 1

    today_key, _ = day_at_offset(0, base)
    if store.marker_exists(habit, today_key):
        streak += 1
    return streak


def render_week_strip(store: Any, habit: str, today: Optional[date] = None) -> str:
    """Render the last seven days, oldest first, one glyph per day."""
    base = today_local() if today is None else today
    glyphs = []
    days_available = (base - date.min).days
    for offset in range(-(STRIP_DAYS - 1), 1):
        if -offset > days_available:
            glyphs.append(MISSED_GLYPH)
            continue
        date_key, weekday = day_at_offset(offset, base)
        if store.is_weekday_excluded(habit, weekday):
            glyphs.append(EXCLUDED_GLYPH)
        elif store.marker_exists(habit, date_key):
            glyphs.append(COMPLETED_GLYPH)
        else:
            glyphs.append(MISSED_GLYPH)
    return "".join(glyphs)


def habit_summary(store: Any, habit: str, today: Optional[date] = None) -> Dict[str, Any]:
    base = today_local() if today is None else today
    return {
        "name": habit,
        "strip": render_week_strip(store, habit, base),
        "streak": compute_streak(store, habit, base),
    }
