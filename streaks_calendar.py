from datetime import date, datetime, timedelta
from typing import Dict, Optional, Tuple

WEEKDAYS = ("su", "m", "tu", "w", "th", "f", "sa")
WEEKDAY_INITIALS = "SMTWTFS"

WEEKDAY_ALIASES: Dict[str, str] = {
    "su": "su",
    "sun": "su",
    "sunday": "su",
    "m": "m",
    "mo": "m",
    "mon": "m",
    "monday": "m",
    "tu": "tu",
    "tue": "tu",
    "tues": "tu",
    "tuesday": "tu",
    "w": "w",
    "we": "w",
    "wed": "w",
    "wednesday": "w",
    "th": "th",
    "thu": "th",
    "thur": "th",
    "thurs": "th",
    "thursday": "th",
    "f": "f",
    "fr": "f",
    "fri": "f",
    "friday": "f",
    "sa": "sa",
    "sat": "sa",
    "saturday": "sa",
}


def today_local() -> date:
    return datetime.now().date()


def format_date_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def normalize_weekday(label: str) -> Optional[str]:
    if not isinstance(label, str):
        return None
    return WEEKDAY_ALIASES.get(label.strip().lower())


def weekday_index(value: date) -> int:
    # date.weekday() counts from Monday; the tokens count from Sunday.
    return (value.weekday() + 1) % 7


def weekday_token(value: date) -> str:
    return WEEKDAYS[weekday_index(value)]


def day_at_offset(offset: int, today: Optional[date] = None) -> Tuple[str, str]:
    """Return the date key and weekday token for today + offset days."""
    base = today_local() if today is None else today
    day = base + timedelta(days=offset)
    return format_date_key(day), weekday_token(day)


def week_header(today: Optional[date] = None) -> str:
    base = today_local() if today is None else today
    start = weekday_index(base)
    return "".join(WEEKDAY_INITIALS[(start - offset) % 7] for offset in range(6, -1, -1))


def parse_date_input(value: str, today: Optional[date] = None) -> Optional[date]:
    """Parse YYYY-MM-DD, or MM-DD in the current year. Returns None when invalid."""
    parts = value.strip().split("-")
    if not all(part.isdecimal() for part in parts):
        return None
    if len(parts) == 3:
        year, month, day = (int(part) for part in parts)
    elif len(parts) == 2:
        year = (today_local() if today is None else today).year
        month, day = (int(part) for part in parts)
    else:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None
