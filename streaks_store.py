import json
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from streaks_calendar import normalize_weekday

DEFAULT_DATA_PATH = "~/.streaks.json"
DEFAULT_PROFILE = "default"


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _string_set(raw: Any) -> Set[str]:
    if not isinstance(raw, (list, tuple, set)):
        return set()
    return {v for v in raw if isinstance(v, str)}


def _weekday_set(raw: Any) -> Set[str]:
    days = set()
    for value in _string_set(raw):
        token = normalize_weekday(value)
        days.add(token if token else value.strip().lower())
    return days


def _normalize_item(item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    return {
        "name": name,
        "created_at": item.get("created_at") or _now_iso(),
        "updated_at": item.get("updated_at") or item.get("created_at") or _now_iso(),
        "checkins": _string_set(item.get("checkins")),
        "excluded_days": _weekday_set(item.get("excluded_days")),
    }


def _item_payload(item: Dict[str, Any]) -> Dict[str, Any]:
    payload = dict(item)
    payload["checkins"] = sorted(item["checkins"])
    payload["excluded_days"] = sorted(item["excluded_days"])
    return payload


class MemoryStore:
    """Habit records kept in a plain mapping of name to record."""

    def __init__(self, items: Optional[Iterable[Dict[str, Any]]] = None):
        self._items: Dict[str, Dict[str, Any]] = {}
        self._replace(items or [])

    def _replace(self, items: Iterable[Dict[str, Any]]) -> None:
        self._items = {}
        for raw in items:
            item = _normalize_item(raw)
            if item is not None:
                self._items[item["name"]] = item

    def _touch(self, item: Dict[str, Any]) -> None:
        item["updated_at"] = _now_iso()

    def items(self) -> List[Dict[str, Any]]:
        return [self._items[name] for name in self.habits()]

    def habits(self) -> List[str]:
        return sorted(self._items, key=lambda name: (name.lower(), name))

    def habit_exists(self, name: str) -> bool:
        return name in self._items

    def add_habit(self, name: str) -> bool:
        name = name.strip()
        if not name or name in self._items:
            return False
        now = _now_iso()
        self._items[name] = {
            "name": name,
            "created_at": now,
            "updated_at": now,
            "checkins": set(),
            "excluded_days": set(),
        }
        return True

    def delete_habit(self, name: str) -> bool:
        return self._items.pop(name, None) is not None

    def rename_habit(self, old_name: str, new_name: str) -> bool:
        new_name = new_name.strip()
        if old_name not in self._items or not new_name or new_name in self._items:
            return False
        item = self._items.pop(old_name)
        item["name"] = new_name
        self._touch(item)
        self._items[new_name] = item
        return True

    def toggle_marker(self, name: str, date_key: str) -> Optional[bool]:
        item = self._items.get(name)
        if item is None:
            return None
        checkins = item["checkins"]
        if date_key in checkins:
            checkins.remove(date_key)
            present = False
        else:
            checkins.add(date_key)
            present = True
        self._touch(item)
        return present

    def add_markers(self, name: str, date_keys: Iterable[str]) -> Optional[int]:
        item = self._items.get(name)
        if item is None:
            return None
        added = 0
        for date_key in date_keys:
            if date_key not in item["checkins"]:
                item["checkins"].add(date_key)
                added += 1
        self._touch(item)
        return added

    def set_excluded_days(self, name: str, weekdays: Iterable[str]) -> bool:
        item = self._items.get(name)
        if item is None:
            return False
        item["excluded_days"] = _weekday_set(list(weekdays))
        self._touch(item)
        return True

    def excluded_days(self, name: str) -> Set[str]:
        item = self._items.get(name)
        if item is None:
            return set()
        return set(item["excluded_days"])

    def is_weekday_excluded(self, name: str, weekday: str) -> bool:
        item = self._items.get(name)
        if item is None or not isinstance(weekday, str):
            return False
        token = normalize_weekday(weekday) or weekday.strip().lower()
        return token in item["excluded_days"]

    def marker_exists(self, name: str, date_key: str) -> bool:
        item = self._items.get(name)
        if item is None:
            return False
        return date_key in item["checkins"]


class JsonStore(MemoryStore):
    def __init__(self, path: str):
        super().__init__()
        self.path = os.path.expanduser(path)

    def load(self) -> "JsonStore":
        if not os.path.exists(self.path):
            self._replace([])
            return self
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            data = []
        self._replace(data)
        return self

    def save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([_item_payload(item) for item in self.items()], f, indent=2, sort_keys=True)


def _ensure_table(cursor) -> None:
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS streaks_habits (
            profile TEXT NOT NULL,
            name TEXT NOT NULL,
            created_at TEXT,
            updated_at TEXT,
            checkins JSONB,
            excluded_days JSONB,
            PRIMARY KEY (profile, name)
        )
        """
    )


def _json_column(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if value:
        return json.loads(value)
    return []


class PostgresStore(MemoryStore):
    def __init__(self, connect: Callable[[], Any], profile: str = DEFAULT_PROFILE):
        super().__init__()
        self._connect = connect
        self.profile = profile

    def load(self) -> "PostgresStore":
        conn = self._connect()
        with conn:
            with conn.cursor() as cursor:
                _ensure_table(cursor)
                cursor.execute(
                    """
                    SELECT name, created_at, updated_at, checkins, excluded_days
                    FROM streaks_habits
                    WHERE profile = %s
                    ORDER BY name
                    """,
                    (self.profile,),
                )
                rows = cursor.fetchall()
        conn.close()
        self._replace(
            {
                "name": row[0],
                "created_at": row[1],
                "updated_at": row[2],
                "checkins": _json_column(row[3]),
                "excluded_days": _json_column(row[4]),
            }
            for row in rows
        )
        return self

    def save(self) -> None:
        conn = self._connect()
        with conn:
            with conn.cursor() as cursor:
                _ensure_table(cursor)
                cursor.execute(
                    "DELETE FROM streaks_habits WHERE profile = %s AND NOT (name = ANY(%s::text[]))",
                    (self.profile, self.habits()),
                )
                for item in self.items():
                    payload = _item_payload(item)
                    cursor.execute(
                        """
                        INSERT INTO streaks_habits
                            (profile, name, created_at, updated_at, checkins, excluded_days)
                        VALUES (%(profile)s, %(name)s, %(created_at)s, %(updated_at)s, %(checkins)s::jsonb, %(excluded_days)s::jsonb)
                        ON CONFLICT (profile, name) DO UPDATE SET
                            created_at = EXCLUDED.created_at,
                            updated_at = EXCLUDED.updated_at,
                            checkins = EXCLUDED.checkins,
                            excluded_days = EXCLUDED.excluded_days
                        """,
                        {
                            "profile": self.profile,
                            "name": payload["name"],
                            "created_at": payload["created_at"],
                            "updated_at": payload["updated_at"],
                            "checkins": json.dumps(payload["checkins"]),
                            "excluded_days": json.dumps(payload["excluded_days"]),
                        },
                    )
        conn.close()


def _data_path() -> str:
    return os.environ.get("STREAKS_DATA_PATH") or DEFAULT_DATA_PATH


def _db_profile() -> str:
    return os.environ.get("STREAKS_PROFILE", DEFAULT_PROFILE)


def _db_url() -> Optional[str]:
    return os.environ.get("STREAKS_DB_URL") or os.environ.get("DATABASE_URL")


def _db_connector(db_url: str) -> Optional[Callable[[], Any]]:
    try:
        import psycopg
    except ImportError:
        print("The Postgres store needs psycopg installed (pip install 'psycopg[binary]').")
        return None
    return lambda: psycopg.connect(db_url)


def open_store():
    db_url = _db_url()
    if db_url:
        connect = _db_connector(db_url)
        if connect is None:
            return None
        return PostgresStore(connect, _db_profile()).load()
    return JsonStore(_data_path()).load()
