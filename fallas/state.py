"""Persistent visit state, keyed by falla number."""

import json
import os
import sqlite3
import tempfile
from datetime import datetime
from typing import Mapping, Optional

from .config import CONFIG
from .models import VisitState


class StateStore:
    """Durable mapping of falla number -> VisitState.

    Subclasses provide load_all/save_all; get/set are built on top of them.
    load_all never raises: an unreadable medium reads as an empty mapping.
    """

    def load_all(self) -> dict[int, VisitState]:
        raise NotImplementedError

    def save_all(self, states: Mapping[int, VisitState]):
        raise NotImplementedError

    def get(self, number: int) -> VisitState:
        """Get the state for a falla, or the default when none was saved"""
        return self.load_all().get(number, VisitState())

    def set(self, number: int, state: VisitState) -> VisitState:
        """Replace the whole state for one falla and persist every entry"""
        # Re-validate in case fields were mutated after construction
        state = VisitState(state.visited, state.wishlisted, state.rating_major, state.rating_child)
        states = self.load_all()
        states[number] = state
        self.save_all(states)
        return state

    def close(self):
        pass


class MemoryStateStore(StateStore):
    """In-process store, mainly for tests"""

    def __init__(self, states: Optional[Mapping[int, VisitState]] = None):
        self._states: dict[int, dict] = {}
        if states:
            self.save_all(states)

    def load_all(self) -> dict[int, VisitState]:
        return {n: VisitState.from_dict(d) for n, d in self._states.items()}

    def save_all(self, states: Mapping[int, VisitState]):
        self._states = {int(n): s.to_dict() for n, s in states.items()}


def _key_for_number(number: int) -> str:
    return f"{CONFIG['state_key_prefix']}{number}"


def _number_for_key(key: str) -> Optional[int]:
    prefix = CONFIG["state_key_prefix"]
    if not key.startswith(prefix):
        return None
    try:
        return int(key[len(prefix):])
    except ValueError:
        return None


class JSONStateStore(StateStore):
    """Single JSON document, {"falla_<n>": {...}}, replaced atomically on save"""

    def __init__(self, path: str = CONFIG["state_json_path"]):
        self.path = path

    def load_all(self) -> dict[int, VisitState]:
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            print(f"Could not read state file {self.path}: {e}")
            return {}

        if not isinstance(raw, dict):
            print(f"Ignoring state file {self.path}: expected an object")
            return {}

        states = {}
        for key, value in raw.items():
            number = _number_for_key(key)
            if number is None or not isinstance(value, dict):
                continue
            states[number] = VisitState.from_dict(value)
        return states

    def save_all(self, states: Mapping[int, VisitState]):
        payload = {_key_for_number(n): s.to_dict() for n, s in states.items()}
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        # Write beside the target then rename, so readers never see half a file
        fd, tmp_path = tempfile.mkstemp(prefix=".fallas_state_", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class SQLiteStateStore(StateStore):
    """SQLite database holding one row per falla"""

    def __init__(self, db_path: str = CONFIG["state_db_path"]):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        try:
            self._init_schema()
        except sqlite3.DatabaseError as e:
            self._recover_corrupt_db(e)

    def _recover_corrupt_db(self, error: sqlite3.DatabaseError):
        """Move an unreadable database aside and start from an empty one"""
        self.conn.close()
        backup = f"{self.db_path}.corrupt-{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        print(f"Could not open visit state {self.db_path} ({error}); moved to {backup}")
        os.replace(self.db_path, backup)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._init_schema()

    def _init_schema(self):
        """Create database tables"""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS visit_state (
                falla_number INTEGER PRIMARY KEY,
                visited INTEGER NOT NULL DEFAULT 0,
                wish INTEGER NOT NULL DEFAULT 0,
                rating_major INTEGER NOT NULL DEFAULT 0,
                rating_child INTEGER NOT NULL DEFAULT 0,
                updated_at TEXT
            )
        """)
        self.conn.commit()

    def load_all(self) -> dict[int, VisitState]:
        try:
            cursor = self.conn.execute(
                "SELECT falla_number, visited, wish, rating_major, rating_child FROM visit_state"
            )
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            print(f"Could not read visit state from {self.db_path}: {e}")
            return {}

        states = {}
        for number, visited, wish, major, child in rows:
            if number is None:
                continue
            states[number] = VisitState(
                visited=visited, wishlisted=wish, rating_major=major, rating_child=child
            )
        return states

    def save_all(self, states: Mapping[int, VisitState]):
        now = datetime.now().isoformat()
        rows = [
            (int(n), int(s.visited), int(s.wishlisted), s.rating_major, s.rating_child, now)
            for n, s in states.items()
        ]
        # One transaction: committed as a whole or rolled back
        with self.conn:
            self.conn.execute("DELETE FROM visit_state")
            self.conn.executemany("""
                INSERT INTO visit_state
                    (falla_number, visited, wish, rating_major, rating_child, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, rows)

    def get_stats(self) -> dict:
        """Get overall visit stats"""
        cursor = self.conn.execute("""
            SELECT
                SUM(visited),
                SUM(wish),
                AVG(CASE WHEN rating_major > 0 THEN rating_major END),
                AVG(CASE WHEN rating_child > 0 THEN rating_child END)
            FROM visit_state
        """)
        row = cursor.fetchone()
        return {
            "visited": row[0] or 0,
            "wishlisted": row[1] or 0,
            "avg_rating_major": round(row[2], 1) if row[2] is not None else None,
            "avg_rating_child": round(row[3], 1) if row[3] is not None else None,
        }

    def close(self):
        self.conn.close()
