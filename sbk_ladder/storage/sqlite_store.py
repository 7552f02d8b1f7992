import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from .. import config
from ..errors import LadderNotFoundError, PersistenceError
from ..models import Ladder
from .base import LadderStore, ladder_from_record, ladder_to_record

logger = logging.getLogger("SQLiteLadderStore")

COLUMNS = (
    "id", "name", "start_stake", "goal_amount", "odds", "ladder_steps",
    "current_amount", "current_step_index", "last_updated", "created_at",
)


class SQLiteLadderStore(LadderStore):
    """
    Local file-backed ladder store.

    One row per ladder; the projected steps live in a JSON text column.
    """

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            db_path = config.LADDER_DB_PATH

        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize database schema if not exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r") as f:
            schema_script = f.read()

        with self._connect() as con:
            con.executescript(schema_script)

    @contextmanager
    def _connect(self):
        try:
            con = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

        con.row_factory = sqlite3.Row
        try:
            with con:
                yield con
        except sqlite3.Error as e:
            logger.error(f"SQLite failure on {self.db_path}: {e}")
            raise PersistenceError(str(e)) from e
        finally:
            con.close()

    @staticmethod
    def _to_row(ladder: Ladder) -> tuple:
        record = ladder_to_record(ladder)
        record["ladder_steps"] = json.dumps(record["ladder_steps"])
        return tuple(record[c] for c in COLUMNS)

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Ladder:
        record = dict(row)
        record["ladder_steps"] = json.loads(record["ladder_steps"])
        return ladder_from_record(record)

    def get(self, ladder_id: str) -> Optional[Ladder]:
        with self._connect() as con:
            row = con.execute("SELECT * FROM ladders WHERE id = ?", (ladder_id,)).fetchone()
        return self._from_row(row) if row else None

    def list(self) -> list[Ladder]:
        with self._connect() as con:
            rows = con.execute("SELECT * FROM ladders ORDER BY created_at, rowid").fetchall()
        return [self._from_row(r) for r in rows]

    def create(self, ladder: Ladder) -> Ladder:
        placeholders = ", ".join("?" for _ in COLUMNS)
        with self._connect() as con:
            con.execute(
                f"INSERT INTO ladders ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                self._to_row(ladder)
            )
        return ladder

    def update(self, ladder: Ladder) -> Ladder:
        """Write back the mutable progress fields; the projection is never rewritten."""
        record = ladder_to_record(ladder)
        with self._connect() as con:
            cursor = con.execute("""
                UPDATE ladders
                SET current_amount = ?,
                    current_step_index = ?,
                    last_updated = ?
                WHERE id = ?
            """, (record["current_amount"], record["current_step_index"], record["last_updated"], ladder.id))
            if cursor.rowcount == 0:
                raise LadderNotFoundError(ladder.id)
        return ladder

    def delete(self, ladder_id: str) -> None:
        with self._connect() as con:
            cursor = con.execute("DELETE FROM ladders WHERE id = ?", (ladder_id,))
            if cursor.rowcount == 0:
                raise LadderNotFoundError(ladder_id)
