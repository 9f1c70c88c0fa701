# database.py
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional
from datetime import datetime

from models import Reading

DB_FILE = Path("terrario.db")


class Database:
    """Histórico local de las lecturas que devuelve /api/today."""

    def __init__(self, db_path: Path = DB_FILE) -> None:
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        self.conn = sqlite3.connect(self.db_path)
        self._create_tables()

    def _create_tables(self) -> None:
        assert self.conn is not None
        cur = self.conn.cursor()
        # date vacía = el controlador aún no tenía hora NTP; en ese caso
        # "day" es la fecha local de la consulta y separa un día de otro
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS readings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                date TEXT NOT NULL DEFAULT '',
                day TEXT NOT NULL,
                time TEXT NOT NULL,
                temperature REAL NOT NULL,
                humidity REAL NOT NULL,
                fetched_at TEXT NOT NULL,
                UNIQUE (day, time)
            );
            """
        )
        self.conn.commit()

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def insert_readings(
        self, readings: Iterable[Reading], now: Optional[datetime] = None
    ) -> int:
        """Guarda las lecturas nuevas; devuelve cuántas se insertaron."""
        assert self.conn is not None
        fetched_at = (now or datetime.now()).isoformat()
        local_day = fetched_at[:10]
        cur = self.conn.cursor()
        before = self.conn.total_changes
        cur.executemany(
            """
            INSERT OR IGNORE INTO readings (date, day, time, temperature, humidity, fetched_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (r.date or "", r.date or local_day, r.time, r.temperature, r.humidity, fetched_at)
                for r in readings
            ],
        )
        self.conn.commit()
        return self.conn.total_changes - before

    def get_last_n_readings(self, n: int = 100) -> List[Reading]:
        assert self.conn is not None
        cur = self.conn.cursor()
        cur.execute(
            """
            SELECT date, time, temperature, humidity
            FROM readings
            ORDER BY id DESC
            LIMIT ?
            """,
            (n,),
        )
        rows = cur.fetchall()
        return [
            Reading(date=date or None, time=time, temperature=temp, humidity=hum)
            for date, time, temp, hum in reversed(rows)
        ]
