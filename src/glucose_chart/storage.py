"""Persistencia SQLite para configuración del gráfico y lecturas de glucosa."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from hashlib import sha256
from pathlib import Path
from typing import TypeVar

from glucose_chart.model import ChartInputError, GlucoseReading, Thresholds
from glucose_chart.widget import BUFFER_HOURS, SizeType, WidgetType

logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound=Enum)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS readings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    row_hash TEXT NOT NULL UNIQUE,
    epoch REAL NOT NULL,
    mg_dl REAL NOT NULL,
    imported_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_readings_epoch
ON readings(epoch);
"""


@dataclass(frozen=True)
class ChartConfig:
    """Configuracion persistida del gráfico."""

    is_mgdl: bool = True
    thresholds: Thresholds = field(default_factory=Thresholds)
    widget_type: WidgetType = WidgetType.SYSTEM_MEDIUM
    size_type: SizeType = SizeType.NORMAL


class SQLiteStore:
    """Repositorio SQLite de lecturas y configuracion."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def load_config(self) -> ChartConfig:
        """Devuelve configuracion guardada o defaults."""
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        values = {row["key"]: row["value"] for row in rows}
        defaults = ChartConfig()
        return ChartConfig(
            is_mgdl=_parse_bool(values.get("is_mgdl"), defaults.is_mgdl),
            thresholds=_parse_thresholds(values.get("thresholds"), defaults.thresholds),
            widget_type=_parse_enum(
                WidgetType, values.get("widget_type"), defaults.widget_type
            ),
            size_type=_parse_enum(
                SizeType, values.get("size_type"), defaults.size_type
            ),
        )

    def save_config(self, config: ChartConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        t = config.thresholds
        payload = {
            "is_mgdl": json.dumps(config.is_mgdl),
            "thresholds": json.dumps(
                [t.urgent_low, t.low, t.high, t.urgent_high]
            ),
            "widget_type": config.widget_type.value,
            "size_type": config.size_type.value,
        }
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_config(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()

    def save_readings(self, readings: Iterable[GlucoseReading]) -> int:
        """Guarda lecturas nuevas. Devuelve cuántas se insertaron.

        Raises:
            ChartInputError: If a reading has a naive timestamp.
        """
        imported_at = datetime.now(tz=timezone.utc).isoformat(timespec="seconds")
        rows = [_reading_row(r) for r in readings]
        with self._connect() as conn:
            existing = _existing_hashes(conn, [row[0] for row in rows])
            new_rows = []
            for row in rows:
                if row[0] in existing:
                    continue
                existing.add(row[0])
                new_rows.append(row)
            conn.executemany(
                """
                INSERT INTO readings(row_hash, epoch, mg_dl, imported_at)
                VALUES (?, ?, ?, ?)
                """,
                [(*row, imported_at) for row in new_rows],
            )
            conn.commit()
        logger.info(
            "Stored %d new readings (%d duplicates)",
            len(new_rows),
            len(rows) - len(new_rows),
        )
        return len(new_rows)

    def load_buffer(
        self, now: datetime, hours: float = BUFFER_HOURS
    ) -> tuple[list[float], list[datetime]]:
        """Load the last ``hours`` of readings up to ``now``.

        Args:
            now: Current time (timezone-aware); returned timestamps use its zone.
            hours: Buffer length.

        Returns:
            Parallel ``(values, timestamps)`` lists ordered by time.
        """
        if now.tzinfo is None:
            raise ChartInputError("now must be timezone-aware")
        end = now.timestamp()
        start = end - hours * 3600
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT epoch, mg_dl FROM readings
                WHERE epoch >= ? AND epoch <= ?
                ORDER BY epoch
                """,
                (start, end),
            ).fetchall()
        values = [float(row["mg_dl"]) for row in rows]
        timestamps = [
            datetime.fromtimestamp(row["epoch"], tz=timezone.utc).astimezone(now.tzinfo)
            for row in rows
        ]
        return values, timestamps

    def count_readings(self) -> int:
        """Cantidad total de lecturas guardadas."""
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM readings").fetchone()
        return int(row["n"])


def _reading_row(reading: GlucoseReading) -> tuple[str, float, float]:
    if reading.timestamp.tzinfo is None:
        raise ChartInputError(f"reading timestamp must be timezone-aware: {reading}")
    epoch = reading.timestamp.timestamp()
    return _row_hash((epoch, reading.mg_dl)), epoch, reading.mg_dl


def _row_hash(values: tuple[object, ...]) -> str:
    payload = json.dumps(values, ensure_ascii=True, sort_keys=False, default=str)
    return sha256(payload.encode("utf-8")).hexdigest()


def _existing_hashes(conn: sqlite3.Connection, hashes: list[str]) -> set[str]:
    if not hashes:
        return set()
    found: set[str] = set()
    # SQLite limita la cantidad de parámetros por consulta.
    for i in range(0, len(hashes), 500):
        chunk = hashes[i : i + 500]
        placeholders = ",".join("?" for _ in chunk)
        rows = conn.execute(
            f"SELECT row_hash FROM readings WHERE row_hash IN ({placeholders})",
            tuple(chunk),
        ).fetchall()
        found.update(str(row["row_hash"]) for row in rows)
    return found


def _parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return default
    return parsed if isinstance(parsed, bool) else default


def _parse_thresholds(raw: str | None, default: Thresholds) -> Thresholds:
    if raw is None:
        return default
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return default
    if not isinstance(parsed, list) or len(parsed) != 4:
        return default
    try:
        return Thresholds(*(float(v) for v in parsed))
    except (TypeError, ValueError):
        return default


def _parse_enum(enum_cls: type[_E], raw: str | None, default: _E) -> _E:
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        return default
