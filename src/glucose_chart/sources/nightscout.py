"""Lectura de exportaciones JSON de entradas de Nightscout."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dateutil import parser as date_parser

from glucose_chart.model import GlucoseReading
from glucose_chart.sources.base import DataSource, SourcePaths

logger = logging.getLogger(__name__)

_GLUCOSE_KEYS: tuple[str, ...] = ("sgv", "mbg", "glucose")


@dataclass(frozen=True)
class NightscoutPaths(SourcePaths):
    """Paths for Nightscout entries exports."""

    # root: folder containing entries*.json


class NightscoutSource(DataSource):
    """Nightscout ``entries.json`` reading source."""

    def newest_json(self) -> Path:
        """Return newest entries*.json by mtime."""
        files = sorted(
            self._paths.root.glob("entries*.json"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        if not files:
            raise FileNotFoundError(f"No entries*.json in {self._paths.root}")
        return files[0]

    def load_readings(self, path: Path) -> list[GlucoseReading]:
        """Parse a Nightscout entries export into typed readings.

        Args:
            path: Path to JSON file.

        Returns:
            List of glucose readings sorted by timestamp.

        Raises:
            ValueError: If JSON shape is invalid or an entry has no time.
        """
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError("Nightscout entries JSON must be a list")

        out: list[GlucoseReading] = []
        for item in raw:
            reading = _item_to_reading(item)
            if reading is not None:
                out.append(reading)
        out.sort(key=lambda r: r.timestamp)
        logger.info("Loaded %d of %d entries from %s", len(out), len(raw), path)
        return out


def _glucose_value(item: dict[str, Any]) -> float | None:
    """Primer valor numérico de glucosa (mg/dL) del ítem, o None."""
    for key in _GLUCOSE_KEYS:
        value = item.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int | float):
            return float(value)
    return None


def _item_to_reading(item: Any) -> GlucoseReading | None:
    """Convierte un ítem dict en GlucoseReading; None si no trae glucosa."""
    if not isinstance(item, dict):
        return None
    mg_dl = _glucose_value(item)
    if mg_dl is None:
        return None
    ts = _parse_timestamp(item.get("dateString"), item.get("date"))
    return GlucoseReading(timestamp=ts, mg_dl=mg_dl)


def _parse_timestamp(date_string: Any, epoch_ms: Any) -> datetime:
    """Parses the entry time; naive strings are taken as UTC.

    A ``dateString`` that is not ISO-8601 falls back to the epoch-ms ``date``.
    """
    if isinstance(date_string, str) and date_string.strip():
        try:
            ts = date_parser.isoparse(date_string)
        except ValueError:
            logger.debug("Unparseable dateString %r, trying date", date_string)
        else:
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=timezone.utc)
            return ts

    if isinstance(epoch_ms, int | float) and not isinstance(epoch_ms, bool):
        return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)

    raise ValueError(f"Missing dateString and date (dateString={date_string!r})")
