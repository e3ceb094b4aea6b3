from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from glucose_chart.model import ChartInputError, GlucoseReading, Thresholds
from glucose_chart.storage import ChartConfig, SQLiteStore
from glucose_chart.widget import SizeType, WidgetType

NOW = datetime(2026, 1, 31, 12, 20, tzinfo=timezone.utc)


def _readings(hours: int) -> list[GlucoseReading]:
    start = NOW - timedelta(hours=hours)
    return [
        GlucoseReading(timestamp=start + timedelta(minutes=5 * i), mg_dl=100.0 + i)
        for i in range(hours * 12 + 1)
    ]


def test_store_config_defaults(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    assert store.load_config() == ChartConfig()


def test_store_config_round_trip(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "nested" / "app.sqlite3")
    config = ChartConfig(
        is_mgdl=False,
        thresholds=Thresholds(urgent_low=54, low=72, high=162, urgent_high=234),
        widget_type=WidgetType.LIVE_ACTIVITY,
        size_type=SizeType.LARGE,
    )
    store.save_config(config)
    assert store.load_config() == config


def test_store_config_falls_back_on_bad_values(tmp_path: Path) -> None:
    db = tmp_path / "app.sqlite3"
    store = SQLiteStore(db)
    with sqlite3.connect(db) as conn:
        conn.executemany(
            "INSERT INTO app_config(key, value) VALUES(?, ?)",
            [
                ("is_mgdl", "not json"),
                ("thresholds", "[250, 180, 70, 55]"),
                ("widget_type", "smartwatch"),
                ("size_type", "huge"),
            ],
        )
        conn.commit()
    assert store.load_config() == ChartConfig()


def test_store_readings_and_load_buffer(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    added = store.save_readings(_readings(24))
    assert added == 24 * 12 + 1

    values, timestamps = store.load_buffer(NOW)

    assert len(values) == len(timestamps) == 12 * 12 + 1
    assert timestamps[0] == NOW - timedelta(hours=12)
    assert timestamps[-1] == NOW
    assert timestamps == sorted(timestamps)
    assert values[-1] == 100.0 + 24 * 12


def test_load_buffer_excludes_future_readings(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.save_readings(
        [GlucoseReading(timestamp=NOW + timedelta(minutes=5), mg_dl=150.0)]
    )
    assert store.load_buffer(NOW) == ([], [])


def test_load_buffer_returns_timestamps_in_now_zone(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.save_readings(_readings(1))
    local = timezone(timedelta(hours=-3))
    _, timestamps = store.load_buffer(NOW.astimezone(local))
    assert all(ts.utcoffset() == timedelta(hours=-3) for ts in timestamps)


def test_load_buffer_requires_aware_now(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    with pytest.raises(ChartInputError, match="timezone-aware"):
        store.load_buffer(NOW.replace(tzinfo=None))


def test_store_skips_duplicate_readings(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    readings = _readings(1)

    assert store.save_readings(readings) == len(readings)
    assert store.save_readings(readings) == 0
    assert store.save_readings(readings + readings) == 0
    assert store.count_readings() == len(readings)


def test_store_deduplicates_within_one_batch(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    reading = GlucoseReading(timestamp=NOW, mg_dl=120.0)
    assert store.save_readings([reading, reading]) == 1


def test_store_rejects_naive_readings(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    naive = GlucoseReading(timestamp=NOW.replace(tzinfo=None), mg_dl=120.0)
    with pytest.raises(ChartInputError, match="timezone-aware"):
        store.save_readings([naive])
