"""Tests for CLI entrypoints."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

from glucose_chart import cli
from glucose_chart.storage import SQLiteStore
from glucose_chart.widget import SizeType, WidgetType


def _entries_file(path: Path) -> Path:
    # 12:20 UTC going back every 5 minutes for 12 hours (newest first, like Nightscout).
    base_ms = 1769862000000
    entries = [
        {"sgv": 100 + (i % 5) * 40, "date": base_ms - i * 300_000, "type": "sgv"}
        for i in range(145)
    ]
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


def test_parse_args_custom_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "sys.argv",
        [
            "prog",
            "--db",
            "/tmp/chart.sqlite3",
            "--widget",
            "live_activity",
            "--size",
            "large",
            "--units",
            "mmol",
            "--high",
            "10",
        ],
    )
    ns = cli.parse_args()
    assert ns.db == "/tmp/chart.sqlite3"
    assert ns.widget == "live_activity"
    assert ns.size == "large"
    assert ns.units == "mmol"
    assert ns.high == 10.0
    assert ns.low is None
    assert ns.entries is None


def test_main_happy_path(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    entries = _entries_file(tmp_path / "entries.json")
    db = tmp_path / "chart.sqlite3"
    out = tmp_path / "out" / "chart.xlsx"
    monkeypatch.setattr(
        "sys.argv",
        [
            "prog",
            "--entries",
            str(entries),
            "--db",
            str(db),
            "--widget",
            "system_medium",
            "--now",
            "2026-01-31T12:20:00+00:00",
            "--out",
            str(out),
        ],
    )

    code = cli.main()

    assert code == 0
    printed = capsys.readouterr().out
    assert "145 new readings" in printed
    assert "OK: Window: 3h, 36 of 145 readings" in printed
    assert "OK: X axis: 10 11 12" in printed

    wb = load_workbook(out)
    assert wb["Lecturas"].max_row == 37
    assert SQLiteStore(db).load_config().widget_type is WidgetType.SYSTEM_MEDIUM


def test_main_converts_mmol_thresholds_and_saves_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    db = tmp_path / "chart.sqlite3"
    monkeypatch.setattr(
        "sys.argv",
        [
            "prog",
            "--db",
            str(db),
            "--widget",
            "live_activity",
            "--size",
            "minimal",
            "--units",
            "mmol",
            "--high",
            "10",
            "--now",
            "2026-01-31T12:20:00+00:00",
            "--out",
            str(tmp_path / "chart.xlsx"),
        ],
    )

    assert cli.main() == 0

    config = SQLiteStore(db).load_config()
    assert config.is_mgdl is False
    assert config.size_type is SizeType.MINIMAL
    assert config.thresholds.high == pytest.approx(180.1559)
    assert config.thresholds.low == 70.0


def test_main_default_output_next_to_db(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    db = tmp_path / "chart.sqlite3"
    monkeypatch.setattr(
        "sys.argv",
        ["prog", "--db", str(db), "--now", "2026-01-31T12:20:00+00:00"],
    )

    assert cli.main() == 0
    outputs = list(tmp_path.glob("glucose_chart_system_medium_*.xlsx"))
    assert [p.name for p in outputs] == [
        "glucose_chart_system_medium_2026-01-31_12-20-00.xlsx"
    ]


def test_main_propagates_missing_entries(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(
        "sys.argv",
        [
            "prog",
            "--entries",
            str(tmp_path / "missing" / "entries.json"),
            "--db",
            str(tmp_path / "chart.sqlite3"),
        ],
    )
    with pytest.raises(FileNotFoundError):
        cli.main()


def test_main_rejects_out_of_order_thresholds(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(
        "sys.argv",
        ["prog", "--db", str(tmp_path / "chart.sqlite3"), "--low", "200"],
    )
    with pytest.raises(ValueError, match="urgent_low <= low"):
        cli.main()
