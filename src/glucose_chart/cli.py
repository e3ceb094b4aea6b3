"""CLI para preparar el gráfico de glucosa de un widget y exportarlo a Excel."""

from __future__ import annotations

import argparse
import logging
from collections import Counter
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from dateutil import parser as date_parser
from dateutil import tz

from glucose_chart.excel_writer import ExcelLayout, write_chart_xlsx
from glucose_chart.model import Severity, Thresholds
from glucose_chart.prepare import ChartDataPreparer
from glucose_chart.sources.nightscout import NightscoutPaths, NightscoutSource
from glucose_chart.storage import ChartConfig, SQLiteStore
from glucose_chart.units import format_glucose, mmol_to_mgdl
from glucose_chart.widget import SizeType, WidgetType

_LOCAL_TZ = tz.tzlocal()

_DEFAULT_DB = Path.home() / ".glucose_chart" / "glucose_chart.sqlite3"


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Gráfico de glucosa para widgets: ventana, eje X y colores."
    )
    parser.add_argument(
        "--entries",
        default=None,
        help="entries.json de Nightscout (o carpeta con entries*.json) a importar.",
    )
    parser.add_argument(
        "--db",
        default=str(_DEFAULT_DB),
        help="Base SQLite de lecturas y configuración (default: ~/.glucose_chart).",
    )
    parser.add_argument(
        "--widget",
        choices=[w.value for w in WidgetType],
        default=None,
        help="Tipo de widget (default: el guardado).",
    )
    parser.add_argument(
        "--size",
        choices=[s.value for s in SizeType],
        default=None,
        help="Tamaño de la notificación de live activity.",
    )
    parser.add_argument(
        "--units",
        choices=["mgdl", "mmol"],
        default=None,
        help="Unidad de visualización y de los umbrales pasados por CLI.",
    )
    for flag in ("urgent-low", "low", "high", "urgent-high"):
        parser.add_argument(f"--{flag}", type=float, default=None)
    parser.add_argument(
        "--now",
        default=None,
        help="Hora de referencia ISO-8601 (default: ahora, hora local).",
    )
    parser.add_argument("--out", default=None, help="Ruta del XLSX de salida.")
    parser.add_argument("--verbose", action="store_true", help="Logging DEBUG.")
    return parser.parse_args()


def _merge_config(saved: ChartConfig, ns: argparse.Namespace) -> ChartConfig:
    """Aplica los flags de la CLI sobre la configuración guardada."""
    is_mgdl = saved.is_mgdl if ns.units is None else ns.units == "mgdl"

    def _limit(value: float | None, current: float) -> float:
        if value is None:
            return current
        return value if is_mgdl else mmol_to_mgdl(value)

    t = saved.thresholds
    thresholds = Thresholds(
        urgent_low=_limit(ns.urgent_low, t.urgent_low),
        low=_limit(ns.low, t.low),
        high=_limit(ns.high, t.high),
        urgent_high=_limit(ns.urgent_high, t.urgent_high),
    )
    return replace(
        saved,
        is_mgdl=is_mgdl,
        thresholds=thresholds,
        widget_type=WidgetType(ns.widget) if ns.widget else saved.widget_type,
        size_type=SizeType(ns.size) if ns.size else saved.size_type,
    )


def _parse_now(raw: str | None) -> datetime:
    if raw is None:
        return datetime.now(tz=_LOCAL_TZ)
    now = date_parser.isoparse(raw)
    if now.tzinfo is None:
        now = now.replace(tzinfo=_LOCAL_TZ)
    return now


def _import_entries(store: SQLiteStore, entries: str) -> tuple[Path, int]:
    path = Path(entries).expanduser().resolve()
    root = path if path.is_dir() else path.parent
    source = NightscoutSource(NightscoutPaths(root=root))
    source.validate()
    entries_file = source.newest_json() if path.is_dir() else path
    readings = source.load_readings(entries_file)
    return entries_file, store.save_readings(readings)


def main() -> int:
    """Run the chart preparation CLI.

    Returns:
        Exit code (0 on success).
    """
    ns = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db_path = Path(ns.db).expanduser()
    store = SQLiteStore(db_path)
    config = _merge_config(store.load_config(), ns)
    store.save_config(config)

    if ns.entries:
        entries_file, added = _import_entries(store, ns.entries)
        print(f"OK: Nightscout file: {entries_file} ({added} new readings)")

    now = _parse_now(ns.now)
    values, timestamps = store.load_buffer(now)

    preparer = ChartDataPreparer.for_widget(
        config.widget_type,
        config.size_type,
        config.thresholds,
        is_mgdl=config.is_mgdl,
    )
    chart = preparer.prepare(values, timestamps, now)

    if ns.out:
        out_path = Path(ns.out).expanduser()
    else:
        ts = now.strftime("%Y-%m-%d_%H-%M-%S")
        name = f"glucose_chart_{config.widget_type.value}_{ts}.xlsx"
        out_path = db_path.parent / name
    write_chart_xlsx(chart, out_path, ExcelLayout())

    counts = Counter(s.value for s in chart.severities)
    print(
        f"OK: Window: {chart.layout.hours_to_show:g}h, "
        f"{len(chart.readings)} of {len(values)} readings"
    )
    if chart.readings:
        latest = format_glucose(chart.readings[-1].mg_dl, config.is_mgdl)
        print(f"OK: Latest: {latest} ({chart.severities[-1].value})")
    summary = ", ".join(f"{s.value}={counts.get(s.value, 0)}" for s in Severity)
    print(f"OK: Severity: {summary}")
    print(f"OK: X axis: {' '.join(chart.tick_labels) or '-'}")
    print(f"OK: Output: {out_path}")
    return 0
