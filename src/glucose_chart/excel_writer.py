"""Exportación a Excel de los datos preparados del gráfico."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from glucose_chart.model import PreparedChart
from glucose_chart.prepare import chart_to_frame

_HEADER_MAP: dict[str, str] = {
    "datetime": "Fecha / Hora",
    "glucose_mg_dl": "Glucosa (mg/dL)",
    "glucose_mmol_l": "Glucosa (mmol/L)",
    "severity": "Severidad",
    "tick": "Marca",
    "label": "Etiqueta",
}

_SEVERITY_FILLS: dict[str, str] = {
    "red": "FFC7CE",
    "yellow": "FFEB9C",
    "green": "C6EFCE",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the chart export."""

    readings_sheet: str = "Lecturas"
    axis_sheet: str = "Eje X"


def _readings_frame(chart: PreparedChart) -> tuple[pd.DataFrame, list[str]]:
    """DataFrame de lecturas con la hora local de cada medición, más sus colores."""
    df = chart_to_frame(chart)
    colors = [str(c) for c in df["color"]]
    df = df.drop(columns=["color"])
    if not df.empty:
        df["datetime"] = [r.timestamp.replace(tzinfo=None) for r in chart.readings]
    return df.rename(columns=_HEADER_MAP), colors


def _axis_frame(chart: PreparedChart) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "tick": [t.replace(tzinfo=None) for t in chart.ticks],
            "label": chart.tick_labels,
        },
        columns=["tick", "label"],
    )
    return df.rename(columns=_HEADER_MAP)


def write_chart_xlsx(chart: PreparedChart, out_path: Path, layout: ExcelLayout) -> None:
    """Write the windowed readings and axis ticks of a chart to XLSX.

    Times are written in the zone they were prepared in, without offset.

    Args:
        chart: Prepared chart data.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    readings_df, colors = _readings_frame(chart)
    axis_df = _axis_frame(chart)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        readings_df.to_excel(writer, index=False, sheet_name=layout.readings_sheet)
        axis_df.to_excel(writer, index=False, sheet_name=layout.axis_sheet)
        readings_ws = writer.book[layout.readings_sheet]
        _format_sheet(readings_ws)
        _apply_severity_fills(readings_ws, colors)
        _format_sheet(writer.book[layout.axis_sheet])


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación y borde a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna para evitar ###."""
    widths = [
        ("Fecha / Hora", 18),
        ("Glucosa (mg/dL)", 14),
        ("Glucosa (mmol/L)", 15),
        ("Severidad", 12),
        ("Marca", 18),
        ("Etiqueta", 10),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    """Aplica formatos numéricos por cabecera."""
    fmt_map: dict[str, str] = {
        "Fecha / Hora": "dd/mm/yyyy hh:mm",
        "Marca": "dd/mm/yyyy hh:mm",
        "Glucosa (mg/dL)": "0",
        "Glucosa (mmol/L)": "0.0",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _apply_severity_fills(ws: Any, colors: list[str]) -> None:
    """Pinta cada fila de lectura con el color de su severidad."""
    for row, color in zip(ws.iter_rows(min_row=2), colors):
        rgb = _SEVERITY_FILLS.get(color)
        if rgb is None:
            continue
        fill = PatternFill(start_color=rgb, end_color=rgb, fill_type="solid")
        for cell in row:
            cell.fill = fill


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
