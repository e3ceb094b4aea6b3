"""Preparación de datos del gráfico: ventana, marcas del eje X y colores."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

import pandas as pd

from glucose_chart.model import (
    ChartInputError,
    GlucoseReading,
    PreparedChart,
    RuleLine,
    Severity,
    Thresholds,
)
from glucose_chart.units import mgdl_to_mmol
from glucose_chart.widget import SizeType, WidgetLayout, WidgetType, layout_for

logger = logging.getLogger(__name__)

DOMAIN_LOWER_MG_DL = 40.0
DOMAIN_DEFAULT_UPPER_MG_DL = 400.0

_URGENT_DASH: tuple[float, float] = (2.0, 6.0)
_LIMIT_DASH: tuple[float, float] = (4.0, 3.0)


def _absolute(ts: datetime) -> datetime:
    # Aware datetimes sharing a tzinfo compare by wall clock; normalize to UTC.
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc)


def _shift_hours(ts: datetime, hours: float) -> datetime:
    if ts.tzinfo is None:
        return ts + timedelta(hours=hours)
    shifted = ts.astimezone(timezone.utc) + timedelta(hours=hours)
    return shifted.astimezone(ts.tzinfo)


def _lower_hour(ts: datetime) -> datetime:
    return ts.replace(minute=0, second=0, microsecond=0)


def _validate_series(
    values: Sequence[float] | None,
    timestamps: Sequence[datetime],
    now: datetime,
) -> None:
    """Valida longitudes, orden y mezcla de fechas naive/aware."""
    if values is not None and len(values) != len(timestamps):
        raise ChartInputError(
            "values and timestamps differ in length: "
            f"{len(values)} != {len(timestamps)}"
        )
    now_aware = now.tzinfo is not None
    previous: datetime | None = None
    for ts in timestamps:
        if (ts.tzinfo is not None) != now_aware:
            raise ChartInputError("timestamps and now must all be naive or all aware")
        current = _absolute(ts)
        if previous is not None and current < previous:
            raise ChartInputError(f"timestamps must be non-decreasing, got {ts}")
        previous = current


def window_readings(
    values: Sequence[float],
    timestamps: Sequence[datetime],
    window_hours: float,
    now: datetime,
) -> list[GlucoseReading]:
    """Keep the readings newer than ``now - window_hours``.

    Args:
        values: Glucose values in mg/dL.
        timestamps: Reading times, same length as ``values``, non-decreasing.
        window_hours: Length of the display window.
        now: Current time, injected by the caller.

    Returns:
        Readings whose timestamp is strictly after the window start, in the
        original order. Empty when none qualify.

    Raises:
        ChartInputError: If the sequences are malformed or the window is negative.
    """
    if window_hours < 0:
        raise ChartInputError(f"window_hours must be >= 0, got {window_hours}")
    _validate_series(values, timestamps, now)

    cutoff = _absolute(_shift_hours(now, -window_hours))
    out = [
        GlucoseReading(timestamp=ts, mg_dl=float(value))
        for value, ts in zip(values, timestamps)
        if _absolute(ts) > cutoff
    ]
    logger.debug(
        "window %sh kept %d of %d readings", window_hours, len(out), len(values)
    )
    return out


def x_axis_values(
    timestamps: Sequence[datetime],
    window_hours: float,
    interval_hours: int,
    now: datetime,
) -> list[datetime]:
    """Hour-aligned tick marks for the time axis.

    Ticks start one hour after the hour containing the earliest reading (or
    the window start when there are no readings) and advance by
    ``interval_hours`` while they stay within the number of started hours up
    to ``now``.

    Raises:
        ChartInputError: If ``interval_hours`` is not a positive integer or the
            timestamps are malformed.
    """
    if isinstance(interval_hours, bool) or not isinstance(interval_hours, int):
        raise ChartInputError(f"interval_hours must be an int, got {interval_hours!r}")
    if interval_hours <= 0:
        raise ChartInputError(f"interval_hours must be > 0, got {interval_hours}")
    _validate_series(None, timestamps, now)

    start = timestamps[0] if timestamps else _shift_hours(now, -window_hours)
    elapsed = (_absolute(now) - _absolute(start)).total_seconds()
    full_hours = max(0, math.ceil(elapsed / 3600))

    start_lower = _lower_hour(start)
    ticks = [
        _shift_hours(start_lower, k)
        for k in range(1, full_hours + 1, interval_hours)
    ]
    logger.debug(
        "%d full hours, %d ticks every %dh", full_hours, len(ticks), interval_hours
    )
    return ticks


def classify(value: float, thresholds: Thresholds) -> Severity:
    """Classify a glucose value; limits themselves count as out of range."""
    if value >= thresholds.urgent_high or value <= thresholds.urgent_low:
        return Severity.URGENT
    if value >= thresholds.high or value <= thresholds.low:
        return Severity.WARNING
    return Severity.IN_RANGE


def y_domain(values: Sequence[float], thresholds: Thresholds) -> tuple[float, float]:
    """Vertical range of the chart in mg/dL."""
    highest = max(values) if len(values) else DOMAIN_DEFAULT_UPPER_MG_DL
    upper = max(float(highest), thresholds.urgent_high, DOMAIN_LOWER_MG_DL)
    return DOMAIN_LOWER_MG_DL, upper


def threshold_rules(
    domain: tuple[float, float], thresholds: Thresholds, layout: WidgetLayout
) -> list[RuleLine]:
    """Threshold lines that fall inside the vertical domain.

    Args:
        domain: ``(lower, upper)`` from :func:`y_domain`.
        thresholds: Limits to draw.
        layout: Widget layout providing line scale and colors.

    Returns:
        Urgent lines first (urgent low, urgent high), then low and high.
    """
    lower, upper = domain
    scale = layout.relative_y_axis_line_size
    candidates = [
        (thresholds.urgent_low, layout.urgent_low_high_line_color, _URGENT_DASH),
        (thresholds.urgent_high, layout.urgent_low_high_line_color, _URGENT_DASH),
        (thresholds.low, layout.low_high_line_color, _LIMIT_DASH),
        (thresholds.high, layout.low_high_line_color, _LIMIT_DASH),
    ]
    return [
        RuleLine(
            value=value,
            color=color,
            line_width=1 * scale,
            dash=(dash[0] * scale, dash[1] * scale),
        )
        for value, color, dash in candidates
        if lower <= value <= upper
    ]


def tick_label(tick: datetime) -> str:
    """Hour-of-day label for an axis tick."""
    return tick.strftime("%H")


class ChartDataPreparer:
    """Binds a widget layout and thresholds to prepare chart data per render."""

    def __init__(
        self,
        layout: WidgetLayout,
        thresholds: Thresholds,
        *,
        is_mgdl: bool = True,
    ) -> None:
        """Create a preparer.

        Args:
            layout: Static parameters of the target widget.
            thresholds: Glucose limits in mg/dL.
            is_mgdl: Display unit flag; values stay in mg/dL either way.
        """
        self._layout = layout
        self._thresholds = thresholds
        self._is_mgdl = is_mgdl

    @classmethod
    def for_widget(
        cls,
        widget_type: WidgetType,
        size_type: SizeType,
        thresholds: Thresholds,
        *,
        is_mgdl: bool = True,
    ) -> ChartDataPreparer:
        return cls(layout_for(widget_type, size_type), thresholds, is_mgdl=is_mgdl)

    @property
    def layout(self) -> WidgetLayout:
        return self._layout

    @property
    def thresholds(self) -> Thresholds:
        return self._thresholds

    def classify(self, value: float) -> Severity:
        return classify(value, self._thresholds)

    def prepare(
        self,
        values: Sequence[float],
        timestamps: Sequence[datetime],
        now: datetime,
    ) -> PreparedChart:
        """Trim a reading buffer and compute everything the chart needs.

        Args:
            values: Glucose values in mg/dL (typically the last 12 hours).
            timestamps: Matching reading times, non-decreasing.
            now: Current time.

        Returns:
            Windowed readings with their severities, axis ticks and labels,
            vertical domain and visible threshold lines.
        """
        hours = self._layout.hours_to_show
        readings = window_readings(values, timestamps, hours, now)
        ticks = x_axis_values(
            [r.timestamp for r in readings],
            hours,
            self._layout.interval_between_axis_values,
            now,
        )
        domain = y_domain([r.mg_dl for r in readings], self._thresholds)
        return PreparedChart(
            readings=readings,
            severities=[self.classify(r.mg_dl) for r in readings],
            ticks=ticks,
            tick_labels=[tick_label(t) for t in ticks],
            y_domain=domain,
            rules=threshold_rules(domain, self._thresholds, self._layout),
            layout=self._layout,
            is_mgdl=self._is_mgdl,
        )


def chart_to_frame(chart: PreparedChart) -> pd.DataFrame:
    """Flatten the windowed readings of a chart into a DataFrame.

    Returns columns: datetime, glucose_mg_dl, glucose_mmol_l, severity, color.
    """
    columns = ["datetime", "glucose_mg_dl", "glucose_mmol_l", "severity", "color"]
    rows = [
        {
            "datetime": r.timestamp,
            "glucose_mg_dl": r.mg_dl,
            "glucose_mmol_l": mgdl_to_mmol(r.mg_dl),
            "severity": s.value,
            "color": s.color,
        }
        for r, s in zip(chart.readings, chart.severities)
    ]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)
