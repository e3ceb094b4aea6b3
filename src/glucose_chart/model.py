"""Modelos tipados para lecturas de glucosa, umbrales y datos del gráfico."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from glucose_chart.widget import WidgetLayout


class ChartInputError(ValueError):
    """Raised when chart inputs violate their preconditions."""


class Severity(str, Enum):
    """Three-tier classification of a glucose value against thresholds."""

    URGENT = "urgent"
    WARNING = "warning"
    IN_RANGE = "in_range"

    @property
    def color(self) -> str:
        return _SEVERITY_COLORS[self]


_SEVERITY_COLORS: dict[Severity, str] = {
    Severity.URGENT: "red",
    Severity.WARNING: "yellow",
    Severity.IN_RANGE: "green",
}


@dataclass(frozen=True)
class GlucoseReading:
    """One glucose measurement event (timestamped, mg/dL)."""

    timestamp: datetime
    mg_dl: float


@dataclass(frozen=True)
class Thresholds:
    """User-configured glucose limits in mg/dL."""

    urgent_low: float = 55.0
    low: float = 70.0
    high: float = 180.0
    urgent_high: float = 250.0

    def __post_init__(self) -> None:
        if not self.urgent_low <= self.low <= self.high <= self.urgent_high:
            raise ChartInputError(
                "Thresholds must satisfy urgent_low <= low <= high <= urgent_high, "
                f"got {self.urgent_low}, {self.low}, {self.high}, {self.urgent_high}"
            )


@dataclass(frozen=True)
class RuleLine:
    """Horizontal threshold line to draw across the chart."""

    value: float
    color: str
    line_width: float
    dash: tuple[float, float]


@dataclass(frozen=True)
class PreparedChart:
    """Everything a renderer needs to draw one widget chart."""

    readings: list[GlucoseReading]
    severities: list[Severity]
    ticks: list[datetime]
    tick_labels: list[str]
    y_domain: tuple[float, float]
    rules: list[RuleLine]
    layout: WidgetLayout
    is_mgdl: bool = True
