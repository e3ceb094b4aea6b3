"""Tabla de layouts por tipo de widget y tamaño de notificación."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

BUFFER_HOURS = 12.0


class WidgetType(str, Enum):
    """Surface the glucose chart is rendered into."""

    LIVE_ACTIVITY = "live_activity"
    DYNAMIC_ISLAND = "dynamic_island"
    SYSTEM_SMALL = "system_small"
    SYSTEM_MEDIUM = "system_medium"
    SYSTEM_LARGE = "system_large"
    ACCESSORY_RECTANGULAR = "accessory_rectangular"


class SizeType(str, Enum):
    """Live activity notification size (ignored by other widget types)."""

    MINIMAL = "minimal"
    NORMAL = "normal"
    LARGE = "large"


@dataclass(frozen=True)
class WidgetLayout:
    """Static chart parameters for one widget variant."""

    hours_to_show: float
    interval_between_axis_values: int
    view_size: tuple[float, float]
    glucose_circle_diameter: float
    relative_y_axis_line_size: float = 1.0
    x_axis_label_offset: float = -10.0
    x_axis_grid_line_color: str = "#ffffff80"
    urgent_low_high_line_color: str = "#ff000080"
    low_high_line_color: str = "#ffff0080"


_LIVE_ACTIVITY_LAYOUTS: dict[SizeType, WidgetLayout] = {
    SizeType.MINIMAL: WidgetLayout(
        hours_to_show=3,
        interval_between_axis_values=1,
        view_size=(110, 50),
        glucose_circle_diameter=10,
        relative_y_axis_line_size=0.8,
        x_axis_label_offset=-8,
    ),
    SizeType.NORMAL: WidgetLayout(
        hours_to_show=3,
        interval_between_axis_values=1,
        view_size=(180, 80),
        glucose_circle_diameter=14,
    ),
    SizeType.LARGE: WidgetLayout(
        hours_to_show=8,
        interval_between_axis_values=2,
        view_size=(340, 130),
        glucose_circle_diameter=20,
        x_axis_label_offset=-12,
    ),
}

_WIDGET_LAYOUTS: dict[WidgetType, WidgetLayout] = {
    WidgetType.DYNAMIC_ISLAND: WidgetLayout(
        hours_to_show=12,
        interval_between_axis_values=2,
        view_size=(330, 70),
        glucose_circle_diameter=14,
    ),
    WidgetType.SYSTEM_SMALL: WidgetLayout(
        hours_to_show=2,
        interval_between_axis_values=1,
        view_size=(155, 80),
        glucose_circle_diameter=12,
    ),
    WidgetType.SYSTEM_MEDIUM: WidgetLayout(
        hours_to_show=3,
        interval_between_axis_values=1,
        view_size=(330, 80),
        glucose_circle_diameter=14,
    ),
    WidgetType.SYSTEM_LARGE: WidgetLayout(
        hours_to_show=6,
        interval_between_axis_values=1,
        view_size=(330, 230),
        glucose_circle_diameter=20,
        relative_y_axis_line_size=1.3,
    ),
    WidgetType.ACCESSORY_RECTANGULAR: WidgetLayout(
        hours_to_show=3,
        interval_between_axis_values=1,
        view_size=(115, 50),
        glucose_circle_diameter=8,
        relative_y_axis_line_size=0.6,
        x_axis_label_offset=-6,
        # lock screen accessories are rendered monochrome
        x_axis_grid_line_color="#ffffff60",
        urgent_low_high_line_color="#ffffffa0",
        low_high_line_color="#ffffff80",
    ),
}


def layout_for(
    widget_type: WidgetType, size_type: SizeType = SizeType.NORMAL
) -> WidgetLayout:
    """Return the chart layout for a widget variant.

    Args:
        widget_type: Surface the chart is drawn on.
        size_type: Notification size, only used for live activities.

    Returns:
        The static layout for that combination.
    """
    if widget_type is WidgetType.LIVE_ACTIVITY:
        return _LIVE_ACTIVITY_LAYOUTS[size_type]
    return _WIDGET_LAYOUTS[widget_type]
