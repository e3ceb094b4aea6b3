from __future__ import annotations

import pytest

from glucose_chart.widget import BUFFER_HOURS, SizeType, WidgetType, layout_for


@pytest.mark.parametrize("widget_type", list(WidgetType))
@pytest.mark.parametrize("size_type", list(SizeType))
def test_every_layout_fits_buffer(widget_type: WidgetType, size_type: SizeType) -> None:
    layout = layout_for(widget_type, size_type)
    assert 0 < layout.hours_to_show <= BUFFER_HOURS
    assert isinstance(layout.interval_between_axis_values, int)
    assert layout.interval_between_axis_values > 0
    width, height = layout.view_size
    assert width > 0
    assert height > 0
    assert layout.glucose_circle_diameter > 0


def test_size_only_matters_for_live_activity() -> None:
    for widget_type in WidgetType:
        if widget_type is WidgetType.LIVE_ACTIVITY:
            continue
        layouts = {layout_for(widget_type, size) for size in SizeType}
        assert len(layouts) == 1


def test_live_activity_large_shows_more_hours() -> None:
    normal = layout_for(WidgetType.LIVE_ACTIVITY, SizeType.NORMAL)
    large = layout_for(WidgetType.LIVE_ACTIVITY, SizeType.LARGE)
    assert large.hours_to_show > normal.hours_to_show
    assert large.interval_between_axis_values == 2


def test_dynamic_island_uses_full_buffer_with_sparse_ticks() -> None:
    layout = layout_for(WidgetType.DYNAMIC_ISLAND)
    assert layout.hours_to_show == BUFFER_HOURS
    assert layout.interval_between_axis_values == 2


def test_default_size_is_normal() -> None:
    assert layout_for(WidgetType.LIVE_ACTIVITY) == layout_for(
        WidgetType.LIVE_ACTIVITY, SizeType.NORMAL
    )
