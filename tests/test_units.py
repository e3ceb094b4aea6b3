from __future__ import annotations

import pytest

from glucose_chart.units import format_glucose, mgdl_to_mmol, mmol_to_mgdl


def test_mgdl_to_mmol_rounds_to_one_decimal() -> None:
    assert mgdl_to_mmol(180.0) == 10.0
    assert mgdl_to_mmol(70.0) == 3.9


def test_mmol_to_mgdl() -> None:
    assert mmol_to_mgdl(10.0) == pytest.approx(180.1559)


def test_format_glucose_mgdl() -> None:
    assert format_glucose(123.4, is_mgdl=True) == "123 mg/dL"


def test_format_glucose_mmol() -> None:
    assert format_glucose(180.0, is_mgdl=False) == "10.0 mmol/L"
