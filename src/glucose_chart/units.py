"""Conversión y formato de unidades de glucosa (mg/dL y mmol/L)."""

from __future__ import annotations

MGDL_PER_MMOL = 18.01559


def mgdl_to_mmol(value: float) -> float:
    """Convert mg/dL to mmol/L, rounded to one decimal."""
    return round(value / MGDL_PER_MMOL, 1)


def mmol_to_mgdl(value: float) -> float:
    """Convert mmol/L to mg/dL."""
    return value * MGDL_PER_MMOL


def format_glucose(value_mg_dl: float, is_mgdl: bool) -> str:
    """Format a mg/dL value for display in the user's unit.

    Args:
        value_mg_dl: Glucose value stored in mg/dL.
        is_mgdl: True to show mg/dL, False to show mmol/L.

    Returns:
        Text such as ``"120 mg/dL"`` or ``"6.7 mmol/L"``.
    """
    if is_mgdl:
        return f"{value_mg_dl:.0f} mg/dL"
    return f"{mgdl_to_mmol(value_mg_dl):.1f} mmol/L"
