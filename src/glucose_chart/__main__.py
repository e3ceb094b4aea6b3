"""Punto de entrada: ``python -m glucose_chart``."""

from __future__ import annotations

from glucose_chart.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
