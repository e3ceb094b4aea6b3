"""Clases base para fuentes de lecturas de glucosa."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from glucose_chart.model import GlucoseReading


@dataclass(frozen=True)
class SourcePaths:
    """Container for source directories."""

    root: Path


class DataSource(ABC):
    """Abstract glucose reading source."""

    def __init__(self, paths: SourcePaths) -> None:
        """Create a data source.

        Args:
            paths: Source paths configuration.
        """
        self._paths = paths

    def validate(self) -> None:
        """Validate that the source directory exists.

        Raises:
            FileNotFoundError: If the root directory is missing.
        """
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))

    @abstractmethod
    def load_readings(self, path: Path) -> list[GlucoseReading]:
        """Parse one export file into readings sorted by timestamp."""
