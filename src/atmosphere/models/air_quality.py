"""Air quality data models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class AirQualityMeasurement(BaseModel):
    model_config = ConfigDict(frozen=True)

    parameter: str
    value: float
    unit: str


class AirQualitySource(str, Enum):
    """Provider that produced an air quality report."""

    WAQI = "waqi"
    OPENAQ = "openaq"
    SYNTHETIC = "synthetic"


class AirQualityReport(BaseModel):
    """Ambient air quality around the resolved location.

    By convention the first measurement is the overall index.
    """

    model_config = ConfigDict(frozen=True)

    measurements: tuple[AirQualityMeasurement, ...] = ()
    location: str | None = None
    source: AirQualitySource
    raw: dict[str, Any] | None = None

    @property
    def is_synthetic(self) -> bool:
        return self.source is AirQualitySource.SYNTHETIC

    @property
    def overall_index(self) -> float | None:
        """Value of the first measurement, or None when there is none."""
        if not self.measurements:
            return None
        return self.measurements[0].value
