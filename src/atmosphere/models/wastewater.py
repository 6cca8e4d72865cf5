"""Wastewater surveillance data models."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict


class WastewaterMeasurement(BaseModel):
    """Weekly viral-load positivity rate (percent) at one treatment station."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    value: float
    station: str


class Trend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"
