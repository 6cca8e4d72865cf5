"""Weather forecast data models."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Period(str, Enum):
    """Fixed 6-hour blocks of the day."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class PrecipKind(str, Enum):
    LIGHT = "light"
    RAIN = "rain"


class PeriodForecast(BaseModel):
    """Forecast aggregated over one period.

    A metric with no hourly samples in the period is left as None.
    """

    model_config = ConfigDict(frozen=True)

    period: Period
    temp_min: int | None = None
    temp_max: int | None = None
    precip_probability: int | None = None
    precip_kind: PrecipKind | None = None
    wind_force: int | None = None
    wind_direction: str | None = None


class WeatherForecast(BaseModel):
    """Morning, afternoon and evening forecasts for one day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    periods: tuple[PeriodForecast, ...] = ()
