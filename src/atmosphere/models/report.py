"""Aggregate report model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from atmosphere.models.air_quality import AirQualityReport
from atmosphere.models.location import Coordinates
from atmosphere.models.recommendation import Recommendation
from atmosphere.models.traffic import TrafficIncident
from atmosphere.models.wastewater import Trend, WastewaterMeasurement
from atmosphere.models.weather import WeatherForecast


class AtmosphereReport(BaseModel):
    """Everything gathered for one request, ready for rendering.

    ``weather`` is None when no forecast could be obtained; empty
    collections mean the corresponding source was unavailable or empty.
    """

    model_config = ConfigDict(frozen=True)

    client_address: str
    coordinates: Coordinates
    weather: WeatherForecast | None = None
    traffic_incidents: tuple[TrafficIncident, ...] = ()
    wastewater_series: tuple[WastewaterMeasurement, ...] = ()
    wastewater_trend: Trend = Trend.INSUFFICIENT_DATA
    air_quality: AirQualityReport
    recommendation: Recommendation
    generated_at: datetime
