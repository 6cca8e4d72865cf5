"""Atmosphere data models."""

from atmosphere.models.air_quality import AirQualityMeasurement, AirQualityReport, AirQualitySource
from atmosphere.models.location import Coordinates, GeocodeResult, LocationSource
from atmosphere.models.recommendation import Recommendation
from atmosphere.models.report import AtmosphereReport
from atmosphere.models.traffic import IncidentCategory, IncidentStyle, InfrastructureKind, TrafficIncident
from atmosphere.models.wastewater import Trend, WastewaterMeasurement
from atmosphere.models.weather import Period, PeriodForecast, PrecipKind, WeatherForecast

__all__ = [
    "AirQualityMeasurement",
    "AirQualityReport",
    "AirQualitySource",
    "AtmosphereReport",
    "Coordinates",
    "GeocodeResult",
    "IncidentCategory",
    "IncidentStyle",
    "InfrastructureKind",
    "LocationSource",
    "Period",
    "PeriodForecast",
    "PrecipKind",
    "Recommendation",
    "TrafficIncident",
    "Trend",
    "WastewaterMeasurement",
    "WeatherForecast",
]
