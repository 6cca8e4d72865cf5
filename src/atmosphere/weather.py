"""Hourly forecast normalization into morning/afternoon/evening periods."""

from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any

from atmosphere._http import FetchFailure, Fetcher, decode_json
from atmosphere._logging import log_resolver_call
from atmosphere.exceptions import SchemaMismatchError
from atmosphere.models.location import Coordinates
from atmosphere.models.weather import Period, PeriodForecast, PrecipKind, WeatherForecast
from atmosphere.settings import AtmosphereSettings

logger = logging.getLogger(__name__)

PERIOD_HOURS: dict[Period, range] = {
    Period.MORNING: range(6, 12),
    Period.AFTERNOON: range(12, 18),
    Period.EVENING: range(18, 24),
}

HOURLY_METRICS = ("temperature_2m", "precipitation_probability", "windspeed_10m")
RAIN_PROBABILITY_THRESHOLD = 50
# The hourly feed carries no wind direction at this resolution
WIND_DIRECTION = "Variable"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _samples(hourly: dict[str, Any], metric: str, hours: range) -> list[float]:
    """Return the finite numeric samples of ``metric`` for the given hours of the day."""
    series = hourly.get(metric)
    if not isinstance(series, list):
        return []
    values: list[float] = []
    for hour in hours:
        if hour >= len(series):
            break
        sample = series[hour]
        if isinstance(sample, bool) or not isinstance(sample, (int, float)):
            continue
        # NaN and Infinity are valid JSON to the decoder
        if math.isfinite(sample):
            values.append(float(sample))
    return values


def summarize_period(period: Period, hourly: dict[str, Any]) -> PeriodForecast:
    """Aggregate the hourly arrays over one period; metrics without samples stay None."""
    hours = PERIOD_HOURS[period]
    fields: dict[str, Any] = {"period": period}

    temps = _samples(hourly, "temperature_2m", hours)
    if temps:
        fields["temp_min"] = round_half_away(min(temps))
        fields["temp_max"] = round_half_away(max(temps))

    precips = _samples(hourly, "precipitation_probability", hours)
    if precips:
        peak = max(precips)
        fields["precip_probability"] = round_half_away(peak)
        fields["precip_kind"] = (
            PrecipKind.RAIN if peak > RAIN_PROBABILITY_THRESHOLD else PrecipKind.LIGHT
        )

    winds = _samples(hourly, "windspeed_10m", hours)
    if winds:
        fields["wind_force"] = round_half_away(max(winds))
        fields["wind_direction"] = WIND_DIRECTION

    return PeriodForecast(**fields)


def _forecast_date(hourly: dict[str, Any]) -> dt.date:
    times = hourly.get("time")
    if isinstance(times, list) and times and isinstance(times[0], str):
        try:
            return dt.date.fromisoformat(times[0][:10])
        except ValueError:
            pass
    return dt.date.today()


def normalize_forecast(payload: dict[str, Any] | None) -> WeatherForecast | None:
    """Convert a raw hourly forecast into three period forecasts.

    Returns None when there is no payload at all.

    Raises:
        SchemaMismatchError: if the payload has no ``hourly`` mapping.
    """
    if payload is None:
        return None
    hourly = payload.get("hourly") if isinstance(payload, dict) else None
    if not isinstance(hourly, dict):
        raise SchemaMismatchError("Forecast payload has no 'hourly' mapping")

    return WeatherForecast(
        date=_forecast_date(hourly),
        periods=tuple(summarize_period(period, hourly) for period in Period),
    )


class WeatherResolver:
    """Fetch today's hourly forecast for a location and normalize it."""

    def __init__(self, fetcher: Fetcher, settings: AtmosphereSettings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    @log_resolver_call
    def resolve(self, coordinates: Coordinates) -> WeatherForecast | None:
        timezone = coordinates.timezone or self._settings.reference_location.timezone
        result = self._fetcher.fetch(
            self._settings.forecast_url,
            params={
                "latitude": coordinates.lat,
                "longitude": coordinates.lon,
                "hourly": ",".join(HOURLY_METRICS),
                "timezone": timezone,
                "forecast_days": 1,
            },
        )
        if isinstance(result, FetchFailure):
            return None
        try:
            return normalize_forecast(decode_json(result.content))
        except SchemaMismatchError as exc:
            logger.warning("Weather forecast unusable: %s", exc)
            return None
