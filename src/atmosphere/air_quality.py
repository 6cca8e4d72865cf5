"""Ambient air quality with a two-provider fallback chain.

The WAQI index is tried first, then the nearest OpenAQ station. When both
fail, a fixed synthetic reading for the reference area is returned, marked
as such, so downstream consumers always have a value for this category.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from atmosphere._http import FetchFailure, Fetcher, decode_json
from atmosphere._logging import log_resolver_call
from atmosphere.exceptions import SchemaMismatchError
from atmosphere.models.air_quality import AirQualityMeasurement, AirQualityReport, AirQualitySource
from atmosphere.models.location import Coordinates
from atmosphere.settings import AtmosphereSettings

logger = logging.getLogger(__name__)

INDEX_PARAMETER = "AQI"
INDEX_UNIT = "AQI"
POLLUTANT_UNIT = "µg/m³"


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_waqi(payload: Any) -> AirQualityReport:
    """Extract the overall index and each pollutant sub-index from a WAQI feed.

    Raises:
        SchemaMismatchError: if the status is not ``ok`` or no numeric
            measurement can be extracted.
    """
    if not isinstance(payload, dict) or payload.get("status") != "ok":
        raise SchemaMismatchError("WAQI status is not 'ok'")
    data = payload.get("data")
    if not isinstance(data, dict):
        raise SchemaMismatchError("WAQI payload has no 'data' object")

    measurements: list[AirQualityMeasurement] = []
    index = _as_float(data.get("aqi"))
    if index is not None:
        measurements.append(
            AirQualityMeasurement(parameter=INDEX_PARAMETER, value=index, unit=INDEX_UNIT),
        )

    iaqi = data.get("iaqi")
    if isinstance(iaqi, dict):
        for pollutant, info in iaqi.items():
            value = _as_float(info.get("v")) if isinstance(info, dict) else None
            if value is None:
                continue
            measurements.append(
                AirQualityMeasurement(
                    parameter=str(pollutant).upper(), value=value, unit=POLLUTANT_UNIT,
                ),
            )

    if not measurements:
        raise SchemaMismatchError("WAQI payload has no numeric measurement")

    city = data.get("city")
    location = city.get("name") if isinstance(city, dict) else None
    return AirQualityReport(
        measurements=tuple(measurements),
        location=location,
        source=AirQualitySource.WAQI,
    )


def parse_openaq(payload: Any) -> AirQualityReport:
    """Wrap the nearest OpenAQ station record, keeping it verbatim in ``raw``.

    Raises:
        SchemaMismatchError: if the payload has no first result.
    """
    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        raise SchemaMismatchError("OpenAQ payload has no results")
    station = results[0]

    measurements: list[AirQualityMeasurement] = []
    for entry in station.get("measurements") or []:
        if not isinstance(entry, dict) or entry.get("parameter") is None:
            continue
        value = _as_float(entry.get("value"))
        if value is None:
            continue
        measurements.append(
            AirQualityMeasurement(
                parameter=str(entry["parameter"]),
                value=value,
                unit=str(entry.get("unit") or POLLUTANT_UNIT),
            ),
        )

    location = station.get("location")
    return AirQualityReport(
        measurements=tuple(measurements),
        location=str(location) if location is not None else None,
        source=AirQualitySource.OPENAQ,
        raw=station,
    )


def synthetic_report(settings: AtmosphereSettings) -> AirQualityReport:
    """Return the configured stand-in reading for the reference area."""
    return AirQualityReport(
        measurements=tuple(settings.synthetic_air_quality),
        location=settings.synthetic_air_quality_location,
        source=AirQualitySource.SYNTHETIC,
    )


class AirQualityResolver:
    """Resolve air quality around a location. Never returns None."""

    def __init__(self, fetcher: Fetcher, settings: AtmosphereSettings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    @log_resolver_call
    def resolve(self, coordinates: Coordinates) -> AirQualityReport:
        report = self._from_waqi(coordinates)
        if report is not None:
            return report
        report = self._from_openaq(coordinates)
        if report is not None:
            return report
        logger.warning("Air quality providers unavailable; using synthetic reading")
        return synthetic_report(self._settings)

    def _from_waqi(self, coordinates: Coordinates) -> AirQualityReport | None:
        url = self._settings.waqi_url.format(lat=coordinates.lat, lon=coordinates.lon)
        result = self._fetcher.fetch(url, params={"token": self._settings.waqi_token})
        if isinstance(result, FetchFailure):
            return None
        try:
            return parse_waqi(decode_json(result.content))
        except SchemaMismatchError as exc:
            logger.warning("WAQI air quality unusable: %s", exc)
            return None

    def _from_openaq(self, coordinates: Coordinates) -> AirQualityReport | None:
        result = self._fetcher.fetch(
            self._settings.openaq_url,
            params={
                "coordinates": f"{coordinates.lat},{coordinates.lon}",
                "radius": self._settings.openaq_radius_m,
                "limit": 1,
            },
        )
        if isinstance(result, FetchFailure):
            return None
        try:
            return parse_openaq(decode_json(result.content))
        except SchemaMismatchError as exc:
            logger.warning("OpenAQ air quality unusable: %s", exc)
            return None
