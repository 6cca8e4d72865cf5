"""Wastewater viral-load series for a single monitoring station.

The national feed is a semicolon-delimited CSV with one row per ISO week
(``2022-S31``) and one column per treatment station. Values use a decimal
comma and ``NA`` for weeks without a measurement.
"""

from __future__ import annotations

import csv
import datetime as dt
import logging
import math
import re
from collections.abc import Sequence

from atmosphere._http import FetchFailure, Fetcher
from atmosphere._logging import log_resolver_call
from atmosphere.models.wastewater import Trend, WastewaterMeasurement
from atmosphere.settings import AtmosphereSettings

logger = logging.getLogger(__name__)

TREND_THRESHOLD_PCT = 5.0

_ISO_WEEK_RE = re.compile(r"(\d{4})-S(\d+)")


def iso_week_to_date(label: str) -> dt.date | None:
    """Return the Monday of an ISO week label such as ``2022-S31``, or None if invalid."""
    match = _ISO_WEEK_RE.search(label)
    if match is None:
        return None
    try:
        return dt.date.fromisocalendar(int(match.group(1)), int(match.group(2)), 1)
    except ValueError:
        return None


def parse_decimal(raw: str) -> float | None:
    """Parse a decimal-comma number (``"12,5"``), or return None if not numeric."""
    try:
        value = float(raw.strip().replace(",", "."))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_wastewater_csv(
    text: str,
    station_column: str = "MAXEVILLE",
    station_name: str = "Maxéville",
    week_column: str = "semaine",
    missing_marker: str = "NA",
    max_entries: int = 30,
) -> list[WastewaterMeasurement]:
    """Parse the weekly CSV into a date-sorted series for one station.

    Rows with a missing week, a missing or non-numeric value, or too few
    fields are skipped. Only the most recent ``max_entries`` are kept.
    Returns an empty list when the CSV has no data rows or no column for
    the station.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]
    if len(lines) < 2:
        logger.warning("Wastewater CSV has %d non-blank lines; expected a header and data", len(lines))
        return []

    rows = csv.reader(lines, delimiter=";")
    header = [name.strip() for name in next(rows)]
    if station_column not in header:
        logger.warning("Wastewater CSV has no %r column", station_column)
        return []

    series: list[WastewaterMeasurement] = []
    for row in rows:
        if len(row) < len(header):
            continue
        item = dict(zip(header, row))

        week = item.get(week_column, "").strip()
        raw_value = item.get(station_column, "").strip()
        if not week or not raw_value or raw_value == missing_marker:
            continue

        monday = iso_week_to_date(week)
        value = parse_decimal(raw_value)
        if monday is None or value is None:
            continue

        series.append(WastewaterMeasurement(date=monday, value=value, station=station_name))

    series.sort(key=lambda measurement: measurement.date)
    return series[-max_entries:] if max_entries > 0 else []


def compute_trend(series: Sequence[WastewaterMeasurement]) -> Trend:
    """Classify the week-over-week change between the last two measurements.

    More than +5% is rising, less than -5% is falling, anything in between
    is stable. A zero previous value is classified by the sign of the
    latest one.
    """
    if len(series) < 2:
        return Trend.INSUFFICIENT_DATA

    previous = series[-2].value
    current = series[-1].value
    if previous == 0:
        if current > 0:
            return Trend.RISING
        if current < 0:
            return Trend.FALLING
        return Trend.STABLE

    change_pct = (current - previous) / previous * 100
    if change_pct > TREND_THRESHOLD_PCT:
        return Trend.RISING
    if change_pct < -TREND_THRESHOLD_PCT:
        return Trend.FALLING
    return Trend.STABLE


def latest_measurement(series: Sequence[WastewaterMeasurement]) -> WastewaterMeasurement | None:
    return series[-1] if series else None


class WastewaterResolver:
    """Fetch the national CSV feed and extract the configured station's series."""

    def __init__(self, fetcher: Fetcher, settings: AtmosphereSettings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    @log_resolver_call
    def resolve(self) -> list[WastewaterMeasurement]:
        result = self._fetcher.fetch(self._settings.wastewater_csv_url)
        if isinstance(result, FetchFailure):
            return []
        text = result.content.decode("utf-8-sig", errors="replace")
        settings = self._settings
        series = parse_wastewater_csv(
            text,
            station_column=settings.wastewater_station_column,
            station_name=settings.wastewater_station_name,
            week_column=settings.wastewater_week_column,
            missing_marker=settings.wastewater_missing_marker,
            max_entries=settings.wastewater_max_entries,
        )
        logger.info(
            "Wastewater: %d measurements for %s", len(series), settings.wastewater_station_name,
        )
        return series
