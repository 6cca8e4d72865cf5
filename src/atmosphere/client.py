"""Public client running the full acquisition and recommendation pipeline."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, TypeVar

from atmosphere._http import Fetcher
from atmosphere.air_quality import AirQualityResolver, synthetic_report
from atmosphere.location import LocationResolver
from atmosphere.models.air_quality import AirQualityReport
from atmosphere.models.location import Coordinates
from atmosphere.models.report import AtmosphereReport
from atmosphere.models.traffic import TrafficIncident
from atmosphere.models.wastewater import WastewaterMeasurement
from atmosphere.models.weather import WeatherForecast
from atmosphere.scoring import Scorer, score_recommendation
from atmosphere.settings import AtmosphereSettings, get_settings
from atmosphere.traffic import TrafficResolver
from atmosphere.wastewater import WastewaterResolver, compute_trend
from atmosphere.weather import WeatherResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AtmosphereClient:
    """Synchronous client for the atmosphere pipeline.

    Usage:
        client = AtmosphereClient()
        report = client.report("203.0.113.7")
        client.close()

        # Or as a context manager:
        with AtmosphereClient() as client:
            report = client.report("203.0.113.7", concurrent=True)
    """

    def __init__(
        self,
        settings: AtmosphereSettings | None = None,
        fetcher: Fetcher | None = None,
        scorer: Scorer = score_recommendation,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher or Fetcher.from_settings(self._settings)
        self._scorer = scorer

        self._location = LocationResolver(self._fetcher, self._settings)
        self._weather = WeatherResolver(self._fetcher, self._settings)
        self._traffic = TrafficResolver(self._fetcher, self._settings)
        self._wastewater = WastewaterResolver(self._fetcher, self._settings)
        self._air_quality = AirQualityResolver(self._fetcher, self._settings)

    def __enter__(self) -> AtmosphereClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection if this client created it."""
        if self._owns_fetcher:
            self._fetcher.close()

    def _guarded(self, label: str, call: Callable[[], T], fallback: Callable[[], T]) -> T:
        # Resolvers degrade on their own; this only catches programming errors
        try:
            return call()
        except Exception:
            logger.exception("Unexpected error in %s; degrading", label)
            return fallback()

    # ── Sources ────────────────────────────────────────────────

    def locate(self, address: str) -> Coordinates:
        """Resolve the caller's address to coordinates in the reference area."""
        return self._guarded(
            "location",
            lambda: self._location.resolve(address),
            self._location.reference_default,
        )

    def weather(self, coordinates: Coordinates) -> WeatherForecast | None:
        """Get today's period forecasts, or None when unavailable."""
        return self._guarded("weather", lambda: self._weather.resolve(coordinates), lambda: None)

    def traffic(self) -> list[TrafficIncident]:
        """Get positioned traffic incidents for the region."""
        return self._guarded("traffic", self._traffic.resolve, list)

    def wastewater(self) -> list[WastewaterMeasurement]:
        """Get the recent wastewater series for the configured station."""
        return self._guarded("wastewater", self._wastewater.resolve, list)

    def air_quality(self, coordinates: Coordinates) -> AirQualityReport:
        """Get air quality around ``coordinates``; synthetic when no provider answers."""
        return self._guarded(
            "air quality",
            lambda: self._air_quality.resolve(coordinates),
            lambda: synthetic_report(self._settings),
        )

    # ── Aggregate ──────────────────────────────────────────────

    def report(self, address: str, concurrent: bool = False) -> AtmosphereReport:
        """Run the whole pipeline for one caller address.

        Location is resolved first; the four data sources then run one after
        another, or on a thread pool when ``concurrent`` is set. Always
        returns a complete report.
        """
        coordinates = self.locate(address)

        if concurrent:
            with ThreadPoolExecutor(max_workers=4) as pool:
                weather_future = pool.submit(self.weather, coordinates)
                traffic_future = pool.submit(self.traffic)
                wastewater_future = pool.submit(self.wastewater)
                air_quality_future = pool.submit(self.air_quality, coordinates)
                weather = weather_future.result()
                incidents = traffic_future.result()
                series = wastewater_future.result()
                air_quality = air_quality_future.result()
        else:
            weather = self.weather(coordinates)
            incidents = self.traffic()
            series = self.wastewater()
            air_quality = self.air_quality(coordinates)

        recommendation = self._scorer(weather, incidents, air_quality)
        logger.info(
            "Report for %s: score=%d use_car=%s",
            address, recommendation.score, recommendation.use_car_recommended,
        )
        return AtmosphereReport(
            client_address=address,
            coordinates=coordinates,
            weather=weather,
            traffic_incidents=tuple(incidents),
            wastewater_series=tuple(series),
            wastewater_trend=compute_trend(series),
            air_quality=air_quality,
            recommendation=recommendation,
            generated_at=datetime.now(timezone.utc),
        )
