"""Environment-driven configuration for the atmosphere pipeline."""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from atmosphere.models.air_quality import AirQualityMeasurement


class ReferenceLocation(BaseModel):
    """The metropolitan area the pipeline is scoped to."""

    model_config = ConfigDict(frozen=True)

    city: str = "Nancy"
    region: str = "Grand Est"
    country: str = "France"
    postal_code: str = "54000"
    timezone: str = "Europe/Paris"
    lat: float = 48.6880492
    lon: float = 6.1727318
    # Geocoded when the caller's address does not resolve inside the area
    fallback_address: str = "IUT Charlemagne"


def _default_synthetic_air_quality() -> list[AirQualityMeasurement]:
    return [
        AirQualityMeasurement(parameter="AQI", value=45, unit="AQI"),
        AirQualityMeasurement(parameter="PM2.5", value=12.5, unit="µg/m³"),
        AirQualityMeasurement(parameter="PM10", value=23.8, unit="µg/m³"),
        AirQualityMeasurement(parameter="NO2", value=18.2, unit="µg/m³"),
        AirQualityMeasurement(parameter="O3", value=35.6, unit="µg/m³"),
    ]


class AtmosphereSettings(BaseSettings):
    """Validated settings. Every field can be overridden with an ATMOSPHERE_ variable."""

    model_config = SettingsConfigDict(
        env_prefix="ATMOSPHERE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ── HTTP ───────────────────────────────────────────────────
    http_timeout: float = 5.0
    user_agent: str = "Mozilla/5.0 (compatible; AtmosphereBot/1.0; +http://example.com/bot)"
    accept: str = "application/json, text/html, application/xml"

    # ── Upstream sources ───────────────────────────────────────
    ip_lookup_url: str = "http://ip-api.com/xml/{address}"
    geocode_url: str = "https://nominatim.openstreetmap.org/search"
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    traffic_feed_url: str = "https://carto.g-ny.org/data/cifs/cifs_waze_v2.json"
    wastewater_csv_url: str = (
        "https://www.data.gouv.fr/fr/datasets/r/2963ccb5-344d-4978-bdd3-08aaf9efe514"
    )
    waqi_url: str = "https://api.waqi.info/feed/geo:{lat};{lon}/"
    waqi_token: str = "demo"
    openaq_url: str = "https://api.openaq.org/v2/latest"
    openaq_radius_m: int = 50_000

    # ── Reference area ─────────────────────────────────────────
    reference_location: ReferenceLocation = Field(default_factory=ReferenceLocation)

    # ── Wastewater CSV layout ──────────────────────────────────
    wastewater_week_column: str = "semaine"
    wastewater_station_column: str = "MAXEVILLE"
    wastewater_station_name: str = "Maxéville"
    wastewater_missing_marker: str = "NA"
    wastewater_max_entries: int = 30

    # ── Last-resort air quality ────────────────────────────────
    synthetic_air_quality: list[AirQualityMeasurement] = Field(
        default_factory=_default_synthetic_air_quality,
    )
    synthetic_air_quality_location: str = "Nancy, France"


@lru_cache(maxsize=1)
def get_settings() -> AtmosphereSettings:
    """Return the process-wide settings, read from the environment once."""
    return AtmosphereSettings()
