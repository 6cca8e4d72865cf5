"""Location data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class LocationSource(str, Enum):
    """Which tier of the location fallback chain produced the coordinates."""

    IP_LOOKUP = "ip_lookup"
    GEOCODED_FALLBACK = "geocoded_fallback"
    REFERENCE_DEFAULT = "reference_default"


class Coordinates(BaseModel):
    """Resolved position of the caller, scoped to the reference area."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float
    city: str
    region: str
    country: str
    postal_code: str
    timezone: str
    source: LocationSource = LocationSource.REFERENCE_DEFAULT


class GeocodeResult(BaseModel):
    """First match of an address-to-coordinates lookup."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float
    display_name: str | None = None
