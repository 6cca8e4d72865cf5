"""Traffic incident normalization across the known feed record shapes.

The regional feed has changed format over time, and mirrors of it use
different conventions. Each record is matched against the known shapes in a
fixed order; the first shape whose distinguishing key is present decides how
the record is read. Records without a usable position are dropped.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Callable

from atmosphere._http import FetchFailure, Fetcher, decode_json
from atmosphere._logging import log_resolver_call
from atmosphere.exceptions import SchemaMismatchError
from atmosphere.models.traffic import (
    IncidentCategory,
    IncidentStyle,
    InfrastructureKind,
    TrafficIncident,
)
from atmosphere.settings import AtmosphereSettings

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Incident"
DEFAULT_KIND = "Incident"
DEFAULT_ROADWORKS_KIND = "Roadworks"

_ROADWORKS_MARKERS = ("construction", "travaux", "roadworks")
_WATER_MARKERS = ("eau", "assainissement", "water", "sewer")
_HEATING_MARKERS = ("chauffage", "heating")


class IncidentShape(str, Enum):
    """Known record shapes, in detection order."""

    LOCATION_POLYLINE = "location_polyline"
    GEOJSON = "geojson"
    FIELDS = "fields"
    FLAT = "flat"


def detect_shape(record: Any) -> IncidentShape | None:
    """Return the first shape whose distinguishing key is present in ``record``."""
    if not isinstance(record, dict):
        return None
    location = record.get("location")
    if isinstance(location, dict) and location.get("polyline") is not None:
        return IncidentShape.LOCATION_POLYLINE
    geometry = record.get("geometry")
    if isinstance(geometry, dict) and geometry.get("coordinates") is not None:
        return IncidentShape.GEOJSON
    if record.get("fields") is not None:
        return IncidentShape.FIELDS
    if record.get("lat") is not None and record.get("lon") is not None:
        return IncidentShape.FLAT
    return None


# ── Field helpers ────────────────────────────────────────────────────────────


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _position(lat: Any, lon: Any) -> tuple[float, float] | None:
    """Return (lat, lon) when both parse and are non-zero."""
    lat_f = _as_float(lat)
    lon_f = _as_float(lon)
    if not lat_f or not lon_f:
        return None
    return lat_f, lon_f


def _first_present(source: Any, *keys: str, default: str | None = None) -> str | None:
    """Return the first non-null value among ``keys`` as a string."""
    if not isinstance(source, dict):
        return default
    for key in keys:
        value = source.get(key)
        if value is not None:
            return str(value)
    return default


def _pair(value: Any) -> tuple[Any, Any] | None:
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        return value[0], value[1]
    return None


# ── Per-shape normalizers ────────────────────────────────────────────────────


def _from_location_polyline(record: dict[str, Any]) -> TrafficIncident | None:
    location = record["location"]
    # Single point encoded as "lat lon"
    parts = str(location["polyline"]).split()
    if len(parts) != 2:
        return None
    position = _position(parts[0], parts[1])
    if position is None:
        return None
    return TrafficIncident(
        lat=position[0],
        lon=position[1],
        kind=_first_present(record, "type", default=DEFAULT_ROADWORKS_KIND),
        description=_first_present(
            record, "description", "short_description", default=DEFAULT_DESCRIPTION,
        ),
        street=_first_present(location, "street") or None,
        location_note=_first_present(location, "location_description") or None,
    )


def _from_geojson(record: dict[str, Any]) -> TrafficIncident | None:
    pair = _pair(record["geometry"]["coordinates"])
    if pair is None:
        return None
    lon, lat = pair
    position = _position(lat, lon)
    if position is None:
        return None
    properties = record.get("properties")
    return TrafficIncident(
        lat=position[0],
        lon=position[1],
        kind=_first_present(properties, "type", default=DEFAULT_KIND),
        description=_first_present(
            properties, "description", "libelle", default=DEFAULT_DESCRIPTION,
        ),
    )


def _from_fields(record: dict[str, Any]) -> TrafficIncident | None:
    fields = record["fields"]
    if not isinstance(fields, dict):
        return None
    pair = _pair(fields.get("geo_point_2d"))
    if pair is None and isinstance(fields.get("coordonnees"), str):
        pair = _pair(fields["coordonnees"].split(","))
    if pair is None:
        return None
    position = _position(*pair)
    if position is None:
        return None
    return TrafficIncident(
        lat=position[0],
        lon=position[1],
        kind=_first_present(fields, "type", default=DEFAULT_KIND),
        description=_first_present(
            fields, "libelle", "description", default=DEFAULT_DESCRIPTION,
        ),
    )


def _from_flat(record: dict[str, Any]) -> TrafficIncident | None:
    position = _position(record["lat"], record["lon"])
    if position is None:
        return None
    return TrafficIncident(
        lat=position[0],
        lon=position[1],
        kind=_first_present(record, "type", default=DEFAULT_KIND),
        description=_first_present(
            record, "description", "libelle", default=DEFAULT_DESCRIPTION,
        ),
    )


_NORMALIZERS: dict[IncidentShape, Callable[[dict[str, Any]], TrafficIncident | None]] = {
    IncidentShape.LOCATION_POLYLINE: _from_location_polyline,
    IncidentShape.GEOJSON: _from_geojson,
    IncidentShape.FIELDS: _from_fields,
    IncidentShape.FLAT: _from_flat,
}


def normalize_incident(record: Any) -> TrafficIncident | None:
    """Normalize one feed record, or return None when it has no usable position."""
    shape = detect_shape(record)
    if shape is None:
        return None
    return _NORMALIZERS[shape](record)


def normalize_incidents(records: list[Any]) -> list[TrafficIncident]:
    """Normalize every record, silently dropping the unpositioned ones."""
    incidents = []
    for record in records:
        incident = normalize_incident(record)
        if incident is not None:
            incidents.append(incident)
    dropped = len(records) - len(incidents)
    if dropped:
        logger.debug("Dropped %d traffic records without a usable position", dropped)
    return incidents


def extract_incident_records(payload: Any) -> list[Any]:
    """Return the raw ``incidents`` list of a feed payload.

    Raises:
        SchemaMismatchError: if the payload has no ``incidents`` list.
    """
    records = payload.get("incidents") if isinstance(payload, dict) else None
    if not isinstance(records, list):
        raise SchemaMismatchError("Traffic feed has no 'incidents' list")
    return records


def classify_incident(incident: TrafficIncident) -> IncidentStyle:
    """Derive marker display hints from the incident type and description."""
    kind = incident.kind.lower()
    description = incident.description.lower()

    category = IncidentCategory.INCIDENT
    if any(marker in kind for marker in _ROADWORKS_MARKERS):
        category = IncidentCategory.ROADWORKS

    infrastructure = None
    if any(marker in description for marker in _WATER_MARKERS):
        infrastructure = InfrastructureKind.WATER
    elif any(marker in description for marker in _HEATING_MARKERS):
        infrastructure = InfrastructureKind.HEATING

    return IncidentStyle(category=category, infrastructure=infrastructure)


class TrafficResolver:
    """Fetch the regional incident feed and normalize it."""

    def __init__(self, fetcher: Fetcher, settings: AtmosphereSettings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    @log_resolver_call
    def resolve(self) -> list[TrafficIncident]:
        result = self._fetcher.fetch(self._settings.traffic_feed_url)
        if isinstance(result, FetchFailure):
            return []
        try:
            records = extract_incident_records(decode_json(result.content))
        except SchemaMismatchError as exc:
            logger.warning("Traffic feed unusable: %s", exc)
            return []
        incidents = normalize_incidents(records)
        logger.info("Traffic: %d of %d incidents positioned", len(incidents), len(records))
        return incidents
