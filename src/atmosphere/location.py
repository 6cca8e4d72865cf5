"""Caller geolocation, scoped to the reference area.

Resolution is a three-tier chain: an IP lookup that is only trusted when it
lands in the reference city, then geocoding of a fixed address inside the
area, then the hardcoded reference coordinates.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping

from atmosphere._http import FetchFailure, Fetcher, decode_json
from atmosphere._logging import log_resolver_call
from atmosphere.exceptions import SchemaMismatchError
from atmosphere.models.location import Coordinates, GeocodeResult, LocationSource
from atmosphere.settings import AtmosphereSettings

logger = logging.getLogger(__name__)


def client_address(headers: Mapping[str, str], remote_addr: str) -> str:
    """Pick the caller's address from request headers, falling back to the peer address."""
    lowered = {name.lower(): value for name, value in headers.items()}
    if lowered.get("client-ip"):
        return lowered["client-ip"].strip()
    forwarded = lowered.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return remote_addr


def _text(root: ET.Element, tag: str) -> str:
    node = root.find(tag)
    if node is None or node.text is None:
        return ""
    return node.text.strip()


def parse_ip_lookup(content: bytes) -> Coordinates:
    """Parse an IP lookup XML answer into coordinates.

    Raises:
        SchemaMismatchError: on malformed XML, a non-success status, or
            missing coordinates.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise SchemaMismatchError(f"IP lookup returned malformed XML: {exc}") from exc

    status = _text(root, "status")
    if status != "success":
        raise SchemaMismatchError(f"IP lookup status is {status or 'missing'!r}")

    try:
        lat = float(_text(root, "lat"))
        lon = float(_text(root, "lon"))
    except ValueError as exc:
        raise SchemaMismatchError(f"IP lookup coordinates are unusable: {exc}") from exc

    return Coordinates(
        lat=lat,
        lon=lon,
        city=_text(root, "city"),
        region=_text(root, "regionName"),
        country=_text(root, "country"),
        postal_code=_text(root, "zip"),
        timezone=_text(root, "timezone"),
        source=LocationSource.IP_LOOKUP,
    )


def parse_geocode(content: bytes) -> GeocodeResult | None:
    """Return the first geocoding match, or None when there is no usable one."""
    data = decode_json(content)
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return None
    first = data[0]
    try:
        lat = float(first["lat"])
        lon = float(first["lon"])
    except (KeyError, TypeError, ValueError):
        return None
    if not lat or not lon:
        return None
    return GeocodeResult(lat=lat, lon=lon, display_name=first.get("display_name"))


class LocationResolver:
    """Resolve a network address to coordinates inside the reference area."""

    def __init__(self, fetcher: Fetcher, settings: AtmosphereSettings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    @log_resolver_call
    def resolve(self, address: str) -> Coordinates:
        """Always returns coordinates; never a location outside the reference city."""
        located = self._lookup_address(address)
        if located is not None:
            return located

        reference = self._settings.reference_location
        geocoded = self.geocode(reference.fallback_address)
        if geocoded is not None:
            logger.info("Using geocoded fallback address %r", reference.fallback_address)
            return self._reference_coordinates(
                geocoded.lat, geocoded.lon, LocationSource.GEOCODED_FALLBACK,
            )

        logger.warning("Geocoding failed; using hardcoded reference coordinates")
        return self.reference_default()

    def reference_default(self) -> Coordinates:
        """Return the hardcoded reference coordinates without any lookup."""
        reference = self._settings.reference_location
        return self._reference_coordinates(
            reference.lat, reference.lon, LocationSource.REFERENCE_DEFAULT,
        )

    def geocode(self, address: str) -> GeocodeResult | None:
        """Geocode a postal address, or return None when the lookup is unusable."""
        result = self._fetcher.fetch(
            self._settings.geocode_url,
            params={"q": address, "format": "json", "limit": 1},
        )
        if isinstance(result, FetchFailure):
            return None
        try:
            return parse_geocode(result.content)
        except SchemaMismatchError as exc:
            logger.warning("Geocoding %r failed: %s", address, exc)
            return None

    def _lookup_address(self, address: str) -> Coordinates | None:
        url = self._settings.ip_lookup_url.format(address=address)
        result = self._fetcher.fetch(url)
        if isinstance(result, FetchFailure):
            return None
        try:
            located = parse_ip_lookup(result.content)
        except SchemaMismatchError as exc:
            logger.warning("IP lookup for %s unusable: %s", address, exc)
            return None

        reference_city = self._settings.reference_location.city
        if located.city.casefold() != reference_city.casefold():
            logger.info(
                "IP lookup placed %s in %r, outside %s; falling back",
                address, located.city, reference_city,
            )
            return None
        return located

    def _reference_coordinates(
        self, lat: float, lon: float, source: LocationSource,
    ) -> Coordinates:
        reference = self._settings.reference_location
        return Coordinates(
            lat=lat,
            lon=lon,
            city=reference.city,
            region=reference.region,
            country=reference.country,
            postal_code=reference.postal_code,
            timezone=reference.timezone,
            source=source,
        )
