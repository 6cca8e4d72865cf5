"""Tests for traffic incident normalization."""

from __future__ import annotations

import httpx
import pytest
import respx

from atmosphere.exceptions import SchemaMismatchError
from atmosphere.models.traffic import IncidentCategory, InfrastructureKind, TrafficIncident
from atmosphere.traffic import (
    IncidentShape,
    TrafficResolver,
    classify_incident,
    detect_shape,
    extract_incident_records,
    normalize_incident,
    normalize_incidents,
)
from tests.conftest import (
    SAMPLE_FIELDS_INCIDENT,
    SAMPLE_FIELDS_STRING_INCIDENT,
    SAMPLE_FLAT_INCIDENT,
    SAMPLE_GEOJSON_INCIDENT,
    SAMPLE_POLYLINE_INCIDENT,
    SAMPLE_TRAFFIC_FEED,
    TRAFFIC_URL,
)


class TestDetectShape:
    @pytest.mark.parametrize(
        ("record", "shape"),
        [
            (SAMPLE_POLYLINE_INCIDENT, IncidentShape.LOCATION_POLYLINE),
            (SAMPLE_GEOJSON_INCIDENT, IncidentShape.GEOJSON),
            (SAMPLE_FIELDS_INCIDENT, IncidentShape.FIELDS),
            (SAMPLE_FLAT_INCIDENT, IncidentShape.FLAT),
        ],
    )
    def test_known_shapes(self, record: dict, shape: IncidentShape) -> None:
        assert detect_shape(record) is shape

    def test_precedence_polyline_over_flat(self) -> None:
        record = {**SAMPLE_FLAT_INCIDENT, "location": {"polyline": "48.1 6.1"}}
        assert detect_shape(record) is IncidentShape.LOCATION_POLYLINE

    def test_unknown(self) -> None:
        assert detect_shape({"id": 1}) is None
        assert detect_shape("not a record") is None
        assert detect_shape({"lat": 48.7}) is None


class TestNormalizeIncident:
    def test_polyline(self) -> None:
        incident = normalize_incident(SAMPLE_POLYLINE_INCIDENT)
        assert incident == TrafficIncident(
            lat=48.6921,
            lon=6.1844,
            kind="CONSTRUCTION",
            description="Travaux sur le réseau d'eau potable",
            street="Rue Saint-Dizier",
            location_note="Entre la rue des Dominicains et la rue Gambetta",
        )

    def test_polyline_falls_back_to_short_description(self) -> None:
        record = {"short_description": "Chantier", "location": {"polyline": "48.7 6.2"}}
        incident = normalize_incident(record)
        assert incident is not None
        assert incident.description == "Chantier"
        assert incident.kind == "Roadworks"
        assert incident.street is None
        assert incident.location_note is None

    def test_geojson_swaps_lon_lat(self) -> None:
        incident = normalize_incident(SAMPLE_GEOJSON_INCIDENT)
        assert incident is not None
        assert (incident.lat, incident.lon) == (48.69, 6.18)
        assert incident.description == "Raccordement au chauffage urbain"
        assert incident.kind == "Travaux"

    def test_fields_point_array(self) -> None:
        incident = normalize_incident(SAMPLE_FIELDS_INCIDENT)
        assert incident is not None
        assert (incident.lat, incident.lon) == (48.7012, 6.1503)
        assert incident.description == "Fermeture de voie"

    def test_fields_coordinate_string(self) -> None:
        incident = normalize_incident(SAMPLE_FIELDS_STRING_INCIDENT)
        assert incident is not None
        assert (incident.lat, incident.lon) == (48.7105, 6.162)
        assert incident.description == "Déviation"

    def test_flat(self) -> None:
        incident = normalize_incident(SAMPLE_FLAT_INCIDENT)
        assert incident is not None
        assert (incident.lat, incident.lon) == (48.6801, 6.1702)
        assert incident.kind == "ACCIDENT"

    def test_flat_defaults(self) -> None:
        incident = normalize_incident({"lat": "48.7", "lon": "6.2"})
        assert incident is not None
        assert incident.description == "Incident"
        assert incident.kind == "Incident"

    @pytest.mark.parametrize(
        "record",
        [
            {"location": {"polyline": "48.69 6.18 48.70 6.19"}},
            {"location": {"polyline": "north south"}},
            {"geometry": {"coordinates": [[6.1, 48.6], [6.2, 48.7]]}},
            {"geometry": {"coordinates": [6.1]}},
            {"fields": {"libelle": "no position"}},
            {"fields": {"coordonnees": "48.7"}},
            {"lat": 0, "lon": 6.1},
            {"lat": "n/a", "lon": "6.1"},
            {"id": "nothing"},
        ],
    )
    def test_unpositioned_records_dropped(self, record: dict) -> None:
        assert normalize_incident(record) is None

    def test_first_shape_wins_without_merging(self) -> None:
        # Polyline shape is selected, so the valid flat coordinates are never read
        record = {"location": {"polyline": "bad"}, "lat": 48.7, "lon": 6.2}
        assert normalize_incident(record) is None


class TestNormalizeIncidents:
    def test_feed(self) -> None:
        incidents = normalize_incidents(SAMPLE_TRAFFIC_FEED["incidents"])
        assert len(incidents) == 5
        assert all(i.lat and i.lon for i in incidents)

    def test_extract_records(self) -> None:
        assert extract_incident_records(SAMPLE_TRAFFIC_FEED) == SAMPLE_TRAFFIC_FEED["incidents"]

    def test_extract_without_incidents(self) -> None:
        with pytest.raises(SchemaMismatchError):
            extract_incident_records({"features": []})


class TestClassifyIncident:
    def test_roadworks_with_water(self) -> None:
        style = classify_incident(normalize_incident(SAMPLE_POLYLINE_INCIDENT))  # type: ignore[arg-type]
        assert style.category is IncidentCategory.ROADWORKS
        assert style.infrastructure is InfrastructureKind.WATER

    def test_heating(self) -> None:
        style = classify_incident(normalize_incident(SAMPLE_GEOJSON_INCIDENT))  # type: ignore[arg-type]
        assert style.category is IncidentCategory.ROADWORKS
        assert style.infrastructure is InfrastructureKind.HEATING

    def test_plain_incident(self) -> None:
        style = classify_incident(normalize_incident(SAMPLE_FLAT_INCIDENT))  # type: ignore[arg-type]
        assert style.category is IncidentCategory.INCIDENT
        assert style.infrastructure is None


class TestTrafficResolver:
    @respx.mock
    def test_resolve(self, fetcher, settings) -> None:
        respx.get(TRAFFIC_URL).mock(return_value=httpx.Response(200, json=SAMPLE_TRAFFIC_FEED))
        incidents = TrafficResolver(fetcher, settings).resolve()
        assert len(incidents) == 5

    @respx.mock
    def test_feed_down(self, fetcher, settings) -> None:
        respx.get(TRAFFIC_URL).mock(return_value=httpx.Response(502, text="Bad gateway"))
        assert TrafficResolver(fetcher, settings).resolve() == []

    @respx.mock
    def test_unexpected_payload(self, fetcher, settings) -> None:
        respx.get(TRAFFIC_URL).mock(return_value=httpx.Response(200, json=[{"lat": 48.7}]))
        assert TrafficResolver(fetcher, settings).resolve() == []
