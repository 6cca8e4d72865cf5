"""Shared test fixtures and sample upstream responses."""

from __future__ import annotations

import logging

import pytest

from atmosphere._http import Fetcher
from atmosphere.settings import AtmosphereSettings

IP_LOOKUP_URL = "http://ip-api.com/xml/{address}"
GEOCODE_URL = "https://nominatim.openstreetmap.org/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
TRAFFIC_URL = "https://carto.g-ny.org/data/cifs/cifs_waze_v2.json"
WASTEWATER_URL = "https://www.data.gouv.fr/fr/datasets/r/2963ccb5-344d-4978-bdd3-08aaf9efe514"
WAQI_PREFIX = "https://api.waqi.info/feed/"
OPENAQ_URL = "https://api.openaq.org/v2/latest"


SAMPLE_IP_NANCY = b"""<?xml version="1.0" encoding="UTF-8"?>
<query>
  <status>success</status>
  <country>France</country>
  <countryCode>FR</countryCode>
  <region>GES</region>
  <regionName>Grand Est</regionName>
  <city>Nancy</city>
  <zip>54000</zip>
  <lat>48.6844</lat>
  <lon>6.1855</lon>
  <timezone>Europe/Paris</timezone>
  <query>193.50.135.1</query>
</query>
"""

SAMPLE_IP_PARIS = b"""<?xml version="1.0" encoding="UTF-8"?>
<query>
  <status>success</status>
  <country>France</country>
  <regionName>Ile-de-France</regionName>
  <city>Paris</city>
  <zip>75001</zip>
  <lat>48.8566</lat>
  <lon>2.3522</lon>
  <timezone>Europe/Paris</timezone>
</query>
"""

SAMPLE_IP_FAIL = b"""<?xml version="1.0" encoding="UTF-8"?>
<query>
  <status>fail</status>
  <message>private range</message>
  <query>127.0.0.1</query>
</query>
"""

SAMPLE_GEOCODE = [
    {
        "lat": "48.6829",
        "lon": "6.1617",
        "display_name": "IUT Charlemagne, 2 ter, Boulevard Charlemagne, Nancy, France",
    },
]

_LEAD = 6  # hours 0-5 are outside every period

SAMPLE_FORECAST = {
    "latitude": 48.68,
    "longitude": 6.18,
    "timezone": "Europe/Paris",
    "hourly": {
        "time": [f"2024-05-14T{hour:02d}:00" for hour in range(24)],
        "temperature_2m": [8.0] * _LEAD
        + [9.4, 10.0, 11.2, 12.5, 13.0, 14.6]
        + [15.5, 16.0, 17.2, 18.0, 17.5, 16.4]
        + [15.0, 13.8, 12.1, 11.0, 10.2, 9.5],
        "precipitation_probability": [0] * _LEAD
        + [0, 5, 10, 20, 30, 40]
        + [55, 60, 70, 65, 50, 45]
        + [50, 40, 30, 20, 10, 0],
        "windspeed_10m": [4.0] * _LEAD
        + [5.2, 6.1, 7.4, 8.0, 9.5, 10.1]
        + [12.4, 13.6, 15.0, 14.2, 13.1, 12.0]
        + [10.0, 9.0, 8.0, 7.0, 6.0, 5.5],
    },
}

SAMPLE_POLYLINE_INCIDENT = {
    "id": "cifs-1042",
    "type": "CONSTRUCTION",
    "description": "Travaux sur le réseau d'eau potable",
    "short_description": "Travaux",
    "location": {
        "street": "Rue Saint-Dizier",
        "polyline": "48.6921 6.1844",
        "location_description": "Entre la rue des Dominicains et la rue Gambetta",
    },
}

SAMPLE_GEOJSON_INCIDENT = {
    "type": "Feature",
    "geometry": {"type": "Point", "coordinates": [6.1800, 48.6900]},
    "properties": {"libelle": "Raccordement au chauffage urbain", "type": "Travaux"},
}

SAMPLE_FIELDS_INCIDENT = {
    "recordid": "a1b2",
    "fields": {"geo_point_2d": [48.7012, 6.1503], "libelle": "Fermeture de voie", "type": "Fermeture"},
}

SAMPLE_FIELDS_STRING_INCIDENT = {
    "fields": {"coordonnees": "48.7105, 6.1620", "description": "Déviation", "type": "Déviation"},
}

SAMPLE_FLAT_INCIDENT = {"lat": 48.6801, "lon": 6.1702, "description": "Accident", "type": "ACCIDENT"}

SAMPLE_TRAFFIC_FEED = {
    "incidents": [
        SAMPLE_POLYLINE_INCIDENT,
        SAMPLE_GEOJSON_INCIDENT,
        SAMPLE_FIELDS_INCIDENT,
        SAMPLE_FIELDS_STRING_INCIDENT,
        SAMPLE_FLAT_INCIDENT,
        {"location": {"polyline": "48.69 6.18 48.70 6.19"}},
        {"id": "no-position"},
        {"lat": 0, "lon": 6.1},
    ],
}

SAMPLE_WASTEWATER_CSV = """semaine;MAXEVILLE;STRASBOURG
2022-S31;12,5;3,1

2022-S33;NA;4,0
2022-S32;14;5,2
2022-S34;;1,0
2022-S35;abc;1,0
2022-S36;15,75
2022-S37;16,2;2,0
"""

SAMPLE_WAQI = {
    "status": "ok",
    "data": {
        "aqi": 42,
        "city": {"name": "Nancy, France", "geo": [48.69, 6.18]},
        "iaqi": {"pm25": {"v": 17}, "no2": {"v": 9.6}, "o3": {"v": 30.2}},
    },
}

SAMPLE_OPENAQ = {
    "meta": {"found": 1},
    "results": [
        {
            "location": "Nancy-Charles III",
            "city": "Nancy",
            "coordinates": {"latitude": 48.69, "longitude": 6.18},
            "measurements": [
                {"parameter": "pm25", "value": 11.0, "unit": "µg/m³", "lastUpdated": "2024-05-14T08:00:00Z"},
                {"parameter": "no2", "value": 21.3, "unit": "µg/m³", "lastUpdated": "2024-05-14T08:00:00Z"},
            ],
        },
    ],
}


@pytest.fixture(autouse=True)
def _isolated_api_log(tmp_path, monkeypatch):
    """Send the API call log to a temporary directory for every test."""
    import atmosphere._logging as mod

    named_logger = logging.getLogger(mod.API_LOGGER_NAME)
    named_logger.handlers.clear()
    monkeypatch.setattr(mod, "_api_logger", None)
    monkeypatch.setenv(mod.LOG_DIR_ENV, str(tmp_path))

    yield tmp_path

    for handler in named_logger.handlers[:]:
        handler.close()
        named_logger.removeHandler(handler)


@pytest.fixture
def settings() -> AtmosphereSettings:
    return AtmosphereSettings(_env_file=None)


@pytest.fixture
def fetcher():
    with Fetcher() as f:
        yield f
