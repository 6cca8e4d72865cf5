"""Atmosphere: drive-or-transit recommendations from live local signals."""

from atmosphere._http import FetchFailure, Fetcher, FetchResult, FetchSuccess
from atmosphere.client import AtmosphereClient
from atmosphere.exceptions import (
    AtmosphereAPIError,
    AtmosphereConnectionError,
    AtmosphereError,
    AtmosphereTimeoutError,
    EmptyResponseError,
    SchemaMismatchError,
    TransportError,
)
from atmosphere.location import client_address
from atmosphere.scoring import score_recommendation
from atmosphere.settings import AtmosphereSettings, get_settings
from atmosphere.traffic import classify_incident
from atmosphere.wastewater import compute_trend

__all__ = [
    "AtmosphereAPIError",
    "AtmosphereClient",
    "AtmosphereConnectionError",
    "AtmosphereError",
    "AtmosphereSettings",
    "AtmosphereTimeoutError",
    "EmptyResponseError",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "Fetcher",
    "SchemaMismatchError",
    "TransportError",
    "classify_incident",
    "client_address",
    "compute_trend",
    "get_settings",
    "score_recommendation",
]

__version__ = "0.1.0"
