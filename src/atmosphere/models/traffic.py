"""Traffic incident data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TrafficIncident(BaseModel):
    """A positioned traffic disruption, whatever the upstream record shape."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float
    kind: str
    description: str
    street: str | None = None
    location_note: str | None = None


class IncidentCategory(str, Enum):
    ROADWORKS = "roadworks"
    INCIDENT = "incident"


class InfrastructureKind(str, Enum):
    WATER = "water"
    HEATING = "heating"


class IncidentStyle(BaseModel):
    """Display hints for an incident marker. Not part of the incident data."""

    model_config = ConfigDict(frozen=True)

    category: IncidentCategory = IncidentCategory.INCIDENT
    infrastructure: InfrastructureKind | None = None
