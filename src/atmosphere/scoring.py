"""Drive-or-transit recommendation rule.

A deliberately simple linear policy. ``AtmosphereClient`` accepts any
callable with the signature of ``score_recommendation``, so the rule can be
swapped without touching the pipeline.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from atmosphere.models.air_quality import AirQualityReport
from atmosphere.models.recommendation import Recommendation
from atmosphere.models.traffic import TrafficIncident
from atmosphere.models.weather import WeatherForecast

WEATHER_AVAILABLE_POINTS = 2
TRAFFIC_INCIDENT_LIMIT = 5
TRAFFIC_CLEAR_POINTS = 1
TRAFFIC_PENALTY = 2
AIR_QUALITY_INDEX_LIMIT = 100
AIR_QUALITY_GOOD_POINTS = 1
AIR_QUALITY_PENALTY = 2

REASON_TRAFFIC = "numerous traffic disruptions"
REASON_AIR_QUALITY = "poor air quality"


class Scorer(Protocol):
    def __call__(
        self,
        weather: WeatherForecast | None,
        incidents: Sequence[TrafficIncident],
        air_quality: AirQualityReport | None,
    ) -> Recommendation: ...


def score_recommendation(
    weather: WeatherForecast | None,
    incidents: Sequence[TrafficIncident],
    air_quality: AirQualityReport | None,
) -> Recommendation:
    """Score the normalized inputs; a positive score recommends the car.

    - a forecast being available adds 2;
    - more than 5 incidents subtracts 2, otherwise adds 1;
    - an overall air quality index above 100 subtracts 2, otherwise adds 1;
      no index contributes nothing.
    """
    score = 0
    reasons: list[str] = []

    if weather is not None:
        score += WEATHER_AVAILABLE_POINTS

    if len(incidents) > TRAFFIC_INCIDENT_LIMIT:
        score -= TRAFFIC_PENALTY
        reasons.append(REASON_TRAFFIC)
    else:
        score += TRAFFIC_CLEAR_POINTS

    index = air_quality.overall_index if air_quality is not None else None
    if index is not None:
        if index > AIR_QUALITY_INDEX_LIMIT:
            score -= AIR_QUALITY_PENALTY
            reasons.append(REASON_AIR_QUALITY)
        else:
            score += AIR_QUALITY_GOOD_POINTS

    return Recommendation(score=score, use_car_recommended=score > 0, reasons=tuple(reasons))
