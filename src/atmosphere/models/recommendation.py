"""Recommendation data model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Recommendation(BaseModel):
    """Verdict of the scorer: drive or take transit."""

    model_config = ConfigDict(frozen=True)

    score: int
    use_car_recommended: bool
    reasons: tuple[str, ...] = ()
