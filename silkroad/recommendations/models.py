from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..catalog.models import Site


class UserPreference(BaseModel):
    tags: list[str] = Field(default_factory=list)
    # Accepted and persisted, but not used for scoring yet
    budget: str = ""
    season: str = ""
    duration: str = ""
    travel_style: str = ""
    extensions: dict[str, Any] = Field(default_factory=dict)


class PreferenceUpdate(BaseModel):
    tags: list[str] | None = None
    budget: str | None = None
    season: str | None = None
    duration: str | None = None
    travel_style: str | None = None
    extensions: dict[str, Any] | None = None


class RecommendResult(BaseModel):
    site: Site
    match_score: int = Field(..., ge=0, le=100)
    match_tags: list[str] = Field(default_factory=list)


class RecommendationStrategy(str, Enum):
    personalized = "personalized"
    default = "default"
    empty = "empty"


class RecommendationOutcome(BaseModel):
    results: list[RecommendResult] = Field(default_factory=list)
    strategy: RecommendationStrategy = RecommendationStrategy.empty
    error: str | None = None

    @property
    def sorted_results(self) -> list[RecommendResult]:
        return sorted(self.results, key=lambda r: r.match_score, reverse=True)


class SimilarSpotsResponse(BaseModel):
    site_id: str
    similar: list[Site]


class SimilarityResponse(BaseModel):
    site_a: str
    site_b: str
    similarity: float = Field(..., ge=0.0, le=1.0)


class SimilarityMatrixResponse(BaseModel):
    site_ids: list[str]
    matrix: list[list[float]]
