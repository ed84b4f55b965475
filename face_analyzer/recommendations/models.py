from __future__ import annotations

from pydantic import BaseModel, Field

from ..catalog.models import Service


class RankRequest(BaseModel):
    features: list[str] = Field(..., description="Detected feature phrases to match")
    limit: int = Field(default=5, ge=1, le=50)


class ScoredServiceOut(Service):
    score: float


class RankResponse(BaseModel):
    services: list[ScoredServiceOut]
    total_candidates: int


class Recommendation(BaseModel):
    service_name: str
    type: str
    explanation: str
    relevant_features: list[str] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    recommendations: list[Recommendation]
