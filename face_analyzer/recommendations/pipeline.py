from __future__ import annotations

import logging
from collections.abc import Sequence

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import detect_features, finalize_recommendations
from .cache import get_profiles
from .models import AnalysisResponse, Recommendation
from .scoring import TOP_K, ServiceProfile, rank_profiles

logger = logging.getLogger(__name__)

NO_FEATURES_RECOMMENDATION = Recommendation(
    service_name="No Specific Issues or Enhancements Detected",
    type="Observation",
    explanation=(
        "The image analysis did not identify specific features requiring targeted treatment "
        "recommendations at this time. A general consultation might be beneficial."
    ),
    relevant_features=[],
)

_CONSULTATION_EXPLANATION = (
    "While features were detected, our algorithm couldn't pinpoint specific services with high "
    "confidence. A consultation is recommended to discuss your goals and explore suitable options."
)


def consultation_recommendation(features: Sequence[str]) -> Recommendation:
    return Recommendation(
        service_name="Consultation Recommended",
        type="General Advice",
        explanation=_CONSULTATION_EXPLANATION,
        relevant_features=list(features),
    )


def recommend_for_features(
    features: Sequence[str],
    profiles: Sequence[ServiceProfile] | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> AnalysisResponse:
    """Shortlist services for ``features`` and turn them into final recommendations."""
    if not features:
        return AnalysisResponse(recommendations=[NO_FEATURES_RECOMMENDATION])

    if profiles is None:
        profiles = get_profiles()

    top_services = rank_profiles(features, profiles, limit=TOP_K)
    logger.info("Top services from algorithm: %s", [s.name for s in top_services])

    if not top_services:
        return AnalysisResponse(recommendations=[consultation_recommendation(features)])

    return AnalysisResponse(
        recommendations=finalize_recommendations(features, top_services, config=config),
    )


def analyze_image(
    image_bytes: bytes,
    content_type: str | None = None,
    profiles: Sequence[ServiceProfile] | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> AnalysisResponse:
    features = detect_features(image_bytes, content_type, config=config)
    return recommend_for_features(features, profiles=profiles, config=config)
