from __future__ import annotations

import base64
import logging
from collections.abc import Sequence

from groq import Groq
from pydantic import ValidationError

from ..catalog.models import Service
from ..exceptions import LLMUnavailableError, ModelOutputError
from ..recommendations.keywords import extract_keywords
from ..recommendations.models import Recommendation
from ..recommendations.scoring import ServiceProfile, build_profile, score_feature
from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .json_extract import parse_model_json
from .prompts import (
    FEATURE_DETECTION_PROMPT,
    FEATURE_DETECTION_USER_TEXT,
    FINAL_RECOMMENDATION_PROMPT,
    build_final_user_message,
)

logger = logging.getLogger(__name__)

FEATURE_STAGE = "Feature detection"
FINAL_STAGE = "Final recommendation"


def _to_data_uri(image_bytes: bytes, content_type: str | None) -> str:
    mime = content_type if content_type and content_type.startswith("image/") else "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode()}"


def detect_features(
    image_bytes: bytes,
    content_type: str | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[str]:
    """
    Ask the vision model which skin conditions and enhancement areas it sees.

    Raises ``LLMUnavailableError`` when no model is configured and
    ``ModelOutputError`` when the reply is not ``{"detected_features": [str, ...]}``.
    Provider errors propagate unchanged.
    """
    if not config.available:
        raise LLMUnavailableError("Feature detection requires a configured GROQ_API_KEY.")

    client = Groq(api_key=config.api_key, timeout=config.timeout)
    response = client.chat.completions.create(
        model=config.vision_model,
        messages=[
            {"role": "system", "content": FEATURE_DETECTION_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": FEATURE_DETECTION_USER_TEXT},
                    {"type": "image_url", "image_url": {"url": _to_data_uri(image_bytes, content_type)}},
                ],
            },
        ],
        max_tokens=config.feature_max_tokens,
        response_format={"type": "json_object"},
    )

    raw = response.choices[0].message.content
    logger.info("Raw feature detection response: %s", raw)

    parsed = parse_model_json(raw, FEATURE_STAGE)
    features = parsed.get("detected_features") if isinstance(parsed, dict) else None
    if not isinstance(features, list) or not all(isinstance(f, str) for f in features):
        raise ModelOutputError(FEATURE_STAGE, "Feature detection JSON in unexpected format.", raw=raw)

    logger.info("Detected features: %s", features)
    return features


def _addresses_problem(feature: str, profile: ServiceProfile) -> bool:
    feature_lower = feature.lower().strip()
    return any(feature_lower in p for p in profile.problems_lower) or any(
        kw in profile.problem_keywords for kw in extract_keywords(feature_lower)
    )


def heuristic_recommendations(
    features: Sequence[str],
    services: Sequence[Service],
) -> list[Recommendation]:
    """Explain the shortlist without an LLM, using the scorer's own matches."""
    results: list[Recommendation] = []
    for service in services:
        profile = build_profile(service)
        relevant = [f for f in features if score_feature(f, profile) > 0]
        solves_problem = any(_addresses_problem(f, profile) for f in relevant)

        explanation = f"{service.name} matches {', '.join(relevant) or 'your goals'}."
        if service.description:
            explanation = f"{explanation} {service.description}"

        results.append(Recommendation(
            service_name=service.name,
            type="Problem-Solving" if solves_problem else "Aesthetic Enhancement",
            explanation=explanation,
            relevant_features=relevant,
        ))
    return results


def finalize_recommendations(
    features: Sequence[str],
    services: Sequence[Service],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[Recommendation]:
    """
    Ask the LLM to pick and explain the final recommendations from ``services``.

    Falls back to ``heuristic_recommendations`` when the LLM is disabled.
    """
    if not services:
        return []

    if not config.available:
        logger.info("LLM disabled, explaining %d services heuristically", len(services))
        return heuristic_recommendations(features, services)

    client = Groq(api_key=config.api_key, timeout=config.timeout)
    response = client.chat.completions.create(
        model=config.model,
        messages=[
            {"role": "system", "content": FINAL_RECOMMENDATION_PROMPT},
            {"role": "user", "content": build_final_user_message(features, services).strip()},
        ],
        max_tokens=config.final_max_tokens,
        response_format={"type": "json_object"},
    )

    raw = response.choices[0].message.content
    logger.info("Raw final recommendation response: %s", raw)

    parsed = parse_model_json(raw, FINAL_STAGE)
    items = parsed.get("recommendations") if isinstance(parsed, dict) else None
    if not isinstance(items, list):
        raise ModelOutputError(FINAL_STAGE, "Final recommendations JSON in unexpected format.", raw=raw)

    try:
        return [Recommendation.model_validate(item) for item in items]
    except ValidationError as exc:
        raise ModelOutputError(
            FINAL_STAGE, "Final recommendations JSON in unexpected format.", raw=raw,
        ) from exc
