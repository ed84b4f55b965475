from __future__ import annotations

import json
from collections.abc import Sequence

from ..catalog.models import Service

FEATURE_DETECTION_PROMPT = "\n".join([
    "You are an expert facial analysis AI.",
    "Analyze the provided image of a face. List all observed skin conditions, signs of aging, "
    "and potential areas for aesthetic enhancement.",
    "You MUST respond with a single, valid JSON object.",
    'This JSON object MUST have a single key named "detected_features".',
    'The value of "detected_features" MUST be a JSON array of strings (e.g., ["forehead wrinkles", '
    '"dull skin tone", "uneven pigmentation", "desire for fuller lips"]).',
    "Focus on actionable observations relevant for aesthetic treatments. Be concise. "
    "Include both problems and desired enhancements. Use descriptive phrases.",
    "Do NOT include any introductory text, concluding remarks, markdown formatting, "
    "or any other text outside of the JSON object.",
])

FEATURE_DETECTION_USER_TEXT = (
    "Analyze this image and list detected features (both problems and desired enhancements) "
    "for aesthetic recommendations. Be specific and use common aesthetic terms."
)

FINAL_RECOMMENDATION_PROMPT = "\n".join([
    "You are a medical-aesthetic assistant.",
    "You MUST respond with a single, valid JSON object.",
    'This JSON object MUST have a key named "recommendations".',
    'The value of "recommendations" MUST be a JSON array of objects.',
    'Each object in the "recommendations" array MUST have keys: "service_name" (string), '
    '"type" (string: "Problem-Solving" or "Aesthetic Enhancement"), "explanation" (string), '
    'and "relevant_features" (array of strings).',
    'The "explanation" should be based on the service details provided (problems_treated, '
    "enhancements, description) and clearly link to the detected_features.",
    'Determine the "type" based on whether the primary detected features it addresses are '
    "problems or enhancements. If it addresses both, lean towards the primary reason for "
    "recommendation based on the detected features.",
    "Do NOT include any introductory text, concluding remarks, markdown formatting, "
    "or any other text outside of the JSON object.",
])


def _join_or_na(items: Sequence[str]) -> str:
    return "; ".join(items) or "N/A"


def build_final_user_message(features: Sequence[str], services: Sequence[Service]) -> str:
    lines = [
        "Based on an initial analysis, the following services are potentially suitable. "
        "Please refine these into final recommendations. For each service, consider its "
        "listed problems_treated and enhancements:",
    ]
    for service in services:
        lines.append(f"- Service: {service.name}")
        lines.append(f"  Description: {service.description or 'N/A'}")
        lines.append(f"  Problems Treated: {_join_or_na(service.problems_treated)}")
        lines.append(f"  Enhancements: {_join_or_na(service.enhancements)}")

    return "\n".join([
        f"The image analysis detected these features: {json.dumps(list(features))}.",
        "",
        "\n".join(lines),
        "",
        "From the list of potentially suitable services, select up to 3-4 final recommendations. "
        "For each:",
        '1. State "service_name".',
        '2. Determine "type" as "Problem-Solving" or "Aesthetic Enhancement" based on the '
        "detected features it primarily addresses and the service's capabilities.",
        '3. Write an "explanation" that clearly links the service (using its description, '
        "problems_treated, and enhancements) to the specific detected_features it addresses. "
        "Make the explanation concise and informative.",
        '4. List the "relevant_features" (from the detected features list) that justify this service.',
    ])
