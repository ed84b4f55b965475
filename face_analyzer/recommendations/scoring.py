"""
Weighted keyword scorer.

Every service is scored against every detected feature. Exact containment of
the feature in the service name or in a curated phrase is a strong signal,
single keyword overlaps are weak corroborating signals, and the free-form
description counts least. Scores are not normalised by how long a service's
phrase lists are.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..catalog.data_store import parse_service
from ..catalog.models import Service
from .keywords import extract_keywords

logger = logging.getLogger(__name__)

TOP_K = 5


@dataclass(frozen=True)
class ScoringWeights:
    name_match: float = 25.0
    problem_phrase: float = 20.0
    enhancement_phrase: float = 15.0
    problem_keyword: float = 3.0
    enhancement_keyword: float = 2.0
    name_keyword: float = 1.0
    description_keyword: float = 0.5


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class ServiceProfile:
    """Lowercased phrases and keyword sets of one service, computed once."""

    service: Service
    name_lower: str
    problems_lower: tuple[str, ...]
    enhancements_lower: tuple[str, ...]
    name_keywords: frozenset[str]
    problem_keywords: frozenset[str]
    enhancement_keywords: frozenset[str]
    description_keywords: frozenset[str]


@dataclass(frozen=True)
class ScoredService:
    service: Service
    score: float


def _flat_keywords(phrases: Iterable[str]) -> frozenset[str]:
    return frozenset(kw for phrase in phrases for kw in extract_keywords(phrase))


def build_profile(service: Service) -> ServiceProfile:
    return ServiceProfile(
        service=service,
        name_lower=service.name.lower(),
        problems_lower=tuple(p.lower() for p in service.problems_treated),
        enhancements_lower=tuple(e.lower() for e in service.enhancements),
        name_keywords=frozenset(extract_keywords(service.name)),
        problem_keywords=_flat_keywords(service.problems_treated),
        enhancement_keywords=_flat_keywords(service.enhancements),
        description_keywords=frozenset(extract_keywords(service.description)),
    )


def build_profiles(catalog: Mapping[str, Sequence[Service | Mapping[str, Any]]]) -> list[ServiceProfile]:
    """Profile every service in category order, then listed order."""
    profiles: list[ServiceProfile] = []
    for category, services in catalog.items():
        for index, record in enumerate(services or []):
            profiles.append(build_profile(parse_service(record, category, index)))
    return profiles


def score_feature(
    feature: str,
    profile: ServiceProfile,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Score a single detected feature against one service."""
    feature_lower = feature.lower().strip()
    if not feature_lower:
        return 0.0
    feature_keywords = extract_keywords(feature_lower)

    score = 0.0

    if feature_lower in profile.name_lower or profile.name_lower in feature_lower:
        score += weights.name_match

    score += weights.problem_phrase * sum(1 for p in profile.problems_lower if feature_lower in p)
    score += weights.enhancement_phrase * sum(
        1 for e in profile.enhancements_lower if feature_lower in e
    )

    # Each field is counted on its own; one keyword may hit several.
    score += weights.problem_keyword * sum(
        1 for kw in feature_keywords if kw in profile.problem_keywords
    )
    score += weights.enhancement_keyword * sum(
        1 for kw in feature_keywords if kw in profile.enhancement_keywords
    )
    score += weights.name_keyword * sum(1 for kw in feature_keywords if kw in profile.name_keywords)
    score += weights.description_keyword * sum(
        1 for kw in feature_keywords if kw in profile.description_keywords
    )

    return score


def score_service(
    features: Iterable[str],
    profile: ServiceProfile,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    return sum(score_feature(f, profile, weights) for f in features)


def score_services(
    features: Sequence[str],
    profiles: Iterable[ServiceProfile],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[ScoredService]:
    """
    Score all profiles and return the positive ones, best first.

    The sort is stable, so services with equal scores keep catalog order.
    """
    scored = []
    for profile in profiles:
        total = score_service(features, profile, weights)
        if total > 0:
            scored.append(ScoredService(service=profile.service, score=total))

    scored.sort(key=lambda s: s.score, reverse=True)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Algorithm scores: %s",
            [(s.service.name, s.score) for s in scored[:10]],
        )
    return scored


def rank_profiles(
    features: Sequence[str],
    profiles: Iterable[ServiceProfile],
    limit: int = TOP_K,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[Service]:
    return [s.service for s in score_services(features, profiles, weights)[:limit]]


def rank(
    features: Sequence[str],
    catalog: Mapping[str, Sequence[Service | Mapping[str, Any]]],
    limit: int = TOP_K,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[Service]:
    """
    Return up to ``limit`` services from ``catalog`` that best match ``features``.

    Services scoring 0 are never returned. Raw dict entries are validated and
    raise ``InvalidServiceRecord`` when ``name`` is missing.
    """
    return rank_profiles(features, build_profiles(catalog), limit, weights)
