from __future__ import annotations

from datetime import datetime
from typing import Mapping

from pricing.config import FilthinessConfig, FilthinessTier
from pricing.data_models import (
    FilthinessAssessment,
    InvalidPricingInput,
    ZoneBreakdown,
    require_finite,
)

ZONE_KEYS = ("exterior", "interior", "engine", "undercarriage")

DEFAULT_FILTHINESS_CONFIG = FilthinessConfig()


def clamp_score(score: float) -> float:
    return max(0.0, min(100.0, score))


def select_tier(score: float, config: FilthinessConfig = DEFAULT_FILTHINESS_CONFIG) -> FilthinessTier:
    """Pick the tier containing ``score``, checking the highest tier first.

    Scores that fall in a gap between integer tier ranges (e.g. 25.5) land in
    the highest tier whose minimum they reach.
    """
    ordered = config.tiers_high_to_low()
    for tier in ordered:
        if tier.contains(score):
            return tier
    for tier in ordered:
        if score >= tier.min_score:
            return tier
    return ordered[-1]


def zone_breakdown(
    score: float,
    zone_scores: Mapping[str, float] | None = None,
    config: FilthinessConfig = DEFAULT_FILTHINESS_CONFIG,
) -> ZoneBreakdown:
    supplied = dict(zone_scores or {})
    unknown = set(supplied) - set(ZONE_KEYS)
    if unknown:
        raise InvalidPricingInput(f"Unknown filthiness zones: {sorted(unknown)}", details={"allowed": list(ZONE_KEYS)})

    values: dict[str, float] = {}
    for key in ZONE_KEYS:
        given = supplied.get(key)
        if given is None:
            values[key] = score * config.zone_weights[key]
        else:
            values[key] = clamp_score(require_finite(given, f"zone_scores.{key}"))
    return ZoneBreakdown(**values)


def classify_filthiness(
    overall_score: float,
    zone_scores: Mapping[str, float] | None = None,
    *,
    config: FilthinessConfig = DEFAULT_FILTHINESS_CONFIG,
    assessed_at: datetime | None = None,
    assessed_by: str | None = None,
) -> FilthinessAssessment:
    score = clamp_score(require_finite(overall_score, "overall_score"))
    tier = select_tier(score, config)
    return FilthinessAssessment(
        overall_score=score,
        zone_breakdown=zone_breakdown(score, zone_scores, config),
        severity_level=tier.level,
        estimated_cleaning_time=tier.base_hours,
        labor_multiplier=tier.multiplier,
        assessed_at=assessed_at,
        assessed_by=assessed_by,
    )
