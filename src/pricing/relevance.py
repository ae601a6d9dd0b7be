"""Hybrid relevance scoring for inspection search."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import cmp_to_key
from typing import Callable, Iterable, Mapping, Sequence

import numpy as np

from pricing.config import RelevanceConfig
from pricing.data_models import (
    Damage,
    FilthinessLevel,
    InspectionRecord,
    InvalidPricingInput,
    Severity,
    require_finite,
)

DEFAULT_RELEVANCE_CONFIG = RelevanceConfig()

STOP_WORDS = frozenset({"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"})

AUTOMOTIVE_TERMS = frozenset(
    {
        "scratch", "dent", "damage", "repair", "paint", "bumper", "door", "hood", "trunk",
        "windshield", "tire", "wheel", "engine", "transmission", "brake", "suspension",
        "honda", "toyota", "ford", "chevrolet", "bmw", "mercedes", "audi", "volkswagen",
        "sedan", "suv", "truck", "coupe", "hatchback", "convertible",
        "minor", "moderate", "major", "severe", "excellent", "good", "fair", "poor",
    }
)

AUTOMOTIVE_TERM_BONUS = 0.5


class SortKey(str, Enum):
    RELEVANCE = "relevance"
    DATE = "date"
    DAMAGE_COUNT = "damage_count"
    REPAIR_COST = "repair_cost"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class KeywordMatch:
    score: float
    matched_terms: tuple[str, ...] = ()
    exact_matches: int = 0


@dataclass(frozen=True)
class ScoreBreakdown:
    vector_similarity: float
    keyword_match: float
    time_decay: float
    exact_match: float
    damage_relevance: float
    total_score: float
    boosted_score: float


@dataclass(frozen=True)
class InspectionSummary:
    vehicle_info: str
    damage_count: int
    total_repair_cost: int
    condition: str
    last_updated: str


@dataclass(frozen=True)
class ScoredResult:
    record: InspectionRecord
    breakdown: ScoreBreakdown
    matched_terms: tuple[str, ...]
    summary: InspectionSummary
    relevance_factors: tuple[str, ...]

    @property
    def score(self) -> float:
        return self.breakdown.boosted_score


@dataclass(frozen=True)
class SearchFilters:
    severity: frozenset[Severity] = frozenset()
    date_start: datetime | None = None
    date_end: datetime | None = None
    vehicle_make: frozenset[str] = frozenset()
    inspection_type: frozenset[str] = frozenset()
    overall_condition: frozenset[str] = frozenset()
    filthiness_level: frozenset[FilthinessLevel] = frozenset()
    min_damage_count: int | None = None
    max_damage_count: int | None = None


def _unit(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    left = np.asarray(a, dtype=float)
    right = np.asarray(b, dtype=float)
    if left.shape != right.shape:
        raise InvalidPricingInput(
            "Embedding dimensions differ", details={"left": left.shape, "right": right.shape}
        )
    norm = float(np.linalg.norm(left) * np.linalg.norm(right))
    if norm == 0.0:
        return 0.0
    return float(np.dot(left, right) / norm)


def query_terms(query: str) -> list[str]:
    return [term for term in query.lower().split() if len(term) > 2 and term not in STOP_WORDS]


def keyword_match(query: str, text: str) -> KeywordMatch:
    if not query or not text:
        return KeywordMatch(score=0.0)

    lowered_query = query.lower()
    lowered_text = text.lower()
    terms = query_terms(query)

    total = 0.0
    exact = 0
    if lowered_query in lowered_text:
        exact = 1
        total += len(terms) * 2

    matched: list[str] = []
    for term in terms:
        if term in lowered_text:
            matched.append(term)
            total += 1
            if term in AUTOMOTIVE_TERMS:
                total += AUTOMOTIVE_TERM_BONUS

    score = total / len(terms) if terms else 0.0
    return KeywordMatch(score=min(score, 1.0), matched_terms=tuple(matched), exact_matches=exact)


def time_decay(
    updated_at: datetime,
    now: datetime,
    max_age_days: float = DEFAULT_RELEVANCE_CONFIG.max_age_days,
    min_decay: float = DEFAULT_RELEVANCE_CONFIG.min_decay,
) -> float:
    """Recency score in [min_decay, 1]; the half-life is a quarter of ``max_age_days``."""
    age = (now - updated_at).total_seconds()
    if age < 0:
        return 1.0
    max_age = max_age_days * 86400
    if age > max_age:
        return min_decay
    return max(math.exp(-age / (max_age / 4)), min_decay)


def damage_relevance(query: str, damages: Iterable[Damage]) -> float:
    lowered = query.lower()
    words = lowered.split()
    score = 0.0
    for damage in damages:
        if damage.type.value in lowered:
            score += 0.3
        if damage.severity.value in lowered:
            score += 0.2
        if damage.zone_id.lower().replace("_", " ") in lowered:
            score += 0.2
        if damage.description and any(word in damage.description.lower() for word in words):
            score += 0.1
    return min(score, 1.0)


def searchable_text(record: InspectionRecord) -> str:
    parts = [record.vehicle_info]
    if record.vin:
        parts.append(record.vin)
    parts.extend([record.customer_name, record.customer_email, record.inspection_type])
    if record.overall_condition:
        parts.append(record.overall_condition)
    if record.notes:
        parts.append(record.notes)
    if record.filthiness_severity:
        parts.append(f"filthiness {FilthinessLevel(record.filthiness_severity).value}")
    for damage in record.damages:
        parts.append(f"{damage.severity.value} {damage.type.value} {damage.zone_id}")
        if damage.description:
            parts.append(damage.description)
    return " ".join(part for part in parts if part)


def matches_filters(record: InspectionRecord, filters: SearchFilters) -> bool:
    if filters.date_start is not None and record.created_at < filters.date_start:
        return False
    if filters.date_end is not None and record.created_at > filters.date_end:
        return False
    if filters.vehicle_make and record.vehicle_make not in filters.vehicle_make:
        return False
    if filters.inspection_type and record.inspection_type not in filters.inspection_type:
        return False
    if filters.overall_condition and record.overall_condition not in filters.overall_condition:
        return False
    if filters.filthiness_level and record.filthiness_severity not in filters.filthiness_level:
        return False

    count = len(record.damages)
    if filters.min_damage_count is not None and count < filters.min_damage_count:
        return False
    if filters.max_damage_count is not None and count > filters.max_damage_count:
        return False
    if filters.severity and not any(d.severity in filters.severity for d in record.damages):
        return False
    return True


def summarize(record: InspectionRecord) -> InspectionSummary:
    return InspectionSummary(
        vehicle_info=record.vehicle_info,
        damage_count=len(record.damages),
        total_repair_cost=record.total_repair_cost,
        condition=record.overall_condition or "Not assessed",
        last_updated=record.updated_at.date().isoformat(),
    )


def relevance_factors(
    breakdown: ScoreBreakdown, matched_terms: Sequence[str], record: InspectionRecord
) -> list[str]:
    factors: list[str] = []
    if breakdown.vector_similarity > 0.7:
        factors.append("High semantic similarity to query")
    if breakdown.keyword_match > 0.5:
        factors.append(f"Matched keywords: {', '.join(matched_terms)}")
    if breakdown.exact_match > 0:
        factors.append("Contains exact phrase match")
    if breakdown.time_decay > 0.8:
        factors.append("Recent inspection")
    count = len(record.damages)
    if count:
        factors.append(f"{count} damage{'s' if count > 1 else ''} documented")
    if record.filthiness_severity:
        factors.append(f"{FilthinessLevel(record.filthiness_severity).value} filthiness level")
    return factors


def combine_scores(
    vector_similarity: float,
    keyword: float,
    decay: float,
    *,
    exact_match: float = 0.0,
    damage: float = 0.0,
    config: RelevanceConfig = DEFAULT_RELEVANCE_CONFIG,
) -> ScoreBreakdown:
    vector_similarity = _unit(require_finite(vector_similarity, "vector_similarity"))
    keyword = _unit(require_finite(keyword, "keyword_match"))
    decay = _unit(require_finite(decay, "time_decay"))
    exact_match = _unit(require_finite(exact_match, "exact_match"))
    damage = _unit(require_finite(damage, "damage_relevance"))

    total = (
        config.vector_weight * vector_similarity
        + config.keyword_weight * keyword
        + config.time_decay_weight * decay
    )
    boosted = total * (1 + config.exact_match_boost * exact_match) * (1 + config.damage_relevance_boost * damage)
    return ScoreBreakdown(
        vector_similarity=vector_similarity,
        keyword_match=keyword,
        time_decay=decay,
        exact_match=exact_match,
        damage_relevance=damage,
        total_score=total,
        boosted_score=boosted,
    )


def score_candidate(
    query: str,
    record: InspectionRecord,
    *,
    now: datetime,
    query_embedding: Sequence[float] | None = None,
    record_embedding: Sequence[float] | None = None,
    config: RelevanceConfig = DEFAULT_RELEVANCE_CONFIG,
) -> ScoredResult:
    vector = 0.0
    if query_embedding is not None and record_embedding is not None:
        vector = cosine_similarity(query_embedding, record_embedding)

    keyword = keyword_match(query, searchable_text(record))
    breakdown = combine_scores(
        vector,
        keyword.score,
        time_decay(record.updated_at, now, config.max_age_days, config.min_decay),
        exact_match=float(keyword.exact_matches),
        damage=damage_relevance(query, record.damages),
        config=config,
    )
    return ScoredResult(
        record=record,
        breakdown=breakdown,
        matched_terms=keyword.matched_terms,
        summary=summarize(record),
        relevance_factors=tuple(relevance_factors(breakdown, keyword.matched_terms, record)),
    )


_SORT_VALUES: dict[SortKey, Callable[[ScoredResult], float]] = {
    SortKey.RELEVANCE: lambda r: r.score,
    SortKey.DATE: lambda r: r.record.created_at.timestamp(),
    SortKey.DAMAGE_COUNT: lambda r: len(r.record.damages),
    SortKey.REPAIR_COST: lambda r: r.record.total_repair_cost,
}


def result_comparator(
    key: SortKey = SortKey.RELEVANCE, direction: SortDirection = SortDirection.DESC
) -> Callable[[ScoredResult, ScoredResult], int]:
    value = _SORT_VALUES[SortKey(key)]
    sign = 1 if SortDirection(direction) is SortDirection.ASC else -1

    def compare(a: ScoredResult, b: ScoredResult) -> int:
        left, right = value(a), value(b)
        return sign * ((left > right) - (left < right))

    return compare


def sort_results(
    results: Iterable[ScoredResult],
    key: SortKey = SortKey.RELEVANCE,
    direction: SortDirection = SortDirection.DESC,
) -> list[ScoredResult]:
    # sorted() is stable, so equal keys keep their input order in both directions
    return sorted(results, key=cmp_to_key(result_comparator(key, direction)))


def rank(
    query: str,
    records: Iterable[InspectionRecord],
    *,
    now: datetime,
    query_embedding: Sequence[float] | None = None,
    embeddings: Mapping[str, Sequence[float]] | None = None,
    filters: SearchFilters | None = None,
    key: SortKey = SortKey.RELEVANCE,
    direction: SortDirection = SortDirection.DESC,
    limit: int | None = None,
    config: RelevanceConfig = DEFAULT_RELEVANCE_CONFIG,
) -> list[ScoredResult]:
    """Filter, score and order ``records`` for ``query``."""
    embeddings = embeddings or {}
    scored = [
        score_candidate(
            query,
            record,
            now=now,
            query_embedding=query_embedding,
            record_embedding=embeddings.get(record.id),
            config=config,
        )
        for record in records
        if filters is None or matches_filters(record, filters)
    ]
    ordered = sort_results(scored, key, direction)
    return ordered if limit is None else ordered[:limit]
