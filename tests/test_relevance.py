from datetime import datetime, timedelta, timezone

import pytest

from pricing.data_models import Damage, DamageType, FilthinessLevel, InspectionRecord, InvalidPricingInput, Severity
from pricing.relevance import (
    ScoredResult,
    SearchFilters,
    SortDirection,
    SortKey,
    combine_scores,
    cosine_similarity,
    damage_relevance,
    keyword_match,
    matches_filters,
    rank,
    score_candidate,
    searchable_text,
    sort_results,
    summarize,
    time_decay,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _record(record_id, *, make="Honda", days_old=1, damages=(), **kwargs):
    created = NOW - timedelta(days=days_old)
    return InspectionRecord(
        id=record_id,
        vehicle_year=2020,
        vehicle_make=make,
        vehicle_model="Civic",
        created_at=created,
        updated_at=created,
        damages=tuple(damages),
        **kwargs,
    )


def _scored(record, score):
    return ScoredResult(
        record=record,
        breakdown=combine_scores(score, 0.0, 0.0),
        matched_terms=(),
        summary=summarize(record),
        relevance_factors=(),
    )


# ── Scoring formula ─────────────────────────────────────────────────


def test_weighted_total_before_boosts():
    breakdown = combine_scores(0.7, 0.8, 0.9)
    assert breakdown.total_score == pytest.approx(0.75)
    assert breakdown.boosted_score == pytest.approx(0.75)


def test_boosts_layer_on_top():
    breakdown = combine_scores(0.7, 0.8, 0.9, exact_match=1, damage=1)
    assert breakdown.total_score == pytest.approx(0.75)
    assert breakdown.boosted_score == pytest.approx(0.75 * 1.1 * 1.05)


def test_sub_scores_are_clamped():
    breakdown = combine_scores(1.5, -0.2, 0.5)
    assert breakdown.vector_similarity == 1.0
    assert breakdown.keyword_match == 0.0
    with pytest.raises(InvalidPricingInput):
        combine_scores(float("nan"), 0, 0)


def test_cosine_similarity():
    assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([0, 0], [1, 1]) == 0.0
    with pytest.raises(InvalidPricingInput):
        cosine_similarity([1, 0, 0], [1, 0])


# ── Sub-scores ──────────────────────────────────────────────────────


def test_keyword_match_with_automotive_bonus():
    match = keyword_match("front bumper scratch", "2020 Honda Civic moderate scratch front_bumper")
    assert match.score == 1.0
    assert match.matched_terms == ("front", "bumper", "scratch")
    assert match.exact_matches == 0


def test_keyword_match_partial_and_stop_words():
    assert keyword_match("toyota truck", "2019 Toyota Camry").score == pytest.approx(0.75)
    assert keyword_match("the and", "the and").score == 0.0
    assert keyword_match("", "anything").score == 0.0


def test_keyword_exact_phrase():
    match = keyword_match("cracked windshield", "customer reports cracked windshield")
    assert match.exact_matches == 1
    assert match.score == 1.0


def test_time_decay():
    assert time_decay(NOW + timedelta(days=1), NOW) == 1.0
    assert time_decay(NOW, NOW) == 1.0
    assert time_decay(NOW - timedelta(days=365 / 4), NOW) == pytest.approx(0.36788, rel=1e-4)
    assert time_decay(NOW - timedelta(days=400), NOW) == 0.1
    assert time_decay(NOW - timedelta(days=360), NOW) == 0.1


def test_damage_relevance():
    damages = [Damage(DamageType.DENT, Severity.SEVERE, "driver_door", description="deep crease")]
    assert damage_relevance("severe dent on driver door", damages) == pytest.approx(0.7)
    assert damage_relevance("crease", damages) == pytest.approx(0.1)
    assert damage_relevance("anything", []) == 0.0


def test_searchable_text_and_summary():
    record = _record(
        "r1",
        vin="1HGCM82633A004352",
        notes="left in the rain",
        filthiness_severity=FilthinessLevel.HEAVY,
        damages=[Damage(DamageType.SCRATCH, Severity.MINOR, "hood", repair_cost=5000)],
    )
    text = searchable_text(record)
    assert text.startswith("2020 Honda Civic 1HGCM82633A004352")
    assert "filthiness heavy" in text
    assert "minor scratch hood" in text

    summary = summarize(record)
    assert summary.damage_count == 1
    assert summary.total_repair_cost == 5000
    assert summary.condition == "Not assessed"
    assert summary.last_updated == "2026-10-18"


def test_score_candidate_explains_itself():
    record = _record("r1", damages=[Damage(DamageType.DENT, Severity.MAJOR, "hood")])
    result = score_candidate("honda dent", record, now=NOW, query_embedding=[1, 0], record_embedding=[1, 0])
    assert result.breakdown.vector_similarity == pytest.approx(1.0)
    assert "High semantic similarity to query" in result.relevance_factors
    assert "Recent inspection" in result.relevance_factors
    assert "1 damage documented" in result.relevance_factors


# ── Filters and ordering ────────────────────────────────────────────


def test_matches_filters():
    minor = _record("a", damages=[Damage(DamageType.SCRATCH, Severity.MINOR, "hood")])
    toyota = _record("b", make="Toyota")

    assert matches_filters(minor, SearchFilters())
    assert not matches_filters(toyota, SearchFilters(vehicle_make=frozenset({"Honda"})))
    assert not matches_filters(toyota, SearchFilters(min_damage_count=1))
    assert matches_filters(minor, SearchFilters(severity=frozenset({Severity.MINOR})))
    assert not matches_filters(minor, SearchFilters(severity=frozenset({Severity.SEVERE})))
    assert not matches_filters(minor, SearchFilters(date_start=NOW))
    assert not matches_filters(minor, SearchFilters(filthiness_level=frozenset({FilthinessLevel.LIGHT})))


def test_sort_by_relevance_desc_and_asc():
    results = [_scored(_record("low"), 0.2), _scored(_record("high"), 0.9), _scored(_record("mid"), 0.5)]
    assert [r.record.id for r in sort_results(results)] == ["high", "mid", "low"]
    assert [r.record.id for r in sort_results(results, direction=SortDirection.ASC)] == ["low", "mid", "high"]


def test_sort_is_stable_for_ties_in_both_directions():
    results = [_scored(_record(name), 0.5) for name in ("first", "second", "third")]
    for direction in SortDirection:
        ordered = sort_results(results, SortKey.DAMAGE_COUNT, direction)
        assert [r.record.id for r in ordered] == ["first", "second", "third"]


def test_sort_by_date_and_repair_cost():
    old = _scored(_record("old", days_old=30), 0.9)
    new = _scored(_record("new", days_old=1, damages=[Damage(DamageType.DENT, Severity.MINOR, "hood", repair_cost=100)]), 0.1)
    assert [r.record.id for r in sort_results([old, new], SortKey.DATE)] == ["new", "old"]
    assert [r.record.id for r in sort_results([new, old], SortKey.REPAIR_COST, SortDirection.ASC)] == ["old", "new"]


def test_rank_filters_scores_and_limits():
    records = [
        _record("civic", damages=[Damage(DamageType.DENT, Severity.MINOR, "hood")]),
        _record("camry", make="Toyota"),
        _record("old-civic", days_old=300),
    ]
    results = rank("honda dent", records, now=NOW, filters=SearchFilters(vehicle_make=frozenset({"Honda"})), limit=1)
    assert [r.record.id for r in results] == ["civic"]
