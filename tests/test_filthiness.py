import pytest

from pricing.config import FilthinessConfig, FilthinessTier
from pricing.data_models import FilthinessLevel, InvalidPricingInput
from pricing.filthiness import classify_filthiness, select_tier, zone_breakdown


@pytest.mark.parametrize(
    "score, level, multiplier, hours",
    [
        (0, FilthinessLevel.LIGHT, 1.0, 0.5),
        (25, FilthinessLevel.LIGHT, 1.0, 0.5),
        (26, FilthinessLevel.MODERATE, 1.5, 1.5),
        (50, FilthinessLevel.MODERATE, 1.5, 1.5),
        (51, FilthinessLevel.HEAVY, 2.0, 3.0),
        (75, FilthinessLevel.HEAVY, 2.0, 3.0),
        (76, FilthinessLevel.EXTREME, 3.0, 5.0),
        (100, FilthinessLevel.EXTREME, 3.0, 5.0),
    ],
)
def test_tier_boundaries_are_exact(score, level, multiplier, hours):
    result = classify_filthiness(score)
    assert result.severity_level is level
    assert result.labor_multiplier == multiplier
    assert result.estimated_cleaning_time == hours


def test_out_of_range_scores_are_clamped():
    assert classify_filthiness(-10) == classify_filthiness(0)
    assert classify_filthiness(150) == classify_filthiness(100)
    assert classify_filthiness(150).overall_score == 100


def test_fractional_gap_score_falls_to_lower_tier():
    assert select_tier(25.5).level is FilthinessLevel.LIGHT
    assert select_tier(75.9).level is FilthinessLevel.HEAVY


def test_non_numeric_score_is_rejected():
    with pytest.raises(InvalidPricingInput):
        classify_filthiness(float("nan"))
    with pytest.raises(InvalidPricingInput):
        classify_filthiness("dirty")


def test_zone_breakdown_uses_default_weights():
    # weights are an assumed soiling split, not measured data
    breakdown = classify_filthiness(50).zone_breakdown
    assert breakdown.exterior == pytest.approx(20)
    assert breakdown.interior == pytest.approx(15)
    assert breakdown.engine == pytest.approx(10)
    assert breakdown.undercarriage == pytest.approx(5)


def test_supplied_zone_scores_override_independently():
    breakdown = zone_breakdown(50, {"interior": 90, "engine": 140})
    assert breakdown.interior == 90
    assert breakdown.engine == 100
    assert breakdown.exterior == pytest.approx(20)
    assert breakdown.undercarriage == pytest.approx(5)


def test_unknown_zone_key_is_rejected():
    with pytest.raises(InvalidPricingInput):
        zone_breakdown(50, {"trunk": 10})


def test_replaceable_tier_table():
    config = FilthinessConfig(
        tiers=(
            FilthinessTier(FilthinessLevel.LIGHT, 0, 60, multiplier=1.0, base_hours=1.0),
            FilthinessTier(FilthinessLevel.EXTREME, 61, 100, multiplier=4.0, base_hours=8.0),
        )
    )
    result = classify_filthiness(70, config=config)
    assert result.severity_level is FilthinessLevel.EXTREME
    assert result.labor_multiplier == 4.0
