import pytest

from pricing.composer import apply_multiplier, compose_price
from pricing.data_models import (
    DayType,
    DemandLevel,
    InvalidPricingInput,
    SurgeContext,
    TimeOfDay,
    WeatherSnapshot,
)
from pricing.filthiness import classify_filthiness

MILD = WeatherSnapshot(temperature=70, humidity=50, precipitation=False, wind_speed=5, uv_index=3)
NEUTRAL_SURGE = SurgeContext(DemandLevel.NORMAL, TimeOfDay.MORNING, DayType.WEEKDAY)


def test_filthiness_only_round_trip():
    moderate = classify_filthiness(40)
    result = compose_price(10000, moderate, MILD, NEUTRAL_SURGE)
    assert result.adjusted_price == 15000
    assert result.breakdown.as_dict() == {
        "base_price": 10000,
        "filthiness_adjustment": 5000,
        "weather_adjustment": 0,
        "surge_adjustment": 0,
        "final_price": 15000,
    }


def test_missing_context_means_no_adjustment():
    result = compose_price(10000, classify_filthiness(10))
    assert result.adjusted_price == 10000
    assert result.breakdown.weather_adjustment == 0
    assert result.breakdown.surge_adjustment == 0


def test_fixed_order_filthiness_weather_surge():
    rainy = WeatherSnapshot(temperature=70, humidity=50, precipitation=True, wind_speed=5, uv_index=3)
    busy = SurgeContext(DemandLevel.HIGH, TimeOfDay.MORNING, DayType.WEEKDAY)
    result = compose_price(10000, classify_filthiness(60), rainy, busy)

    b = result.breakdown
    assert b.filthiness_adjustment == 10000
    assert b.weather_adjustment == 6000
    assert b.surge_adjustment == 7800
    assert b.final_price == 33800
    assert b.base_price + b.filthiness_adjustment + b.weather_adjustment + b.surge_adjustment == b.final_price


def test_each_stage_rounds_on_its_own():
    adjustment, price = apply_multiplier(999, 1.5)
    assert adjustment == 500
    assert price == 1499


def test_composition_is_idempotent():
    args = (12345, classify_filthiness(80), MILD, SurgeContext(DemandLevel.PEAK, TimeOfDay.EVENING, DayType.WEEKEND, 1.2))
    assert compose_price(*args) == compose_price(*args)


def test_zero_base_price():
    result = compose_price(0, classify_filthiness(100))
    assert result.adjusted_price == 0


@pytest.mark.parametrize("base_price", [-1, 10.5, "100", True])
def test_invalid_base_price_is_rejected(base_price):
    with pytest.raises(InvalidPricingInput):
        compose_price(base_price, classify_filthiness(10))


def test_negative_multiplier_is_rejected():
    with pytest.raises(InvalidPricingInput):
        apply_multiplier(100, -0.5)
