from __future__ import annotations

from pricing.config import SurgeConfig, WeatherConfig
from pricing.data_models import (
    FilthinessAssessment,
    InvalidPricingInput,
    PriceAdjustment,
    PriceBreakdown,
    SurgeContext,
    WeatherSnapshot,
    require_finite,
    round_minor,
)
from pricing.surge import DEFAULT_SURGE_CONFIG, surge_multiplier
from pricing.weather import DEFAULT_WEATHER_CONFIG, weather_multiplier


def apply_multiplier(price: int, multiplier: float) -> tuple[int, int]:
    """Return ``(adjustment, new_price)``, each rounded on its own."""
    if multiplier < 0:
        raise InvalidPricingInput(f"Multiplier must be non-negative, got {multiplier}")
    return round_minor(price * (multiplier - 1)), round_minor(price * multiplier)


def compose_price(
    base_price: int,
    filthiness: FilthinessAssessment,
    weather: WeatherSnapshot | None = None,
    surge: SurgeContext | None = None,
    *,
    weather_config: WeatherConfig = DEFAULT_WEATHER_CONFIG,
    surge_config: SurgeConfig = DEFAULT_SURGE_CONFIG,
) -> PriceAdjustment:
    """Apply filthiness, then weather, then surge to ``base_price`` (cents).

    The order is fixed so that breakdowns can be reproduced from their inputs.
    """
    if isinstance(base_price, bool) or not isinstance(base_price, int):
        raise InvalidPricingInput(f"base_price must be an integer amount of cents, got {base_price!r}")
    if base_price < 0:
        raise InvalidPricingInput(f"base_price must be non-negative, got {base_price}")

    labor_multiplier = require_finite(filthiness.labor_multiplier, "labor_multiplier")
    filthiness_adjustment, current = apply_multiplier(base_price, labor_multiplier)

    weather_adjustment = 0
    if weather is not None:
        weather_adjustment, current = apply_multiplier(current, weather_multiplier(weather, weather_config))

    surge_adjustment = 0
    if surge is not None:
        surge_adjustment, current = apply_multiplier(current, surge_multiplier(surge, surge_config))

    return PriceAdjustment(
        adjusted_price=current,
        breakdown=PriceBreakdown(
            base_price=base_price,
            filthiness_adjustment=filthiness_adjustment,
            weather_adjustment=weather_adjustment,
            surge_adjustment=surge_adjustment,
            final_price=current,
        ),
    )
