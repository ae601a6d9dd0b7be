from __future__ import annotations

from datetime import datetime

from pricing.config import SurgeConfig
from pricing.data_models import (
    DayType,
    DemandLevel,
    InvalidPricingInput,
    SurgeContext,
    TimeOfDay,
    coerce_enum,
    require_finite,
)

DEFAULT_SURGE_CONFIG = SurgeConfig()


def time_of_day_for(hour: int, config: SurgeConfig = DEFAULT_SURGE_CONFIG) -> TimeOfDay:
    if config.morning_start <= hour < config.afternoon_start:
        return TimeOfDay.MORNING
    if config.afternoon_start <= hour < config.evening_start:
        return TimeOfDay.AFTERNOON
    if config.evening_start <= hour < config.night_start:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def day_type_for(at: datetime) -> DayType:
    # datetime.weekday(): Monday == 0 ... Saturday == 5, Sunday == 6
    return DayType.WEEKEND if at.weekday() >= 5 else DayType.WEEKDAY


def time_factors(at: datetime, config: SurgeConfig = DEFAULT_SURGE_CONFIG) -> tuple[TimeOfDay, DayType]:
    """Bucket a wall-clock instant. ``at`` is read in whatever timezone it carries."""
    return time_of_day_for(at.hour, config), day_type_for(at)


def seasonal_factor(month_index: int, config: SurgeConfig = DEFAULT_SURGE_CONFIG) -> float:
    """Seasonal demand factor for a zero-based month index (0 = January)."""
    if not 0 <= month_index <= 11:
        raise InvalidPricingInput(f"month_index must be within 0..11, got {month_index}")
    if 2 <= month_index <= 7:
        return config.spring_summer_factor
    if 8 <= month_index <= 10:
        return config.fall_factor
    return config.winter_factor


def seasonal_factor_for(at: datetime, config: SurgeConfig = DEFAULT_SURGE_CONFIG) -> float:
    return seasonal_factor(at.month - 1, config)


def build_surge_context(
    at: datetime,
    *,
    demand_level: DemandLevel | str = DemandLevel.NORMAL,
    holiday_multiplier: float = 1.0,
    seasonal: float | None = None,
    config: SurgeConfig = DEFAULT_SURGE_CONFIG,
) -> SurgeContext:
    time_of_day, day_of_week = time_factors(at, config)
    return SurgeContext(
        demand_level=coerce_enum(demand_level, DemandLevel, "demand_level"),
        time_of_day=time_of_day,
        day_of_week=day_of_week,
        seasonal_factor=seasonal_factor_for(at, config) if seasonal is None else seasonal,
        holiday_multiplier=holiday_multiplier,
    )


def surge_multiplier(context: SurgeContext, config: SurgeConfig = DEFAULT_SURGE_CONFIG) -> float:
    demand = coerce_enum(context.demand_level, DemandLevel, "demand_level")
    time_of_day = coerce_enum(context.time_of_day, TimeOfDay, "time_of_day")
    day_of_week = coerce_enum(context.day_of_week, DayType, "day_of_week")
    seasonal = require_finite(context.seasonal_factor, "seasonal_factor")
    holiday = require_finite(context.holiday_multiplier, "holiday_multiplier")
    if seasonal < 0 or holiday < 0:
        raise InvalidPricingInput(
            "Seasonal and holiday factors must be non-negative",
            details={"seasonal_factor": seasonal, "holiday_multiplier": holiday},
        )

    multiplier = 1.0
    multiplier *= config.demand[demand]
    multiplier *= config.time_of_day[time_of_day]
    multiplier *= config.day_of_week[day_of_week]
    multiplier *= seasonal
    multiplier *= holiday
    return multiplier


def surge_factors(context: SurgeContext) -> list[str]:
    factors: list[str] = []
    demand = coerce_enum(context.demand_level, DemandLevel, "demand_level")
    if demand is not DemandLevel.NORMAL:
        factors.append(f"{demand.value} demand")
    if context.time_of_day == TimeOfDay.EVENING:
        factors.append("Evening hours")
    if context.day_of_week == DayType.WEEKEND:
        factors.append("Weekend")
    if context.seasonal_factor > 1.0:
        factors.append("Peak season")
    if context.holiday_multiplier > 1.0:
        factors.append("Holiday period")
    return factors
