from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from pricing.data_models import (
    DamageType,
    DayType,
    DemandLevel,
    FilthinessLevel,
    RepairComplexity,
    ServiceType,
    Severity,
    TimeOfDay,
    require_exhaustive,
)


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class FilthinessTier:
    level: FilthinessLevel
    min_score: float
    max_score: float
    multiplier: float
    base_hours: float

    def contains(self, score: float) -> bool:
        return self.min_score <= score <= self.max_score


DEFAULT_FILTHINESS_TIERS: tuple[FilthinessTier, ...] = (
    FilthinessTier(FilthinessLevel.LIGHT, 0, 25, multiplier=1.0, base_hours=0.5),
    FilthinessTier(FilthinessLevel.MODERATE, 26, 50, multiplier=1.5, base_hours=1.5),
    FilthinessTier(FilthinessLevel.HEAVY, 51, 75, multiplier=2.0, base_hours=3.0),
    FilthinessTier(FilthinessLevel.EXTREME, 76, 100, multiplier=3.0, base_hours=5.0),
)

# Assumed soiling distribution used when no per-zone scores are measured.
# An approximation, not calibrated against real inspections.
DEFAULT_ZONE_WEIGHTS: Mapping[str, float] = _frozen(
    {"exterior": 0.4, "interior": 0.3, "engine": 0.2, "undercarriage": 0.1}
)


@dataclass(frozen=True)
class FilthinessConfig:
    tiers: tuple[FilthinessTier, ...] = DEFAULT_FILTHINESS_TIERS
    zone_weights: Mapping[str, float] = field(default_factory=lambda: DEFAULT_ZONE_WEIGHTS)

    def __post_init__(self) -> None:
        if not self.tiers:
            raise ValueError("FilthinessConfig needs at least one tier")
        if set(self.zone_weights) != {"exterior", "interior", "engine", "undercarriage"}:
            raise ValueError("zone_weights must define exterior, interior, engine and undercarriage")
        if any(t.multiplier < 0 or t.base_hours < 0 for t in self.tiers):
            raise ValueError("Tier multipliers and hours must be non-negative")

    def tiers_high_to_low(self) -> tuple[FilthinessTier, ...]:
        return tuple(sorted(self.tiers, key=lambda t: t.min_score, reverse=True))


@dataclass(frozen=True)
class WeatherConfig:
    high_temp_threshold: float = 85.0
    high_temp_multiplier: float = 1.2
    low_temp_threshold: float = 40.0
    low_temp_multiplier: float = 1.1
    high_humidity_threshold: float = 70.0
    high_humidity_multiplier: float = 1.15
    precipitation_multiplier: float = 1.3
    high_wind_threshold: float = 15.0  # mph
    high_wind_multiplier: float = 1.1
    high_uv_threshold: float = 7.0
    high_uv_multiplier: float = 1.1

    def __post_init__(self) -> None:
        if self.low_temp_threshold > self.high_temp_threshold:
            raise ValueError("low_temp_threshold must not exceed high_temp_threshold")
        multipliers = (
            self.high_temp_multiplier,
            self.low_temp_multiplier,
            self.high_humidity_multiplier,
            self.precipitation_multiplier,
            self.high_wind_multiplier,
            self.high_uv_multiplier,
        )
        if any(m < 1.0 for m in multipliers):
            raise ValueError("Weather multipliers must be >= 1.0")


DEMAND_MULTIPLIERS: Mapping[DemandLevel, float] = _frozen(
    {
        DemandLevel.LOW: 0.9,
        DemandLevel.NORMAL: 1.0,
        DemandLevel.HIGH: 1.3,
        DemandLevel.PEAK: 1.8,
    }
)

TIME_OF_DAY_MULTIPLIERS: Mapping[TimeOfDay, float] = _frozen(
    {
        TimeOfDay.MORNING: 1.0,
        TimeOfDay.AFTERNOON: 1.1,
        TimeOfDay.EVENING: 1.2,
        TimeOfDay.NIGHT: 0.8,
    }
)

DAY_OF_WEEK_MULTIPLIERS: Mapping[DayType, float] = _frozen(
    {
        DayType.WEEKDAY: 1.0,
        DayType.WEEKEND: 1.3,
    }
)


@dataclass(frozen=True)
class SurgeConfig:
    demand: Mapping[DemandLevel, float] = field(default_factory=lambda: DEMAND_MULTIPLIERS)
    time_of_day: Mapping[TimeOfDay, float] = field(default_factory=lambda: TIME_OF_DAY_MULTIPLIERS)
    day_of_week: Mapping[DayType, float] = field(default_factory=lambda: DAY_OF_WEEK_MULTIPLIERS)
    # Hour boundaries, start inclusive. Anything outside them is night.
    morning_start: int = 6
    afternoon_start: int = 12
    evening_start: int = 17
    night_start: int = 22
    spring_summer_factor: float = 1.2
    fall_factor: float = 1.1
    winter_factor: float = 0.9

    def __post_init__(self) -> None:
        require_exhaustive(self.demand, DemandLevel, "demand")
        require_exhaustive(self.time_of_day, TimeOfDay, "time_of_day")
        require_exhaustive(self.day_of_week, DayType, "day_of_week")
        if not 0 <= self.morning_start < self.afternoon_start < self.evening_start < self.night_start <= 24:
            raise ValueError("Time-of-day boundaries must be increasing within 0..24")


BASE_HOURS_BY_COMPLEXITY: Mapping[RepairComplexity, float] = _frozen(
    {
        RepairComplexity.LOW: 0.5,
        RepairComplexity.MEDIUM: 2.0,
        RepairComplexity.HIGH: 4.0,
    }
)

SEVERITY_MULTIPLIERS: Mapping[Severity, float] = _frozen(
    {
        Severity.MINOR: 1.0,
        Severity.MODERATE: 2.0,
        Severity.MAJOR: 4.0,
        Severity.SEVERE: 8.0,
    }
)

DAMAGE_TYPE_MULTIPLIERS: Mapping[DamageType, float] = _frozen(
    {
        DamageType.SCRATCH: 1.0,
        DamageType.DENT: 1.5,
        DamageType.CHIP: 0.5,
        DamageType.CRACK: 2.0,
        DamageType.STAIN: 0.8,
        DamageType.BURN: 3.0,
        DamageType.TEAR: 1.2,
        DamageType.OTHER: 1.0,
    }
)

COMPLEXITY_BY_DAMAGE_TYPE: Mapping[DamageType, float] = _frozen(
    {
        DamageType.SCRATCH: 1.1,
        DamageType.DENT: 1.3,
        DamageType.CHIP: 1.0,
        DamageType.CRACK: 1.4,
        DamageType.STAIN: 1.2,
        DamageType.BURN: 1.8,
        DamageType.TEAR: 1.5,
        DamageType.OTHER: 1.2,
    }
)

COMPLEXITY_BONUS_BY_SEVERITY: Mapping[Severity, float] = _frozen(
    {
        Severity.MINOR: 0.0,
        Severity.MODERATE: 0.1,
        Severity.MAJOR: 0.3,
        Severity.SEVERE: 0.5,
    }
)


@dataclass(frozen=True)
class RepairTimeConfig:
    base_hours: Mapping[RepairComplexity, float] = field(default_factory=lambda: BASE_HOURS_BY_COMPLEXITY)
    severity: Mapping[Severity, float] = field(default_factory=lambda: SEVERITY_MULTIPLIERS)
    damage_type: Mapping[DamageType, float] = field(default_factory=lambda: DAMAGE_TYPE_MULTIPLIERS)
    complexity_by_type: Mapping[DamageType, float] = field(default_factory=lambda: COMPLEXITY_BY_DAMAGE_TYPE)
    complexity_bonus: Mapping[Severity, float] = field(default_factory=lambda: COMPLEXITY_BONUS_BY_SEVERITY)
    unknown_zone_hours: float = 1.0

    def __post_init__(self) -> None:
        require_exhaustive(self.base_hours, RepairComplexity, "base_hours")
        require_exhaustive(self.severity, Severity, "severity")
        require_exhaustive(self.damage_type, DamageType, "damage_type")
        require_exhaustive(self.complexity_by_type, DamageType, "complexity_by_type")
        require_exhaustive(self.complexity_bonus, Severity, "complexity_bonus")


@dataclass(frozen=True)
class ServiceProfile:
    base_hours: float
    description: str


SERVICE_PROFILES: Mapping[ServiceType, ServiceProfile] = _frozen(
    {
        ServiceType.BASIC_WASH: ServiceProfile(1.0, "Basic Wash & Vacuum"),
        ServiceType.DETAIL: ServiceProfile(3.0, "Interior & Exterior Detail"),
        ServiceType.PREMIUM_DETAIL: ServiceProfile(6.0, "Premium Full Detail Service"),
        ServiceType.REPAIR: ServiceProfile(2.0, "Damage Repair Service"),
        ServiceType.CUSTOM: ServiceProfile(2.0, "Custom Service Package"),
    }
)


@dataclass(frozen=True)
class EstimateConfig:
    labor_rate: int = 7500  # cents per hour
    material_rate: float = 0.2
    tax_rate: float = 0.0875
    minimum_charge: int = 2500  # cents
    maximum_surge: float = 2.0
    surge_enabled: bool = True
    weather_adjustments: bool = True
    services: Mapping[ServiceType, ServiceProfile] = field(default_factory=lambda: SERVICE_PROFILES)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    surge: SurgeConfig = field(default_factory=SurgeConfig)
    repair: RepairTimeConfig = field(default_factory=RepairTimeConfig)
    filthiness: FilthinessConfig = field(default_factory=FilthinessConfig)

    def __post_init__(self) -> None:
        require_exhaustive(self.services, ServiceType, "services")
        if self.labor_rate < 0 or self.minimum_charge < 0:
            raise ValueError("labor_rate and minimum_charge must be non-negative")
        if self.maximum_surge < 0 or self.material_rate < 0 or self.tax_rate < 0:
            raise ValueError("maximum_surge, material_rate and tax_rate must be non-negative")


@dataclass(frozen=True)
class RelevanceConfig:
    vector_weight: float = 0.6
    keyword_weight: float = 0.3
    time_decay_weight: float = 0.1
    exact_match_boost: float = 0.1
    damage_relevance_boost: float = 0.05
    max_age_days: float = 365.0
    min_decay: float = 0.1


require_exhaustive(DEMAND_MULTIPLIERS, DemandLevel, "DEMAND_MULTIPLIERS")
require_exhaustive(TIME_OF_DAY_MULTIPLIERS, TimeOfDay, "TIME_OF_DAY_MULTIPLIERS")
require_exhaustive(DAY_OF_WEEK_MULTIPLIERS, DayType, "DAY_OF_WEEK_MULTIPLIERS")
require_exhaustive(BASE_HOURS_BY_COMPLEXITY, RepairComplexity, "BASE_HOURS_BY_COMPLEXITY")
require_exhaustive(SEVERITY_MULTIPLIERS, Severity, "SEVERITY_MULTIPLIERS")
require_exhaustive(DAMAGE_TYPE_MULTIPLIERS, DamageType, "DAMAGE_TYPE_MULTIPLIERS")
require_exhaustive(SERVICE_PROFILES, ServiceType, "SERVICE_PROFILES")
