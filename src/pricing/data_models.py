from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, TypeVar


class InvalidPricingInput(ValueError):
    """Raised when a caller hands the pricing core input that breaks its contract."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ZoneCategory(str, Enum):
    EXTERIOR = "exterior"
    INTERIOR = "interior"
    MECHANICAL = "mechanical"


class RepairComplexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FilthinessLevel(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"
    EXTREME = "extreme"


class DamageType(str, Enum):
    SCRATCH = "scratch"
    DENT = "dent"
    CHIP = "chip"
    CRACK = "crack"
    STAIN = "stain"
    BURN = "burn"
    TEAR = "tear"
    OTHER = "other"


class Severity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    SEVERE = "severe"


class DemandLevel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    PEAK = "peak"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class DayType(str, Enum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"


class ServiceType(str, Enum):
    BASIC_WASH = "basic_wash"
    DETAIL = "detail"
    PREMIUM_DETAIL = "premium_detail"
    REPAIR = "repair"
    CUSTOM = "custom"


E = TypeVar("E", bound=Enum)


def require_exhaustive(table: Mapping[E, Any], enum_cls: type[E], name: str) -> None:
    """Fail at import time when a lookup table misses a member of its enum."""
    missing = [m.value for m in enum_cls if m not in table]
    if missing:
        raise TypeError(f"{name} is missing entries for {missing}")


def coerce_enum(value: Any, enum_cls: type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = [m.value for m in enum_cls]
    raise InvalidPricingInput(
        f"Invalid {field_name}: {value!r}",
        details={"field": field_name, "allowed": allowed},
    )


def require_finite(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPricingInput(f"{field_name} must be a number, got {value!r}", details={"field": field_name})
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise InvalidPricingInput(f"{field_name} must be finite, got {value!r}", details={"field": field_name})
    return number


def round_minor(value: float) -> int:
    # half-up, so 12.5 -> 13 and -2.5 -> -2
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Zone:
    id: str
    name: str
    category: ZoneCategory
    repair_complexity: RepairComplexity
    typical_damage_types: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ZoneBreakdown:
    exterior: float
    interior: float
    engine: float
    undercarriage: float

    def as_dict(self) -> dict[str, float]:
        return {
            "exterior": self.exterior,
            "interior": self.interior,
            "engine": self.engine,
            "undercarriage": self.undercarriage,
        }


@dataclass(frozen=True)
class FilthinessAssessment:
    overall_score: float
    zone_breakdown: ZoneBreakdown
    severity_level: FilthinessLevel
    estimated_cleaning_time: float
    labor_multiplier: float
    assessed_at: datetime | None = None
    assessed_by: str | None = None

    def supersede(self, other: "FilthinessAssessment") -> "FilthinessAssessment":
        """Return ``other`` as the newer snapshot; the current one is left untouched."""
        if self.assessed_at and other.assessed_at and other.assessed_at < self.assessed_at:
            raise InvalidPricingInput(
                "A superseding assessment cannot predate the one it replaces",
                details={"current": self.assessed_at.isoformat(), "new": other.assessed_at.isoformat()},
            )
        return other

    def stamped(self, assessed_at: datetime, assessed_by: str | None) -> "FilthinessAssessment":
        return replace(self, assessed_at=assessed_at, assessed_by=assessed_by)

    def as_dict(self) -> dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "zone_breakdown": self.zone_breakdown.as_dict(),
            "severity_level": self.severity_level.value,
            "estimated_cleaning_time": self.estimated_cleaning_time,
            "labor_multiplier": self.labor_multiplier,
            "assessed_at": self.assessed_at.isoformat() if self.assessed_at else None,
            "assessed_by": self.assessed_by,
        }


@dataclass(frozen=True)
class WeatherSnapshot:
    temperature: float  # Fahrenheit
    humidity: float  # percent
    precipitation: bool
    wind_speed: float  # mph
    uv_index: float


@dataclass(frozen=True)
class SurgeContext:
    demand_level: DemandLevel
    time_of_day: TimeOfDay
    day_of_week: DayType
    seasonal_factor: float = 1.0
    holiday_multiplier: float = 1.0


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Damage:
    type: DamageType
    severity: Severity
    zone_id: str
    bounding_box: BoundingBox | None = None
    repair_cost: int | None = None  # cents
    confidence: float | None = None
    description: str | None = None


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: int
    filthiness_adjustment: int
    weather_adjustment: int
    surge_adjustment: int
    final_price: int

    def as_dict(self) -> dict[str, int]:
        return {
            "base_price": self.base_price,
            "filthiness_adjustment": self.filthiness_adjustment,
            "weather_adjustment": self.weather_adjustment,
            "surge_adjustment": self.surge_adjustment,
            "final_price": self.final_price,
        }


@dataclass(frozen=True)
class PriceAdjustment:
    adjusted_price: int
    breakdown: PriceBreakdown

    def as_dict(self) -> dict[str, Any]:
        return {"adjusted_price": self.adjusted_price, "breakdown": self.breakdown.as_dict()}


@dataclass(frozen=True)
class InspectionRecord:
    """Searchable view of an inspection, as handed over by the storage layer."""

    id: str
    vehicle_year: int
    vehicle_make: str
    vehicle_model: str
    created_at: datetime
    updated_at: datetime
    vin: str | None = None
    customer_name: str = ""
    customer_email: str = ""
    inspection_type: str = "intake"
    overall_condition: str | None = None
    filthiness_severity: FilthinessLevel | None = None
    notes: str | None = None
    damages: tuple[Damage, ...] = field(default_factory=tuple)

    @property
    def vehicle_info(self) -> str:
        return f"{self.vehicle_year} {self.vehicle_make} {self.vehicle_model}"

    @property
    def total_repair_cost(self) -> int:
        return sum(d.repair_cost or 0 for d in self.damages)


