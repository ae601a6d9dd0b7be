from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pricing.config import FilthinessConfig, SurgeConfig
from pricing.data_models import (
    BoundingBox,
    Damage,
    DayType,
    DemandLevel,
    FilthinessAssessment,
    FilthinessLevel,
    InspectionRecord,
    InvalidPricingInput,
    ServiceType,
    Severity,
    SurgeContext,
    TimeOfDay,
    WeatherSnapshot,
)
from pricing.estimate import EstimateInput
from pricing.filthiness import classify_filthiness
from pricing.relevance import SearchFilters, SortDirection, SortKey
from pricing.repair_time import parse_damage_type
from pricing.surge import build_surge_context
from service.vin import is_valid_vin, normalize_vin

TENANT_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$"

P = TypeVar("P", bound=BaseModel)


class _Payload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False, extra="ignore")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


def _check_vin(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not is_valid_vin(value):
        raise ValueError("VIN must be 17 characters without I, O or Q and carry a valid check digit")
    return normalize_vin(value)


class BoundingBoxIn(_Payload):
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class DamageIn(_Payload):
    type: str
    severity: Severity
    zone_id: str = Field(min_length=1)
    bounding_box: Optional[BoundingBoxIn] = None
    repair_cost: Optional[int] = Field(default=None, ge=0)
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    description: Optional[str] = None

    def to_damage(self) -> Damage:
        box = self.bounding_box
        return Damage(
            type=parse_damage_type(self.type),
            severity=self.severity,
            zone_id=self.zone_id,
            bounding_box=BoundingBox(box.x, box.y, box.width, box.height) if box else None,
            repair_cost=self.repair_cost,
            confidence=self.confidence,
            description=self.description,
        )


class WeatherIn(_Payload):
    temperature: float
    humidity: float = Field(ge=0, le=100)
    precipitation: bool = False
    wind_speed: float = Field(default=0.0, ge=0)
    uv_index: float = Field(default=0.0, ge=0)

    def to_snapshot(self) -> WeatherSnapshot:
        return WeatherSnapshot(
            temperature=self.temperature,
            humidity=self.humidity,
            precipitation=self.precipitation,
            wind_speed=self.wind_speed,
            uv_index=self.uv_index,
        )


class SurgeIn(_Payload):
    demand_level: DemandLevel = DemandLevel.NORMAL
    holiday_multiplier: float = Field(default=1.0, ge=0)
    seasonal_factor: Optional[float] = Field(default=None, ge=0)
    time_of_day: Optional[TimeOfDay] = None
    day_of_week: Optional[DayType] = None

    def to_context(self, at: datetime, config: SurgeConfig) -> SurgeContext:
        derived = build_surge_context(
            at,
            demand_level=self.demand_level,
            holiday_multiplier=self.holiday_multiplier,
            seasonal=self.seasonal_factor,
            config=config,
        )
        return SurgeContext(
            demand_level=derived.demand_level,
            time_of_day=self.time_of_day or derived.time_of_day,
            day_of_week=self.day_of_week or derived.day_of_week,
            seasonal_factor=derived.seasonal_factor,
            holiday_multiplier=derived.holiday_multiplier,
        )


class FilthinessIn(_Payload):
    overall_score: float
    zone_scores: Optional[dict[str, float]] = None
    assessed_by: Optional[str] = None

    def to_assessment(self, at: datetime, config: FilthinessConfig) -> FilthinessAssessment:
        return classify_filthiness(
            self.overall_score,
            self.zone_scores,
            config=config,
            assessed_at=at,
            assessed_by=self.assessed_by,
        )


class _TenantScoped(_Payload):
    tenant_id: str = Field(pattern=TENANT_PATTERN)
    vin: Optional[str] = None

    @field_validator("vin")
    @classmethod
    def validate_vin(cls, value: Optional[str]) -> Optional[str]:
        return _check_vin(value)


class PricingRequest(_TenantScoped):
    base_price: int = Field(ge=0, strict=True)
    at: datetime
    filthiness: FilthinessIn
    weather: Optional[WeatherIn] = None
    surge: Optional[SurgeIn] = None


class EstimateRequest(_TenantScoped):
    service_type: ServiceType
    at: datetime
    damages: list[DamageIn] = Field(default_factory=list)
    filthiness: Optional[FilthinessIn] = None
    weather: Optional[WeatherIn] = None
    surge: Optional[SurgeIn] = None

    def to_input(self, filthiness_config: FilthinessConfig, surge_config: SurgeConfig) -> EstimateInput:
        return EstimateInput(
            service_type=self.service_type,
            at=self.at,
            damages=tuple(d.to_damage() for d in self.damages),
            filthiness=self.filthiness.to_assessment(self.at, filthiness_config) if self.filthiness else None,
            weather=self.weather.to_snapshot() if self.weather else None,
            surge=self.surge.to_context(self.at, surge_config) if self.surge else None,
        )


class AssessmentRequest(_TenantScoped):
    at: datetime
    filthiness: FilthinessIn


class InspectionIn(_Payload):
    id: str
    vehicle_year: int = Field(ge=1900, le=2100)
    vehicle_make: str
    vehicle_model: str
    created_at: datetime
    updated_at: datetime
    vin: Optional[str] = None
    customer_name: str = ""
    customer_email: str = ""
    inspection_type: str = "intake"
    overall_condition: Optional[str] = None
    filthiness_severity: Optional[FilthinessLevel] = None
    notes: Optional[str] = None
    damages: list[DamageIn] = Field(default_factory=list)
    embedding: Optional[list[float]] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, value: datetime) -> datetime:
        # naive timestamps from storage are UTC
        return _as_utc(value)

    def to_record(self) -> InspectionRecord:
        return InspectionRecord(
            id=self.id,
            vehicle_year=self.vehicle_year,
            vehicle_make=self.vehicle_make,
            vehicle_model=self.vehicle_model,
            created_at=self.created_at,
            updated_at=self.updated_at,
            vin=self.vin,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            inspection_type=self.inspection_type,
            overall_condition=self.overall_condition,
            filthiness_severity=self.filthiness_severity,
            notes=self.notes,
            damages=tuple(d.to_damage() for d in self.damages),
        )


class SearchRequest(_Payload):
    tenant_id: str = Field(pattern=TENANT_PATTERN)
    query: str = Field(min_length=1)
    query_embedding: Optional[list[float]] = None
    sort_key: SortKey = SortKey.RELEVANCE
    direction: SortDirection = SortDirection.DESC
    limit: Optional[int] = Field(default=None, gt=0)
    severity: list[Severity] = Field(default_factory=list)
    vehicle_make: list[str] = Field(default_factory=list)
    inspection_type: list[str] = Field(default_factory=list)
    overall_condition: list[str] = Field(default_factory=list)
    filthiness_level: list[FilthinessLevel] = Field(default_factory=list)
    date_start: Optional[datetime] = None
    date_end: Optional[datetime] = None
    min_damage_count: Optional[int] = Field(default=None, ge=0)
    max_damage_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("date_start", "date_end")
    @classmethod
    def validate_window(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def to_filters(self) -> SearchFilters:
        return SearchFilters(
            severity=frozenset(self.severity),
            date_start=self.date_start,
            date_end=self.date_end,
            vehicle_make=frozenset(self.vehicle_make),
            inspection_type=frozenset(self.inspection_type),
            overall_condition=frozenset(self.overall_condition),
            filthiness_level=frozenset(self.filthiness_level),
            min_damage_count=self.min_damage_count,
            max_damage_count=self.max_damage_count,
        )


def parse_payload(model: type[P], payload: Any) -> P:
    """Validate a plain payload, surfacing pydantic errors as ``InvalidPricingInput``."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        raise InvalidPricingInput(
            f"Invalid {model.__name__} payload",
            details={"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors]},
        ) from exc
