from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Sequence

from pricing.config import EstimateConfig
from pricing.data_models import (
    Damage,
    DemandLevel,
    FilthinessAssessment,
    ServiceType,
    SurgeContext,
    WeatherSnapshot,
    coerce_enum,
    round_minor,
)
from pricing.repair_time import complexity_multiplier, estimate_repair_hours
from pricing.surge import build_surge_context, surge_factors, surge_multiplier
from pricing.weather import weather_factors, weather_multiplier
from pricing.zones import DEFAULT_CATALOG, ZoneCatalog


@dataclass(frozen=True)
class EstimateInput:
    service_type: ServiceType
    at: datetime
    damages: Sequence[Damage] = ()
    filthiness: FilthinessAssessment | None = None
    weather: WeatherSnapshot | None = None
    surge: SurgeContext | None = None
    demand_level: DemandLevel = DemandLevel.NORMAL
    holiday_multiplier: float = 1.0


@dataclass(frozen=True)
class LaborLine:
    hours: float
    rate: int
    subtotal: int


@dataclass(frozen=True)
class DamageLine:
    repair_hours: float
    repair_cost: int
    complexity_multiplier: float


@dataclass(frozen=True)
class CleaningLine:
    cleaning_hours: float
    severity_multiplier: float
    additional_cost: int


@dataclass(frozen=True)
class MultiplierLine:
    multiplier: float
    additional_cost: int
    factors: tuple[str, ...] = ()


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: float
    unit_price: int
    total: int


@dataclass(frozen=True)
class EstimateBreakdown:
    service_type: ServiceType
    base_labor: LaborLine
    damage: DamageLine
    cleaning: CleaningLine
    weather: MultiplierLine
    surge: MultiplierLine
    material_rate: float
    materials_cost: int
    subtotal: int
    tax_rate: float
    tax_amount: int
    total: int
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)

    @property
    def total_hours(self) -> float:
        return self.base_labor.hours + self.damage.repair_hours + self.cleaning.cleaning_hours

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["service_type"] = self.service_type.value
        data["total_hours"] = self.total_hours
        return data


_NO_ADJUSTMENT = MultiplierLine(multiplier=1.0, additional_cost=0)


def _damage_line(damages: Sequence[Damage], rate: int, config: EstimateConfig, catalog: ZoneCatalog) -> DamageLine:
    hours = 0.0
    cost = 0
    max_complexity = 1.0
    for damage in damages:
        repair_hours = estimate_repair_hours(
            damage.zone_id, damage.type, damage.severity, catalog=catalog, config=config.repair
        )
        hours += repair_hours
        cost += damage.repair_cost if damage.repair_cost else round_minor(repair_hours * rate)
        max_complexity = max(max_complexity, complexity_multiplier(damage.type, damage.severity, config.repair))
    return DamageLine(repair_hours=hours, repair_cost=cost, complexity_multiplier=max_complexity)


def _cleaning_line(filthiness: FilthinessAssessment | None, rate: int) -> CleaningLine:
    if filthiness is None or not filthiness.overall_score:
        return CleaningLine(cleaning_hours=0.0, severity_multiplier=1.0, additional_cost=0)
    return CleaningLine(
        cleaning_hours=filthiness.estimated_cleaning_time,
        severity_multiplier=filthiness.labor_multiplier,
        additional_cost=round_minor(filthiness.estimated_cleaning_time * rate),
    )


def _per_hour(total: int, hours: float) -> int:
    return round_minor(total / hours) if hours else total


def _line_items(
    description: str,
    labor: LaborLine,
    damage: DamageLine,
    cleaning: CleaningLine,
    weather: MultiplierLine,
    surge: MultiplierLine,
    materials_cost: int,
) -> tuple[LineItem, ...]:
    items = [LineItem(description, labor.hours, labor.rate, labor.subtotal)]
    if damage.repair_cost > 0:
        items.append(
            LineItem("Damage Repair", damage.repair_hours, _per_hour(damage.repair_cost, damage.repair_hours), damage.repair_cost)
        )
    if cleaning.additional_cost > 0:
        items.append(
            LineItem(
                "Additional Cleaning",
                cleaning.cleaning_hours,
                _per_hour(cleaning.additional_cost, cleaning.cleaning_hours),
                cleaning.additional_cost,
            )
        )
    if weather.additional_cost > 0:
        label = f"Weather Adjustment ({', '.join(weather.factors)})"
        items.append(LineItem(label, 1, weather.additional_cost, weather.additional_cost))
    if surge.additional_cost > 0:
        label = f"Surge Pricing ({', '.join(surge.factors)})"
        items.append(LineItem(label, 1, surge.additional_cost, surge.additional_cost))
    if materials_cost > 0:
        items.append(LineItem("Materials & Supplies", 1, materials_cost, materials_cost))
    return tuple(items)


def build_estimate(
    request: EstimateInput,
    config: EstimateConfig | None = None,
    catalog: ZoneCatalog = DEFAULT_CATALOG,
) -> EstimateBreakdown:
    """Itemised service estimate in cents.

    Labor, damage repair and extra cleaning are summed first; weather and
    surge then scale that running subtotal, followed by materials and tax.
    Surge time buckets come from ``request.at`` unless an explicit surge
    context is supplied.
    """
    config = config or EstimateConfig()
    service_type = coerce_enum(request.service_type, ServiceType, "service_type")
    profile = config.services[service_type]
    rate = config.labor_rate

    labor = LaborLine(hours=profile.base_hours, rate=rate, subtotal=round_minor(profile.base_hours * rate))
    damage = _damage_line(request.damages, rate, config, catalog)
    cleaning = _cleaning_line(request.filthiness, rate)
    running = labor.subtotal + damage.repair_cost + cleaning.additional_cost

    weather = _NO_ADJUSTMENT
    if request.weather is not None and config.weather_adjustments:
        multiplier = weather_multiplier(request.weather, config.weather)
        weather = MultiplierLine(
            multiplier=multiplier,
            additional_cost=round_minor(running * (multiplier - 1)),
            factors=tuple(weather_factors(request.weather, config.weather)),
        )
    running += weather.additional_cost

    surge = _NO_ADJUSTMENT
    if config.surge_enabled:
        context = request.surge or build_surge_context(
            request.at,
            demand_level=request.demand_level,
            holiday_multiplier=request.holiday_multiplier,
            config=config.surge,
        )
        multiplier = min(surge_multiplier(context, config.surge), config.maximum_surge)
        surge = MultiplierLine(
            multiplier=multiplier,
            additional_cost=round_minor(running * (multiplier - 1)),
            factors=tuple(surge_factors(context)),
        )
    running += surge.additional_cost

    materials_cost = round_minor(running * config.material_rate)
    subtotal = running + materials_cost
    tax_amount = round_minor(subtotal * config.tax_rate)
    total = max(subtotal + tax_amount, config.minimum_charge)

    return EstimateBreakdown(
        service_type=service_type,
        base_labor=labor,
        damage=damage,
        cleaning=cleaning,
        weather=weather,
        surge=surge,
        material_rate=config.material_rate,
        materials_cost=materials_cost,
        subtotal=subtotal,
        tax_rate=config.tax_rate,
        tax_amount=tax_amount,
        total=total,
        line_items=_line_items(profile.description, labor, damage, cleaning, weather, surge, materials_cost),
    )
