from __future__ import annotations

from typing import Any, Iterable

from pricing.config import RepairTimeConfig
from pricing.data_models import Damage, DamageType, InvalidPricingInput, Severity, coerce_enum
from pricing.zones import DEFAULT_CATALOG, ZoneCatalog

DEFAULT_REPAIR_CONFIG = RepairTimeConfig()


def parse_damage_type(value: Any) -> DamageType:
    """Map a damage type to the enum; unrecognised strings become ``OTHER``."""
    if isinstance(value, DamageType):
        return value
    if isinstance(value, str):
        try:
            return DamageType(value.strip().lower())
        except ValueError:
            return DamageType.OTHER
    raise InvalidPricingInput(f"Invalid damage_type: {value!r}", details={"field": "damage_type"})


def parse_severity(value: Any) -> Severity:
    return coerce_enum(value, Severity, "severity")


def estimate_repair_hours(
    zone_id: str,
    damage_type: DamageType | str,
    severity: Severity | str,
    *,
    catalog: ZoneCatalog = DEFAULT_CATALOG,
    config: RepairTimeConfig = DEFAULT_REPAIR_CONFIG,
) -> float:
    """Raw labor hours for one damage; rounding for display is left to the caller."""
    kind = parse_damage_type(damage_type)
    level = parse_severity(severity)

    complexity = catalog.repair_complexity(zone_id)
    if complexity is None:
        return config.unknown_zone_hours

    return config.base_hours[complexity] * config.severity[level] * config.damage_type[kind]


def estimate_damage_hours(
    damages: Iterable[Damage],
    *,
    catalog: ZoneCatalog = DEFAULT_CATALOG,
    config: RepairTimeConfig = DEFAULT_REPAIR_CONFIG,
) -> float:
    return sum(
        estimate_repair_hours(d.zone_id, d.type, d.severity, catalog=catalog, config=config)
        for d in damages
    )


def complexity_multiplier(
    damage_type: DamageType | str,
    severity: Severity | str,
    config: RepairTimeConfig = DEFAULT_REPAIR_CONFIG,
) -> float:
    kind = parse_damage_type(damage_type)
    level = parse_severity(severity)
    return config.complexity_by_type[kind] + config.complexity_bonus[level]
