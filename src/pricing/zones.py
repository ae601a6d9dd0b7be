from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from pricing.data_models import RepairComplexity, Zone, ZoneCategory

_EXT = ZoneCategory.EXTERIOR
_INT = ZoneCategory.INTERIOR
_LOW = RepairComplexity.LOW
_MED = RepairComplexity.MEDIUM
_HIGH = RepairComplexity.HIGH


def _zone(zone_id: str, name: str, category: ZoneCategory, complexity: RepairComplexity, *damage: str) -> Zone:
    return Zone(
        id=zone_id,
        name=name,
        category=category,
        repair_complexity=complexity,
        typical_damage_types=frozenset(damage),
    )


DEFAULT_ZONES: tuple[Zone, ...] = (
    # front
    _zone("front_bumper", "Front Bumper", _EXT, _MED, "scratch", "dent", "crack"),
    _zone("front_grille", "Front Grille", _EXT, _LOW, "crack", "chip"),
    _zone("headlights", "Headlights", _EXT, _HIGH, "crack", "chip"),
    _zone("hood", "Hood", _EXT, _HIGH, "dent", "scratch", "chip"),
    _zone("windshield", "Windshield", _EXT, _HIGH, "crack", "chip"),
    # rear
    _zone("rear_bumper", "Rear Bumper", _EXT, _MED, "scratch", "dent", "crack"),
    _zone("taillights", "Taillights", _EXT, _MED, "crack", "chip"),
    _zone("trunk", "Trunk", _EXT, _HIGH, "dent", "scratch"),
    _zone("rear_windshield", "Rear Windshield", _EXT, _HIGH, "crack", "chip"),
    # sides
    _zone("driver_door", "Driver Door", _EXT, _HIGH, "dent", "scratch"),
    _zone("passenger_door", "Passenger Door", _EXT, _HIGH, "dent", "scratch"),
    _zone("driver_rear_door", "Driver Rear Door", _EXT, _HIGH, "dent", "scratch"),
    _zone("passenger_rear_door", "Passenger Rear Door", _EXT, _HIGH, "dent", "scratch"),
    # interior
    _zone("dashboard", "Dashboard", _INT, _HIGH, "crack", "stain", "tear"),
    _zone("seats", "Seats", _INT, _MED, "stain", "tear", "burn"),
    _zone("door_panels", "Door Panels", _INT, _MED, "stain", "tear", "scratch"),
    _zone("console", "Center Console", _INT, _MED, "scratch", "stain"),
    _zone("carpet", "Carpet", _INT, _LOW, "stain", "tear"),
    _zone("headliner", "Headliner", _INT, _HIGH, "stain", "tear"),
    # wheels
    _zone("front_left_wheel", "Front Left Wheel", _EXT, _MED, "scratch", "dent"),
    _zone("front_right_wheel", "Front Right Wheel", _EXT, _MED, "scratch", "dent"),
    _zone("rear_left_wheel", "Rear Left Wheel", _EXT, _MED, "scratch", "dent"),
    _zone("rear_right_wheel", "Rear Right Wheel", _EXT, _MED, "scratch", "dent"),
    # top
    _zone("roof", "Roof", _EXT, _HIGH, "dent", "scratch"),
    _zone("sunroof", "Sunroof", _EXT, _HIGH, "crack", "chip"),
)


class ZoneCatalog:
    """Read-only registry of vehicle zones.

    Unknown identifiers never raise: lookups return ``None`` or an empty set.
    """

    def __init__(self, zones: Iterable[Zone] = DEFAULT_ZONES) -> None:
        by_id: dict[str, Zone] = {}
        for zone in zones:
            if zone.id in by_id:
                raise ValueError(f"Duplicate zone id: {zone.id}")
            by_id[zone.id] = zone
        self._zones: Mapping[str, Zone] = MappingProxyType(by_id)

    def __contains__(self, zone_id: object) -> bool:
        return self._get(zone_id) is not None

    def __len__(self) -> int:
        return len(self._zones)

    def ids(self) -> list[str]:
        return list(self._zones)

    def _get(self, zone_id: object) -> Zone | None:
        if not isinstance(zone_id, str):
            return None
        return self._zones.get(zone_id)

    def lookup(self, zone_id: str) -> Zone | None:
        return self._get(zone_id)

    def by_category(self, category: ZoneCategory | str) -> list[Zone]:
        try:
            wanted = ZoneCategory(category)
        except ValueError:
            return []
        return [z for z in self._zones.values() if z.category is wanted]

    def typical_damage_types(self, zone_id: str) -> frozenset[str]:
        zone = self._get(zone_id)
        return zone.typical_damage_types if zone else frozenset()

    def repair_complexity(self, zone_id: str) -> RepairComplexity | None:
        zone = self._get(zone_id)
        return zone.repair_complexity if zone else None


DEFAULT_CATALOG = ZoneCatalog()


def lookup_zone(zone_id: str, catalog: ZoneCatalog = DEFAULT_CATALOG) -> Zone | None:
    return catalog.lookup(zone_id)


def is_valid_zone(zone_id: str, catalog: ZoneCatalog = DEFAULT_CATALOG) -> bool:
    return zone_id in catalog


def zones_by_category(category: ZoneCategory | str, catalog: ZoneCatalog = DEFAULT_CATALOG) -> list[Zone]:
    return catalog.by_category(category)


def typical_damage_types(zone_id: str, catalog: ZoneCatalog = DEFAULT_CATALOG) -> frozenset[str]:
    return catalog.typical_damage_types(zone_id)


def repair_complexity(zone_id: str, catalog: ZoneCatalog = DEFAULT_CATALOG) -> RepairComplexity | None:
    return catalog.repair_complexity(zone_id)
