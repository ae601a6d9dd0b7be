import pytest

from pricing.data_models import RepairComplexity, Zone, ZoneCategory
from pricing.zones import (
    DEFAULT_CATALOG,
    ZoneCatalog,
    is_valid_zone,
    lookup_zone,
    repair_complexity,
    typical_damage_types,
    zones_by_category,
)


def test_default_catalog_has_all_zones():
    assert len(DEFAULT_CATALOG) == 25
    assert "front_bumper" in DEFAULT_CATALOG
    assert is_valid_zone("sunroof")


def test_lookup_known_zone():
    zone = lookup_zone("windshield")
    assert zone is not None
    assert zone.name == "Windshield"
    assert zone.category is ZoneCategory.EXTERIOR
    assert zone.repair_complexity is RepairComplexity.HIGH
    assert typical_damage_types("windshield") == frozenset({"crack", "chip"})


def test_unknown_zone_never_raises():
    assert lookup_zone("flux_capacitor") is None
    assert not is_valid_zone("flux_capacitor")
    assert typical_damage_types("flux_capacitor") == frozenset()
    assert repair_complexity("flux_capacitor") is None


@pytest.mark.parametrize("zone_id", [["hood"], {"id": "hood"}, None, 7])
def test_non_string_zone_ids_are_unknown(zone_id):
    assert lookup_zone(zone_id) is None
    assert not is_valid_zone(zone_id)
    assert typical_damage_types(zone_id) == frozenset()
    assert repair_complexity(zone_id) is None


def test_zones_by_category():
    interior = zones_by_category(ZoneCategory.INTERIOR)
    assert {z.id for z in interior} == {"dashboard", "seats", "door_panels", "console", "carpet", "headliner"}
    assert zones_by_category("exterior") == zones_by_category(ZoneCategory.EXTERIOR)
    assert zones_by_category(ZoneCategory.MECHANICAL) == []
    assert zones_by_category("spaceship") == []


def test_custom_catalog():
    engine = Zone("engine_bay", "Engine Bay", ZoneCategory.MECHANICAL, RepairComplexity.HIGH, frozenset({"burn"}))
    catalog = ZoneCatalog([engine])
    assert catalog.ids() == ["engine_bay"]
    assert catalog.by_category("mechanical") == [engine]
    assert repair_complexity("engine_bay", catalog) is RepairComplexity.HIGH


def test_duplicate_zone_ids_rejected():
    zone = lookup_zone("roof")
    with pytest.raises(ValueError):
        ZoneCatalog([zone, zone])
