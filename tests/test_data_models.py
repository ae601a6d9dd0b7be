from datetime import datetime, timezone
from enum import Enum

import pytest

from pricing.config import EstimateConfig, FilthinessConfig, SurgeConfig, WeatherConfig
from pricing.data_models import (
    Damage,
    DamageType,
    InspectionRecord,
    InvalidPricingInput,
    Severity,
    coerce_enum,
    require_exhaustive,
    require_finite,
    round_minor,
)
from pricing.filthiness import classify_filthiness


def test_round_minor_is_half_up():
    assert round_minor(2.5) == 3
    assert round_minor(3.5) == 4
    assert round_minor(2.4999) == 2
    assert round_minor(-2.5) == -2
    assert round_minor(5000.0) == 5000


def test_coerce_enum_accepts_members_and_loose_strings():
    assert coerce_enum(Severity.MAJOR, Severity, "severity") is Severity.MAJOR
    assert coerce_enum("  Severe ", Severity, "severity") is Severity.SEVERE


def test_coerce_enum_rejects_unknown_values():
    with pytest.raises(InvalidPricingInput) as exc:
        coerce_enum("catastrophic", Severity, "severity")
    assert exc.value.details["allowed"] == ["minor", "moderate", "major", "severe"]

    with pytest.raises(InvalidPricingInput):
        coerce_enum(3, Severity, "severity")


def test_require_finite_rejects_nan_and_non_numbers():
    assert require_finite(4, "x") == 4.0
    for bad in (float("nan"), float("inf"), "12", None, True):
        with pytest.raises(InvalidPricingInput):
            require_finite(bad, "x")


def test_require_exhaustive_reports_missing_members():
    class Color(str, Enum):
        RED = "red"
        BLUE = "blue"

    require_exhaustive({Color.RED: 1, Color.BLUE: 2}, Color, "colors")
    with pytest.raises(TypeError, match="blue"):
        require_exhaustive({Color.RED: 1}, Color, "colors")


def test_config_rejects_incomplete_tables():
    with pytest.raises(TypeError):
        SurgeConfig(demand={})
    with pytest.raises(ValueError):
        WeatherConfig(precipitation_multiplier=0.9)
    with pytest.raises(ValueError):
        FilthinessConfig(tiers=())
    with pytest.raises(ValueError):
        EstimateConfig(tax_rate=-0.1)


def test_assessment_supersede_keeps_history_immutable():
    earlier = classify_filthiness(30, assessed_at=datetime(2026, 10, 1, tzinfo=timezone.utc), assessed_by="tech-1")
    later = classify_filthiness(80, assessed_at=datetime(2026, 10, 2, tzinfo=timezone.utc), assessed_by="tech-2")

    current = earlier.supersede(later)
    assert current is later
    assert earlier.overall_score == 30
    assert earlier.assessed_by == "tech-1"

    with pytest.raises(InvalidPricingInput):
        later.supersede(earlier)


def test_assessment_stamped_returns_new_snapshot():
    base = classify_filthiness(10)
    stamped = base.stamped(datetime(2026, 10, 3, tzinfo=timezone.utc), "kiosk")
    assert base.assessed_by is None
    assert stamped.assessed_by == "kiosk"
    assert stamped.as_dict()["assessed_at"] == "2026-10-03T00:00:00+00:00"


def test_inspection_record_totals():
    record = InspectionRecord(
        id="insp-1",
        vehicle_year=2020,
        vehicle_make="Honda",
        vehicle_model="Civic",
        created_at=datetime(2026, 9, 1, tzinfo=timezone.utc),
        updated_at=datetime(2026, 9, 2, tzinfo=timezone.utc),
        damages=(
            Damage(DamageType.DENT, Severity.MINOR, "hood", repair_cost=15000),
            Damage(DamageType.SCRATCH, Severity.MINOR, "trunk"),
        ),
    )
    assert record.vehicle_info == "2020 Honda Civic"
    assert record.total_repair_cost == 15000
