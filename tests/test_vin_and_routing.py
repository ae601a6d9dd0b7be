from pricing.data_models import Damage, DamageType, Severity
from pricing.routing import DamageReviewRouter
from service.vin import check_digit, is_valid_vin, model_year_from_vin, normalize_vin

VALID_VIN = "1HGCM82633A004352"


def test_valid_vin():
    assert is_valid_vin(VALID_VIN)
    assert check_digit(VALID_VIN) == "3"


def test_vin_is_normalized_before_validation():
    assert normalize_vin(" 1hgcm82633a 004352 ") == VALID_VIN
    assert is_valid_vin("1hgcm82633a004352")


def test_invalid_vins():
    assert not is_valid_vin("1HGCM82643A004352")  # wrong check digit
    assert not is_valid_vin("1HGCM82633A123456")
    assert not is_valid_vin("1HGCM82633A00435")
    assert not is_valid_vin("1HGCM8263IA004352")
    assert not is_valid_vin("")
    assert not is_valid_vin(None)


def test_model_year_from_vin():
    assert model_year_from_vin(VALID_VIN) == 2003
    assert model_year_from_vin("1HGCM8263") is None


def test_review_router_queues_low_confidence_damage():
    router = DamageReviewRouter(confidence_threshold=0.75)
    sure = Damage(DamageType.DENT, Severity.MINOR, "hood", confidence=0.92)
    unsure = Damage(DamageType.CRACK, Severity.MAJOR, "windshield", confidence=0.40)
    unscored = Damage(DamageType.STAIN, Severity.MINOR, "seats")

    priced = router.route_all([sure, unsure, unscored])
    assert priced == [sure]
    assert router.drain() == [unsure, unscored]
    assert router.drain() == []


def test_review_router_threshold_is_inclusive():
    router = DamageReviewRouter(confidence_threshold=0.75)
    assert not router.route(Damage(DamageType.DENT, Severity.MINOR, "hood", confidence=0.75))
