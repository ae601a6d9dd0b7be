from __future__ import annotations

import re

_VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")

_CHECK_WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

_TRANSLITERATION = {
    **{str(d): d for d in range(10)},
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
}

# Position 10 codes cycle every 30 years; this maps the 2000-2029 cycle.
_YEAR_CODES = "Y123456789ABCDEFGHJKLMNPRSTVWX"
_YEAR_CODE_MAP = {code: 2000 + offset for offset, code in enumerate(_YEAR_CODES)}


def normalize_vin(vin: str) -> str:
    return re.sub(r"\s", "", vin).upper()


def check_digit(vin: str) -> str:
    total = sum(_TRANSLITERATION[char] * weight for char, weight in zip(vin, _CHECK_WEIGHTS))
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def is_valid_vin(vin: object) -> bool:
    """17 characters, no I/O/Q, and a matching ISO 3779 check digit in position 9."""
    if not isinstance(vin, str) or not vin:
        return False
    clean = normalize_vin(vin)
    if not _VIN_PATTERN.match(clean):
        return False
    return clean[8] == check_digit(clean)


def model_year_from_vin(vin: str) -> int | None:
    clean = normalize_vin(vin)
    if len(clean) < 10:
        return None
    return _YEAR_CODE_MAP.get(clean[9])
