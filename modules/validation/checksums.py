"""
Checksum algorithms.

Pure check-digit functions, one per identifier family. Each takes the raw
string as entered and returns a boolean. Every function rejects inputs of
the wrong length or containing disallowed characters before computing a
checksum.

- luhn_valid: payment cards, IMEI (ISO/IEC 7812)
- valid_isbn: ISBN-10 / ISBN-13 (ISO 2108)
- valid_issn: ISSN (ISO 3297)
- valid_iban: IBAN mod-97 (ISO 13616)
- valid_ean13: EAN-13 / GTIN-13
- valid_upca: UPC-A / GTIN-12
- valid_vin: VIN check digit (ISO 3779)
"""

import re
from typing import Callable, Dict, List, Optional

from modules.validation.patterns import IBAN_REGEX, VIN_REGEX

_SEPARATORS = re.compile(r"[\s-]")
_LUHN_ALLOWED = re.compile(r"\A[0-9\s-]+\Z")
_DIGITS = re.compile(r"\A[0-9]+\Z")

# ISO 3779 transliteration; I, O and Q are not allowed in a VIN
VIN_TRANSLITERATION: Dict[str, int] = {
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
}
VIN_WEIGHTS: List[int] = [8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2]


def _strip_separators(value: str) -> str:
    return _SEPARATORS.sub("", value)


def _gtin_valid(digits: str) -> bool:
    """
    Weighted 1,3 check over a digit string whose last digit is the check digit.

    The weights are aligned from the first digit of a 13-digit body, so
    shorter codes must be left-padded with zeros by the caller.
    """
    body, check = digits[:-1], int(digits[-1])
    total = sum(int(d) * (3 if i % 2 else 1) for i, d in enumerate(body))
    return (10 - total % 10) % 10 == check


def luhn_valid(value: str) -> bool:
    """
    Luhn (mod 10) check.

    Spaces and hyphens between digits are ignored; any other character
    makes the value invalid.
    """
    if not isinstance(value, str) or not _LUHN_ALLOWED.match(value):
        return False

    digits = _strip_separators(value)
    if not digits:
        return False

    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit

    return total % 10 == 0


def valid_isbn(value: str) -> bool:
    """ISBN-10 (mod 11, X = 10 in last position) or ISBN-13 (weights 1,3, mod 10)."""
    if not isinstance(value, str):
        return False

    chars = _strip_separators(value).upper()

    if len(chars) == 10:
        if not (_DIGITS.match(chars[:9]) and (_DIGITS.match(chars[9]) or chars[9] == "X")):
            return False
        total = sum(
            (10 if char == "X" else int(char)) * weight
            for char, weight in zip(chars, range(10, 0, -1))
        )
        return total % 11 == 0

    if len(chars) == 13:
        if not _DIGITS.match(chars):
            return False
        total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(chars))
        return total % 10 == 0

    return False


def valid_issn(value: str) -> bool:
    """ISSN: 8 characters (last may be X = 10), weights 8..1, mod 11."""
    if not isinstance(value, str):
        return False

    chars = value.replace("-", "").upper()
    if len(chars) != 8:
        return False
    if not (_DIGITS.match(chars[:7]) and (_DIGITS.match(chars[7]) or chars[7] == "X")):
        return False

    total = sum(
        (10 if char == "X" else int(char)) * weight
        for char, weight in zip(chars, range(8, 0, -1))
    )
    return total % 11 == 0


def valid_iban(value: str) -> bool:
    """IBAN: move the first four characters to the end, letters to 10..35, mod 97 == 1."""
    if not isinstance(value, str):
        return False

    iban = re.sub(r"\s+", "", value).upper()
    if not IBAN_REGEX.match(iban):
        return False

    rearranged = iban[4:] + iban[:4]
    numeric = "".join(
        str(ord(char) - ord("A") + 10) if char.isalpha() else char
        for char in rearranged
    )
    return int(numeric) % 97 == 1


def valid_ean13(value: str) -> bool:
    """EAN-13: 13 digits, weights 1,3 from the first digit, check digit last."""
    if not isinstance(value, str) or len(value) != 13 or not _DIGITS.match(value):
        return False
    return _gtin_valid(value)


def valid_upca(value: str) -> bool:
    """UPC-A: 12 digits, checked as the EAN-13 with a leading zero."""
    if not isinstance(value, str) or len(value) != 12 or not _DIGITS.match(value):
        return False
    return _gtin_valid("0" + value)


def vin_check_character(vin: str) -> str:
    """Compute the check character (position 9) for a 17-character VIN."""
    total = sum(
        (int(char) if char.isdigit() else VIN_TRANSLITERATION[char]) * weight
        for char, weight in zip(vin.upper(), VIN_WEIGHTS)
    )
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def valid_vin(value: str) -> bool:
    """VIN: 17 characters without I/O/Q, transliterated weighted sum mod 11 vs position 9."""
    if not isinstance(value, str) or not VIN_REGEX.match(value):
        return False

    vin = value.upper()
    return vin[8] == vin_check_character(vin)


CHECKSUM_METHODS: Dict[str, Callable[[str], bool]] = {
    "luhn_valid": luhn_valid,
    "valid_isbn": valid_isbn,
    "valid_issn": valid_issn,
    "valid_iban": valid_iban,
    "valid_ean13": valid_ean13,
    "valid_upca": valid_upca,
    "valid_vin": valid_vin,
}

# Predicate-style names used by older spec tables
CHECKSUM_ALIASES: Dict[str, str] = {
    "luhn_valid?": "luhn_valid",
    "valid_isbn?": "valid_isbn",
    "valid_issn?": "valid_issn",
    "valid_iban?": "valid_iban",
    "valid_ean13?": "valid_ean13",
    "valid_upca?": "valid_upca",
    "valid_vin?": "valid_vin",
}


def get_checksum_method(name: str) -> Optional[Callable[[str], bool]]:
    """
    Look up a checksum function by name (or alias).

    Args:
        name: Method name, e.g. "valid_vin"

    Returns:
        The function or None if unknown
    """
    if not name:
        return None
    return CHECKSUM_METHODS.get(CHECKSUM_ALIASES.get(name, name))


def list_checksum_methods() -> List[str]:
    """List canonical checksum method names."""
    return sorted(CHECKSUM_METHODS.keys())
