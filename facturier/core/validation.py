"""French business identifier checks (SIRET, SIREN)."""

import re

_SIRET_RE = re.compile(r"[0-9]{14}")
_SIREN_RE = re.compile(r"[0-9]{9}")


def _luhn_sum(digits: str, double_even_positions: bool) -> int:
    total = 0
    for i, char in enumerate(digits):
        digit = int(char)
        if (i % 2 == 0) == double_even_positions:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total


def is_valid_siret(siret: str) -> bool:
    """Return True for a 14-digit SIRET whose Luhn checksum is valid."""
    if not _SIRET_RE.fullmatch(siret):
        return False
    return _luhn_sum(siret, double_even_positions=True) % 10 == 0


def is_valid_siren(siren: str) -> bool:
    """Return True for a 9-digit SIREN whose Luhn checksum is valid."""
    if not _SIREN_RE.fullmatch(siren):
        return False
    return _luhn_sum(siren, double_even_positions=False) % 10 == 0


def normalize_siret(value: str) -> str:
    """Strip the spaces users type between SIRET digit groups."""
    return value.replace(" ", "").strip()
