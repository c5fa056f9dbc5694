"""Address normalization helpers (Brazilian CEP / UF conventions)."""

from __future__ import annotations

import math
import re
from typing import Any

_NON_DIGITS = re.compile(r"\D")
POSTAL_CODE_LENGTH = 8


def digits_only(value: Any) -> str:
    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))


def postal_code_digits(value: Any) -> str:
    """Digits of ``value`` truncated to the postal-code length (may be shorter)."""
    return digits_only(value)[:POSTAL_CODE_LENGTH]


def normalize_postal_code(value: Any) -> str | None:
    """Eight-digit postal code or None."""
    digits = postal_code_digits(value)
    return digits if len(digits) == POSTAL_CODE_LENGTH else None


def format_postal_code(value: Any) -> str | None:
    digits = normalize_postal_code(value)
    if not digits:
        return None
    return f"{digits[:5]}-{digits[5:]}"


def build_full_address(
    street: str | None = None,
    number: str | None = None,
    complement: str | None = None,
    neighborhood: str | None = None,
    city: str | None = None,
    region: str | None = None,
    postal_code: str | None = None,
) -> str:
    """Compose the display line, e.g. ``Rua X, 10 | Centro | Sao Paulo - SP | CEP 01001-000``."""
    parts = []
    if street:
        parts.append(f"{street}, {number}" if number else street)
    if complement:
        parts.append(complement)
    if neighborhood:
        parts.append(neighborhood)
    city_region = " - ".join(p for p in (city, region) if p)
    if city_region:
        parts.append(city_region)
    formatted = format_postal_code(postal_code) if postal_code else None
    if formatted:
        parts.append(f"CEP {formatted}")
    return " | ".join(parts)


def to_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""
