from __future__ import annotations

import re

CODE_PATTERN = re.compile(r"^([A-Z]{2}|[A-Z]{3}|\d{3})$", re.ASCII)
ALPHA2_PATTERN = re.compile(r"^[A-Z]{2}$")
ALPHA3_PATTERN = re.compile(r"^[A-Z]{3}$")
NUMERIC_PATTERN = re.compile(r"^\d{3}$", re.ASCII)


def is_valid_code(code: str) -> bool:
    return bool(CODE_PATTERN.fullmatch(code or ""))


def code_column(code: str) -> str | None:
    """
    Column a lookup code selects, or None when the shape matches no column.

    Digits are checked before length: "643" is a numeric code, not alpha-3.
    """
    if not code:
        return None
    if code.isascii() and code.isdigit():
        return "iso_numeric"
    if len(code) == 2:
        return "iso_alpha2"
    if len(code) == 3:
        return "iso_alpha3"
    return None
