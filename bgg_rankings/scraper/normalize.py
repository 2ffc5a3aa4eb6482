"""
Normalization of raw text tokens scraped from BGG pages into numbers.

Every helper here returns ``None`` for anything it cannot read. ``None`` is
the missing marker throughout the package; zero is always a real value.
"""

import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional, Union

Number = Union[int, float]

MISSING_TOKENS = {"", "-", "–"}
# Plain ASCII decimal notation only; no underscores or other scripts' digits
NUMBER_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def _clean(text: Any) -> str:
    return "".join(str(text).replace(",", "").split())


def normalize_number(text: Any) -> Optional[Number]:
    """
    Convert a token like ``"1,234"`` or ``" 7.81 "`` into a number.

    Thousands separators and whitespace are removed. Empty text and a lone
    dash or en-dash are missing. Integral tokens come back as ``int``.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return text if math.isfinite(text) else None

    cleaned = _clean(text)
    if cleaned in MISSING_TOKENS or not NUMBER_PATTERN.fullmatch(cleaned):
        return None
    try:
        return int(cleaned)
    except ValueError:
        pass
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def round_to(value: Optional[Number], places: int) -> Optional[float]:
    """Round half away from zero at ``places`` decimals."""
    if value is None:
        return None
    try:
        exact = Decimal(repr(value))
    except (InvalidOperation, ValueError):
        return None
    if not exact.is_finite():
        return None
    with localcontext() as ctx:
        # Enough digits for the integer part plus the kept decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        quantum = Decimal(1).scaleb(-places)
        rounded = float(exact.quantize(quantum, rounding=ROUND_HALF_UP))
    return rounded if math.isfinite(rounded) else None


def coerce_int(value: Any) -> Optional[int]:
    """Read an integer from a JSON value or text, truncating toward zero."""
    number = normalize_number(value)
    if number is None:
        return None
    return int(number)


def coerce_float(value: Any, places: Optional[int] = None) -> Optional[float]:
    """Read a float from a JSON value or text, optionally rounded."""
    number = normalize_number(value)
    if number is None:
        return None
    if places is None:
        return float(number)
    return round_to(number, places)
