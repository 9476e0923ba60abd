import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

_NUMERIC_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")


def parse_float(value: Any) -> float:
    """
    Lenient float parse: uses the longest numeric prefix of the value
    ("72.5kg" -> 72.5) and returns NaN when there is none.
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)

    match = _NUMERIC_PREFIX.match(str(value).lstrip())
    if not match:
        return math.nan
    text = match.group(0)
    if text.endswith("Infinity"):
        return -math.inf if text.startswith("-") else math.inf
    return float(text)


def float_or_zero(value: Any) -> float:
    """parse_float, with NaN mapped to 0."""
    number = parse_float(value)
    if math.isnan(number):
        return 0.0
    return number


def fixed1(value: float) -> str:
    """One decimal place, halves rounded away from zero."""
    if not math.isfinite(value):
        return str(value)
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def round1(value: float) -> float:
    return float(fixed1(value))
