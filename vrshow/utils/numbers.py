"""Numeric coercion shared by the pipeline services and the blueprints.

Free of Flask/SQLAlchemy imports so the pure services can use it.
"""

import math


def to_number(value, default: float = 0.0) -> float:
    """Coerce a form value to float.

    Anything that does not parse (None, "", "abc", NaN, inf) becomes
    ``default`` so a half-filled form never raises.
    """
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity (2.5 → 3, -2.5 → -2)."""
    return math.floor(value + 0.5)


def format_number(value) -> str:
    """Render 5.0 as "5" and 2.5 as "2.5"."""
    number = to_number(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
