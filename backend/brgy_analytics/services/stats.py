"""
Numeric helpers shared by the aggregators.

Every helper returns a finite number; degenerate input (empty sequences,
zero denominators, NaN) yields 0.
"""

import math
from typing import Iterable, Optional, Union

import numpy as np

Numeric = Union[int, float]


def finite(value: Optional[Numeric], default: Numeric = 0) -> Numeric:
    """Return `value` if it is a finite number, else `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return value if np.isfinite(value) else default
    except TypeError:
        return default


def round_half_up(value: Optional[Numeric], digits: int = 0) -> Numeric:
    """
    Round halves away from zero (2.5 -> 3, -2.5 -> -3).

    Python's round() uses banker's rounding; dashboard figures are expected
    to round the way people do by hand.
    """
    value = finite(value)
    factor = 10 ** digits
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    rounded = math.copysign(rounded, value) if value else 0.0
    return int(rounded) if digits == 0 else rounded


def safe_div(numerator: Optional[Numeric], denominator: Optional[Numeric]) -> float:
    denominator = finite(denominator)
    if not denominator:
        return 0.0
    return float(finite(finite(numerator) / denominator))


def percent(part: Optional[Numeric], whole: Optional[Numeric]) -> int:
    """round(part / whole * 100), 0 when whole is 0."""
    return round_half_up(safe_div(part, whole) * 100)


def mean(values: Iterable[Numeric]) -> float:
    items = [v for v in values if finite(v, None) is not None]
    if not items:
        return 0.0
    return float(finite(float(np.mean(items))))


def positive(values: Iterable[Optional[Numeric]]) -> list:
    """Strictly positive finite values, in input order."""
    return [v for v in values if finite(v, 0) > 0]
