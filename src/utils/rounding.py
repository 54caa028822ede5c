from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal]


def round_half_up(value: Number, places: int = 0) -> Decimal:
    """
    Round with halves going away from zero (2.5 -> 3, 0.125 -> 0.13).

    Floats are converted through `repr` so 0.125 rounds as written
    rather than as its binary approximation.
    """
    if isinstance(value, float):
        value = Decimal(repr(value))
    else:
        value = Decimal(value)
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def score_percentage(score: int, max_score: int, places: int = 2) -> Decimal:
    """Percentage of max_score achieved, 0 when nothing could be scored."""
    if max_score <= 0:
        return Decimal(0).quantize(Decimal(1).scaleb(-places))
    return round_half_up(Decimal(score) * 100 / Decimal(max_score), places)
