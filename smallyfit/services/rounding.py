"""Half-up rounding (2642.5 -> 2643), unlike Python's banker's ``round``."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round ``value`` to ``ndigits`` decimals, ties away from zero.

    Goes through ``str`` so binary float noise (e.g. 5.4000000000000004)
    doesn't push a value across a tie.
    """
    exp = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP))


def round_int(value: float) -> int:
    return int(round_half_up(value, 0))
