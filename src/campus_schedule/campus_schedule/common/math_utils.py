from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (built-in round() is banker's rounding)."""
    return int(math.floor(value + 0.5))
