"""Small numeric helpers shared across the analysis chain."""

import math


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value to the closed range [lower, upper]."""
    return min(upper, max(lower, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity.

    Python's round() uses banker's rounding, which would shift MIDI ticks
    and velocities on exact .5 values.
    """
    return int(math.floor(value + 0.5))
