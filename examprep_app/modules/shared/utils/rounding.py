"""Integer rounding helpers. Halves round up; an empty denominator yields 0."""


def round_half_up(numerator: int, denominator: int) -> int:
    """``round(numerator / denominator)`` on non-negative integers without float error."""
    if denominator <= 0:
        return 0
    return (2 * numerator + denominator) // (2 * denominator)


def percentage(numerator: int, denominator: int) -> int:
    """Integer percentage ``round(100 * numerator / denominator)``."""
    return round_half_up(100 * numerator, denominator)
