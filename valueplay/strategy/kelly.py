"""
Kelly Stake Hints
=================

Fractional Kelly sizing attached to ranked picks. These are hints only:
no bankroll, exposure or drawdown tracking happens here.
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_KELLY_FRACTION = 0.25


def kelly_formula(prob: float, odds: float) -> float:
    """
    Calculate full Kelly fraction.

    Formula: f* = (b*p - q) / b
    where b = odds - 1, p = prob, q = 1 - p

    Returns:
        Fraction of bankroll to bet, floored at 0
    """
    if prob <= 0 or prob >= 1 or odds <= 1:
        return 0.0

    b = odds - 1
    p = prob
    q = 1 - p

    kelly = (b * p - q) / b

    return max(0.0, kelly)


def kelly_simple(prob: float, odds: float, fraction: float = DEFAULT_KELLY_FRACTION) -> float:
    """Fractional Kelly stake (standalone)."""
    if fraction < 0:
        raise ValueError(f"kelly fraction must be non-negative, got {fraction}")
    return kelly_formula(prob, odds) * fraction
