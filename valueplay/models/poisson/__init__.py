"""Poisson subpackage for VALUEPLAY models."""

from .rates import RateEstimate, estimate_rates
from .goals_matrix import GoalsMatrix, build_score_matrix, poisson_pmf
from .markets import derive_markets, derive_corner_markets, line_key

__all__ = [
    "RateEstimate",
    "estimate_rates",
    "GoalsMatrix",
    "build_score_matrix",
    "poisson_pmf",
    "derive_markets",
    "derive_corner_markets",
    "line_key",
]
