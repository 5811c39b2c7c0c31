"""
Goals Matrix Utilities
======================
Score probability matrices from two independent Poisson rates.
"""

import math
import numpy as np
from typing import List, Optional, Tuple

MIN_MAX_GOALS = 9
TAIL_STD_DEVS = 5

# Grown on demand by _factorial(); entries are exact integers.
_FACTORIALS: List[int] = [1, 1, 2, 6, 24, 120, 720, 5040, 40320, 362880, 3628800]


def _factorial(n: int) -> int:
    if n < 0:
        return 1
    while len(_FACTORIALS) <= n:
        _FACTORIALS.append(_FACTORIALS[-1] * len(_FACTORIALS))
    return _FACTORIALS[n]


def poisson_pmf(k: int, lam: float) -> float:
    """P(X = k) for X ~ Poisson(lam)."""
    return (lam ** k) * math.exp(-lam) / _factorial(k)


def matrix_size(lambda_home: float, lambda_away: float, hard_max: Optional[int] = None) -> int:
    """
    Largest goal count per axis.

    Sized so the untruncated tail (beyond mean + 5 std devs of the total)
    is negligible; ``hard_max`` overrides the calculation.
    """
    if hard_max is not None:
        return hard_max
    mean = lambda_home + lambda_away
    calc_max = math.ceil(mean + TAIL_STD_DEVS * math.sqrt(mean))
    return max(MIN_MAX_GOALS, calc_max)


class GoalsMatrix:
    """
    Utilities for working with score probability matrices.

    A score matrix M[i,j] represents P(home_goals=i, away_goals=j).
    """

    @staticmethod
    def from_lambdas(
        lambda_home: float,
        lambda_away: float,
        hard_max: Optional[int] = None,
    ) -> np.ndarray:
        """
        Generate score probability matrix from expected goals.

        Args:
            lambda_home: Expected goals (or corners) for home team
            lambda_away: Expected goals (or corners) for away team
            hard_max: Fixed maximum count per side (half-time matrices use 5)

        Returns:
            (max_goals+1, max_goals+1) probability matrix
        """
        max_goals = matrix_size(lambda_home, lambda_away, hard_max)
        n = max_goals + 1

        p_home = [poisson_pmf(i, lambda_home) for i in range(n)]
        p_away = [poisson_pmf(j, lambda_away) for j in range(n)]

        matrix = np.zeros((n, n))
        total = 0.0
        for i in range(n):
            for j in range(n):
                prob = p_home[i] * p_away[j]
                matrix[i, j] = prob
                total += prob

        # Renormalize for truncation loss
        if 0 < total < 1:
            matrix /= total
        return matrix

    @staticmethod
    def top_scores(
        matrix: np.ndarray,
        n: int = 5
    ) -> List[Tuple[str, float]]:
        """
        Get top N most likely correct scores.

        Returns:
            List of (score_string, probability) sorted by probability
        """
        scores = []
        for i in range(matrix.shape[0]):
            for j in range(matrix.shape[1]):
                scores.append((f"{i}-{j}", float(matrix[i, j])))

        scores.sort(key=lambda x: -x[1])
        return scores[:n]


def build_score_matrix(
    lambda_home: float,
    lambda_away: float,
    hard_max: Optional[int] = None,
) -> np.ndarray:
    """Standalone alias for GoalsMatrix.from_lambdas."""
    return GoalsMatrix.from_lambdas(lambda_home, lambda_away, hard_max)
