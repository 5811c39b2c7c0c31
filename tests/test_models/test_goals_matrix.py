"""
Tests for models.poisson.goals_matrix: score probability matrices
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import math

import pytest
from valueplay.models.poisson.goals_matrix import (
    GoalsMatrix,
    build_score_matrix,
    matrix_size,
    poisson_pmf,
)


class TestPoissonPmf:

    def test_zero_goals(self):
        assert poisson_pmf(0, 1.5) == pytest.approx(math.exp(-1.5))

    def test_matches_closed_form(self):
        # P(X=3 | 2.0) = 2^3 e^-2 / 6
        assert poisson_pmf(3, 2.0) == pytest.approx(8 * math.exp(-2.0) / 6)

    def test_factorial_table_grows(self):
        # k beyond the seeded table still evaluates
        expected = (1.0 ** 15) * math.exp(-1.0) / math.factorial(15)
        assert poisson_pmf(15, 1.0) == pytest.approx(expected)


class TestMatrixSize:

    def test_floor_of_nine(self):
        assert matrix_size(0.5, 0.5) == 9

    def test_grows_with_mean(self):
        # mean 9 -> ceil(9 + 5*3) = 24
        assert matrix_size(4.5, 4.5) == 24

    def test_hard_max_overrides(self):
        assert matrix_size(4.5, 4.5, hard_max=5) == 5


class TestFromLambdas:

    @pytest.mark.parametrize("lh,la", [(1.35, 1.10), (0.1, 0.1), (4.5, 0.3), (6.0, 5.5)])
    def test_sums_to_one(self, lh, la):
        matrix = build_score_matrix(lh, la)
        assert matrix.sum() == pytest.approx(1.0, abs=1e-6)

    def test_half_matrix_shape_and_sum(self):
        matrix = build_score_matrix(1.35 * 0.45, 1.10 * 0.45, hard_max=5)
        assert matrix.shape == (6, 6)
        assert matrix.sum() == pytest.approx(1.0, abs=1e-6)

    def test_cells_are_independent_product(self):
        matrix = GoalsMatrix.from_lambdas(1.2, 0.8)
        total = sum(poisson_pmf(i, 1.2) * poisson_pmf(j, 0.8)
                    for i in range(matrix.shape[0]) for j in range(matrix.shape[1]))
        assert matrix[1, 0] == pytest.approx(poisson_pmf(1, 1.2) * poisson_pmf(0, 0.8) / total)

    def test_default_lambdas_favour_home(self):
        matrix = build_score_matrix(1.35, 1.10)
        n = matrix.shape[0]
        home = sum(matrix[i, j] for i in range(n) for j in range(n) if i > j)
        away = sum(matrix[i, j] for i in range(n) for j in range(n) if j > i)
        assert home > away


class TestHelpers:

    def test_top_scores_sorted(self):
        matrix = build_score_matrix(1.35, 1.10)
        top = GoalsMatrix.top_scores(matrix, n=5)
        assert len(top) == 5
        probs = [p for _, p in top]
        assert probs == sorted(probs, reverse=True)
        assert top[0][0] == "1-1"
