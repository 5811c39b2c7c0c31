"""
Tests for strategy.kelly: Kelly stake hints
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from valueplay.strategy.kelly import kelly_formula, kelly_simple


class TestKellyFormula:
    """Test the core Kelly formula: f* = (b*p - q) / b."""

    def test_positive_edge(self):
        # 60% chance at 2.0 (even money): f = (1*0.6 - 0.4) / 1 = 0.2
        assert kelly_formula(0.60, 2.0) == pytest.approx(0.2)

    def test_no_edge(self):
        assert kelly_formula(0.50, 2.0) == pytest.approx(0.0)

    def test_negative_edge(self):
        # 30% at 2.0 → f = -0.4 → clamped to 0
        assert kelly_formula(0.30, 2.0) == 0.0

    def test_high_odds(self):
        # 15% at 10.0: f = (9*0.15 - 0.85) / 9 ≈ 0.0556
        assert kelly_formula(0.15, 10.0) == pytest.approx(0.0556, abs=0.001)

    def test_edge_cases(self):
        assert kelly_formula(0.0, 2.0) == 0.0
        assert kelly_formula(1.0, 2.0) == 0.0
        assert kelly_formula(0.5, 1.0) == 0.0
        assert kelly_formula(0.5, 0.5) == 0.0


class TestKellySimple:

    def test_default_quarter_kelly(self):
        assert kelly_simple(0.60, 2.0) == pytest.approx(0.05)

    def test_custom_fraction(self):
        assert kelly_simple(0.60, 2.0, fraction=0.5) == pytest.approx(0.1)

    def test_zero_for_negative_edge(self):
        assert kelly_simple(0.30, 2.0) == 0.0

    def test_negative_fraction_rejected(self):
        with pytest.raises(ValueError):
            kelly_simple(0.6, 2.0, fraction=-0.1)
