"""
Tests for models.poisson.rates: rate cascade and clamping
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from valueplay.data.schemas import MatchRecord
from valueplay.models.poisson.rates import (
    DEFAULT_LAMBDA_AWAY,
    DEFAULT_LAMBDA_HOME,
    estimate_rates,
)


def _record(**kwargs) -> MatchRecord:
    return MatchRecord.model_validate({"match_id": "m1", **kwargs})


class TestGoalCascade:
    """First satisfied rule wins."""

    def test_signal_xg(self):
        rates = estimate_rates(_record(signals={"xg": {"home": 1.8, "away": 0.9}}))
        assert rates.source == "xg_signal"
        assert rates.lambda_home == pytest.approx(1.8)
        assert rates.lambda_away == pytest.approx(0.9)

    def test_signal_xg_needs_both_sides(self):
        record = _record(
            signals={"xg": {"home": 1.8, "away": 0.05}},
            context={"team_a_xg_prematch": 1.4, "team_b_xg_prematch": 1.2},
        )
        rates = estimate_rates(record)
        assert rates.source == "context_xg"
        assert (rates.lambda_home, rates.lambda_away) == pytest.approx((1.4, 1.2))

    def test_context_xg_missing_away_uses_default(self):
        rates = estimate_rates(_record(context={"team_a_xg_prematch": 1.4}))
        assert rates.source == "context_xg"
        assert rates.lambda_away == pytest.approx(DEFAULT_LAMBDA_AWAY)

    def test_signal_ppg_heuristic(self):
        rates = estimate_rates(_record(signals={"ppg": {"home": 2.0, "away": 0.4}}))
        assert rates.source == "ppg_signal_heuristic"
        assert rates.lambda_home == pytest.approx(1.6)
        # 0.4 * 0.8 = 0.32 floored at 0.5
        assert rates.lambda_away == pytest.approx(0.5)

    def test_signal_ppg_missing_away(self):
        rates = estimate_rates(_record(signals={"ppg": {"home": 1.5}}))
        assert rates.source == "ppg_signal_heuristic"
        assert rates.lambda_away == pytest.approx(0.5)

    def test_context_ppg_heuristic(self):
        rates = estimate_rates(_record(context={"home_ppg": 2.5, "away_ppg": 1.25}))
        assert rates.source == "context_ppg_heuristic"
        assert (rates.lambda_home, rates.lambda_away) == pytest.approx((2.0, 1.0))

    def test_league_average_fallback(self):
        rates = estimate_rates(_record())
        assert rates.source == "league_avg_fallback"
        assert rates.lambda_home == pytest.approx(DEFAULT_LAMBDA_HOME)
        assert rates.lambda_away == pytest.approx(DEFAULT_LAMBDA_AWAY)


class TestClamping:

    def test_goal_lambdas_clamped(self):
        rates = estimate_rates(_record(signals={"xg": {"home": 7.3, "away": 0.11}}))
        assert rates.lambda_home == pytest.approx(4.5)
        assert rates.lambda_away == pytest.approx(0.11)

    def test_corner_lambdas_clamped(self):
        record = _record(signals={"corners": {
            "home_for": 20.0, "away_against": 18.0,
            "away_for": 0.2, "home_against": 0.4,
        }})
        rates = estimate_rates(record)
        assert rates.corner_lambda_home == pytest.approx(12.0)
        assert rates.corner_lambda_away == pytest.approx(1.0)


class TestCorners:

    def test_averages_for_and_against(self):
        record = _record(signals={"corners": {
            "home_for": 6.0, "away_against": 5.0,
            "away_for": 4.0, "home_against": 3.0,
        }})
        rates = estimate_rates(record)
        assert rates.corner_lambda_home == pytest.approx(5.5)
        assert rates.corner_lambda_away == pytest.approx(3.5)

    def test_missing_inputs_default(self):
        rates = estimate_rates(_record(signals={"corners": {"home_for": 6.5}}))
        assert rates.corner_lambda_home == pytest.approx(5.5)
        assert rates.corner_lambda_away == pytest.approx(4.5)

    def test_to_dict_shape(self):
        d = estimate_rates(_record()).to_dict()
        assert d == {
            "goals": {"home": 1.35, "away": 1.1},
            "corners": {"home": 4.5, "away": 4.5},
            "source": "league_avg_fallback",
        }
