"""
Rate Estimation
===============

Turns whatever pre-match signal a record carries into Poisson rates:
two goal lambdas (one per side) and two corner lambdas.

Goal lambdas come from an ordered cascade of rules; the first rule whose
predicate holds wins and its label is recorded as the estimate's source.
Corner lambdas are always an average of "for" and "against" rates.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import logging

from valueplay.data.schemas import MatchRecord

logger = logging.getLogger(__name__)

DEFAULT_LAMBDA_HOME = 1.35
DEFAULT_LAMBDA_AWAY = 1.10
DEFAULT_CORNERS = 4.5

MIN_XG_SIGNAL = 0.1
PPG_TO_GOALS = 0.8
MIN_PPG_LAMBDA = 0.5

GOAL_LAMBDA_RANGE = (0.1, 4.5)
CORNER_LAMBDA_RANGE = (1.0, 12.0)


@dataclass(frozen=True)
class RateEstimate:
    """Poisson rates for one match."""
    lambda_home: float
    lambda_away: float
    corner_lambda_home: float
    corner_lambda_away: float
    source: str

    def to_dict(self) -> dict:
        return {
            "goals": {
                "home": round(self.lambda_home, 2),
                "away": round(self.lambda_away, 2),
            },
            "corners": {
                "home": round(self.corner_lambda_home, 2),
                "away": round(self.corner_lambda_away, 2),
            },
            "source": self.source,
        }


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _or_zero(v: Optional[float]) -> float:
    """Missing signals count as zero."""
    return v if v is not None else 0.0


def _ppg_lambda(ppg: Optional[float]) -> float:
    return max(MIN_PPG_LAMBDA, _or_zero(ppg) * PPG_TO_GOALS)


# --- cascade rules -------------------------------------------------------

def _has_signal_xg(record: MatchRecord) -> bool:
    xg = record.signals.xg
    return _or_zero(xg.home) > MIN_XG_SIGNAL and _or_zero(xg.away) > MIN_XG_SIGNAL


def _signal_xg(record: MatchRecord) -> Tuple[float, float]:
    return record.signals.xg.home, record.signals.xg.away


def _has_context_xg(record: MatchRecord) -> bool:
    return record.context is not None and _or_zero(record.context.team_a_xg_prematch) > MIN_XG_SIGNAL


def _context_xg(record: MatchRecord) -> Tuple[float, float]:
    away = _or_zero(record.context.team_b_xg_prematch)
    return record.context.team_a_xg_prematch, away if away > 0 else DEFAULT_LAMBDA_AWAY


def _has_signal_ppg(record: MatchRecord) -> bool:
    return _or_zero(record.signals.ppg.home) > 0


def _signal_ppg(record: MatchRecord) -> Tuple[float, float]:
    ppg = record.signals.ppg
    return _ppg_lambda(ppg.home), _ppg_lambda(ppg.away)


def _has_context_ppg(record: MatchRecord) -> bool:
    return record.context is not None and _or_zero(record.context.home_ppg) > 0


def _context_ppg(record: MatchRecord) -> Tuple[float, float]:
    return _ppg_lambda(record.context.home_ppg), _ppg_lambda(record.context.away_ppg)


def _league_average(record: MatchRecord) -> Tuple[float, float]:
    return DEFAULT_LAMBDA_HOME, DEFAULT_LAMBDA_AWAY


Rule = Tuple[Callable[[MatchRecord], bool], Callable[[MatchRecord], Tuple[float, float]], str]

# Order matters: first satisfied rule wins.
GOAL_RATE_RULES: List[Rule] = [
    (_has_signal_xg, _signal_xg, "xg_signal"),
    (_has_context_xg, _context_xg, "context_xg"),
    (_has_signal_ppg, _signal_ppg, "ppg_signal_heuristic"),
    (_has_context_ppg, _context_ppg, "context_ppg_heuristic"),
    (lambda record: True, _league_average, "league_avg_fallback"),
]


def estimate_goal_lambdas(record: MatchRecord) -> Tuple[float, float, str]:
    """Run the cascade and clamp the winner."""
    for predicate, estimator, source in GOAL_RATE_RULES:
        if predicate(record):
            home, away = estimator(record)
            break

    lo, hi = GOAL_LAMBDA_RANGE
    return clamp(home, lo, hi), clamp(away, lo, hi), source


def estimate_corner_lambdas(record: MatchRecord) -> Tuple[float, float]:
    c = record.signals.corners

    def _or_default(v: Optional[float]) -> float:
        return DEFAULT_CORNERS if v is None else v

    home = (_or_default(c.home_for) + _or_default(c.away_against)) / 2
    away = (_or_default(c.away_for) + _or_default(c.home_against)) / 2

    lo, hi = CORNER_LAMBDA_RANGE
    return clamp(home, lo, hi), clamp(away, lo, hi)


def estimate_rates(record: MatchRecord) -> RateEstimate:
    """
    Estimate all four rates for a match.

    Never raises: the cascade always terminates at the league-average
    fallback, and every rate is clamped regardless of its source.
    """
    lambda_home, lambda_away, source = estimate_goal_lambdas(record)
    corner_home, corner_away = estimate_corner_lambdas(record)

    if source == "league_avg_fallback":
        logger.debug(f"{record.match_id}: no rate signal, using league averages")

    return RateEstimate(
        lambda_home=lambda_home,
        lambda_away=lambda_away,
        corner_lambda_home=corner_home,
        corner_lambda_away=corner_away,
        source=source,
    )
