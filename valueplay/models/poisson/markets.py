"""
Market Derivation
=================

Collapses a score matrix into named market probabilities in one pass.

Every market is keyed "{prefix}_{market}" so full-time, first-half and
second-half markets can live side by side in one dict:

    ft_1x2           {"home", "draw", "away"}
    ft_btts          {"yes", "no"}
    ft_clean_sheet   {"home", "away"}
    ft_win_to_nil    {"home", "away"}
    ft_goals         {"2.5": {"over", "under"}, ...}
    ft_double_chance {"1x", "12", "x2"}

Double chance is summed from the 1X2 legs after the pass, never
accumulated on its own, so the two can not disagree.
"""

from typing import Dict, Sequence
import numpy as np

FT_GOAL_LINES = (0.5, 1.5, 2.5, 3.5, 4.5)
HALF_GOAL_LINES = (0.5, 1.5, 2.5, 3.5)
CORNER_LINES = (7.5, 8.5, 9.5, 10.5, 11.5)

GOAL_LINES_BY_PREFIX = {
    "ft": FT_GOAL_LINES,
    "ht": HALF_GOAL_LINES,
    "2h": HALF_GOAL_LINES,
}

MarketProbs = Dict[str, float]
Markets = Dict[str, dict]


def line_key(line: float) -> str:
    """Render a line the way odds keys spell it: 2.5 -> "2.5"."""
    return f"{line:g}"


def _totals_market(lines: Sequence[float]) -> Dict[str, MarketProbs]:
    return {line_key(L): {"over": 0.0, "under": 0.0} for L in lines}


def _accumulate_totals(totals: Dict[str, MarketProbs], lines: Sequence[float], total: int, p: float):
    for L in lines:
        side = "over" if total > L else "under"
        totals[line_key(L)][side] += p


def derive_markets(matrix: np.ndarray, prefix: str = "ft") -> Markets:
    """
    Derive goal markets for one time scope.

    Args:
        matrix: Score probability matrix
        prefix: "ft", "ht" or "2h"

    Returns:
        Dict of market name -> selection probabilities
    """
    lines = GOAL_LINES_BY_PREFIX.get(prefix, FT_GOAL_LINES)

    result = {"home": 0.0, "draw": 0.0, "away": 0.0}
    btts = {"yes": 0.0, "no": 0.0}
    clean_sheet = {"home": 0.0, "away": 0.0}
    win_to_nil = {"home": 0.0, "away": 0.0}
    goals = _totals_market(lines)

    n_home, n_away = matrix.shape
    for h in range(n_home):
        for a in range(n_away):
            p = float(matrix[h, a])

            if h > a:
                result["home"] += p
                if a == 0:
                    win_to_nil["home"] += p
            elif a > h:
                result["away"] += p
                if h == 0:
                    win_to_nil["away"] += p
            else:
                result["draw"] += p

            if h > 0 and a > 0:
                btts["yes"] += p
            else:
                btts["no"] += p

            if a == 0:
                clean_sheet["home"] += p
            if h == 0:
                clean_sheet["away"] += p

            _accumulate_totals(goals, lines, h + a, p)

    double_chance = {
        "1x": result["home"] + result["draw"],
        "12": result["home"] + result["away"],
        "x2": result["draw"] + result["away"],
    }

    return {
        f"{prefix}_1x2": result,
        f"{prefix}_btts": btts,
        f"{prefix}_goals": goals,
        f"{prefix}_clean_sheet": clean_sheet,
        f"{prefix}_win_to_nil": win_to_nil,
        f"{prefix}_double_chance": double_chance,
    }


def derive_corner_markets(matrix: np.ndarray) -> Markets:
    """Corner 1X2 and total-corner lines from a corner-count matrix."""
    result = {"home": 0.0, "draw": 0.0, "away": 0.0}
    totals = _totals_market(CORNER_LINES)

    n_home, n_away = matrix.shape
    for h in range(n_home):
        for a in range(n_away):
            p = float(matrix[h, a])
            if h > a:
                result["home"] += p
            elif a > h:
                result["away"] += p
            else:
                result["draw"] += p
            _accumulate_totals(totals, CORNER_LINES, h + a, p)

    return {
        "corners_1x2": result,
        "corners_ou": totals,
    }
