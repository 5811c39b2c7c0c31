"""
Pick Ranking
============

Scores every scanner candidate, assigns a tier and a Kelly hint, and
sorts best-first. Candidates are copied, never mutated.

    score = ev*100*0.7 + edge*100*0.3 + confidence bonus

Python's sort is stable, so candidates with equal scores keep the
scanner's market order.
"""

from dataclasses import replace
from typing import Iterable, List
import logging

from .ev import ValueBetCandidate
from .kelly import DEFAULT_KELLY_FRACTION, kelly_simple

logger = logging.getLogger(__name__)

EV_WEIGHT = 0.7
EDGE_WEIGHT = 0.3

CONFIDENCE_BONUS = {
    "High": 5.0,
    "Medium": 2.0,
}


def score_candidate(candidate: ValueBetCandidate) -> float:
    bonus = CONFIDENCE_BONUS.get(candidate.confidence, 0.0)
    raw = candidate.ev * 100 * EV_WEIGHT + candidate.edge * 100 * EDGE_WEIGHT + bonus
    return round(raw, 2)


def tier_for(candidate: ValueBetCandidate) -> str:
    """S: strong and trusted, A: solid, B: thin, C: marginal."""
    if candidate.ev > 0.10 and candidate.confidence == "High":
        return "S"
    if candidate.ev > 0.05 and candidate.confidence in ("High", "Medium"):
        return "A"
    if candidate.ev > 0.02:
        return "B"
    return "C"


def rank_picks(
    candidates: Iterable[ValueBetCandidate],
    kelly_fraction: float = DEFAULT_KELLY_FRACTION,
) -> List[ValueBetCandidate]:
    """
    Score, tier and sort candidates.

    Args:
        candidates: Scanner output, in scan order
        kelly_fraction: Fraction of full Kelly used for the stake hint

    Returns:
        New candidates with score, tier and kelly set, best first
    """
    ranked = [
        replace(
            c,
            score=score_candidate(c),
            tier=tier_for(c),
            kelly=kelly_simple(c.p_model, c.odds, kelly_fraction),
        )
        for c in candidates
    ]
    ranked.sort(key=lambda c: -c.score)

    if ranked:
        tiers = {t: sum(1 for c in ranked if c.tier == t) for t in "SABC"}
        logger.debug(f"Ranked {len(ranked)} candidates: {tiers}")
    return ranked
