"""
Combo Board
===========

Multi-day parlay board with three buckets, built in order:

    safe      2-3 legs, total odds  2-3
    balanced  2-3 legs, total odds  3-5
    booster   3-4 legs, total odds  8-30

Each bucket is the best-scoring combination found by a bounded
depth-first search. A match used by one bucket is not offered to the
buckets after it.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from .picks import Pick

logger = logging.getLogger(__name__)

SEARCH_WIDTH = 15


@dataclass(frozen=True)
class ScoreWeights:
    prob: float
    conf: float
    ev: float
    odds: float


@dataclass(frozen=True)
class BucketConfig:
    legs_allowed: Tuple[int, ...]
    total_odds: Tuple[float, float]
    leg_odds: Tuple[float, float]
    p_model_min: float
    confidence_min: float
    ev_min: float
    max_pool_considered: int
    weights: ScoreWeights


def _default_buckets() -> Dict[str, BucketConfig]:
    return {
        "safe": BucketConfig(
            legs_allowed=(2, 3),
            total_odds=(2.00, 3.00),
            leg_odds=(1.30, 2.10),
            p_model_min=0.62,
            confidence_min=70,
            ev_min=0.01,
            max_pool_considered=28,
            weights=ScoreWeights(prob=10000, conf=100, ev=10, odds=1.0),
        ),
        "balanced": BucketConfig(
            legs_allowed=(2, 3),
            total_odds=(3.00, 5.00),
            leg_odds=(1.45, 2.50),
            p_model_min=0.54,
            confidence_min=65,
            ev_min=0.02,
            max_pool_considered=35,
            weights=ScoreWeights(prob=10000, conf=90, ev=12, odds=0.9),
        ),
        "booster": BucketConfig(
            legs_allowed=(3, 4),
            total_odds=(8.00, 30.00),
            leg_odds=(1.70, 3.20),
            p_model_min=0.45,
            confidence_min=60,
            ev_min=0.03,
            max_pool_considered=45,
            weights=ScoreWeights(prob=9000, conf=80, ev=20, odds=0.6),
        ),
    }


@dataclass
class ComboBoardConfig:
    # Pool filter
    min_odds: float = 1.25
    max_odds: float = 3.50
    min_confidence: float = 58
    min_p_model: float = 0.44
    min_ev: float = 0.0

    # Diversity
    max_same_family: int = 2
    same_family_penalty: float = 0.97

    # Dicts keep insertion order: buckets are built in this order
    buckets: Dict[str, BucketConfig] = field(default_factory=_default_buckets)


@dataclass(frozen=True)
class BoardCombo:
    legs: Tuple[Pick, ...]
    total_odds: float
    score: float


def _in_window(pick: Pick, window_start: str, window_end: str) -> bool:
    if not pick.date_iso:
        return False
    return window_start <= pick.day <= window_end


def passes_pool_filter(pick: Pick, config: ComboBoardConfig) -> bool:
    if pick.odds < config.min_odds or pick.odds > config.max_odds:
        return False
    if pick.p_model < config.min_p_model:
        return False
    if pick.confidence_score < config.min_confidence:
        return False
    return pick.ev >= config.min_ev


def _match_id_key(match_id: str) -> Tuple[int, int, str]:
    """Numeric ids sort numerically and ahead of non-numeric ones."""
    try:
        return (0, int(match_id), match_id)
    except ValueError:
        return (1, 0, match_id)


def _preference(pick: Pick) -> Tuple[float, float, float, float]:
    return (pick.p_model, pick.confidence_score, pick.sort_score, pick.ev)


def best_per_match(picks: Iterable[Pick]) -> List[Pick]:
    """
    One pick per match, preferring higher p_model, then confidence,
    sort score and EV. Sorted the same way, then by match_id (numeric
    ids compared as numbers).
    """
    best: Dict[str, Pick] = {}
    for pick in picks:
        current = best.get(pick.match_id)
        if current is None or _preference(pick) > _preference(current):
            best[pick.match_id] = pick

    pool = list(best.values())
    pool.sort(key=lambda p: (-p.p_model, -p.confidence_score, -p.sort_score, -p.ev, _match_id_key(p.match_id)))
    return pool


def combo_score(legs: Sequence[Pick], total_odds: float, weights: ScoreWeights, penalty: float) -> float:
    """
    prob_w * P(all legs) * penalty^overlaps + conf_w * weakest confidence
    + ev_w * summed EV - odds_w * total odds
    """
    joint_prob = 1.0
    for leg in legs:
        joint_prob *= leg.p_model
    min_conf = min(100.0, min(leg.confidence_score for leg in legs))
    sum_ev = sum(leg.ev for leg in legs)

    overlaps = len(legs) - len({leg.market_family for leg in legs})
    joint_prob *= penalty ** overlaps

    return (
        joint_prob * weights.prob
        + min_conf * weights.conf
        + sum_ev * weights.ev
        - total_odds * weights.odds
    )


def find_best_combo(
    pool: Sequence[Pick],
    target_legs: int,
    bucket: BucketConfig,
    config: ComboBoardConfig,
) -> Optional[BoardCombo]:
    """Depth-first search for the highest-scoring combination of target_legs picks."""
    min_total, max_total = bucket.total_odds
    best: Optional[BoardCombo] = None

    def search(start: int, legs: List[Pick], odds: float, families: Dict[str, int]):
        nonlocal best
        if len(legs) == target_legs:
            if min_total <= odds <= max_total:
                score = combo_score(legs, odds, bucket.weights, config.same_family_penalty)
                if best is None or score > best.score:
                    best = BoardCombo(legs=tuple(legs), total_odds=odds, score=score)
            return

        for i in range(start, min(len(pool), start + SEARCH_WIDTH)):
            leg = pool[i]
            new_odds = odds * leg.odds
            if new_odds > max_total:
                continue

            family = leg.market_family or "unknown"
            count = families.get(family, 0)
            if count >= config.max_same_family:
                continue

            search(i + 1, legs + [leg], new_odds, {**families, family: count + 1})

    search(0, [], 1.0, {})
    return best


def _bucket_candidates(pool: Sequence[Pick], bucket: BucketConfig, used: set) -> List[Pick]:
    lo, hi = bucket.leg_odds
    candidates = [
        p for p in pool
        if p.match_id not in used
        and lo <= p.odds <= hi
        and p.p_model >= bucket.p_model_min
        and p.confidence_score >= bucket.confidence_min
        and p.ev >= bucket.ev_min
    ]
    return candidates[:bucket.max_pool_considered]


def default_window(picks: Iterable[Pick]) -> Tuple[Optional[str], Optional[str]]:
    """First and last kickoff day found among dated picks."""
    days = sorted(p.day for p in picks if p.date_iso)
    if not days:
        return None, None
    return days[0], days[-1]


def generate_combo_board(
    picks: Sequence[Pick],
    window_start: Optional[str] = None,
    window_end: Optional[str] = None,
    config: Optional[ComboBoardConfig] = None,
) -> dict:
    """
    Build the safe / balanced / booster board for a window of days.

    Args:
        picks: Flattened picks across all days
        window_start: First day (YYYY-MM-DD), defaults to the earliest pick
        window_end: Last day (YYYY-MM-DD), defaults to the latest pick
        config: Pool filter, diversity and bucket settings

    Returns:
        {meta: {window, input_count, pool_size}, combos, debug}
    """
    config = config or ComboBoardConfig()

    if window_start is None or window_end is None:
        first, last = default_window(picks)
        window_start = window_start or first
        window_end = window_end or last

    if window_start is None:
        pool: List[Pick] = []
    else:
        eligible = [
            p for p in picks
            if _in_window(p, window_start, window_end) and passes_pool_filter(p, config)
        ]
        pool = best_per_match(eligible)

    board = {
        "meta": {
            "window": {"start": window_start, "end": window_end},
            "input_count": len(picks),
            "pool_size": len(pool),
        },
        "combos": {},
        "debug": [],
    }

    used_matches = set()
    for name, bucket in config.buckets.items():
        candidates = _bucket_candidates(pool, bucket, used_matches)

        best: Optional[BoardCombo] = None
        for leg_count in bucket.legs_allowed:
            combo = find_best_combo(candidates, leg_count, bucket, config)
            if combo is not None and (best is None or combo.score > best.score):
                best = combo

        if best is None:
            board["debug"].append(f"No {name} combo found (Pool: {len(candidates)})")
            continue

        board["combos"][name] = {
            "type": name.upper(),
            "legs": [leg.to_dict() for leg in best.legs],
            "total_odds": round(best.total_odds, 2),
        }
        used_matches.update(leg.match_id for leg in best.legs)

    logger.info(
        f"Combo board {window_start}..{window_end}: pool={len(pool)}, "
        f"buckets={list(board['combos'])}"
    )
    return board
