"""
Daily Portfolio Builder
=======================

Turns one day's picks into a portfolio:
- best pick per match, sorted by sort_score
- core / value / high-potential singles, classified by model probability
- two doubles and one "mid" combo searched in a fixed odds range

Combo search walks index combinations in lexicographic order
(itertools.combinations), so the first hit is deterministic for a
given pool ordering.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from .picks import Pick

logger = logging.getLogger(__name__)

PAIR_POOL_SIZE = 20
TRIPLE_POOL_SIZE = 15

TOP_CORE = 5
TOP_VALUE = 5
TOP_HIGH_POTENTIAL = 3


@dataclass
class PortfolioConfig:
    """Thresholds for the daily portfolio."""
    core_prob_min: float = 0.55
    value_prob_min: float = 0.35
    mid_combo_min_odds: float = 3.0
    mid_combo_max_odds: float = 5.0

    # Pre-filter; with these defaults every +EV pick passes
    min_confidence: float = 0.0
    min_edge: Optional[float] = None

    @classmethod
    def from_config(cls, config) -> "PortfolioConfig":
        return cls(
            core_prob_min=config.core_prob_min,
            value_prob_min=config.value_prob_min,
            mid_combo_min_odds=config.mid_combo_min_odds,
            mid_combo_max_odds=config.mid_combo_max_odds,
            min_confidence=config.min_confidence,
            min_edge=config.min_edge,
        )


@dataclass(frozen=True)
class Combo:
    """A parlay of 2-3 picks."""
    type: str
    legs: tuple
    total_odds: float
    combined_edge: float

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "total_odds": round(self.total_odds, 2),
            "combined_edge": round(self.combined_edge, 3),
            "legs": [leg.to_dict() for leg in self.legs],
        }


def _product(values: Iterable[float]) -> float:
    result = 1.0
    for v in values:
        result *= v
    return result


def make_combo(combo_type: str, legs: Sequence[Pick]) -> Combo:
    return Combo(
        type=combo_type,
        legs=tuple(legs),
        total_odds=_product(leg.odds for leg in legs),
        combined_edge=_product(1 + leg.edge for leg in legs) - 1,
    )


def generate_double(pool: Sequence[Pick]) -> Optional[Combo]:
    """Top two picks of an already-sorted pool, or None."""
    if len(pool) < 2:
        return None
    return make_combo("double", pool[:2])


def find_combo_in_range(
    pool: Sequence[Pick],
    legs: int,
    min_odds: float,
    max_odds: float,
) -> Optional[Sequence[Pick]]:
    """First combination of ``legs`` picks whose odds product is in range."""
    for combo in combinations(pool, legs):
        total = _product(p.odds for p in combo)
        if min_odds <= total <= max_odds:
            return combo
    return None


def generate_mid_combo(pool: Sequence[Pick], min_odds: float, max_odds: float) -> Optional[Combo]:
    """
    Search a pair in the best 20, then a triple in the best 15.

    Returns:
        Combo typed "mid_combo_2leg" / "mid_combo_3leg", or None
    """
    pair = find_combo_in_range(pool[:PAIR_POOL_SIZE], 2, min_odds, max_odds)
    if pair is not None:
        return make_combo("mid_combo_2leg", pair)

    triple = find_combo_in_range(pool[:TRIPLE_POOL_SIZE], 3, min_odds, max_odds)
    if triple is not None:
        return make_combo("mid_combo_3leg", triple)

    logger.debug(f"No mid combo in [{min_odds}, {max_odds}] from {len(pool)} picks")
    return None


def passes_prefilter(pick: Pick, config: PortfolioConfig) -> bool:
    if pick.confidence_score < config.min_confidence:
        return False
    if config.min_edge is not None and pick.edge < config.min_edge:
        return False
    return pick.ev > 0


def best_per_match(picks: Iterable[Pick]) -> List[Pick]:
    """Highest sort_score pick per match (first seen wins ties), best first."""
    best: Dict[str, Pick] = {}
    for pick in picks:
        current = best.get(pick.match_id)
        if current is None or pick.sort_score > current.sort_score:
            best[pick.match_id] = pick
    unique = list(best.values())
    unique.sort(key=lambda p: -p.sort_score)
    return unique


def classify(picks: Iterable[Pick], config: PortfolioConfig) -> Dict[str, List[Pick]]:
    classes = {"core": [], "value": [], "high_potential": []}
    for pick in picks:
        if pick.p_model >= config.core_prob_min:
            classes["core"].append(pick)
        elif pick.p_model >= config.value_prob_min:
            classes["value"].append(pick)
        else:
            classes["high_potential"].append(pick)
    return classes


def _combo_dict(combo: Optional[Combo]) -> Optional[dict]:
    return combo.to_dict() if combo is not None else None


def build_daily_portfolio(
    picks: Sequence[Pick],
    config: Optional[PortfolioConfig] = None,
) -> dict:
    """
    Build a daily portfolio from one day's picks.

    Args:
        picks: Flattened picks (any order)
        config: Thresholds; defaults to PortfolioConfig()

    Returns:
        {meta, core_singles, value_singles, high_potential_singles, combos, stats}
    """
    config = config or PortfolioConfig()

    valid = [p for p in picks if passes_prefilter(p, config)]
    unique = best_per_match(valid)
    classes = classify(unique, config)

    logger.info(
        f"Portfolio: {len(picks)} picks -> {len(valid)} valid -> {len(unique)} unique "
        f"(core={len(classes['core'])}, value={len(classes['value'])}, "
        f"high_potential={len(classes['high_potential'])})"
    )

    combos = {
        "core_double": generate_double(classes["core"]),
        "smart_double": generate_double(classes["value"]),
        "mid_combo": generate_mid_combo(unique, config.mid_combo_min_odds, config.mid_combo_max_odds),
    }

    return {
        "meta": {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "total_matches_analyzed": len({p.match_id for p in picks}),
            "portfolio_size": len(unique),
        },
        "core_singles": [p.to_dict() for p in classes["core"][:TOP_CORE]],
        "value_singles": [p.to_dict() for p in classes["value"][:TOP_VALUE]],
        "high_potential_singles": [p.to_dict() for p in classes["high_potential"][:TOP_HIGH_POTENTIAL]],
        "combos": {name: _combo_dict(combo) for name, combo in combos.items()},
        "stats": {
            "core_count": len(classes["core"]),
            "value_count": len(classes["value"]),
            "high_pot_count": len(classes["high_potential"]),
        },
    }
