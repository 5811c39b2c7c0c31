"""
Global Portfolio Selector
=========================

Picks a capped, diversified slate across many matches.

One sequential pass over a globally sorted list; the per-match and
per-(match, family) counters are local to each call.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional
import logging

from .picks import Pick, flatten_match_output

logger = logging.getLogger(__name__)

ALTERNATIVES_LIMIT = 20


@dataclass
class GlobalPortfolioConfig:
    global_limit: int = 15
    max_per_match: int = 2
    max_per_category: int = 1
    timezone: str = "Europe/Paris"

    @classmethod
    def from_config(cls, config) -> "GlobalPortfolioConfig":
        return cls(
            global_limit=config.global_limit,
            max_per_match=config.max_per_match,
            max_per_category=config.max_per_category,
            timezone=config.timezone,
        )


def sort_for_selection(picks: Iterable[Pick]) -> List[Pick]:
    """Stable sort by (confidence_score desc, ev desc)."""
    return sorted(picks, key=lambda p: (-p.confidence_score, -p.ev))


def select_diversified(picks: List[Pick], config: GlobalPortfolioConfig) -> List[Pick]:
    """Greedy walk over pre-sorted picks under the diversity limits."""
    selected: List[Pick] = []
    match_counts: Counter = Counter()
    category_counts: Counter = Counter()
    seen = set()

    for pick in picks:
        if len(selected) >= config.global_limit:
            break

        category = (pick.match_id, pick.market_family)
        if match_counts[pick.match_id] >= config.max_per_match:
            continue
        if category_counts[category] >= config.max_per_category:
            continue

        identity = (pick.match_id, pick.market, pick.selection)
        if identity in seen:
            continue

        selected.append(pick)
        seen.add(identity)
        match_counts[pick.match_id] += 1
        category_counts[category] += 1

    return selected


def build_global_portfolio(
    match_outputs: Iterable[dict],
    config: Optional[GlobalPortfolioConfig] = None,
) -> dict:
    """
    Select the global slate from per-match outputs.

    Args:
        match_outputs: Per-match engine outputs; entries with "error" are skipped
        config: Limits; defaults to 15 picks, 2 per match, 1 per family per match

    Returns:
        {portfolio, alternatives, stats}
    """
    config = config or GlobalPortfolioConfig()

    all_picks: List[Pick] = []
    matches_processed = 0
    for output in match_outputs:
        if output.get("error"):
            logger.debug(f"Skipping failed match {output.get('match_id')}")
            continue
        matches_processed += 1
        all_picks.extend(flatten_match_output(output, config.timezone))

    ranked = sort_for_selection(all_picks)
    selected = select_diversified(ranked, config)

    selected_ids = {id(p) for p in selected}
    alternatives = [p for p in ranked if id(p) not in selected_ids][:ALTERNATIVES_LIMIT]
    distribution = dict(Counter(p.market_family for p in selected))

    logger.info(
        f"Global portfolio: {len(selected)}/{len(all_picks)} picks "
        f"from {matches_processed} matches"
    )

    return {
        "portfolio": [p.to_dict() for p in selected],
        "alternatives": [p.to_dict() for p in alternatives],
        "stats": {
            "matches_processed": matches_processed,
            "total_value_bets": len(all_picks),
            "distribution": distribution,
        },
    }
