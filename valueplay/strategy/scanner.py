"""
Market Scanner
==============

Compares model probabilities against the best offered odds, market by
market, and emits every selection with positive expected value.

Markets are scanned in a fixed order (see build_market_definitions);
the ranker relies on that order to break score ties.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple
import logging

from valueplay.data.schemas import OddsQuote
from valueplay.models.poisson.markets import (
    FT_GOAL_LINES,
    HALF_GOAL_LINES,
    CORNER_LINES,
    line_key,
)
from .ev import EVCalculator, ValueBetCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketDefinition:
    """One scannable market: model probabilities plus where to find odds."""
    name: str
    family: str
    confidence: str
    probs: Mapping[str, float]
    mapping: Tuple[Tuple[str, str], ...]  # (model selection, odds key), in order
    devig: bool = True  # False when the selections do not cover every outcome


def legacy_alias(odds_key: str) -> str:
    """Older normalizers spell corners_ou_over_9.5 as corners_over_9.5."""
    return odds_key.replace("_ou_", "_")


def resolve_quote(best: Mapping[str, OddsQuote], odds_key: str) -> Tuple[Optional[OddsQuote], Optional[str]]:
    """Look up a key, falling back to its legacy alias."""
    quote = best.get(odds_key)
    if quote is not None:
        return quote, odds_key
    alias = legacy_alias(odds_key)
    quote = best.get(alias)
    if quote is not None:
        return quote, alias
    return None, None


def _ou_mapping(prefix: str, line: float) -> Tuple[Tuple[str, str], ...]:
    L = line_key(line)
    return (("over", f"{prefix}_over_{L}"), ("under", f"{prefix}_under_{L}"))


def _result_mapping(prefix: str) -> Tuple[Tuple[str, str], ...]:
    return (
        ("home", f"{prefix}_home"),
        ("draw", f"{prefix}_draw"),
        ("away", f"{prefix}_away"),
    )


def build_market_definitions(markets: Mapping[str, dict]) -> List[MarketDefinition]:
    """
    Build the ordered list of markets to scan.

    Args:
        markets: Union of derive_markets() for "ft", "ht", "2h" and
            derive_corner_markets(); missing scopes are skipped.
    """
    defs: List[MarketDefinition] = []

    if "ft_1x2" in markets:
        cs = markets["ft_clean_sheet"]
        wtn = markets["ft_win_to_nil"]
        defs.extend([
            MarketDefinition("1X2", "result_1x2", "High", markets["ft_1x2"], _result_mapping("ft_1x2")),
            MarketDefinition(
                "Double Chance", "double_chance", "Medium", markets["ft_double_chance"],
                (("1x", "dc_1x"), ("12", "dc_12"), ("x2", "dc_x2")),
            ),
            MarketDefinition(
                "BTTS", "goals_btts", "High", markets["ft_btts"],
                (("yes", "btts_yes"), ("no", "btts_no")),
            ),
            MarketDefinition(
                "Clean Sheet Home", "clean_sheet", "High",
                {"yes": cs["home"], "no": 1 - cs["home"]},
                (("yes", "cs_home_yes"), ("no", "cs_home_no")),
            ),
            MarketDefinition(
                "Clean Sheet Away", "clean_sheet", "High",
                {"yes": cs["away"], "no": 1 - cs["away"]},
                (("yes", "cs_away_yes"), ("no", "cs_away_no")),
            ),
            MarketDefinition(
                "Win to Nil", "win_to_nil", "Medium", wtn,
                (("home", "win_to_nil_home"), ("away", "win_to_nil_away")),
                devig=False,
            ),
        ])
        for line in FT_GOAL_LINES:
            defs.append(MarketDefinition(
                f"Over/Under {line_key(line)}", "goals_ou", "High",
                markets["ft_goals"][line_key(line)], _ou_mapping("ft_goals", line),
            ))

    for prefix, label in (("ht", "HT"), ("2h", "2H")):
        if f"{prefix}_1x2" not in markets:
            continue
        defs.append(MarketDefinition(
            f"{label} 1X2", "result_1x2", "Medium", markets[f"{prefix}_1x2"], _result_mapping(f"{prefix}_1x2"),
        ))
        defs.append(MarketDefinition(
            f"{label} BTTS", "goals_btts", "Low", markets[f"{prefix}_btts"],
            (("yes", f"{prefix}_btts_yes"), ("no", f"{prefix}_btts_no")),
        ))
        for line in HALF_GOAL_LINES:
            defs.append(MarketDefinition(
                f"{label} Over/Under {line_key(line)}", "goals_ou", "Medium",
                markets[f"{prefix}_goals"][line_key(line)], _ou_mapping(f"{prefix}_goals", line),
            ))

    if "corners_1x2" in markets:
        defs.append(MarketDefinition(
            "Corners 1X2", "corners_1x2", "Low", markets["corners_1x2"], _result_mapping("corners_1x2"),
        ))
        for line in CORNER_LINES:
            defs.append(MarketDefinition(
                f"Corners Over/Under {line_key(line)}", "corners_ou", "Medium",
                markets["corners_ou"][line_key(line)], _ou_mapping("corners_ou", line),
            ))

    return defs


class MarketScanner:
    """
    Scans market definitions against a record's best odds.

    Devig policy: the fair (devigged) market probability is only used when
    the market covers every outcome, every selection has a price and the
    vector devigs.
    Otherwise each priced selection is compared against its raw implied
    probability.
    """

    def __init__(self, ev_calculator: Optional[EVCalculator] = None):
        self.ev_calc = ev_calculator or EVCalculator()

    def process(
        self,
        definition: MarketDefinition,
        best: Mapping[str, OddsQuote],
    ) -> List[ValueBetCandidate]:
        """Evaluate one market definition."""
        resolved: Dict[str, Tuple[OddsQuote, str]] = {}
        for selection, odds_key in definition.mapping:
            quote, used_key = resolve_quote(best, odds_key)
            if quote is not None:
                resolved[selection] = (quote, used_key)

        if not resolved:
            return []

        has_full_vector = len(resolved) == len(definition.mapping)
        market_probs = None
        if definition.devig and has_full_vector:
            vector = {sel: quote.odds for sel, (quote, _) in resolved.items()}
            market_probs = self.ev_calc.remove_vig(vector)
            if market_probs is None:
                logger.debug(f"{definition.name}: devig skipped, using raw implied probabilities")

        candidates = []
        for selection, _ in definition.mapping:
            if selection not in resolved:
                continue
            quote, used_key = resolved[selection]

            p_model = definition.probs[selection]
            if market_probs is not None:
                p_market = market_probs[selection]
            else:
                p_market = quote.implied_prob

            ev = self.ev_calc.calculate_ev(p_model, quote.odds)
            if ev is None or ev <= 0:
                continue

            candidates.append(ValueBetCandidate(
                market=definition.name,
                selection=selection,
                odds=quote.odds,
                p_model=p_model,
                p_market=p_market,
                edge=p_model - p_market,
                ev=ev,
                confidence=definition.confidence,
                book=quote.book,
                odds_key=used_key,
                market_family=definition.family,
                source=quote.source,
                devigged=market_probs is not None,
            ))

        return candidates

    def scan(
        self,
        definitions: List[MarketDefinition],
        best: Mapping[str, OddsQuote],
    ) -> List[ValueBetCandidate]:
        """Evaluate every definition, preserving scan order."""
        results: List[ValueBetCandidate] = []
        for definition in definitions:
            results.extend(self.process(definition, best))
        return results


def scan_markets(markets: Mapping[str, dict], best: Mapping[str, OddsQuote]) -> List[ValueBetCandidate]:
    """Build definitions from model markets and scan them."""
    return MarketScanner().scan(build_market_definitions(markets), best)
