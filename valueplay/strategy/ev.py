"""
Expected Value (EV) Calculator
==============================

The core formula: EV = probability * odds - 1

Positive EV indicates a profitable bet in the long run.
This module provides EV calculation, overround removal and the
candidate record that flows through ranking and portfolio building.
"""

from typing import Dict, Mapping, Optional
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

# Implied sums above this mean the vector is not one exclusive,
# exhaustive outcome set (double-chance legs sum near 2.0).
MAX_DEVIG_OVERROUND = 1.5


@dataclass(frozen=True)
class ValueBetCandidate:
    """A +EV selection found by the scanner."""
    market: str
    selection: str
    odds: float
    p_model: float
    p_market: float
    edge: float            # p_model - p_market
    ev: float              # p_model * odds - 1
    confidence: str        # "High" | "Medium" | "Low"
    book: str
    odds_key: str = ""
    market_family: str = "unknown"
    source: str = "unknown"
    devigged: bool = False

    # Filled in by the ranker
    score: Optional[float] = None
    tier: Optional[str] = None
    kelly: Optional[float] = None

    @property
    def why(self) -> list:
        return [
            f"Model {round(self.p_model * 100)}% > Market {round(self.p_market * 100)}%",
            f"EV +{self.ev * 100:.1f}%",
        ]

    def to_dict(self) -> dict:
        return {
            "market": self.market,
            "selection": self.selection,
            "odds": self.odds,
            "p_model": round(self.p_model, 4),
            "p_market": round(self.p_market, 4),
            "edge": round(self.edge, 4),
            "ev": round(self.ev, 4),
            "confidence": self.confidence,
            "book": self.book,
            "source": self.source,
            "odds_key": self.odds_key,
            "market_family": self.market_family,
            "devigged": self.devigged,
            "score": self.score,
            "tier": self.tier,
            "kelly": None if self.kelly is None else round(self.kelly, 4),
            "why": self.why,
        }


class EVCalculator:
    """
    Expected value and market-probability helpers.
    """

    @staticmethod
    def calculate_ev(prob: float, odds: float) -> Optional[float]:
        """
        Basic EV formula: EV = p * odds - 1

        Args:
            prob: Model probability (0-1)
            odds: Decimal odds (e.g., 2.5)

        Returns:
            Expected value, or None when the odds cannot be priced
        """
        if odds is None or odds <= 1.0:
            return None
        return prob * odds - 1.0

    @staticmethod
    def remove_vig(odds_dict: Mapping[str, Optional[float]]) -> Optional[Dict[str, float]]:
        """
        Remove bookmaker margin (vig) from odds.

        Uses proportional method: fair_prob = (1 / odds) / overround

        Args:
            odds_dict: {outcome: decimal_odds} for an exclusive, exhaustive
                outcome set

        Returns:
            {outcome: fair_probability}, or None when not computable
            (missing/invalid odds, empty vector, or an implied sum above
            1.5 which means the outcomes overlap)
        """
        total = EVCalculator.overround(odds_dict)
        if total is None:
            return None

        if total > MAX_DEVIG_OVERROUND:
            logger.debug(f"Refusing to devig overlapping vector (implied sum {total:.3f}): {dict(odds_dict)}")
            return None

        return {k: (1.0 / odds) / total for k, odds in odds_dict.items()}

    @staticmethod
    def overround(odds_dict: Mapping[str, float]) -> Optional[float]:
        """Sum of implied probabilities (1.0 = fair book)."""
        if not odds_dict or any(o is None or o <= 1 for o in odds_dict.values()):
            return None
        return sum(1.0 / o for o in odds_dict.values())


def remove_vig(odds_dict: Mapping[str, Optional[float]]) -> Optional[Dict[str, float]]:
    """Standalone alias for EVCalculator.remove_vig."""
    return EVCalculator.remove_vig(odds_dict)
