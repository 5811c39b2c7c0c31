"""VALUEPLAY Strategy Module - EV, scanning, ranking and portfolio building."""

from .ev import EVCalculator, ValueBetCandidate, remove_vig
from .kelly import kelly_formula, kelly_simple
from .scanner import MarketDefinition, MarketScanner, build_market_definitions, scan_markets
from .ranking import rank_picks, score_candidate, tier_for
from .picks import (
    Pick, UNKNOWN_DATE, confidence_score,
    flatten_match_output, flatten_outputs, group_picks_by_day,
)
from .portfolio import PortfolioConfig, Combo, build_daily_portfolio, generate_double, generate_mid_combo
from .global_portfolio import GlobalPortfolioConfig, build_global_portfolio
from .combo_board import ComboBoardConfig, BucketConfig, generate_combo_board

__all__ = [
    # EV
    "EVCalculator",
    "ValueBetCandidate",
    "remove_vig",
    # Kelly
    "kelly_formula",
    "kelly_simple",
    # Scanner
    "MarketDefinition",
    "MarketScanner",
    "build_market_definitions",
    "scan_markets",
    # Ranking
    "rank_picks",
    "score_candidate",
    "tier_for",
    # Picks
    "Pick",
    "UNKNOWN_DATE",
    "confidence_score",
    "flatten_match_output",
    "flatten_outputs",
    "group_picks_by_day",
    # Portfolios
    "PortfolioConfig",
    "Combo",
    "build_daily_portfolio",
    "generate_double",
    "generate_mid_combo",
    "GlobalPortfolioConfig",
    "build_global_portfolio",
    "ComboBoardConfig",
    "BucketConfig",
    "generate_combo_board",
]
