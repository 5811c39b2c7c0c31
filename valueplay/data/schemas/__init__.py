"""
Data schemas package.

Re-exports all schema classes for convenient importing:
    from valueplay.data.schemas import MatchRecord, OddsQuote
"""

from .match import (
    TeamRef,
    Teams,
    SidePair,
    CornerSignals,
    Signals,
    LegacyContext,
    OddsQuote,
    MatchOdds,
    MatchMeta,
    MatchRecord,
)

__all__ = [
    "TeamRef",
    "Teams",
    "SidePair",
    "CornerSignals",
    "Signals",
    "LegacyContext",
    "OddsQuote",
    "MatchOdds",
    "MatchMeta",
    "MatchRecord",
]
