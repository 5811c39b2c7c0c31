"""
Data package - input contract of the engine.

Match records arrive already normalized; this package only validates them.
"""

from .schemas import MatchRecord, OddsQuote

__all__ = ["MatchRecord", "OddsQuote"]
