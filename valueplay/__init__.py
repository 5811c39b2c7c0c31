"""
VALUEPLAY - Value Bet Scanner & Portfolio Builder

Poisson score models turn pre-match signals into market probabilities,
which are compared against bookmaker odds to surface +EV picks and
assemble them into singles and parlays.
"""

__version__ = "1.0.0"
