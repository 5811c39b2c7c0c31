"""
Input schemas for VALUEPLAY.

Pydantic models for the match record produced by the ingestion layer:
- Lenient on missing signals (everything optional, engine falls back)
- Strict on odds: quotes with odds <= 1.0 never reach the scanner
- Frozen so a record cannot change mid-run
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class TeamRef(BaseModel):
    """Team descriptor as delivered by the ingestion layer."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: Optional[Union[int, str]] = None
    name: str = "Unknown"


class Teams(BaseModel):
    model_config = ConfigDict(frozen=True)

    home: TeamRef = Field(default_factory=TeamRef)
    away: TeamRef = Field(default_factory=TeamRef)


class SidePair(BaseModel):
    """A home/away pair of numeric signals."""

    model_config = ConfigDict(frozen=True, extra="allow")

    home: Optional[float] = None
    away: Optional[float] = None


class CornerSignals(BaseModel):
    """Per-match corner averages (for and against) for each side."""

    model_config = ConfigDict(frozen=True)

    home_for: Optional[float] = None
    home_against: Optional[float] = None
    away_for: Optional[float] = None
    away_against: Optional[float] = None


class Signals(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    xg: SidePair = Field(default_factory=SidePair)
    ppg: SidePair = Field(default_factory=SidePair)
    corners: CornerSignals = Field(default_factory=CornerSignals)


class LegacyContext(BaseModel):
    """Legacy flat context block kept for records from older normalizers."""

    model_config = ConfigDict(frozen=True, extra="allow")

    team_a_xg_prematch: Optional[float] = None
    team_b_xg_prematch: Optional[float] = None
    home_ppg: Optional[float] = None
    away_ppg: Optional[float] = None


class OddsQuote(BaseModel):
    """Best available price for one market selection."""

    model_config = ConfigDict(frozen=True)

    odds: float = Field(..., gt=1.0, allow_inf_nan=False)
    book: str = "unknown"
    source: str = "unknown"

    @field_validator("odds", mode="before")
    @classmethod
    def round_odds(cls, v):
        if v is not None:
            return round(float(v), 3)
        return v

    @property
    def implied_prob(self) -> float:
        """Raw implied probability (with vig)."""
        return 1.0 / self.odds


def _is_valid_odds(value: Any) -> bool:
    try:
        odds = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(odds) and round(odds, 3) > 1.0


class MatchOdds(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    best: Dict[str, OddsQuote] = Field(default_factory=dict)

    @field_validator("best", mode="before")
    @classmethod
    def drop_invalid_quotes(cls, v):
        """Silently drop quotes that cannot be priced.

        A selection without a usable price is simply absent from the
        vector; it must never fail the whole record.
        """
        if not v:
            return {}
        cleaned = {}
        for key, quote in v.items():
            if isinstance(quote, OddsQuote):
                cleaned[key] = quote
                continue
            if isinstance(quote, dict):
                raw = quote.get("odds")
            else:
                # Bare number: {"btts_yes": 1.85}
                raw = quote
                quote = {"odds": quote}
            if not _is_valid_odds(raw):
                logger.debug(f"Dropping invalid odds for {key}: {raw!r}")
                continue
            cleaned[key] = quote
        return cleaned


class MatchMeta(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    date_unix: Optional[int] = None
    date_iso: Optional[str] = None
    season: Optional[str] = None
    status: Optional[str] = None

    @field_validator("season", mode="before")
    @classmethod
    def season_as_str(cls, v):
        return None if v is None else str(v)

    def kickoff_iso(self, tz=None) -> Optional[str]:
        """Kickoff as ISO string; unix timestamps are rendered in ``tz``."""
        if self.date_iso:
            return self.date_iso
        if self.date_unix is None:
            return None
        try:
            return datetime.fromtimestamp(self.date_unix, tz=tz or timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Kickoff timestamp out of range: {self.date_unix}")
            return None


class MatchRecord(BaseModel):
    """
    One fixture as consumed by the engine.

    Produced upstream by the ingestion layer; immutable for the run.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    match_id: str
    teams: Teams = Field(default_factory=Teams)
    signals: Signals = Field(default_factory=Signals)
    context: Optional[LegacyContext] = None
    odds: MatchOdds = Field(default_factory=MatchOdds)
    meta: MatchMeta = Field(default_factory=MatchMeta)

    @field_validator("match_id", mode="before")
    @classmethod
    def id_as_str(cls, v):
        if v is None or str(v).strip() == "":
            raise ValueError("match_id is required")
        return str(v)

    @property
    def match_name(self) -> str:
        return f"{self.teams.home.name} vs {self.teams.away.name}"