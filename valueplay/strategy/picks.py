"""
Picks
=====

A Pick is a ranked candidate flattened together with its match
metadata. It is the unit the portfolio layer works with, and it can be
rebuilt from a per-match output dict (e.g. one loaded back from JSON).
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union
from zoneinfo import ZoneInfo
import logging

from .ev import ValueBetCandidate

logger = logging.getLogger(__name__)

UNKNOWN_DATE = "UNKNOWN_DATE"

# confidence_score weights
PROB_WEIGHT = 0.6
EV_WEIGHT = 0.4
EV_CAP = 0.5
EDGE_BONUS_THRESHOLD = 0.05
EDGE_PENALTY_THRESHOLD = -0.10
EDGE_ADJUSTMENT = 2.0


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def confidence_score(p_model: float, ev: float, edge: float) -> float:
    """
    0-100 rating of how much a pick can be trusted.

    Mostly probability (60%), partly value (40%, EV capped at 50%),
    nudged by two points either way on a clear or negative edge.
    """
    prob_part = _clamp(p_model, 0.0, 1.0) * 100
    ev_part = _clamp(ev, 0.0, EV_CAP) / EV_CAP * 100
    score = PROB_WEIGHT * prob_part + EV_WEIGHT * ev_part

    if edge > EDGE_BONUS_THRESHOLD:
        score += EDGE_ADJUSTMENT
    elif edge < EDGE_PENALTY_THRESHOLD:
        score -= EDGE_ADJUSTMENT

    return round(score, 1)


@dataclass(frozen=True)
class Pick:
    """A ranked value bet with the match it belongs to."""
    match_id: str
    match_name: str
    market: str
    selection: str
    odds: float
    p_model: float
    p_market: float
    edge: float
    ev: float
    confidence: str
    market_family: str
    confidence_score: float
    sort_score: float
    book: str = "unknown"
    odds_key: str = ""
    tier: Optional[str] = None
    kelly: Optional[float] = None
    kickoff: Optional[int] = None      # unix seconds
    date_iso: Optional[str] = None
    lambda_source: Optional[str] = None

    @property
    def day(self) -> str:
        return self.date_iso[:10] if self.date_iso else UNKNOWN_DATE

    def to_dict(self) -> dict:
        return {
            "match_id": self.match_id,
            "match_name": self.match_name,
            "market": self.market,
            "selection": self.selection,
            "odds": self.odds,
            "p_model": round(self.p_model, 4),
            "p_market": round(self.p_market, 4),
            "edge": round(self.edge, 4),
            "ev": round(self.ev, 4),
            "confidence": self.confidence,
            "market_family": self.market_family,
            "confidence_score": self.confidence_score,
            "sort_score": self.sort_score,
            "book": self.book,
            "odds_key": self.odds_key,
            "tier": self.tier,
            "kelly": None if self.kelly is None else round(self.kelly, 4),
            "kickoff": self.kickoff,
            "date_iso": self.date_iso,
            "lambda_source": self.lambda_source,
        }


def resolve_date_iso(meta: dict, tz_name: str = "Europe/Paris") -> Optional[str]:
    """Prefer an explicit ISO date; otherwise render the unix kickoff in tz_name."""
    if meta.get("date_iso"):
        return meta["date_iso"]
    date_unix = meta.get("date_unix")
    if date_unix is None:
        return None
    try:
        kickoff = datetime.fromtimestamp(int(date_unix), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.warning(f"Kickoff timestamp out of range: {date_unix}")
        return None
    return kickoff.astimezone(ZoneInfo(tz_name)).isoformat()


def _match_name(output: dict) -> str:
    teams = output.get("overview", {}).get("teams", {})
    home = teams.get("home", {}).get("name", "Unknown")
    away = teams.get("away", {}).get("name", "Unknown")
    return f"{home} vs {away}"


def _as_dict(candidate: Union[ValueBetCandidate, dict]) -> dict:
    if isinstance(candidate, ValueBetCandidate):
        return candidate.to_dict()
    return candidate


def flatten_match_output(output: dict, tz_name: str = "Europe/Paris") -> List[Pick]:
    """
    Turn one per-match output into Picks.

    Outputs carrying an ``error`` key (failed matches) yield nothing.
    Scanner rows may be ValueBetCandidate objects or their dict form.
    """
    if output.get("error"):
        return []

    meta = output.get("meta") or {}
    overview = output.get("overview", {})
    match_id = str(output.get("match_id"))
    match_name = _match_name(output)
    date_iso = resolve_date_iso(meta, tz_name)
    lambda_source = overview.get("lambdas", {}).get("source")

    picks = []
    for row in output.get("scanner", []):
        bet = _as_dict(row)
        score = bet.get("score")
        picks.append(Pick(
            match_id=match_id,
            match_name=match_name,
            market=bet["market"],
            selection=bet["selection"],
            odds=bet["odds"],
            p_model=bet["p_model"],
            p_market=bet["p_market"],
            edge=bet["edge"],
            ev=bet["ev"],
            confidence=bet.get("confidence", "Low"),
            market_family=bet.get("market_family", "unknown"),
            confidence_score=confidence_score(bet["p_model"], bet["ev"], bet["edge"]),
            sort_score=score if score is not None else 0.0,
            book=bet.get("book", "unknown"),
            odds_key=bet.get("odds_key", ""),
            tier=bet.get("tier"),
            kelly=bet.get("kelly"),
            kickoff=meta.get("date_unix"),
            date_iso=date_iso,
            lambda_source=lambda_source,
        ))
    return picks


def flatten_outputs(outputs: Iterable[dict], tz_name: str = "Europe/Paris") -> List[Pick]:
    picks: List[Pick] = []
    for output in outputs:
        picks.extend(flatten_match_output(output, tz_name))
    return picks


def group_picks_by_day(picks: Iterable[Pick]) -> Dict[str, List[Pick]]:
    """Group picks by kickoff day, days in first-seen order."""
    groups: Dict[str, List[Pick]] = OrderedDict()
    for pick in picks:
        groups.setdefault(pick.day, []).append(pick)

    if UNKNOWN_DATE in groups:
        logger.warning(f"{len(groups[UNKNOWN_DATE])} picks have no kickoff date")
    return groups
