"""
Daily Value Pipeline
====================

Main orchestration for a batch of match records:
1. Validate each MatchRecord
2. Estimate rates and build full-time, half and corner matrices
3. Derive market probabilities
4. Scan against the best odds and rank the value bets
5. Build daily portfolios, the global slate and the combo board

Each match is analysed in isolation: a failure becomes an
{"error", "match_id"} entry and the batch carries on.

Usage:
    pipeline = DailyPipeline()
    result = pipeline.run(records)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from zoneinfo import ZoneInfo
import json

import numpy as np
import pandas as pd
from pydantic import ValidationError

from valueplay.config import get_config
from valueplay.data.schemas import MatchRecord
from valueplay.models.poisson import (
    GoalsMatrix,
    build_score_matrix,
    derive_corner_markets,
    derive_markets,
    estimate_rates,
)
from valueplay.strategy import (
    ComboBoardConfig,
    GlobalPortfolioConfig,
    MarketScanner,
    PortfolioConfig,
    build_daily_portfolio,
    build_global_portfolio,
    build_market_definitions,
    flatten_outputs,
    generate_combo_board,
    group_picks_by_day,
    rank_picks,
)

logger = logging.getLogger(__name__)

SHORTLIST_SIZE = 5
TOP_SCORES = 5


@dataclass
class EngineConfig:
    """Per-match engine settings."""
    first_half_split: float = 0.45
    second_half_split: float = 0.55
    half_max_goals: int = 5
    kelly_fraction: float = 0.25
    timezone: str = "Europe/Paris"

    @classmethod
    def from_config(cls, config) -> "EngineConfig":
        return cls(
            first_half_split=config.first_half_split,
            second_half_split=config.second_half_split,
            half_max_goals=config.half_max_goals,
            kelly_fraction=config.kelly_fraction,
            timezone=config.timezone,
        )


@dataclass
class PipelineConfig:
    """Configuration for the batch pipeline."""
    engine: EngineConfig = field(default_factory=EngineConfig)
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)
    global_portfolio: GlobalPortfolioConfig = field(default_factory=GlobalPortfolioConfig)
    combo_board: ComboBoardConfig = field(default_factory=ComboBoardConfig)
    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    @classmethod
    def from_config(cls, config=None) -> "PipelineConfig":
        config = config or get_config()
        return cls(
            engine=EngineConfig.from_config(config),
            portfolio=PortfolioConfig.from_config(config),
            global_portfolio=GlobalPortfolioConfig.from_config(config),
            output_dir=config.output_dir,
        )


def _r4(x: float) -> float:
    return round(float(x), 4)


def model_markets(rates, engine: EngineConfig) -> Tuple[Dict[str, dict], np.ndarray]:
    """All market probabilities for one match plus the full-time matrix."""
    ft = build_score_matrix(rates.lambda_home, rates.lambda_away)
    ht = build_score_matrix(
        rates.lambda_home * engine.first_half_split,
        rates.lambda_away * engine.first_half_split,
        hard_max=engine.half_max_goals,
    )
    sh = build_score_matrix(
        rates.lambda_home * engine.second_half_split,
        rates.lambda_away * engine.second_half_split,
        hard_max=engine.half_max_goals,
    )
    corners = build_score_matrix(rates.corner_lambda_home, rates.corner_lambda_away)

    markets: Dict[str, dict] = {}
    markets.update(derive_markets(ft, "ft"))
    markets.update(derive_markets(ht, "ht"))
    markets.update(derive_markets(sh, "2h"))
    markets.update(derive_corner_markets(corners))
    return markets, ft


def analyze_match(
    record: Union[MatchRecord, dict],
    engine: Optional[EngineConfig] = None,
) -> dict:
    """
    Run the engine on one match.

    Returns:
        {match_id, meta, overview, scanner, shortlist}

    Raises:
        pydantic.ValidationError: if a dict record does not validate
    """
    engine = engine or EngineConfig()
    if not isinstance(record, MatchRecord):
        record = MatchRecord.model_validate(record)

    rates = estimate_rates(record)
    markets, ft_matrix = model_markets(rates, engine)

    definitions = build_market_definitions(markets)
    candidates = MarketScanner().scan(definitions, record.odds.best)
    ranked = rank_picks(candidates, kelly_fraction=engine.kelly_fraction)

    logger.debug(
        f"{record.match_id} {record.match_name}: {len(ranked)} value bets "
        f"from {len(definitions)} markets ({rates.source})"
    )

    ft_1x2 = markets["ft_1x2"]
    tz = ZoneInfo(engine.timezone)
    scanner_rows = [c.to_dict() for c in ranked]

    return {
        "match_id": record.match_id,
        "meta": {
            "date_unix": record.meta.date_unix,
            "date_iso": record.meta.kickoff_iso(tz),
            "season": record.meta.season,
            "status": record.meta.status,
        },
        "overview": {
            "teams": record.teams.model_dump(),
            "lambdas": rates.to_dict(),
            "probs": {
                "home_win": _r4(ft_1x2["home"]),
                "draw": _r4(ft_1x2["draw"]),
                "away_win": _r4(ft_1x2["away"]),
                "btts": _r4(markets["ft_btts"]["yes"]),
                "over_2_5": _r4(markets["ft_goals"]["2.5"]["over"]),
                "corners_over_9_5": _r4(markets["corners_ou"]["9.5"]["over"]),
            },
            "top_scores": [
                {"score": score, "prob": _r4(p)}
                for score, p in GoalsMatrix.top_scores(ft_matrix, TOP_SCORES)
            ],
        },
        "scanner": scanner_rows,
        "shortlist": scanner_rows[:SHORTLIST_SIZE],
    }


def _record_id(record: Any) -> Optional[str]:
    if isinstance(record, MatchRecord):
        return record.match_id
    if isinstance(record, dict) and record.get("match_id") is not None:
        return str(record["match_id"])
    return None


class DailyPipeline:
    """
    Batch pipeline for a slate of matches.

    Orchestrates: Records -> Engine -> Picks -> Portfolios
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def analyze_all(self, records: Iterable[Union[MatchRecord, dict]]) -> List[dict]:
        """Per-match outputs; failures become error entries."""
        outputs = []
        for record in records:
            try:
                outputs.append(analyze_match(record, self.config.engine))
            except ValidationError as e:
                logger.error(f"Invalid match record {_record_id(record)}: {e.error_count()} errors")
                outputs.append({"error": str(e), "match_id": _record_id(record)})
            except Exception as e:
                logger.error(f"Analysis failed for {_record_id(record)}: {e}")
                outputs.append({"error": str(e), "match_id": _record_id(record)})
        return outputs

    def daily_portfolios(self, outputs: List[dict]) -> Dict[str, dict]:
        picks = flatten_outputs(outputs, self.config.engine.timezone)
        return {
            day: build_daily_portfolio(day_picks, self.config.portfolio)
            for day, day_picks in group_picks_by_day(picks).items()
        }

    def run(
        self,
        records: Iterable[Union[MatchRecord, dict]],
        window_start: Optional[str] = None,
        window_end: Optional[str] = None,
    ) -> dict:
        """
        Execute the full pipeline.

        Args:
            records: MatchRecords or their raw dicts
            window_start: First day for the combo board (defaults to earliest pick)
            window_end: Last day for the combo board (defaults to latest pick)

        Returns:
            {generated_at, matches, daily_portfolios, global_portfolio, combo_board}
        """
        records = list(records)
        logger.info("=" * 50)
        logger.info(f"Starting daily pipeline for {len(records)} matches")
        logger.info("=" * 50)

        outputs = self.analyze_all(records)
        failed = sum(1 for o in outputs if o.get("error"))
        logger.info(f"  → {len(outputs) - failed} analysed, {failed} failed")

        picks = flatten_outputs(outputs, self.config.engine.timezone)
        logger.info(f"  → {len(picks)} value bets found")

        result = {
            "generated_at": datetime.now().isoformat(),
            "matches": outputs,
            "daily_portfolios": self.daily_portfolios(outputs),
            "global_portfolio": build_global_portfolio(outputs, self.config.global_portfolio),
            "combo_board": generate_combo_board(
                picks, window_start, window_end, self.config.combo_board
            ),
        }

        logger.info("=" * 50)
        logger.info(f"Pipeline complete: {len(result['global_portfolio']['portfolio'])} picks in global slate")
        logger.info("=" * 50)
        return result

    def save_output(self, result: dict, output_dir: Optional[Path] = None) -> Path:
        """Save pipeline output as JSON plus a flat CSV of every value bet."""
        output_dir = Path(output_dir or self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = output_dir / f"valueplay_{timestamp}.json"
        with open(filepath, "w") as f:
            json.dump(result, f, indent=2)

        csv_filepath = output_dir / f"value_bets_{timestamp}.csv"
        export_csv(result["matches"], csv_filepath, self.config.engine.timezone)

        logger.info(f"Saved output to {filepath} and {csv_filepath}")
        return filepath


def scanner_frame(outputs: Iterable[dict], tz_name: str = "Europe/Paris") -> pd.DataFrame:
    """One row per value bet, sorted by EV descending."""
    picks = sorted(flatten_outputs(outputs, tz_name), key=lambda p: p.ev, reverse=True)
    rows = []
    for p in picks:
        rows.append({
            "Match": p.match_name,
            "Date": p.date_iso or "TBD",
            "Market": p.market,
            "Selection": p.selection,
            "Odds": round(p.odds, 2),
            "Bookmaker": p.book,
            "Model (%)": round(p.p_model * 100, 1),
            "Edge (%)": round(p.edge * 100, 1),
            "EV (%)": round(p.ev * 100, 1),
            "Tier": p.tier,
            "Confidence": p.confidence_score,
            "Kelly (%)": None if p.kelly is None else round(p.kelly * 100, 2),
        })
    return pd.DataFrame(rows)


def export_csv(outputs: Iterable[dict], path: Path, tz_name: str = "Europe/Paris") -> Path:
    df = scanner_frame(outputs, tz_name)
    df.to_csv(path, index=False)
    logger.info(f"Exported {len(df)} value bets to {path}")
    return path


def run_daily_pipeline(records: Iterable[Union[MatchRecord, dict]], config=None) -> dict:
    """Convenience function to run the pipeline with the global config."""
    pipeline = DailyPipeline(config=PipelineConfig.from_config(config))
    return pipeline.run(records)
