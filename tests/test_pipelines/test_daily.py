"""
Tests for pipelines.daily: per-match engine and batch pipeline
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import json

import pandas as pd
import pytest
from valueplay.pipelines.daily import (
    DailyPipeline,
    EngineConfig,
    PipelineConfig,
    analyze_match,
    scanner_frame,
)
from valueplay.strategy import UNKNOWN_DATE


def _record(match_id="1001", date_unix=1714845600, **overrides) -> dict:
    record = {
        "match_id": match_id,
        "teams": {"home": {"id": 1, "name": "Lens"}, "away": {"id": 2, "name": "Brest"}},
        "signals": {
            "xg": {"home": 1.7, "away": 0.9},
            "corners": {"home_for": 6.0, "home_against": 4.0, "away_for": 4.5, "away_against": 5.5},
        },
        "odds": {"best": {
            "ft_1x2_home": {"odds": 2.40, "book": "bet365", "source": "feed"},
            "ft_1x2_draw": {"odds": 3.40, "book": "bet365", "source": "feed"},
            "ft_1x2_away": {"odds": 3.10, "book": "bet365", "source": "feed"},
            "btts_yes": 1.80,
            "btts_no": 2.00,
            "ft_goals_over_2.5": {"odds": 2.05},
            "ft_goals_under_2.5": {"odds": 1.80},
            "corners_over_9.5": {"odds": 2.30},
            "dc_1x": {"odds": 1.0},
        }},
        "meta": {"date_unix": date_unix, "season": 2024},
    }
    record.update(overrides)
    return record


class TestAnalyzeMatch:

    def test_output_contract(self):
        output = analyze_match(_record())

        assert output["match_id"] == "1001"
        assert set(output) == {"match_id", "meta", "overview", "scanner", "shortlist"}
        overview = output["overview"]
        assert overview["lambdas"]["source"] == "xg_signal"
        assert overview["lambdas"]["goals"] == {"home": 1.7, "away": 0.9}
        assert overview["lambdas"]["corners"] == {"home": 5.75, "away": 4.25}
        assert set(overview["probs"]) == {
            "home_win", "draw", "away_win", "btts", "over_2_5", "corners_over_9_5",
        }
        assert overview["probs"]["home_win"] > overview["probs"]["away_win"]
        assert len(overview["top_scores"]) == 5
        assert output["meta"]["season"] == "2024"

    def test_scanner_rows_ranked(self):
        output = analyze_match(_record())
        scores = [row["score"] for row in output["scanner"]]
        assert scores == sorted(scores, reverse=True)
        assert all(row["ev"] > 0 for row in output["scanner"])
        assert output["shortlist"] == output["scanner"][:5]

    def test_home_value_found(self):
        output = analyze_match(_record())
        home = [r for r in output["scanner"] if r["market"] == "1X2" and r["selection"] == "home"]
        assert len(home) == 1
        assert home[0]["devigged"] is True

    def test_legacy_corner_key_resolves(self):
        output = analyze_match(_record())
        corners = [r for r in output["scanner"] if r["market_family"] == "corners_ou"]
        assert corners and corners[0]["odds_key"] == "corners_over_9.5"

    def test_invalid_odds_ignored(self):
        output = analyze_match(_record())
        assert not any(r["odds_key"] == "dc_1x" for r in output["scanner"])

    def test_infinite_odds_never_scanned(self):
        record = _record()
        record["odds"]["best"]["btts_yes"] = {"odds": "inf", "book": "x"}
        output = analyze_match(record)

        assert not any(r["odds_key"] == "btts_yes" for r in output["scanner"])
        json.dumps(output, allow_nan=False)

    def test_kickoff_rendered_in_timezone(self):
        # 2024-05-04 18:00 UTC
        output = analyze_match(_record(), EngineConfig(timezone="Europe/Paris"))
        assert output["meta"]["date_iso"].startswith("2024-05-04T20:00:00")

    def test_fallback_record(self):
        output = analyze_match({"match_id": 7})
        assert output["match_id"] == "7"
        assert output["overview"]["lambdas"]["source"] == "league_avg_fallback"
        assert output["scanner"] == []


class TestDailyPipeline:

    def test_bad_record_isolated(self):
        records = [_record("1"), {"teams": {}}, _record("3", odds="not-a-mapping")]
        outputs = DailyPipeline().analyze_all(records)

        assert len(outputs) == 3
        assert "error" not in outputs[0]
        assert "error" in outputs[1] and outputs[1]["match_id"] is None
        assert "error" in outputs[2] and outputs[2]["match_id"] == "3"

    def test_out_of_range_kickoff_does_not_abort_batch(self):
        bad = _record("2", date_unix=10**20)
        result = DailyPipeline().run([_record("1"), bad, _record("3")])

        outputs = result["matches"]
        assert [o["match_id"] for o in outputs] == ["1", "2", "3"]
        assert not any("error" in o for o in outputs)
        assert outputs[1]["meta"]["date_iso"] is None
        assert UNKNOWN_DATE in result["daily_portfolios"]
        json.dumps(result, allow_nan=False)

    def test_unexpected_error_isolated(self, monkeypatch):
        import valueplay.pipelines.daily as daily

        real = daily.analyze_match

        def flaky(record, engine=None):
            if record["match_id"] == "2":
                raise OverflowError("timestamp out of range")
            return real(record, engine)

        monkeypatch.setattr(daily, "analyze_match", flaky)
        outputs = DailyPipeline().analyze_all([_record("1"), _record("2"), _record("3")])

        assert len(outputs) == 3
        assert outputs[1] == {"error": "timestamp out of range", "match_id": "2"}
        assert "error" not in outputs[0] and "error" not in outputs[2]

    def test_run(self):
        records = [_record("1"), _record("2", date_unix=1714932000), {"match_id": ""}]
        result = DailyPipeline().run(records)

        assert set(result) == {
            "generated_at", "matches", "daily_portfolios", "global_portfolio", "combo_board",
        }
        assert len(result["matches"]) == 3
        assert list(result["daily_portfolios"]) == ["2024-05-04", "2024-05-05"]
        assert result["global_portfolio"]["stats"]["matches_processed"] == 2
        assert result["combo_board"]["meta"]["window"] == {"start": "2024-05-04", "end": "2024-05-05"}
        json.dumps(result)

    def test_save_output(self, tmp_path):
        pipeline = DailyPipeline(PipelineConfig(output_dir=tmp_path))
        result = pipeline.run([_record("1")])
        filepath = pipeline.save_output(result)

        assert filepath.exists()
        saved = json.loads(filepath.read_text())
        assert saved["matches"][0]["match_id"] == "1"

        csv_files = list(tmp_path.glob("value_bets_*.csv"))
        assert len(csv_files) == 1
        df = pd.read_csv(csv_files[0])
        assert len(df) == len(result["matches"][0]["scanner"])


class TestScannerFrame:

    def test_sorted_by_ev(self):
        outputs = DailyPipeline().analyze_all([_record("1")])
        df = scanner_frame(outputs)
        assert list(df["EV (%)"]) == sorted(df["EV (%)"], reverse=True)
        assert (df["Match"] == "Lens vs Brest").all()

    def test_empty(self):
        assert scanner_frame([]).empty
