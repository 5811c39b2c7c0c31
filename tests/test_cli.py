import json
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from valueplay.interfaces.cli_app import cli


RECORDS = [
    {
        "match_id": 1,
        "teams": {"home": {"name": "Lens"}, "away": {"name": "Brest"}},
        "signals": {"xg": {"home": 1.7, "away": 0.9}},
        "odds": {"best": {
            "ft_1x2_home": {"odds": 2.4, "book": "bet365"},
            "ft_1x2_draw": {"odds": 3.4, "book": "bet365"},
            "ft_1x2_away": {"odds": 3.1, "book": "bet365"},
            "btts_no": 2.0,
        }},
        "meta": {"date_unix": 1714845600},
    },
    {
        "match_id": 2,
        "teams": {"home": {"name": "Metz"}, "away": {"name": "Lorient"}},
        "signals": {"ppg": {"home": 1.9, "away": 1.1}},
        "odds": {"best": {"ft_goals_over_1.5": 1.6, "ft_goals_under_1.5": 2.3}},
        "meta": {"date_unix": 1714932000},
    },
    {"teams": {}},
]


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    return CliRunner()


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "matches.json"
    path.write_text(json.dumps(RECORDS))
    return path


class TestScan:

    def test_writes_json_and_csv(self, runner, input_file, tmp_path):
        out = tmp_path / "out" / "scan.json"
        result = runner.invoke(cli, ["scan", str(input_file), "-o", str(out)])

        assert result.exit_code == 0, result.output
        outputs = json.loads(out.read_text())
        assert [o["match_id"] for o in outputs] == ["1", "2", None]
        assert "error" in outputs[2]
        assert out.with_suffix(".csv").exists()

    def test_single_object_input(self, runner, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps(RECORDS[0]))
        out = tmp_path / "one_out.json"
        result = runner.invoke(cli, ["scan", str(path), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert len(json.loads(out.read_text())) == 1

    def test_unreadable_input(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        result = runner.invoke(cli, ["scan", str(path)])
        assert result.exit_code != 0


class TestPortfolioCommands:

    def test_portfolio_per_day(self, runner, input_file, tmp_path):
        out = tmp_path / "portfolio.json"
        result = runner.invoke(cli, ["portfolio", str(input_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert list(json.loads(out.read_text())) == ["2024-05-04", "2024-05-05"]

    def test_global_limit_option(self, runner, input_file, tmp_path):
        out = tmp_path / "global.json"
        result = runner.invoke(cli, ["global", str(input_file), "--limit", "1", "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert len(data["portfolio"]) == 1
        assert data["stats"]["matches_processed"] == 2

    def test_board_window(self, runner, input_file, tmp_path):
        out = tmp_path / "board.json"
        result = runner.invoke(cli, ["board", str(input_file), "--start", "2024-05-04",
                                     "--end", "2024-05-04", "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert data["meta"]["window"] == {"start": "2024-05-04", "end": "2024-05-04"}

    def test_run_saves_output(self, runner, input_file, tmp_path):
        out_dir = tmp_path / "run"
        result = runner.invoke(cli, ["run", str(input_file), "-o", str(out_dir)])
        assert result.exit_code == 0, result.output
        assert list(out_dir.glob("valueplay_*.json"))
        assert list(out_dir.glob("value_bets_*.csv"))


class TestConfigOption:

    def test_config_overrides(self, runner, input_file, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"global_limit": 1}))
        out = tmp_path / "global.json"
        result = runner.invoke(cli, ["--config", str(config), "global", str(input_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert len(json.loads(out.read_text())["portfolio"]) == 1
