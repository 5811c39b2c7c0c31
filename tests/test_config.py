import pytest
import sys
import logging
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from valueplay.config import Config, get_config, reload_config, setup_logging


class TestConfig:

    def test_defaults(self, monkeypatch):
        for var in ("KELLY_FRACTION", "GLOBAL_LIMIT", "MAX_PER_MATCH", "MAX_PER_CATEGORY", "VALUEPLAY_TIMEZONE", "MIN_EDGE"):
            monkeypatch.delenv(var, raising=False)
        config = Config()
        assert config.kelly_fraction == 0.25
        assert config.timezone == "Europe/Paris"
        assert (config.global_limit, config.max_per_match, config.max_per_category) == (15, 2, 1)
        assert (config.mid_combo_min_odds, config.mid_combo_max_odds) == (3.0, 5.0)
        assert config.min_edge is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GLOBAL_LIMIT", "8")
        monkeypatch.setenv("KELLY_FRACTION", "0.5")
        config = Config()
        assert config.global_limit == 8
        assert config.kelly_fraction == 0.5

    def test_min_edge_from_env(self, monkeypatch):
        monkeypatch.setenv("MIN_EDGE", "0.02")
        monkeypatch.setenv("MIN_CONFIDENCE", "50")
        config = Config()
        assert config.min_edge == 0.02
        assert config.min_confidence == 50.0

        monkeypatch.setenv("MIN_EDGE", "")
        assert Config().min_edge is None

    def test_invalid_kelly_fraction(self, monkeypatch):
        monkeypatch.setenv("KELLY_FRACTION", "1.5")
        with pytest.raises(ValueError):
            Config()

    def test_invalid_combo_range(self):
        with pytest.raises(ValueError):
            Config(mid_combo_min_odds=6.0, mid_combo_max_odds=5.0)

    def test_apply_overrides(self, caplog):
        config = Config()
        with caplog.at_level(logging.WARNING):
            config.apply_overrides({"global_limit": 5, "log_dir": "/tmp/vp", "nonsense": 1})
        assert config.global_limit == 5
        assert config.log_dir == Path("/tmp/vp")
        assert "nonsense" in caplog.text

    def test_apply_overrides_validates(self):
        with pytest.raises(ValueError):
            Config().apply_overrides({"kelly_fraction": 0})

    def test_global_instance(self):
        first = reload_config()
        assert get_config() is first


class TestSetupLogging:

    def test_writes_rotating_log(self, tmp_path):
        setup_logging("DEBUG", log_dir=tmp_path)
        logging.getLogger("valueplay.test").debug("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello" in (tmp_path / "valueplay.log").read_text()
        logging.getLogger().handlers.clear()
