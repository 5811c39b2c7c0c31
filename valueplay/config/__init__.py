"""
Configuration management for VALUEPLAY.

Loads settings from environment variables with sensible defaults.
Configures logging with rotation to prevent unbounded log growth.
"""

import os
import logging
import logging.handlers
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env file
load_dotenv()

# Project paths (valueplay/config/__init__.py -> repo root)
PROJECT_ROOT = Path(__file__).parent.parent.parent
OUTPUT_DIR = PROJECT_ROOT / "outputs"
LOG_DIR = PROJECT_ROOT / "logs"


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    max_bytes: int = 5 * 1024 * 1024,  # 5 MB per file
    backup_count: int = 3,
) -> None:
    """Configure logging with console output AND rotating file handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (defaults to PROJECT_ROOT/logs)
        max_bytes: Max size per log file before rotation (default 5MB)
        backup_count: Number of rotated backup files to keep
    """
    log_dir = Path(log_dir) if log_dir else LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers to avoid duplicates on reload
    root.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "valueplay.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


def _env_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class Config:
    """Application configuration."""

    # Mode
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_dir: Path = field(default_factory=lambda: Path(os.getenv("LOG_DIR", str(LOG_DIR))))
    output_dir: Path = field(default_factory=lambda: Path(os.getenv("OUTPUT_DIR", str(OUTPUT_DIR))))

    # Kickoff days are bucketed in this timezone
    timezone: str = field(default_factory=lambda: os.getenv("VALUEPLAY_TIMEZONE", "Europe/Paris"))

    # Staking hints
    kelly_fraction: float = field(default_factory=lambda: _env_float("KELLY_FRACTION", "0.25"))

    # Engine
    first_half_split: float = 0.45
    second_half_split: float = 0.55
    half_max_goals: int = 5

    # Daily portfolio
    core_prob_min: float = field(default_factory=lambda: _env_float("CORE_PROB_MIN", "0.55"))
    value_prob_min: float = field(default_factory=lambda: _env_float("VALUE_PROB_MIN", "0.35"))
    mid_combo_min_odds: float = field(default_factory=lambda: _env_float("MID_COMBO_MIN_ODDS", "3.0"))
    mid_combo_max_odds: float = field(default_factory=lambda: _env_float("MID_COMBO_MAX_ODDS", "5.0"))
    min_confidence: float = field(default_factory=lambda: _env_float("MIN_CONFIDENCE", "0.0"))
    min_edge: Optional[float] = field(default_factory=lambda: _env_optional_float("MIN_EDGE"))

    # Global portfolio
    global_limit: int = field(default_factory=lambda: _env_int("GLOBAL_LIMIT", "15"))
    max_per_match: int = field(default_factory=lambda: _env_int("MAX_PER_MATCH", "2"))
    max_per_category: int = field(default_factory=lambda: _env_int("MAX_PER_CATEGORY", "1"))

    def __post_init__(self):
        """Validate ranges that would silently break the engine."""
        if not 0 < self.kelly_fraction <= 1:
            raise ValueError(f"kelly_fraction must be in (0, 1], got {self.kelly_fraction}")
        if self.half_max_goals < 1:
            raise ValueError(f"half_max_goals must be positive, got {self.half_max_goals}")
        if self.mid_combo_min_odds > self.mid_combo_max_odds:
            raise ValueError(
                f"mid_combo_min_odds ({self.mid_combo_min_odds}) exceeds "
                f"mid_combo_max_odds ({self.mid_combo_max_odds})"
            )

    def apply_overrides(self, overrides: dict) -> "Config":
        """Apply a flat dict of overrides (e.g. from a JSON config file)."""
        for key, value in overrides.items():
            if not hasattr(self, key):
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            current = getattr(self, key)
            if isinstance(current, Path):
                value = Path(value)
            setattr(self, key, value)
        self.__post_init__()
        return self


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config
