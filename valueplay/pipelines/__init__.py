"""VALUEPLAY Pipelines - per-match engine and daily batch."""

from .daily import (
    DailyPipeline,
    PipelineConfig,
    EngineConfig,
    analyze_match,
    model_markets,
    export_csv,
    scanner_frame,
    run_daily_pipeline,
)

__all__ = [
    "DailyPipeline",
    "PipelineConfig",
    "EngineConfig",
    "analyze_match",
    "model_markets",
    "export_csv",
    "scanner_frame",
    "run_daily_pipeline",
]
