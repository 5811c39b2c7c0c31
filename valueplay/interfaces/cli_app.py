"""
VALUEPLAY Command Line Interface
================================

Usage:
    valueplay scan matches.json -o outputs/scan.json
    valueplay portfolio matches.json
    valueplay global matches.json --limit 10
    valueplay board matches.json --start 2024-05-01 --end 2024-05-03
    valueplay run matches.json --output-dir outputs
"""

import click
import json
import logging
from pathlib import Path
from typing import List, Optional

from valueplay.config import Config, setup_logging

logger = logging.getLogger(__name__)


def load_records(path: str) -> List[dict]:
    """Read MatchRecords from a JSON file holding a list or a single object."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise click.ClickException(f"{path}: expected a JSON object or list, got {type(data).__name__}")


def _write_or_echo(data, output: Optional[str]):
    text = json.dumps(data, indent=2)
    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        Path(output).write_text(text)
        click.echo(f"💾 Saved to {output}")
    else:
        click.echo(text)


def _read_input(path: str) -> List[dict]:
    try:
        return load_records(path)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Unreadable input {path}: {e}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="JSON file of config overrides")
@click.pass_context
def cli(ctx, verbose: bool, config: Optional[str]):
    """VALUEPLAY - Football value bets and parlay portfolios"""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    cfg = Config()
    if config:
        with open(config) as f:
            cfg.apply_overrides(json.load(f))

    setup_logging("DEBUG" if verbose else cfg.log_level, log_dir=cfg.log_dir)
    ctx.obj["config"] = cfg


def _pipeline(ctx):
    from valueplay.pipelines import DailyPipeline, PipelineConfig
    return DailyPipeline(config=PipelineConfig.from_config(ctx.obj["config"]))


@cli.command()
@click.argument("input_path", type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(), help="Output JSON path (a CSV is written beside it)")
@click.pass_context
def scan(ctx, input_path: str, output: Optional[str]):
    """Analyse matches and list their value bets."""
    from valueplay.pipelines import export_csv

    records = _read_input(input_path)
    pipeline = _pipeline(ctx)
    outputs = pipeline.analyze_all(records)

    failed = [o for o in outputs if o.get("error")]
    for o in failed:
        click.echo(f"❌ {o.get('match_id')}: {o['error']}", err=True)

    if output:
        _write_or_echo(outputs, output)
        csv_path = Path(output).with_suffix(".csv")
        export_csv(outputs, csv_path, pipeline.config.engine.timezone)
        click.echo(f"💾 Saved CSV to {csv_path}")
        click.echo(f"✅ {len(outputs) - len(failed)} matches analysed, {len(failed)} failed")
    else:
        _write_or_echo(outputs, None)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(), help="Output JSON path")
@click.pass_context
def portfolio(ctx, input_path: str, output: Optional[str]):
    """Build one daily portfolio per kickoff day."""
    pipeline = _pipeline(ctx)
    outputs = pipeline.analyze_all(_read_input(input_path))
    _write_or_echo(pipeline.daily_portfolios(outputs), output)


@cli.command(name="global")
@click.argument("input_path", type=click.Path(exists=True))
@click.option("--limit", type=int, default=None, help="Maximum picks in the slate")
@click.option("--max-per-match", type=int, default=None, help="Maximum picks per match")
@click.option("--max-per-category", type=int, default=None, help="Maximum picks per match and market family")
@click.option("--output", "-o", type=click.Path(), help="Output JSON path")
@click.pass_context
def global_portfolio(ctx, input_path: str, limit: Optional[int], max_per_match: Optional[int],
                     max_per_category: Optional[int], output: Optional[str]):
    """Select a diversified slate across all matches."""
    from valueplay.strategy import build_global_portfolio

    pipeline = _pipeline(ctx)
    gp_config = pipeline.config.global_portfolio
    if limit is not None:
        gp_config.global_limit = limit
    if max_per_match is not None:
        gp_config.max_per_match = max_per_match
    if max_per_category is not None:
        gp_config.max_per_category = max_per_category

    outputs = pipeline.analyze_all(_read_input(input_path))
    _write_or_echo(build_global_portfolio(outputs, gp_config), output)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True))
@click.option("--start", type=str, default=None, help="First day (YYYY-MM-DD)")
@click.option("--end", type=str, default=None, help="Last day (YYYY-MM-DD)")
@click.option("--output", "-o", type=click.Path(), help="Output JSON path")
@click.pass_context
def board(ctx, input_path: str, start: Optional[str], end: Optional[str], output: Optional[str]):
    """Build the safe / balanced / booster combo board."""
    from valueplay.strategy import flatten_outputs, generate_combo_board

    pipeline = _pipeline(ctx)
    outputs = pipeline.analyze_all(_read_input(input_path))
    picks = flatten_outputs(outputs, pipeline.config.engine.timezone)
    _write_or_echo(generate_combo_board(picks, start, end, pipeline.config.combo_board), output)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True))
@click.option("--output-dir", "-o", type=click.Path(), default=None, help="Directory for JSON and CSV output")
@click.pass_context
def run(ctx, input_path: str, output_dir: Optional[str]):
    """Run the full pipeline and save its output."""
    click.echo(f"\n{'='*50}")
    click.echo("🎯 VALUEPLAY Daily Run")
    click.echo(f"{'='*50}\n")

    pipeline = _pipeline(ctx)
    result = pipeline.run(_read_input(input_path))
    filepath = pipeline.save_output(result, Path(output_dir) if output_dir else None)

    slate = result["global_portfolio"]["portfolio"]
    if not slate:
        click.echo("❌ No value bets found")
    else:
        click.echo(f"✅ {len(slate)} picks in the global slate:\n")
        for i, pick in enumerate(slate[:10], 1):
            click.echo(f"{i}. {pick['match_name']}")
            click.echo(f"   {pick['market']}: {pick['selection']} @ {pick['odds']:.2f}")
            click.echo(f"   EV: {pick['ev']:.1%}, Confidence: {pick['confidence_score']}")
            click.echo()

    click.echo(f"💾 Saved to {filepath}")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
