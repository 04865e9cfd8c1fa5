"""CLI entry point for trade insights."""

from __future__ import annotations

import json
from datetime import datetime

import click


@click.group()
def main() -> None:
    """Trade Insights journal analytics."""


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--now", "now_str", default=None, help="Evaluation time (ISO 8601); defaults to now")
@click.option("--log-level", default=None, help="Override the configured log level")
@click.option("--indent", default=2, type=int, help="JSON indentation")
def report(
    path: str, config: str | None, now_str: str | None, log_level: str | None, indent: int,
) -> None:
    """Build a full journal report from a JSON array of trades."""
    from pydantic import ValidationError

    from .core.config import load_settings
    from .core.errors import InsightsError
    from .core.models import load_trades
    from .journal.report import build_report
    from .observability.logger import get_logger, new_run_id, setup_logging

    try:
        settings = load_settings(config_path=config)
        setup_logging(
            level=log_level or settings.observability.log_level,
            format=settings.observability.log_format,
        )
    except InsightsError as exc:
        raise click.ClickException(str(exc)) from exc
    new_run_id()
    log = get_logger(__name__)

    now = None
    if now_str:
        try:
            now = datetime.fromisoformat(now_str)
        except ValueError as exc:
            raise click.BadParameter(f"not an ISO 8601 timestamp: {now_str}", param_hint="--now") from exc

    with open(path, encoding="utf-8") as f:
        try:
            records = json.load(f)
        except json.JSONDecodeError as exc:
            raise click.ClickException(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise click.ClickException(f"{path} must contain a JSON array of trade objects")

    try:
        trades = load_trades(records)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid trade record: {exc}") from exc

    result = build_report(trades, now=now, settings=settings)
    log.info("report_built", path=path, trades=len(trades))
    click.echo(json.dumps(result.to_dict(), indent=indent, ensure_ascii=False, default=str))


@main.command("show-config")
@click.option("--config", default=None, help="Config file path (TOML)")
def show_config(config: str | None) -> None:
    """Print the effective settings as JSON."""
    from .core.config import load_settings
    from .core.errors import InsightsError

    try:
        settings = load_settings(config_path=config)
    except InsightsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(settings.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
