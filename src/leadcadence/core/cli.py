"""Command-line interface for cadence generation and call timing."""

import asyncio
import json
from datetime import datetime
from typing import Optional

import click
import structlog

from leadcadence.cadence.engine import generate_cadence
from leadcadence.cadence.models import Channel
from leadcadence.cadence.timing import (
    classify_business_type,
    next_contact_time,
    score_moment,
    window_summary,
)
from leadcadence.core.config import DEFAULT_CONFIG_PATH, load_settings
from leadcadence.core.errors import CadenceError

# Configure structlog for CLI output
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer()
    ]
)

log = structlog.get_logger()


@click.group()
def cli():
    """Lead cadence engine - plan and schedule outreach touches."""


@cli.command()
@click.argument("lead_id")
@click.option("--user", "-u", "user_id", required=True, help="Acting user id")
@click.option("--config", "config_path", type=click.Path(), default=str(DEFAULT_CONFIG_PATH),
              help="Config directory path")
@click.option("--rules", is_flag=True, help="Use the rule-based planner instead of Claude")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def generate(lead_id: str, user_id: str, config_path: str, rules: bool, as_json: bool):
    """Generate and save a cadence for LEAD_ID."""
    from pathlib import Path

    try:
        result = asyncio.run(generate_cadence(lead_id, user_id, Path(config_path), use_rules=rules))
    except CadenceError as e:
        log.error("cadence_generation_failed", lead_id=lead_id, error=e.message)
        click.echo(json.dumps(e.to_dict(), indent=2))
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(f"\nCadence for {lead_id} ({result.business_type})")
    click.echo("─" * 40)
    for step in result.steps:
        when = step.scheduled_at.strftime("%a %Y-%m-%d %H:%M")
        click.echo(f"{step.step_number:>2}. {when}  {step.channel.value:<10} {step.template_name}")

    click.echo("\nReasoning")
    click.echo("─" * 40)
    for note in result.reasoning:
        click.echo(f"{note.step:>2}. [{note.channel}] {note.reasoning or '-'}")


@cli.command()
@click.argument("category")
def windows(category: str):
    """Show the best call windows for a business CATEGORY."""
    business_type = classify_business_type(category)

    click.echo(f"\nBest call windows: {business_type.value}")
    click.echo("───────────────")
    for w in window_summary(business_type):
        click.echo(f"{w['day_label']:<14} {w['time_range']:<18} {w['label']} ({w['quality']})")


@cli.command("next-window")
@click.argument("category")
@click.argument("channel", type=click.Choice([c.value for c in Channel]))
@click.option("--at", "at", type=str, default=None, help="Reference time (ISO 8601)")
@click.option("--config", "config_path", type=click.Path(), default=str(DEFAULT_CONFIG_PATH),
              help="Config directory path")
def next_window(category: str, channel: str, at: Optional[str], config_path: str):
    """Show when to next contact a CATEGORY business on CHANNEL."""
    from pathlib import Path
    from zoneinfo import ZoneInfo

    settings = load_settings(Path(config_path))
    tz = ZoneInfo(settings.timing.timezone)

    if at:
        reference = datetime.fromisoformat(at)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=tz)
    else:
        reference = datetime.now(tz)

    business_type = classify_business_type(category)
    when = next_contact_time(business_type, Channel(channel), reference, settings.timing)
    score = score_moment(category, when)

    click.echo(f"Business type: {business_type.value}")
    click.echo(f"Next {channel}: {when.strftime('%a %Y-%m-%d %H:%M %Z')}")
    click.echo(f"Call timing score: {score.score} ({score.label})")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
