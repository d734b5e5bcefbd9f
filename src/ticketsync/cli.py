"""CLI entry point for ticketsync.

A run loads a snapshot of open linked tickets and the tracked users' pull
requests, moves each ticket to the status its pull request implies, and then
files tickets for old enough pull requests that nobody linked.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ticketsync.codehost import CodeHostClient
from ticketsync.config import ConfigError, SyncConfig, find_config, load_config
from ticketsync.exceptions import RemoteError
from ticketsync.generator import TicketGenerator
from ticketsync.logging import setup_logging
from ticketsync.reconcile import ReconciliationEngine, TransitionApplier
from ticketsync.runner import RunReport, SyncRunner
from ticketsync.snapshot import SnapshotLoader
from ticketsync.tracker import TrackerClient


def build_runner(
    config: SyncConfig,
    tracker: TrackerClient,
    codehost: CodeHostClient,
    generate: bool = True,
    dry_run: bool = False,
) -> SyncRunner:
    """Wire the run components around already constructed clients."""
    loader = SnapshotLoader(
        tracker=tracker,
        codehost=codehost,
        tracker_config=config.tracker,
        codehost_config=config.codehost,
        workflow=config.workflow,
    )
    engine = ReconciliationEngine(
        tracker=tracker,
        codehost=codehost,
        applier=TransitionApplier(tracker),
        workflow=config.workflow,
        link_field_id=config.tracker.link_field_id,
        dry_run=dry_run,
    )
    generator = None
    if generate and config.generator.enabled:
        generator = TicketGenerator(
            tracker=tracker,
            tracker_config=config.tracker,
            generator_config=config.generator,
            dry_run=dry_run,
        )
    return SyncRunner(
        loader=loader,
        engine=engine,
        generator=generator,
        max_workers=config.run.max_workers,
    )


def _echo_report(report: RunReport) -> None:
    for outcome in sorted(report.tickets, key=lambda o: o.ticket_key):
        if outcome.error:
            click.echo(f"  {outcome.ticket_key}: {outcome.status} - {outcome.error}", err=True)
        elif outcome.decision.target:
            click.echo(f"  {outcome.ticket_key}: {outcome.status} -> {outcome.decision.target}")
    for generated in sorted(report.generated, key=lambda o: o.pr_url):
        line = f"  {generated.pr_url}: {generated.status}"
        if generated.ticket_key:
            line += f" ({generated.ticket_key})"
        if generated.error:
            click.echo(f"{line} - {generated.error}", err=True)
        else:
            click.echo(line)
    click.echo(report.summary())


@click.group()
@click.version_option(package_name="ticketsync")
def main() -> None:
    """ticketsync - keep Jira tickets in step with their GitHub pull requests."""
    pass


@main.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to ticketsync.yaml (auto-detected if not specified)",
)
@click.option("--no-generate", is_flag=True, help="Don't create tickets for unlinked PRs")
@click.option("--dry-run", is_flag=True, help="Decide and log, but change nothing in Jira")
@click.option(
    "--workers",
    "num_workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of concurrent tasks (default: from config or 8)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def run(
    config_path: Path | None,
    no_generate: bool,
    dry_run: bool,
    num_workers: int | None,
    verbose: bool,
) -> None:
    """Run one synchronization pass."""
    setup_logging(level="DEBUG" if verbose else None)

    try:
        if config_path is None:
            config_path = find_config()
        config = load_config(config_path, generate=False if no_generate else None)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    if num_workers is not None:
        config.run.max_workers = num_workers

    tracker = TrackerClient(
        host=config.tracker.host,
        username=config.tracker.username,
        password=config.tracker.password,
        link_field_id=config.tracker.link_field_id,
    )
    codehost = CodeHostClient(
        token=config.codehost.token,
        username=config.codehost.username,
        base_url=config.codehost.base_url,
    )

    try:
        tracker.authenticate()
        runner = build_runner(
            config, tracker, codehost, generate=not no_generate, dry_run=dry_run
        )
        report = runner.run()
    except RemoteError as e:
        click.echo(f"Sync aborted: {e}", err=True)
        sys.exit(1)
    finally:
        tracker.close()
        codehost.close()

    _echo_report(report)
    if report.generation_error:
        click.echo(f"Ticket generation error: {report.generation_error}", err=True)
        sys.exit(1)
