"""
JetBrains Updater — CLI entrypoint.

Usage:
    jetbrains-updater                 # same as "update"
    jetbrains-updater update --keep-going
    jetbrains-updater check
    jetbrains-updater config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from jbupdater import __version__
from jbupdater.core.observability.logging_config import setup_logging

_STATUS_STYLE = {
    "updated": ("✓", "green"),
    "up_to_date": ("=", "cyan"),
    "outdated": ("↑", "yellow"),
    "skipped": ("⊘", "white"),
    "failed": ("✗", "red"),
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="jetbrains-updater")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to the config file (default: updater.yml or config.json in the cwd).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """JetBrains Updater — install the newest build of configured IDEs."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("JBU_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("JBU_LOG_FILE"),
        log_file_level=os.environ.get("JBU_LOG_FILE_LEVEL"),
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(update)


@cli.command()
@click.option(
    "--keep-going",
    is_flag=True,
    help="Continue with the next product when a download or extraction fails.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def update(ctx: click.Context, keep_going: bool = False, as_json: bool = False) -> None:
    """Download and install newer builds of every enabled product."""
    from jbupdater.core.use_cases.update import run_update

    result = run_update(config_path=ctx.obj.get("config_path"), keep_going=keep_going)
    _emit(ctx, result, as_json, title="Update")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Show which products have a newer build, without installing."""
    from jbupdater.core.use_cases.update import run_update

    result = run_update(config_path=ctx.obj.get("config_path"), dry_run=True)
    _emit(ctx, result, as_json, title="Check")


def _emit(ctx: click.Context, result, as_json: bool, title: str) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None

    if not ctx.obj.get("quiet"):
        click.secho(f"\n📦 {title}: {report.total} product(s)", fg="cyan", bold=True)
        for outcome in report.outcomes:
            icon, color = _STATUS_STYLE.get(outcome.status, ("?", "white"))
            click.secho(f"   {icon} {outcome.product} ", fg=color, nl=False)
            click.echo(_describe(outcome))

    if report.aborted:
        click.echo()
        click.secho("   Run aborted after the first failure.", fg="red")

    if report.failed > 0:
        click.echo()
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        click.echo()


def _describe(outcome) -> str:
    if outcome.status == "failed":
        return f"failed: {outcome.error}"
    if outcome.status == "skipped":
        return f"skipped ({outcome.message})"
    installed = outcome.installed_build or "none"
    if outcome.status == "updated":
        return f"{installed} → {outcome.candidate_build}"
    if outcome.status == "outdated":
        return f"{installed} → {outcome.candidate_build} available"
    return f"{installed} (latest {outcome.candidate_build})"


@cli.group()
def config() -> None:
    """Updater configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate the updater config file."""
    from jbupdater.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.settings is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Catalog: {result.settings.catalog}")
        click.echo(f"   Products: {len(result.settings.products)}")
        click.echo(f"   Enabled: {len(result.settings.enabled_products())}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
