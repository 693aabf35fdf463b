"""
distropkg — CLI entrypoint.

Usage:
    python -m distropkg.main --help
    python -m distropkg.main detect
    python -m distropkg.main packages get n-api,c-vol
    python -m distropkg.main packages install qemu-kvm
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import click

from distropkg import __version__
from distropkg.core.observability.logging_config import setup_logging
from distropkg.ui.cli.packages import packages, run_or_die


@click.group()
@click.version_option(version=__version__, prog_name="distropkg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--timings", is_flag=True, help="Print package operation timings at exit.")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Log privileged package commands instead of running them.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to distropkg.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    timings: bool,
    dry_run: bool,
    config_path: Path | None,
) -> None:
    """distropkg — distro detection and native package management."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["dry_run"] = dry_run

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(debug=debug, verbose=verbose, quiet=quiet, environ=os.environ)

    # ── Settings + run state ────────────────────────────────────
    from distropkg.core.config.loader import load_settings
    from distropkg.core.context import reset_run_state
    from distropkg.core.services.installer import PackageInstaller, set_installer

    settings = run_or_die(ctx, lambda: load_settings(config_path))
    state = reset_run_state(settings)
    installer = PackageInstaller(settings=settings, state=state)
    installer.runner.dry_run = dry_run
    set_installer(installer)

    ctx.obj["settings"] = settings
    ctx.obj["state"] = state
    ctx.obj["installer"] = installer

    if timings:
        ctx.call_on_close(lambda: _print_timings(installer))


def _print_timings(installer) -> None:
    rows = installer.timer.summary()
    if not rows:
        return
    click.echo("Package operation timings:", err=True)
    for row in rows:
        click.echo(
            f"   {row['name']:<16} {row['count']:>3}x  total {row['total']:.1f}s  max {row['max']:.1f}s",
            err=True,
        )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Detect the host distribution."""
    installer = ctx.obj["installer"]
    info = run_or_die(ctx, lambda: installer.distro)

    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2))
        return

    click.secho(f"\n🐧 {info.vendor} {info.release}", fg="cyan", bold=True)
    if info.codename:
        click.echo(f"   Codename: {info.codename}")
    click.echo(f"   Package family: {info.package_family.value}")
    click.echo(f"   Distro tag: {info.distro_tag}")
    click.echo()


cli.add_command(packages)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
