"""
CLI commands for native package management.

Thin wrappers over ``distropkg.core.services.packages`` and
``distropkg.core.services.installer``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, TypeVar

import click

from distropkg.core.errors import DistroPkgError

T = TypeVar("T")


def run_or_die(ctx: click.Context, fn: Callable[[], T]) -> T:
    """Call ``fn``; on a distropkg error, report it and terminate."""
    from distropkg.core.observability.diagnostics import die

    try:
        return fn()
    except DistroPkgError as exc:
        settings = ctx.obj.get("settings") if ctx.obj else None
        die(exc, log_dir=settings.log_dir if settings else None)


@click.group()
def packages() -> None:
    """Packages — resolve, install, uninstall, query."""


# ── Resolve ─────────────────────────────────────────────────────


@packages.command("get")
@click.argument("services", nargs=-1)
@click.option(
    "--files-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Manifest root holding debs/, rpms/, rpms-suse/ (default: $FILES).",
)
@click.pass_context
def get(ctx: click.Context, services: tuple[str, ...], files_dir: Path | None) -> None:
    """Print the packages needed by a comma-separated SERVICES list."""
    from distropkg.core.services.packages import get_packages

    settings = ctx.obj["settings"]
    if files_dir is not None:
        settings = settings.model_copy(update={"files_dir": files_dir})

    names = run_or_die(
        ctx, lambda: get_packages(
            *services,
            settings=settings,
            state=ctx.obj["state"],
            runner=ctx.obj["installer"].runner,
        ),
    )
    for name in names:
        click.echo(name)


@packages.command("parse")
@click.argument("manifest", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--distro", "distro_tag", required=True, help="Distro tag to filter for.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def parse(manifest: Path, distro_tag: str, as_json: bool) -> None:
    """Show which entries of one MANIFEST apply to a distro tag."""
    from distropkg.core.services.packages.manifest import iter_manifest

    rows = [
        {
            "package": e.package_name,
            "dist": sorted(e.distro_filter) if e.distro_filter is not None else None,
            "noprime": e.defer_flag,
            "selected": e.applies_to(distro_tag),
        }
        for e in iter_manifest(manifest)
    ]

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    for row in rows:
        marker = "✓" if row["selected"] else " "
        notes = []
        if row["dist"] is not None:
            notes.append("dist:" + ",".join(row["dist"]))
        if row["noprime"]:
            notes.append("NOPRIME")
        suffix = f"  ({'; '.join(notes)})" if notes else ""
        click.echo(f"   {marker} {row['package']}{suffix}")


# ── Act ─────────────────────────────────────────────────────────


@packages.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def install(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Install packages, retrying once after a repo refresh."""
    installer = ctx.obj["installer"]
    run_or_die(ctx, lambda: installer.install_packages(names))


@packages.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def uninstall(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Remove packages (best effort)."""
    installer = ctx.obj["installer"]
    run_or_die(ctx, lambda: installer.uninstall_packages(names))


@packages.command()
@click.argument("names", nargs=-1)
@click.pass_context
def installed(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Exit 0 if every package is installed, 1 otherwise."""
    installer = ctx.obj["installer"]
    ok = run_or_die(ctx, lambda: installer.is_installed(names))
    sys.exit(0 if ok else 1)


@packages.command("update-repos")
@click.option("--force", is_flag=True, help="Refresh even if already done this run.")
@click.pass_context
def update_repos(ctx: click.Context, force: bool) -> None:
    """Refresh package metadata if needed."""
    installer = ctx.obj["installer"]
    refreshed = run_or_die(ctx, lambda: installer.update_repo_if_needed(force=force))
    if not ctx.obj.get("quiet"):
        click.echo("Repositories refreshed" if refreshed else "Repositories left as they are")
