"""
Package resolver — from a service list to OS package names.

Services name their own manifest (``<package_dir>/<service>``) and also
pull in the manifest of the component group they belong to, decided by
name prefix.  ``n-api`` additionally needs glance, because that is where
the glance client comes from.

Only packages for the requested services are returned; see
``distropkg.core.services.packages.manifest`` for line filtering.
"""

from __future__ import annotations

import logging
from pathlib import Path

from distropkg.adapters.shell.command import CommandRunner
from distropkg.core.config.loader import Settings, load_settings
from distropkg.core.context import RunState, get_run_state
from distropkg.core.errors import InvalidArgumentError
from distropkg.core.models.distro import DistroInfo, PackageFamily
from distropkg.core.services.distro.classifier import suse_like
from distropkg.core.services.distro.detect import detect_os
from distropkg.core.services.packages.manifest import parse_package_files

logger = logging.getLogger(__name__)

# (match kind, pattern, groups); first match wins, so "n-api" must precede "n-"
_GROUP_RULES: list[tuple[str, str, tuple[str, ...]]] = [
    ("exact", "n-api", ("nova", "glance")),
    ("prefix", "c-", ("cinder",)),
    ("prefix", "s-", ("swift",)),
    ("prefix", "n-", ("nova",)),
    ("prefix", "g-", ("glance",)),
    ("prefix", "key", ("keystone",)),
    ("prefix", "q-", ("neutron",)),
    ("prefix", "ir-", ("ironic",)),
]


def groups_for_service(service: str) -> tuple[str, ...]:
    """Component groups a service token pulls in (may be empty)."""
    for kind, pattern, groups in _GROUP_RULES:
        if kind == "exact" and service == pattern:
            return groups
        if kind == "prefix" and service.startswith(pattern):
            return groups
    return ()


def select_manifest_files(services: str, package_dir: Path) -> list[Path]:
    """Manifest files for a comma-separated service list, deduplicated.

    A service's own manifest is only selected when it is a regular file;
    group manifests are always selected and missing ones parse as empty.
    """
    selected: list[Path] = []

    def add(path: Path) -> None:
        if path not in selected:
            selected.append(path)

    for service in (s.strip() for s in services.split(",")):
        if not service:
            continue
        own = package_dir / service
        if own.is_file():
            add(own)
        for group in groups_for_service(service):
            add(package_dir / group)

    return selected


def package_dir_for(info: DistroInfo, files_dir: Path) -> Path:
    """Manifest directory for the host: ``debs``, ``rpms`` or ``rpms-suse``."""
    if info.package_family is PackageFamily.DEB:
        return files_dir / "debs"
    if suse_like(info):
        return files_dir / "rpms-suse"
    return files_dir / "rpms"


def resolve_packages(
    *args: str,
    package_dir: Path,
    distro_tag: str,
) -> list[str]:
    """Resolve one comma-separated service list into package names.

    Raises:
        InvalidArgumentError: Not exactly one positional argument.
    """
    if len(args) != 1:
        raise InvalidArgumentError(
            "get_packages takes a single, comma-separated argument"
        )

    files = select_manifest_files(args[0], Path(package_dir))
    logger.debug("Manifests for %r: %s", args[0], [str(f) for f in files])
    return parse_package_files(files, distro_tag)


def get_packages(
    *args: str,
    settings: Settings | None = None,
    state: RunState | None = None,
    runner: CommandRunner | None = None,
) -> list[str]:
    """Resolve services against the configured files directory and host distro.

    Raises:
        InvalidArgumentError: Wrong argument count, or no files directory
            configured.
    """
    if len(args) != 1:
        raise InvalidArgumentError(
            "get_packages takes a single, comma-separated argument"
        )

    settings = settings or load_settings()
    if settings.files_dir is None:
        raise InvalidArgumentError("No package directory supplied")

    info = detect_os(
        state if state is not None else get_run_state(), runner, settings,
    )
    return resolve_packages(
        args[0],
        package_dir=package_dir_for(info, settings.files_dir),
        distro_tag=info.distro_tag,
    )
