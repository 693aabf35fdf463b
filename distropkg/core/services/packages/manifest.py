"""
Manifest parser — package lists with distro-conditional directives.

A manifest is a plain text file, one package per line::

    libxml2-dev
    qemu-kvm        # needed by n-cpu
    python-dev      # dist:trusty,xenial
    openvswitch     # NOPRIME

Two bits of metadata are recognised in the comment part:

- ``NOPRIME`` anywhere on the line defers the package to a later
  install phase; the resolver never returns it.
- ``dist:TAG1,TAG2`` limits the package to the listed distro tags
  (case-insensitive).

Missing or unreadable manifest files simply contribute no packages.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from distropkg.core.models.manifest import PackageManifestEntry

logger = logging.getLogger(__name__)

NOPRIME_MARKER = "NOPRIME"

_DIST_DIRECTIVE = re.compile(r"dist:([^\s#]*)")


def parse_line(line: str) -> PackageManifestEntry | None:
    """Parse one manifest line; None for blank and comment-only lines."""
    name, sep, comment = line.partition("#")
    name = name.strip()
    if not name:
        return None

    distro_filter: frozenset[str] | None = None
    if sep:
        match = _DIST_DIRECTIVE.search(comment)
        if match:
            distro_filter = frozenset(
                tag.strip().lower() for tag in match.group(1).split(",") if tag.strip()
            )

    return PackageManifestEntry(
        package_name=name,
        distro_filter=distro_filter,
        defer_flag=NOPRIME_MARKER in line,
    )


def iter_manifest(path: Path) -> Iterator[PackageManifestEntry]:
    """Yield every entry of ``path``, deferred ones included.

    Undecodable bytes are replaced rather than failing the whole list;
    a path that cannot be read as a file contributes nothing.
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.debug("No manifest at %s", path)
        return
    except OSError as e:
        logger.warning("Skipping unreadable manifest %s: %s", path, e)
        return

    for line in text.splitlines():
        entry = parse_line(line)
        if entry is not None:
            yield entry


def parse_manifest(path: Path, distro_tag: str) -> list[PackageManifestEntry]:
    """Return the entries of ``path`` that apply to ``distro_tag``.

    NOPRIME lines and lines whose ``dist:`` list excludes the tag are
    dropped.
    """
    entries = [e for e in iter_manifest(Path(path)) if e.applies_to(distro_tag)]
    logger.debug("%s: %d package(s) for %s", path, len(entries), distro_tag)
    return entries


def parse_package_files(paths: Iterable[Path], distro_tag: str) -> list[str]:
    """Concatenate package names from ``paths`` in order (no deduplication)."""
    packages: list[str] = []
    for path in paths:
        packages.extend(e.package_name for e in parse_manifest(path, distro_tag))
    return packages
