"""
Distro detection — probe the host and cache the result.

``lsb_release`` is the only supported identification tool.  When it is
missing we make a *best effort* to install it with whichever native
package manager is present (the generic installer cannot be used for
this: it depends on detection).

The ``is_*`` predicates accept an explicit ``DistroInfo``; called
without one they detect lazily through the run state.
"""

from __future__ import annotations

import logging
import platform
from typing import NoReturn

from distropkg.adapters.shell.command import CommandRunner
from distropkg.core.config.loader import Settings, load_settings
from distropkg.core.context import RunState, get_run_state
from distropkg.core.errors import UnsupportedPlatformError
from distropkg.core.models.distro import DistroInfo, OsRelease, PackageManagerKind
from distropkg.core.services.distro.classifier import (
    build_distro_info,
    fedora_like,
    oracle_like,
    suse_like,
    ubuntu_like,
)

logger = logging.getLogger(__name__)

# Ordered: zypper before yum/dnf because older SUSE hosts also ship yum,
# and SUSE names the package just "lsb".
_LSB_INSTALLERS: list[tuple[str, list[str]]] = [
    ("apt-get", ["apt-get", "install", "-y", "lsb-release"]),
    ("zypper", ["zypper", "-n", "install", "lsb"]),
    ("dnf", ["dnf", "install", "-y", "redhat-lsb-core"]),
    ("yum", ["yum", "install", "-y", "redhat-lsb-core"]),
]


def ensure_lsb_release(runner: CommandRunner) -> None:
    """Make sure ``lsb_release`` is on PATH, installing it if we can.

    Raises:
        UnsupportedPlatformError: No package manager could provide it.
    """
    if runner.which("lsb_release"):
        return

    for tool, argv in _LSB_INSTALLERS:
        if runner.which(tool):
            logger.info("lsb_release missing, installing it with %s", tool)
            result = runner.run(argv, privileged=True)
            if not result.ok:
                logger.warning("Installing lsb_release with %s failed (exit %d)", tool, result.returncode)
            return

    raise UnsupportedPlatformError("Unable to find or auto-install lsb_release")


def _lsb_field(runner: CommandRunner, flag: str) -> str:
    result = runner.run(["lsb_release", flag, "-s"])
    if not result.ok:
        raise UnsupportedPlatformError(
            f"lsb_release {flag} failed (exit {result.returncode}): {result.stderr.strip()}"
        )
    return result.stdout.strip()


def probe_os(runner: CommandRunner | None = None) -> OsRelease:
    """Read vendor, release and codename from ``lsb_release``."""
    runner = runner or CommandRunner()
    ensure_lsb_release(runner)
    return OsRelease(
        release=_lsb_field(runner, "-r"),
        codename=_lsb_field(runner, "-c"),
        vendor=_lsb_field(runner, "-i"),
    )


def detect_os(
    state: RunState | None = None,
    runner: CommandRunner | None = None,
    settings: Settings | None = None,
) -> DistroInfo:
    """Return the host's ``DistroInfo``, detecting it on first use.

    Raises:
        UnsupportedPlatformError: lsb_release unavailable (or, with
            ``strict_family``, the vendor's family is unknown).
        UnrecognizedDistroError: No distro tag rule matches the vendor.
    """
    state = state if state is not None else get_run_state()
    if state.distro is not None:
        return state.distro

    settings = settings or load_settings()
    os_release = probe_os(runner)
    info = build_distro_info(os_release, strict=settings.strict_family)
    logger.info(
        "Detected %s %s (%s), family=%s tag=%s",
        info.vendor, info.release, info.codename,
        info.package_family.value, info.distro_tag,
    )
    state.distro = info
    return info


# ── Predicates ──────────────────────────────────────────────────


def is_ubuntu(info: DistroInfo | None = None) -> bool:
    """Ubuntu-based (covers Debian and Mint too)."""
    return ubuntu_like(info or detect_os())


def is_fedora(info: DistroInfo | None = None) -> bool:
    """Fedora-based (Fedora, RHEL, CentOS, ...)."""
    return fedora_like(info or detect_os())


def is_suse(info: DistroInfo | None = None) -> bool:
    """SUSE-based (openSUSE, SLE)."""
    return suse_like(info or detect_os())


def is_oraclelinux(info: DistroInfo | None = None) -> bool:
    return oracle_like(info or detect_os())


def is_arch(arch: str) -> bool:
    """Whether the machine architecture is ``arch`` (e.g. ``x86_64``)."""
    return platform.machine() == arch


def exit_distro_not_supported(what: str | None = None, info: DistroInfo | None = None) -> NoReturn:
    """Raise the standard "support is incomplete" error for this distro."""
    tag = info.distro_tag if info else "this distribution"
    if what:
        raise UnsupportedPlatformError(f"Support for {tag} is incomplete: no support for {what}")
    raise UnsupportedPlatformError(f"Support for {tag} is incomplete.")


def package_manager_kind(info: DistroInfo, what: str = "installing packages") -> PackageManagerKind:
    """Pick the native package manager for ``info``."""
    if ubuntu_like(info):
        return PackageManagerKind.APT
    if fedora_like(info):
        return PackageManagerKind.YUM
    if suse_like(info):
        return PackageManagerKind.ZYPPER
    exit_distro_not_supported(what, info)
