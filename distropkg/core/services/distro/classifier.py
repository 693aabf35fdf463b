"""
Distro classification rules (pure).

Maps raw ``lsb_release`` strings to a package family and a distro tag.
No I/O, no subprocess.

Vendor matching is a regex *search*, so ``RedHatEnterpriseServer``
matches ``Red.*Hat`` and ``openSUSE Leap`` matches ``openSUSE``.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from distropkg.core.errors import UnrecognizedDistroError, UnsupportedPlatformError
from distropkg.core.models.distro import DistroInfo, OsRelease, PackageFamily

logger = logging.getLogger(__name__)

_DEB_VENDORS = re.compile(r"Debian|Ubuntu|LinuxMint")

# Vendors known to be rpm-based; anything else defaulting to rpm is a guess.
_RPM_VENDORS = re.compile(
    r"Fedora|Red.*Hat|CentOS|OracleServer|Virtuozzo|kvmibm|openSUSE|SUSE LINUX|XenServer"
)


def _major(release: str) -> str:
    """Drop the last dotted component: ``12.3`` → ``12``, ``7`` → ``7``."""
    return release.rsplit(".", 1)[0]


def _first_char(release: str) -> str:
    return release[:1]


# (vendor pattern, tag builder); first match wins
_TAG_RULES: list[tuple[re.Pattern[str], Callable[[str, str, str], str]]] = [
    (re.compile(r"Ubuntu|Debian|LinuxMint"), lambda v, r, c: c),
    (re.compile(r"Fedora"), lambda v, r, c: f"f{r}"),
    (re.compile(r"openSUSE"), lambda v, r, c: f"opensuse-{r}"),
    (re.compile(r"SUSE LINUX"), lambda v, r, c: f"sle{_major(r)}"),
    (
        re.compile(r"Red.*Hat|CentOS|OracleServer|Virtuozzo"),
        lambda v, r, c: f"rhel{_first_char(r)}",
    ),
    (re.compile(r"XenServer"), lambda v, r, c: f"xs{_major(r)}"),
    (re.compile(r"kvmibm"), lambda v, r, c: f"{v}{_first_char(r)}"),
]


def classify_family(vendor: str, *, strict: bool = False) -> PackageFamily:
    """Return the package family for ``vendor``.

    Debian-family vendors are ``deb``; everything else is ``rpm``.  An
    unknown vendor silently landing on rpm is a latent risk, so it is
    logged; with ``strict`` it raises instead.

    Raises:
        UnsupportedPlatformError: ``strict`` and the vendor is unknown.
    """
    if _DEB_VENDORS.search(vendor):
        return PackageFamily.DEB
    if not _RPM_VENDORS.search(vendor):
        if strict:
            raise UnsupportedPlatformError(
                f"Unknown vendor {vendor!r}: cannot tell its package family"
            )
        logger.warning("Unknown vendor %r, assuming an rpm-based distribution", vendor)
    return PackageFamily.RPM


def compute_distro_tag(vendor: str, release: str, codename: str) -> str:
    """Translate vendor/release/codename into the short distro tag.

    Raises:
        UnrecognizedDistroError: No rule matches the vendor.
    """
    for pattern, build in _TAG_RULES:
        if pattern.search(vendor):
            return build(vendor, release, codename)
    raise UnrecognizedDistroError(
        f"Unable to determine DISTRO for vendor {vendor!r}, can not continue."
    )


def build_distro_info(os_release: OsRelease, *, strict: bool = False) -> DistroInfo:
    """Combine the raw strings with their derived family and tag."""
    return DistroInfo(
        vendor=os_release.vendor,
        release=os_release.release,
        codename=os_release.codename,
        package_family=classify_family(os_release.vendor, strict=strict),
        distro_tag=compute_distro_tag(
            os_release.vendor, os_release.release, os_release.codename,
        ),
    )


# ── Vendor predicates (pure) ────────────────────────────────────

_FEDORA_VENDORS = frozenset({
    "Fedora",
    "Red Hat",
    "RedHatEnterpriseServer",
    "CentOS",
    "OracleServer",
    "Virtuozzo",
    "kvmibm",
})


def ubuntu_like(info: DistroInfo) -> bool:
    """Ubuntu, Debian, Mint: anything deb-packaged."""
    return info.package_family is PackageFamily.DEB


def fedora_like(info: DistroInfo) -> bool:
    """Fedora, RHEL, CentOS and their rebuilds."""
    return info.vendor in _FEDORA_VENDORS


def suse_like(info: DistroInfo) -> bool:
    """openSUSE and SLE."""
    return "openSUSE" in info.vendor or info.vendor == "SUSE LINUX"


def oracle_like(info: DistroInfo) -> bool:
    return info.vendor == "OracleServer"
