"""
Distro models — what the host is, as far as packaging cares.

``OsRelease`` holds the raw strings reported by ``lsb_release``.
``DistroInfo`` adds the derived package family and distro tag; it is
computed once per run and cached in the run state.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PackageFamily(str, Enum):
    """Binary package format of the host."""

    DEB = "deb"
    RPM = "rpm"


class PackageManagerKind(str, Enum):
    """Native package manager the installer drives."""

    APT = "apt"
    YUM = "yum"
    ZYPPER = "zypper"


class OsRelease(BaseModel):
    """Raw identification strings, e.g. ``Ubuntu`` / ``14.04`` / ``trusty``."""

    model_config = ConfigDict(frozen=True)

    vendor: str
    release: str
    codename: str = ""


class DistroInfo(BaseModel):
    """Normalized description of the host distribution."""

    model_config = ConfigDict(frozen=True)

    vendor: str
    release: str
    codename: str = ""
    package_family: PackageFamily
    distro_tag: str

    def to_dict(self) -> dict[str, str]:
        return {
            "vendor": self.vendor,
            "release": self.release,
            "codename": self.codename,
            "package_family": self.package_family.value,
            "distro_tag": self.distro_tag,
        }
