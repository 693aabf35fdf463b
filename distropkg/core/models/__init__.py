"""
Domain models — Pydantic types for distropkg.

All models are re-exported here for convenient access:

    from distropkg.core.models import DistroInfo, PackageFamily, InstallStatus
"""

from distropkg.core.models.distro import (
    DistroInfo,
    OsRelease,
    PackageFamily,
    PackageManagerKind,
)
from distropkg.core.models.install import InstallStatus
from distropkg.core.models.manifest import PackageManifestEntry

__all__ = [
    "DistroInfo",
    "InstallStatus",
    "OsRelease",
    "PackageFamily",
    "PackageManagerKind",
    "PackageManifestEntry",
]
