"""
Installer façade — package re-exports and collaborator functions.

The module-level functions mirror the interface the deployment scripts
call (``install_package``, ``uninstall_package``,
``is_package_installed``) and share one installer per process::

    from distropkg.core.services.installer import install_package
    install_package("qemu-kvm", "libvirt-bin")
"""

from __future__ import annotations

from typing import Optional

from distropkg.core.services.installer.facade import PackageInstaller
from distropkg.core.services.installer.output import (  # noqa: F401
    YUM_FAILURE_PATTERNS_VERSION,
    classify_yum_output,
)

_installer: Optional[PackageInstaller] = None


def get_installer() -> PackageInstaller:
    """Return the process-wide installer, creating it on first use."""
    global _installer
    if _installer is None:
        _installer = PackageInstaller()
    return _installer


def set_installer(installer: Optional[PackageInstaller]) -> None:
    """Replace (or with None, drop) the process-wide installer."""
    global _installer
    _installer = installer


def install_package(*names: str) -> None:
    get_installer().install_packages(names)


def uninstall_package(*names: str) -> None:
    get_installer().uninstall_packages(names)


def is_package_installed(*names: str) -> bool:
    return get_installer().is_installed(names)


__all__ = [
    "PackageInstaller",
    "YUM_FAILURE_PATTERNS_VERSION",
    "classify_yum_output",
    "get_installer",
    "install_package",
    "is_package_installed",
    "set_installer",
    "uninstall_package",
]
