"""
Error taxonomy — every failure the package layer can surface.

Library code raises these; only the CLI entrypoint turns them into a
process exit (see ``distropkg.core.observability.diagnostics.die``).
Each class carries the exit code the process terminates with.
"""

from __future__ import annotations


class DistroPkgError(Exception):
    """Base class for all distropkg failures."""

    exit_code: int = 1


class ConfigError(DistroPkgError):
    """Raised when configuration is invalid or unreadable."""


class UnsupportedPlatformError(DistroPkgError):
    """The host has no package manager (or lsb_release) we know how to drive."""


class UnrecognizedDistroError(DistroPkgError):
    """The vendor string matches no distro tag rule."""


class InvalidArgumentError(DistroPkgError):
    """A caller passed a malformed argument."""


class RepoUpdateError(DistroPkgError):
    """Package metadata refresh kept failing until its time budget ran out."""


class InstallError(DistroPkgError):
    """A retryable install failure persisted after the single retry."""

    def __init__(self, message: str, packages: list[str] | None = None):
        super().__init__(message)
        self.packages = list(packages or [])


class FatalInstallError(InstallError):
    """A package genuinely failed to install. Never retried."""

    exit_code = 2
