"""
Installer façade — one install/uninstall/query interface over apt,
yum/dnf and zypper.

Install flow per call::

    update repos if needed → attempt install ─┬─ OK        → done
                                              ├─ FATAL     → FatalInstallError
                                              └─ RETRYABLE → forced repo refresh
                                                             → attempt install once more
                                                               ├─ OK → done
                                                               └─ else → (Fatal)InstallError

Bad mirrors are common, so one forced refresh plus one retry is worth
it; anything beyond that is treated as a real failure for the calling
deployment.  Output-classified yum failures are never retried: the
package looks installed on the second pass and the failure would be
masked.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from distropkg.adapters.shell.command import CommandResult, CommandRunner
from distropkg.core.config.loader import Settings, load_settings
from distropkg.core.context import RunState, get_run_state
from distropkg.core.errors import FatalInstallError, InstallError, RepoUpdateError
from distropkg.core.models.distro import DistroInfo, PackageFamily, PackageManagerKind
from distropkg.core.models.install import InstallStatus
from distropkg.core.observability.timing import OperationTimer, get_timer
from distropkg.core.services.distro.classifier import ubuntu_like
from distropkg.core.services.distro.detect import (
    detect_os,
    exit_distro_not_supported,
    package_manager_kind,
)
from distropkg.core.services.installer.output import classify_yum_output, fatal_lines

logger = logging.getLogger(__name__)


class PackageInstaller:
    """Distro-agnostic package operations for one run.

    Not thread-safe; use one instance per thread of control.

    Args:
        settings: Run configuration (default: loaded from env/file).
        state: Run state shared with detection (default: process-wide).
        runner: Command runner for native tools.
        sleep: Sleep function used between repo refresh attempts.
        clock: Monotonic clock bounding the repo refresh budget.
        timer: Per-operation duration recorder.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        state: RunState | None = None,
        runner: CommandRunner | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        timer: OperationTimer | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.state = state if state is not None else get_run_state()
        self.runner = runner or CommandRunner()
        self._sleep = sleep
        self._clock = clock
        self.timer = timer or get_timer()

    @property
    def distro(self) -> DistroInfo:
        return detect_os(self.state, self.runner, self.settings)

    # ── Repo metadata ───────────────────────────────────────────

    def update_repo_if_needed(self, force: bool = False) -> bool:
        """Refresh package metadata unless it is unnecessary.

        Only apt needs an explicit refresh; yum/dnf and zypper refresh
        on every invocation.

        Args:
            force: Refresh even if it already happened this run.

        Returns:
            True if a refresh was performed.

        Raises:
            RepoUpdateError: Refresh kept failing for the whole budget.
        """
        if self.settings.no_update_repos:
            return False
        if not ubuntu_like(self.distro):
            return False
        return self._apt_get_update(force=force)

    def _apt_get_update(self, force: bool) -> bool:
        if self.state.repos_updated and not (force or self.settings.retry_update):
            return False
        if self.settings.offline:
            logger.info("Offline: skipping apt-get update")
            return False

        budget = self.settings.repo_update_timeout
        interval = self.settings.repo_update_interval
        deadline = self._clock() + budget
        attempt = 0

        with self.timer.time("apt-get-update"):
            while True:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise RepoUpdateError(
                        f"Failed to update apt repos within {budget:.0f}s "
                        f"({attempt} attempt(s)), we're dead now"
                    )
                attempt += 1
                result = self.runner.run(
                    ["apt-get", "update"],
                    privileged=True,
                    env=self.settings.proxy_env(),
                    timeout=remaining,
                )
                if result.ok:
                    break
                logger.warning(
                    "apt-get update failed (attempt %d, exit %d), retrying in %.0fs",
                    attempt, result.returncode, interval,
                )
                if self._clock() + interval >= deadline:
                    raise RepoUpdateError(
                        f"Failed to update apt repos within {budget:.0f}s "
                        f"({attempt} attempt(s)), we're dead now"
                    )
                self._sleep(interval)

        self.state.repos_updated = True
        return True

    # ── Install ─────────────────────────────────────────────────

    def attempt_install(self, names: Iterable[str]) -> InstallStatus:
        """Run the native installer once and classify the outcome."""
        packages = list(names)
        if not packages:
            return InstallStatus.OK
        if self.settings.offline:
            logger.info("Offline: not installing %s", " ".join(packages))
            return InstallStatus.OK

        kind = package_manager_kind(self.distro, "installing packages")
        if kind is PackageManagerKind.APT:
            return self._apt_install(packages)
        if kind is PackageManagerKind.YUM:
            return self._yum_install(packages)
        return self._zypper_install(packages)

    def install_packages(self, names: Iterable[str]) -> None:
        """Install ``names``, retrying once after a forced repo refresh.

        Raises:
            FatalInstallError: A package genuinely failed to install.
            InstallError: Install still failed after the retry.
            RepoUpdateError: Repo refresh budget exhausted.
        """
        packages = list(names)
        self.update_repo_if_needed()

        status = self.attempt_install(packages)
        if status is InstallStatus.RETRYABLE:
            logger.warning("Install of %s failed, refreshing repos and retrying once", " ".join(packages))
            self.update_repo_if_needed(force=True)
            status = self.attempt_install(packages)

        if status is InstallStatus.FATAL:
            raise FatalInstallError("Detected fatal package install failure", packages)
        if status is InstallStatus.RETRYABLE:
            raise InstallError(f"Failed to install {' '.join(packages)}", packages)

    def apt_get(self, operation: str, packages: list[str]) -> CommandResult | None:
        """``apt-get`` with non-interactive frontend, confold and proxies.

        Returns None (nothing run) when offline or with no packages.
        """
        if self.settings.offline or not packages:
            return None
        env = {"DEBIAN_FRONTEND": "noninteractive", **self.settings.proxy_env()}
        with self.timer.time("apt-get"):
            return self.runner.run(
                [
                    "apt-get",
                    "--option", "Dpkg::Options::=--force-confold",
                    "--assume-yes",
                    operation,
                    *packages,
                ],
                privileged=True,
                env=env,
            )

    def _apt_install(self, packages: list[str]) -> InstallStatus:
        result = self.apt_get("install", packages)
        if result is None or result.ok:
            return InstallStatus.OK
        return InstallStatus.RETRYABLE

    def _yum_install(self, packages: list[str]) -> InstallStatus:
        env = {"LC_ALL": "C", **self.settings.proxy_env()}
        with self.timer.time("yum_install"):
            result = self.runner.run(
                [self.settings.yum, "install", "-y", *packages],
                privileged=True,
                env=env,
                merge_stderr=True,
            )

        status = classify_yum_output(result.output, result.returncode)
        if status is InstallStatus.FATAL:
            for line in fatal_lines(result.output):
                logger.error("%s: %s", self.settings.yum, line)
        return status

    def _zypper_install(self, packages: list[str]) -> InstallStatus:
        with self.timer.time("zypper_install"):
            result = self.runner.run(
                [
                    "zypper", "--non-interactive",
                    "install", "--auto-agree-with-licenses",
                    *packages,
                ],
                privileged=True,
                env=self.settings.proxy_env(),
            )
        return InstallStatus.OK if result.ok else InstallStatus.RETRYABLE

    # ── Query / remove ──────────────────────────────────────────

    def is_installed(self, names: Iterable[str]) -> bool:
        """Whether every package in ``names`` is installed."""
        packages = list(names)
        if not packages:
            return False

        family = self.distro.package_family
        if family is PackageFamily.DEB:
            return self.runner.run(["dpkg", "-s", *packages]).ok
        if family is PackageFamily.RPM:
            return self.runner.run(["rpm", "--quiet", "-q", *packages]).ok
        exit_distro_not_supported("finding if a package is installed", self.distro)

    def uninstall_packages(self, names: Iterable[str]) -> None:
        """Remove ``names``; tool failures are logged, never raised.

        Raises:
            UnsupportedPlatformError: No package manager for this distro.
        """
        packages = list(names)
        kind = package_manager_kind(self.distro, "uninstalling packages")

        if kind is PackageManagerKind.APT:
            result = self.apt_get("purge", packages)
        elif kind is PackageManagerKind.YUM:
            result = self.runner.run([self.settings.yum, "remove", "-y", *packages], privileged=True)
        else:
            result = self.runner.run(["zypper", "--non-interactive", "rm", *packages], privileged=True)

        if result is not None and not result.ok:
            logger.warning(
                "Uninstall of %s exited %d, ignoring", " ".join(packages), result.returncode,
            )
