"""
Shared test fixtures and configuration.

No test executes a real package manager: installer and detection tests
run against ``FakeRunner``, which records every command and answers
from a small script of canned results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

import pytest

from distropkg.adapters.shell.command import CommandResult, CommandRunner
from distropkg.core.config.loader import Settings
from distropkg.core.context import RunState, reset_run_state
from distropkg.core.models.distro import DistroInfo, PackageFamily
from distropkg.core.observability.timing import get_timer
from distropkg.core.services.installer import set_installer

_ENV_VARS = (
    "OFFLINE", "NO_UPDATE_REPOS", "RETRY_UPDATE", "REPOS_UPDATED",
    "http_proxy", "https_proxy", "no_proxy", "YUM", "FILES", "LOGDIR",
    "DISTROPKG_STRICT_FAMILY", "DISTROPKG_LOG_LEVEL", "DISTROPKG_LOG_FILE",
    "DISTROPKG_LOG_FILE_LEVEL",
)


@dataclass
class Call:
    argv: list[str]
    cmd: list[str]
    privileged: bool
    env: dict[str, str]
    timeout: float | None
    merge_stderr: bool


@dataclass
class _Rule:
    tokens: tuple[str, ...]
    results: list[CommandResult]


@dataclass
class FakeRunner(CommandRunner):
    """Scripted stand-in for ``CommandRunner``.

    ``on("apt-get", "update", returncode=1)`` queues a result for any
    command whose argv contains all the given tokens.  Queued results are
    consumed in order; the last one repeats.  Unmatched commands succeed
    with empty output.

    With ``dry_run`` set, privileged commands land in ``history`` only,
    the way the real runner skips them.
    """

    available: set[str] = field(default_factory=lambda: {"lsb_release"})
    root: bool = False
    calls: list[Call] = field(default_factory=list)
    _rules: list[_Rule] = field(default_factory=list)

    def on(self, *tokens: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> FakeRunner:
        result = CommandResult(argv=list(tokens), returncode=returncode, stdout=stdout, stderr=stderr)
        for rule in self._rules:
            if rule.tokens == tokens:
                rule.results.append(result)
                return self
        self._rules.append(_Rule(tokens=tokens, results=[result]))
        return self

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.available else None

    def is_root(self) -> bool:
        return self.root

    def run(
        self,
        argv: Sequence[str],
        *,
        privileged: bool = False,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        merge_stderr: bool = False,
    ) -> CommandResult:
        cmd = self.privileged_argv(argv, env) if privileged else list(argv)
        if self.dry_run and privileged:
            self.history.append(cmd)
            return CommandResult(argv=cmd, returncode=0)
        self.calls.append(Call(
            argv=list(argv),
            cmd=cmd,
            privileged=privileged,
            env=dict(env or {}),
            timeout=timeout,
            merge_stderr=merge_stderr,
        ))
        self.history.append(cmd)

        for rule in self._rules:
            if all(t in argv for t in rule.tokens):
                canned = rule.results[0] if len(rule.results) == 1 else rule.results.pop(0)
                return CommandResult(
                    argv=cmd,
                    returncode=canned.returncode,
                    stdout=canned.stdout,
                    stderr=canned.stderr,
                )
        return CommandResult(argv=cmd, returncode=0)

    def calls_with(self, *tokens: str) -> list[Call]:
        return [c for c in self.calls if all(t in c.argv for t in tokens)]


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` is called."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def lsb_runner(vendor: str, release: str, codename: str, **kwargs) -> FakeRunner:
    """FakeRunner answering ``lsb_release`` for the given host."""
    runner = FakeRunner(**kwargs)
    runner.on("lsb_release", "-i", stdout=f"{vendor}\n")
    runner.on("lsb_release", "-r", stdout=f"{release}\n")
    runner.on("lsb_release", "-c", stdout=f"{codename}\n")
    return runner


@pytest.fixture(autouse=True)
def _isolated_run(monkeypatch):
    """Fresh environment, run state, installer and timer for every test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_run_state()
    set_installer(None)
    get_timer().reset()

    # setup_logging() replaces the root handlers; put them back afterwards
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    reset_run_state()
    set_installer(None)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def ubuntu() -> DistroInfo:
    return DistroInfo(
        vendor="Ubuntu", release="14.04", codename="trusty",
        package_family=PackageFamily.DEB, distro_tag="trusty",
    )


@pytest.fixture
def fedora() -> DistroInfo:
    return DistroInfo(
        vendor="Fedora", release="34", codename="ThirtyFour",
        package_family=PackageFamily.RPM, distro_tag="f34",
    )


@pytest.fixture
def opensuse() -> DistroInfo:
    return DistroInfo(
        vendor="openSUSE", release="42.3", codename="n/a",
        package_family=PackageFamily.RPM, distro_tag="opensuse-42.3",
    )


@pytest.fixture
def xenserver() -> DistroInfo:
    return DistroInfo(
        vendor="XenServer", release="6.5.0", codename="Creedence",
        package_family=PackageFamily.RPM, distro_tag="xs6.5",
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_state(info: DistroInfo, repos_updated: bool = False) -> RunState:
    return RunState(distro=info, repos_updated=repos_updated)


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """A manifest tree shaped like the deployment scripts' ``files/``."""
    root = tmp_path / "files"
    debs = root / "debs"
    debs.mkdir(parents=True)
    (debs / "general").write_text("bridge-utils\ncurl\n")
    (debs / "nova").write_text(
        "qemu-kvm\n"
        "libvirt-bin # dist:precise,trusty\n"
        "libvirt-daemon-system # dist:xenial,bionic\n"
        "genisoimage\n"
    )
    (debs / "glance").write_text("python-glanceclient\n")
    (debs / "cinder").write_text("lvm2\nopen-iscsi # NOPRIME\ntgt\n")
    (debs / "keystone").write_text("python-mysqldb # dist:TRUSTY\n")
    (debs / "n-cpu").write_text("sysfsutils\n")
    rpms = root / "rpms"
    rpms.mkdir()
    (rpms / "nova").write_text("qemu-kvm\nlibvirt # dist:f34,rhel8\n")
    suse = root / "rpms-suse"
    suse.mkdir()
    (suse / "nova").write_text("kvm\n")
    return root
