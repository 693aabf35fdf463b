"""
Shell command adapter — the SINGLE PLACE where native tools are run.

Package managers, ``lsb_release``, ``dpkg`` and ``rpm`` are all invoked
through ``CommandRunner.run``.  Privilege escalation, environment
forwarding, logging, and timeouts are centralised here.

Privileged commands are prefixed the way the deployment scripts do it:

    sudo VAR=value ... cmd args     (when not root)
    env  VAR=value ... cmd args     (when already root)

so forwarded variables (proxies, ``DEBIAN_FRONTEND``) survive sudo's
environment reset.

The runner NEVER raises for a failing command — the outcome is captured
in a ``CommandResult``.  A missing binary is reported as exit status
127 and a timeout as 124, matching shell conventions.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)

EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command invocation."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr together (stderr is empty when merged)."""
        if self.stderr:
            return f"{self.stdout}{self.stderr}"
        return self.stdout


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


@dataclass
class CommandRunner:
    """Run host commands with consistent privilege and logging handling.

    Attributes:
        dry_run: Log privileged commands without executing them (each one
                 succeeds). Unprivileged queries such as lsb_release or
                 dpkg -s still run.
        history: argv of every command run, in order.
    """

    dry_run: bool = False
    history: list[list[str]] = field(default_factory=list)

    def which(self, name: str) -> str | None:
        """Locate ``name`` on PATH."""
        return shutil.which(name)

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def privileged_argv(
        self,
        argv: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> list[str]:
        """Build ``sudo|env [VAR=value ...] argv``."""
        prefix = ["env"] if self.is_root() else ["sudo"]
        assignments = [f"{k}={v}" for k, v in (env or {}).items()]
        return prefix + assignments + list(argv)

    def run(
        self,
        argv: Sequence[str],
        *,
        privileged: bool = False,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        merge_stderr: bool = False,
    ) -> CommandResult:
        """Run a command and capture its outcome.

        Args:
            argv: Command list.
            privileged: Run through ``sudo`` (or ``env`` when root).
            env: Extra variables. For privileged commands they are passed
                 as ``VAR=value`` arguments; otherwise merged into the
                 child's environment.
            timeout: Seconds before the command is killed.
            merge_stderr: Send stderr into stdout (for output parsing).

        Returns:
            CommandResult. Never raises for command failures.
        """
        if privileged:
            cmd = self.privileged_argv(argv, env)
            child_env = None
        else:
            cmd = list(argv)
            child_env = dict(os.environ, **env) if env else None

        self.history.append(cmd)
        if self.dry_run and privileged:
            logger.warning("Dry run, not running: %s", format_argv(cmd))
            return CommandResult(argv=cmd, returncode=0)
        logger.info("CMD %s", format_argv(cmd))

        start = time.monotonic()
        try:
            p = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                timeout=timeout,
                env=child_env,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", timeout, format_argv(cmd))
            return CommandResult(
                argv=cmd,
                returncode=EXIT_TIMEOUT,
                elapsed_ms=int((time.monotonic() - start) * 1000),
                timed_out=True,
            )
        except FileNotFoundError:
            logger.warning("Command not found: %s", cmd[0])
            return CommandResult(argv=cmd, returncode=EXIT_NOT_FOUND, stderr=f"{cmd[0]}: not found")
        except OSError as exc:
            logger.warning("OS error running %s: %s", format_argv(cmd), exc)
            return CommandResult(argv=cmd, returncode=EXIT_NOT_FOUND, stderr=str(exc))

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = p.stdout or ""
        stderr = p.stderr or ""

        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())
        if p.returncode != 0:
            logger.info("Command exited %d (%dms): %s", p.returncode, elapsed_ms, format_argv(cmd))

        return CommandResult(
            argv=cmd,
            returncode=p.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=elapsed_ms,
        )
