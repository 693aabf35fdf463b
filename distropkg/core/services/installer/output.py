"""
yum/dnf output classification (pure).

``yum -y`` treats missing packages and packages whose scriptlets failed
as acceptable and can still exit 0, so the text output is the only
reliable failure signal.  The tool is run with ``LC_ALL=C`` so the
patterns below see untranslated messages; they remain fragile against
reformatted output, which is why they are kept in one versioned table.

Classification:
    - a line matching a FATAL pattern  → FATAL (never retried)
    - otherwise a non-zero exit status → RETRYABLE (bad mirror, network)
    - otherwise                        → OK
"""

from __future__ import annotations

import re

from distropkg.core.models.install import InstallStatus

YUM_FAILURE_PATTERNS_VERSION = 1

# Anchored at line start, matched per line.
YUM_FATAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^No package"),
    re.compile(r"^Failed:"),
)


def fatal_lines(output: str) -> list[str]:
    """Lines of ``output`` that signal a genuine install failure."""
    return [
        line
        for line in output.splitlines()
        if any(p.match(line) for p in YUM_FATAL_PATTERNS)
    ]


def classify_yum_output(output: str, returncode: int) -> InstallStatus:
    """Classify one ``yum install -y`` run from its output and exit status."""
    if fatal_lines(output):
        return InstallStatus.FATAL
    if returncode != 0:
        return InstallStatus.RETRYABLE
    return InstallStatus.OK
