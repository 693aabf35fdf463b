"""
Install result model — how an install attempt ended.
"""

from __future__ import annotations

from enum import IntEnum


class InstallStatus(IntEnum):
    """Classification of a single install attempt.

    The values double as the shell-style status the attempt maps to.
    """

    OK = 0
    RETRYABLE = 1
    FATAL = 2

    @property
    def ok(self) -> bool:
        return self is InstallStatus.OK
