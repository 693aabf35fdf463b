"""
Run state — the process-wide facts the package layer remembers.

Two things are remembered for the lifetime of a run:

    - the detected ``DistroInfo`` (detection is deterministic, so this
      is a cache, not a source of truth)
    - whether package repositories were already refreshed this run

Both live on a ``RunState`` object owned by the installer and read by
the distro classifier.  A module-level default instance serves the
CLI and the collaborator functions:

    - CLI:    main.py  → context.reset_run_state(settings)
    - Tests:  fixtures → RunState(...) passed explicitly

Not thread-safe: one run, one thread of control.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from distropkg.core.models.distro import DistroInfo

if TYPE_CHECKING:
    from distropkg.core.config.loader import Settings


@dataclass
class RunState:
    """Mutable state shared by detection and installation within one run."""

    distro: Optional[DistroInfo] = None
    repos_updated: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> RunState:
        """Seed the state from settings (``REPOS_UPDATED`` carries over)."""
        return cls(repos_updated=settings.repos_updated)


_run_state: Optional[RunState] = None


def get_run_state() -> RunState:
    """Return the process-wide run state, creating it on first use."""
    global _run_state
    if _run_state is None:
        _run_state = RunState()
    return _run_state


def reset_run_state(settings: Optional[Settings] = None) -> RunState:
    """Start a fresh run state for the current process."""
    global _run_state
    _run_state = RunState.from_settings(settings) if settings else RunState()
    return _run_state
