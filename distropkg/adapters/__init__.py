"""Adapters — bindings to native tools on the host."""

from distropkg.adapters.shell.command import CommandResult, CommandRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
]
