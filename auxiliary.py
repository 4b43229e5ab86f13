#!/usr/bin/env python3
"""
Auxiliary utility functions for Siope

Formatting helpers shared by the catalog, the engine and the CLI:
log-line rendering and shell-specific export statements.
"""

import shlex
from typing import Iterable

EXPORT_SHELLS = ("sh", "fish", "powershell", "cmd")
CMD_UNSAFE = ("%", '"', "\r", "\n")


def format_env_assignment(name: str, value: str) -> str:
    """Render an environment variable action as ``NAME=VALUE``"""
    return f"{name}={value}"


def format_command_line(executable: str, arguments: Iterable[str]) -> str:
    """Render a command action as ``executable arguments``

    Tokens are joined with single spaces, exactly as they are passed to
    the process.
    """
    return " ".join([executable, *arguments])


def format_export(shell: str, name: str, value: str) -> str:
    """Format a statement that sets *name* to *value* in the given shell

    Args:
        shell: One of ``sh``, ``fish``, ``powershell`` or ``cmd``
        name: Environment variable name
        value: Value to assign

    Returns:
        A single line suitable for ``eval`` (or ``Invoke-Expression``)

    Raises:
        ValueError: If *shell* is not supported, or *value* cannot be written
            literally for ``cmd`` (it contains ``%``, ``"`` or a line break)
    """
    if shell == "sh":
        return f"export {name}={shlex.quote(value)}"
    if shell == "fish":
        return f"set -gx {name} {shlex.quote(value)}"
    if shell == "powershell":
        escaped = value.replace("'", "''")
        return f"$env:{name} = '{escaped}'"
    if shell == "cmd":
        # cmd expands %VAR% inside quotes and has no escape for " or newlines
        if any(ch in value for ch in CMD_UNSAFE):
            raise ValueError(f"Value of {name} cannot be exported to cmd: {value!r}")
        return f'set "{name}={value}"'
    raise ValueError(f"Unsupported shell: {shell}")


def pluralize(count: int, noun: str) -> str:
    """Return ``"1 action"`` / ``"3 actions"``"""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
