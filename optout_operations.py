#!/usr/bin/env python3
"""
Mutation primitives for Siope

The only two side effects the tool ever has: writing a variable into
the process environment and running a target application's CLI. Both
report failures through OperationResult instead of raising, so one bad
action never stops the pass.
"""

import os
import shutil
import subprocess
from collections.abc import MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence


class OperationType(Enum):
    """Type of mutation"""

    SET_ENV = "set_env"
    RUN_COMMAND = "run_command"


@dataclass
class OperationResult:
    """Result of a single mutation"""

    operation_type: OperationType
    target: str
    success: bool
    error_message: Optional[str] = None
    exit_code: Optional[int] = None
    output: str = ""


class SystemOperations:
    """Environment and process primitives bound to one environment mapping"""

    def __init__(self, environ: Optional[MutableMapping] = None, command_timeout: Optional[float] = None):
        """Initialize with an optional environment mapping and per-command timeout

        Args:
            environ: Mapping to write variables into (defaults to os.environ)
            command_timeout: Seconds to wait for each command, None waits forever
        """
        self.environ = os.environ if environ is None else environ
        self.command_timeout = command_timeout

    def set_environment_variable(self, name: str, value: str) -> OperationResult:
        """Set *name* to *value*; setting the same value twice is a no-op"""
        try:
            self.environ[name] = value
            return OperationResult(OperationType.SET_ENV, name, success=True)
        except (OSError, ValueError) as e:
            # ValueError: embedded null character
            return OperationResult(OperationType.SET_ENV, name, success=False, error_message=str(e))

    def resolve_executable(self, executable: str) -> Optional[str]:
        """Return the full path of *executable* on the search path, or None"""
        path = self.environ.get("PATH") if self.environ is not os.environ else None
        return shutil.which(executable, path=path)

    def run_command(self, executable_path: str, arguments: Sequence[str]) -> OperationResult:
        """Run a command to completion and capture its combined output"""
        argv = [executable_path, *arguments]
        target = " ".join(argv)
        child_env = None if self.environ is os.environ else dict(self.environ)

        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                env=child_env,
                timeout=self.command_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            return OperationResult(
                OperationType.RUN_COMMAND,
                target,
                success=False,
                error_message=f"timed out after {self.command_timeout:g}s",
            )
        except OSError as e:
            return OperationResult(OperationType.RUN_COMMAND, target, success=False, error_message=str(e))

        output = completed.stdout or ""
        if completed.returncode != 0:
            return OperationResult(
                OperationType.RUN_COMMAND,
                target,
                success=False,
                error_message=f"exited with status {completed.returncode}",
                exit_code=completed.returncode,
                output=output,
            )
        return OperationResult(OperationType.RUN_COMMAND, target, success=True, exit_code=0, output=output)
