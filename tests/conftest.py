"""
Pytest configuration and shared fixtures
"""

import pytest

from optout_operations import OperationResult, OperationType, SystemOperations


class RecordingOperations(SystemOperations):
    """SystemOperations over a dict environment with a fake PATH and process table"""

    def __init__(self, installed=None, exit_codes=None, environ=None):
        super().__init__(environ={} if environ is None else environ)
        self.installed = dict(installed or {})
        self.exit_codes = dict(exit_codes or {})
        self.looked_up: list[str] = []
        self.spawned: list[tuple[str, tuple[str, ...]]] = []
        self.env_writes: list[tuple[str, str]] = []

    def set_environment_variable(self, name, value):
        self.env_writes.append((name, value))
        return super().set_environment_variable(name, value)

    def resolve_executable(self, executable):
        self.looked_up.append(executable)
        return self.installed.get(executable)

    def run_command(self, executable_path, arguments):
        self.spawned.append((executable_path, tuple(arguments)))
        code = self.exit_codes.get(executable_path, 0)
        return OperationResult(
            OperationType.RUN_COMMAND,
            " ".join([executable_path, *arguments]),
            success=code == 0,
            error_message=None if code == 0 else f"exited with status {code}",
            exit_code=code,
            output="done\n",
        )


@pytest.fixture
def recording_operations():
    """Factory for RecordingOperations"""
    return RecordingOperations
