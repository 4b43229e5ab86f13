#!/usr/bin/env python3
"""
Execution engine for Siope

Applies a catalog of opt-out actions in a single sequential pass.
Eligibility is decided by one side-effect-free function that live and
dry runs share, so the two can never disagree about which actions they
consider. Every per-action failure is recorded and the pass continues.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

from optout_catalog import ActionKind, OptOutAction
from optout_operations import OperationResult, SystemOperations
from platform_detect import Platform, detect_platform
from siope_config import SiopeConfig


class Outcome(Enum):
    """What happened to one action during a pass"""

    APPLIED = "applied"
    SIMULATED = "simulated"
    FAILED = "failed"
    SKIPPED_PLATFORM = "skipped_platform"
    SKIPPED_KIND = "skipped_kind"
    SKIPPED_MISSING = "skipped_missing"

    @property
    def is_skip(self) -> bool:
        return self.name.startswith("SKIPPED")


@dataclass
class Eligibility:
    """Verdict of the eligibility check for one action"""

    outcome: Optional[Outcome] = None  # set only when the action is skipped
    executable_path: Optional[str] = None

    @property
    def eligible(self) -> bool:
        return self.outcome is None


@dataclass
class ActionReport:
    action: OptOutAction
    outcome: Outcome
    result: Optional[OperationResult] = None


@dataclass
class RunReport:
    """Outcome of a full pass, in catalog order"""

    platform: Platform
    config: SiopeConfig
    reports: list[ActionReport] = field(default_factory=list)
    log_lines: list[str] = field(default_factory=list)

    def _with(self, *outcomes: Outcome) -> list[ActionReport]:
        return [r for r in self.reports if r.outcome in outcomes]

    @property
    def applied(self) -> list[ActionReport]:
        return self._with(Outcome.APPLIED)

    @property
    def simulated(self) -> list[ActionReport]:
        return self._with(Outcome.SIMULATED)

    @property
    def failed(self) -> list[ActionReport]:
        return self._with(Outcome.FAILED)

    @property
    def skipped(self) -> list[ActionReport]:
        return [r for r in self.reports if r.outcome.is_skip]

    @property
    def eligible(self) -> list[ActionReport]:
        return [r for r in self.reports if not r.outcome.is_skip]


class OptOutEngine:
    """Interpreter for the opt-out catalog"""

    def __init__(
        self,
        config: SiopeConfig,
        operations: Optional[SystemOperations] = None,
        platform: Optional[Platform] = None,
        log_callback: Optional[Callable[[str], None]] = None,
        output_callback: Optional[Callable[[ActionReport], None]] = None,
    ):
        """Initialize the engine

        Args:
            config: Mode switches; resolved here so unset flags mean "both"
            operations: Mutation primitives (defaults to the real process environment)
            platform: Override for the detected platform
            log_callback: Receives one line per eligible action when verbose
            output_callback: Receives each executed report when verbose
        """
        self.config = config.resolved()
        self.operations = operations or SystemOperations(command_timeout=self.config.command_timeout)
        self.platform = platform if platform is not None else detect_platform()
        self.log_callback = log_callback
        self.output_callback = output_callback

    def evaluate(self, action: OptOutAction) -> Eligibility:
        """Decide whether *action* would run, without mutating anything"""
        if not action.applies_to(self.platform):
            return Eligibility(Outcome.SKIPPED_PLATFORM)

        if action.kind is ActionKind.ENV_VAR:
            if not self.config.apply_env:
                return Eligibility(Outcome.SKIPPED_KIND)
            return Eligibility()

        if not self.config.apply_exec:
            return Eligibility(Outcome.SKIPPED_KIND)
        executable_path = self.operations.resolve_executable(action.executable)
        if executable_path is None:
            return Eligibility(Outcome.SKIPPED_MISSING)
        return Eligibility(executable_path=executable_path)

    def apply(self, action: OptOutAction, eligibility: Eligibility) -> OperationResult:
        """Perform the mutation for an eligible action"""
        if action.kind is ActionKind.ENV_VAR:
            return self.operations.set_environment_variable(action.name, action.value.text)
        return self.operations.run_command(eligibility.executable_path, action.arguments)

    def run(self, actions: Iterable[OptOutAction]) -> RunReport:
        """Apply every eligible action in order and report what happened"""
        report = RunReport(platform=self.platform, config=self.config)

        for action in actions:
            eligibility = self.evaluate(action)
            if not eligibility.eligible:
                report.reports.append(ActionReport(action, eligibility.outcome))
                continue

            if self.config.verbose:
                report.log_lines.append(action.log_line)
                if self.log_callback:
                    self.log_callback(action.log_line)

            if self.config.dry_run:
                report.reports.append(ActionReport(action, Outcome.SIMULATED))
                continue

            result = self.apply(action, eligibility)
            action_report = ActionReport(action, Outcome.APPLIED if result.success else Outcome.FAILED, result)
            report.reports.append(action_report)

            if self.config.verbose and self.output_callback:
                self.output_callback(action_report)

        return report
