#!/usr/bin/env python3
"""
Siope — Ancient Greek σιωπή (silence)

Turns off telemetry and usage analytics for a catalog of developer
tools. Each opt-out is either an environment variable the tool reads at
startup or a single call to the tool's own CLI that flips its
"telemetry disabled" setting. Commands are only run for tools found on
PATH; a missing tool is simply not applicable.

Silent by default so it can run unattended from a login script.

Usage:
    siope                          # Apply every opt-out
    siope --env                    # Only set environment variables
    siope --exec                   # Only run tool commands
    siope --dry-run --verbose      # Show what would be done
    siope --list                   # Show the catalog
    siope --export sh              # Print export statements for eval
    siope --catalog extra.toml     # Add opt-outs from a TOML file
"""

import argparse
import pathlib
import sys
import tomllib
from typing import Optional

from rich.console import Console
from rich.markup import escape

from auxiliary import EXPORT_SHELLS, format_export
from console_ui import ConsoleUI
from optout_catalog import ActionKind, InvalidConfiguration, OptOutAction, list_actions, load_catalog
from optout_engine import ActionReport, OptOutEngine, Outcome, RunReport
from platform_detect import detect_platform
from siope_config import SiopeConfig

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io

    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")

EXPORTED_OUTCOMES = (Outcome.APPLIED, Outcome.SIMULATED)


class Siope:
    """Main application class for the Siope telemetry opt-out tool."""

    def __init__(self, args: argparse.Namespace, ui: Optional[ConsoleUI] = None, engine_factory=OptOutEngine):
        self.args = args
        self.config = SiopeConfig.from_args(args).resolved()
        # Keep stdout clean for eval when exporting
        self.ui = ui or ConsoleUI(console=Console(stderr=self.config.export_shell is not None, highlight=False))
        self.engine_factory = engine_factory

    # -- catalog ------------------------------------------------------------

    def load_actions(self) -> tuple[OptOutAction, ...]:
        """Built-in catalog followed by any extension catalogs, in order"""
        actions = list(list_actions())
        for path in self.config.catalog_paths:
            actions.extend(load_catalog(pathlib.Path(path)))
        return tuple(actions)

    def list_catalog(self, actions: tuple[OptOutAction, ...]):
        platform = detect_platform()
        rows = []
        for action in actions:
            platforms = ", ".join(sorted(p.value for p in action.platforms)) or "any"
            rows.append((action.application, action.kind.value, action.log_line, platforms, action.applies_to(platform)))
        self.ui.show_catalog(rows, title=f"Opt-out Catalog ({len(actions)} actions, host: {platform.value})")

    # -- verbose callbacks --------------------------------------------------

    def _log_action(self, line: str):
        self.ui.print_action(line)

    def _show_output(self, action_report: ActionReport):
        result = action_report.result
        if action_report.action.kind is ActionKind.COMMAND:
            self.ui.print_command_result(
                action_report.action.application, result.success, result.output, result.error_message
            )
        elif not result.success:
            self.ui.print_error(f"  Could not set {action_report.action.name}: {escape(result.error_message or '')}")

    # -- reporting ----------------------------------------------------------

    def summary(self, report: RunReport):
        failed = [(r.action.application, r.result.error_message or "failed") for r in report.failed]
        self.ui.show_run_summary(
            applied=len(report.applied),
            simulated=len(report.simulated),
            failed=failed,
            skipped=len(report.skipped),
        )

    def export(self, report: RunReport, stream=None):
        """Print one shell statement per environment variable that was set (or would be, in a dry run)"""
        stream = stream or sys.stdout
        for action_report in report.reports:
            action = action_report.action
            if action.kind is not ActionKind.ENV_VAR or action_report.outcome not in EXPORTED_OUTCOMES:
                continue
            try:
                statement = format_export(self.config.export_shell, action.name, action.value.text)
            except ValueError as e:
                self.ui.print_error(escape(str(e)))
                continue
            print(statement, file=stream)

    # -- main entry point ---------------------------------------------------

    def run(self) -> int:
        try:
            actions = self.load_actions()
        except (OSError, tomllib.TOMLDecodeError, InvalidConfiguration) as e:
            self.ui.print_error(f"Could not load catalog: {escape(str(e))}")
            return 1

        if getattr(self.args, "list", False):
            self.list_catalog(actions)
            return 0

        engine = self.engine_factory(
            self.config,
            log_callback=self._log_action,
            output_callback=self._show_output,
        )

        if self.config.verbose:
            mode = "dry run" if self.config.dry_run else "live"
            self.ui.print_header("Siope", f"Telemetry opt-out on {engine.platform.value} ({mode})")
            self.ui.show_configuration(self.config.to_dict())

        report = engine.run(actions)

        if self.config.verbose:
            self.summary(report)
        if self.config.export_shell:
            self.export(report)
        return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _positive_float(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from None
    if seconds <= 0:
        raise argparse.ArgumentTypeError("timeout must be greater than zero")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="siope",
        description="Siope — disable telemetry in developer tools",
    )
    parser.add_argument("--env", action="store_true", help="Only set environment variables")
    parser.add_argument("--exec", action="store_true", help="Only run tool commands")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without changing anything")
    parser.add_argument(
        "-v", "--verbose", "--show-log", dest="verbose", action="store_true", help="Print each action before it runs"
    )
    parser.add_argument("--list", action="store_true", help="Show the opt-out catalog and exit")
    parser.add_argument(
        "--export",
        choices=EXPORT_SHELLS,
        default=None,
        help="Print statements that set the variables in a parent shell",
    )
    parser.add_argument(
        "--catalog",
        type=pathlib.Path,
        action="append",
        default=None,
        metavar="PATH",
        help="Add opt-outs from a TOML catalog (repeatable)",
    )
    parser.add_argument(
        "--timeout", type=_positive_float, default=None, metavar="SECONDS", help="Per-command time limit"
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    app = Siope(args)
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
