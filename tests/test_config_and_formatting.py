"""Tests for run configuration and formatting helpers."""

import argparse
import pathlib

import pytest

from auxiliary import format_command_line, format_env_assignment, format_export, pluralize
from siope_config import SiopeConfig


def test_unset_modes_resolve_to_both():
    config = SiopeConfig().resolved()
    assert config.apply_env is True
    assert config.apply_exec is True


@pytest.mark.parametrize(
    "apply_env, apply_exec, expected",
    [
        (True, None, (True, False)),
        (None, True, (False, True)),
        (True, True, (True, True)),
    ],
)
def test_explicit_modes_are_kept(apply_env, apply_exec, expected):
    config = SiopeConfig(apply_env=apply_env, apply_exec=apply_exec).resolved()
    assert (config.apply_env, config.apply_exec) == expected


def test_resolved_is_idempotent():
    config = SiopeConfig(apply_env=True).resolved()
    assert config.resolved() == config


def test_from_args_and_to_dict():
    args = argparse.Namespace(
        env=True,
        exec=False,
        dry_run=True,
        verbose=False,
        timeout=10.0,
        catalog=[pathlib.Path("extra.toml")],
        export="fish",
    )

    config = SiopeConfig.from_args(args)

    assert config.apply_env is True
    assert config.apply_exec is None
    assert config.dry_run is True
    assert config.catalog_paths == (pathlib.Path("extra.toml"),)
    assert config.to_dict()["catalog_paths"] == ["extra.toml"]
    assert config.to_dict()["export_shell"] == "fish"


def test_log_line_helpers():
    assert format_env_assignment("NEXT_TELEMETRY_DISABLED", "1") == "NEXT_TELEMETRY_DISABLED=1"
    assert format_command_line("brew", ("analytics", "off")) == "brew analytics off"
    assert format_command_line("dart", ()) == "dart"


@pytest.mark.parametrize(
    "shell, expected",
    [
        ("sh", "export AZURE_DEV_COLLECT_TELEMETRY=no"),
        ("fish", "set -gx AZURE_DEV_COLLECT_TELEMETRY no"),
        ("powershell", "$env:AZURE_DEV_COLLECT_TELEMETRY = 'no'"),
        ("cmd", 'set "AZURE_DEV_COLLECT_TELEMETRY=no"'),
    ],
)
def test_format_export(shell, expected):
    assert format_export(shell, "AZURE_DEV_COLLECT_TELEMETRY", "no") == expected


def test_format_export_quotes_values():
    assert format_export("sh", "X", "a b") == "export X='a b'"
    assert format_export("powershell", "X", "it's") == "$env:X = 'it''s'"


def test_format_export_rejects_unknown_shell():
    with pytest.raises(ValueError):
        format_export("tcsh", "X", "1")


@pytest.mark.parametrize("value", ["50%", "%PATH%", 'a"b', "one\ntwo", "one\r\ntwo"])
def test_format_export_rejects_values_cmd_would_rewrite(value):
    with pytest.raises(ValueError):
        format_export("cmd", "X", value)


def test_format_export_keeps_percent_for_posix_shells():
    assert format_export("sh", "X", "50%") == "export X=50%"
    assert format_export("powershell", "X", 'a"b') == "$env:X = 'a\"b'"


def test_pluralize():
    assert pluralize(1, "action") == "1 action"
    assert pluralize(0, "action") == "0 actions"
    assert pluralize(3, "command") == "3 commands"
