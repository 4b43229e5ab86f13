"""Tests for the opt-out catalog: record validation, built-in data and TOML loading."""

import tomllib

import pytest

from optout_catalog import (
    BUILTIN_CATALOG,
    ActionKind,
    EnvValue,
    InvalidConfiguration,
    OptOutAction,
    action_from_dict,
    command,
    env,
    list_actions,
    load_catalog,
)
from platform_detect import Platform


@pytest.fixture
def catalog():
    """Load the built-in catalog once for all tests."""
    return list_actions()


def test_catalog_is_reiterable_and_stable(catalog):
    assert list(catalog) == list(list_actions())
    assert list(catalog) == list(catalog)
    assert catalog is BUILTIN_CATALOG


def test_every_action_has_a_target(catalog):
    for action in catalog:
        if action.kind is ActionKind.ENV_VAR:
            assert action.name, f"{action.application} has an empty variable name"
            assert action.value is not None
        else:
            assert action.executable, f"{action.application} has an empty executable"
        assert action.application


def test_catalog_covers_both_kinds(catalog):
    kinds = {action.kind for action in catalog}
    assert kinds == {ActionKind.ENV_VAR, ActionKind.COMMAND}
    assert len(catalog) >= 30


def test_shared_checkpoint_variable_is_not_deduplicated(catalog):
    users = [a.application for a in catalog if a.kind is ActionKind.ENV_VAR and a.name == "CHECKPOINT_DISABLE"]
    assert {"Terraform", "Packer", "Consul", "Vagrant"} <= set(users)


def test_presence_only_values_are_flagged(catalog):
    checkpoint = next(a for a in catalog if a.name == "CHECKPOINT_DISABLE")
    assert checkpoint.value.is_presence_only
    assert checkpoint.value.text == "1"
    assert checkpoint.log_line == "CHECKPOINT_DISABLE=1"


def test_homebrew_is_gated_to_unix(catalog):
    brew = [a for a in catalog if a.application == "Homebrew"]
    assert brew
    for action in brew:
        assert action.platforms == frozenset({Platform.LINUX, Platform.MACOS})
        assert not action.applies_to(Platform.WINDOWS)
        assert not action.applies_to(Platform.UNKNOWN)


def test_ungated_action_applies_everywhere():
    action = env("Example", "FOO", "1")
    for platform in Platform:
        assert action.applies_to(platform)


def test_log_line_formats():
    assert env("Example", "FOO", "1").log_line == "FOO=1"
    gcloud = command("Google Cloud SDK", "gcloud", "config set disable_usage_reporting true")
    assert gcloud.arguments == ("config", "set", "disable_usage_reporting", "true")
    assert gcloud.log_line == "gcloud config set disable_usage_reporting true"
    assert command("Dart", "dart").log_line == "dart"


def test_actions_are_immutable():
    action = env("Example", "FOO", "1")
    with pytest.raises(AttributeError):
        action.name = "BAR"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind": ActionKind.ENV_VAR, "application": "x", "name": "", "value": EnvValue("1")},
        {"kind": ActionKind.ENV_VAR, "application": "x", "name": "   ", "value": EnvValue("1")},
        {"kind": ActionKind.ENV_VAR, "application": "x", "name": "A=B", "value": EnvValue("1")},
        {"kind": ActionKind.ENV_VAR, "application": "x", "name": "FOO"},
        {"kind": ActionKind.ENV_VAR, "application": "x", "name": "FOO", "value": EnvValue("1"), "executable": "foo"},
        {"kind": ActionKind.COMMAND, "application": "x", "executable": ""},
        {"kind": ActionKind.COMMAND, "application": "x", "executable": "foo", "name": "FOO"},
        {"kind": "env", "application": "x", "name": "FOO", "value": EnvValue("1")},
        {
            "kind": ActionKind.ENV_VAR,
            "application": "x",
            "name": "FOO",
            "value": EnvValue("1"),
            "platforms": {Platform.UNKNOWN},
        },
    ],
)
def test_malformed_records_are_rejected(kwargs):
    with pytest.raises(InvalidConfiguration):
        OptOutAction(**kwargs)


def test_action_from_dict_env_and_command():
    action = action_from_dict(
        {"kind": "env", "application": "Tool", "name": "TOOL_NO_TRACK", "value": 1, "platforms": ["darwin"]}
    )
    assert action.kind is ActionKind.ENV_VAR
    assert action.value.text == "1"
    assert action.platforms == frozenset({Platform.MACOS})

    cmd = action_from_dict({"kind": "command", "executable": "tool", "arguments": ["telemetry", "off"]})
    assert cmd.application == "tool"
    assert cmd.arguments == ("telemetry", "off")


def test_action_from_dict_presence_only():
    action = action_from_dict({"kind": "env", "name": "TOOL_CHECK_DISABLE", "presence_only": True})
    assert action.value.is_presence_only


@pytest.mark.parametrize(
    "entry",
    [
        {"kind": "registry", "name": "X"},
        {"kind": "env", "name": "X"},
        {"kind": "env", "name": "X", "value": "1", "platforms": ["beos"]},
        {"kind": "command", "executable": "tool", "arguments": 5},
        {"kind": "command", "executable": ""},
        {"kind": "env", "name": 5, "value": "1"},
        {"kind": "env", "name": "X", "value": "1", "platforms": 5},
        {"kind": "env", "name": "X", "value": "1", "platforms": ["linux", 3]},
        {"kind": "command", "executable": 7},
        {"kind": "command", "application": ["Tool"], "executable": "tool"},
        {"kind": 1, "name": "X", "value": "1"},
        1,
        "env",
    ],
)
def test_action_from_dict_rejects_bad_entries(entry):
    with pytest.raises(InvalidConfiguration):
        action_from_dict(entry)


def test_load_catalog_preserves_order(tmp_path):
    path = tmp_path / "extra.toml"
    path.write_text(
        """
[[actions]]
kind = "env"
application = "Tool A"
name = "TOOL_A_TELEMETRY"
value = "off"

[[actions]]
kind = "command"
application = "Tool B"
executable = "toolb"
arguments = "telemetry disable"
platforms = ["linux", "macos"]
""",
        encoding="utf-8",
    )

    actions = load_catalog(path)

    assert [a.application for a in actions] == ["Tool A", "Tool B"]
    assert actions[1].arguments == ("telemetry", "disable")
    assert actions[1].platforms == frozenset({Platform.LINUX, Platform.MACOS})


def test_load_catalog_empty_file(tmp_path):
    path = tmp_path / "empty.toml"
    path.write_text("", encoding="utf-8")
    assert load_catalog(path) == ()


def test_load_catalog_errors(tmp_path):
    with pytest.raises(OSError):
        load_catalog(tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("[[actions]\nkind = ", encoding="utf-8")
    with pytest.raises(tomllib.TOMLDecodeError):
        load_catalog(broken)

    not_array = tmp_path / "not_array.toml"
    not_array.write_text('actions = "nope"\n', encoding="utf-8")
    with pytest.raises(InvalidConfiguration):
        load_catalog(not_array)


def test_load_catalog_rejects_non_table_entries(tmp_path):
    path = tmp_path / "numbers.toml"
    path.write_text("actions = [1]\n", encoding="utf-8")
    with pytest.raises(InvalidConfiguration):
        load_catalog(path)
