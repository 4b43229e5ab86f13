#!/usr/bin/env python3
"""
Opt-out action catalog for Siope

Every known telemetry opt-out is one OptOutAction record: either an
environment variable assignment or a single invocation of the target
application's own CLI. The built-in catalog is a plain tuple built at
import time; extension catalogs can be loaded from TOML files with the
same fields.

Adding an application means appending a record here. The engine never
needs to change.
"""

import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

import tomllib

from auxiliary import format_command_line, format_env_assignment
from platform_detect import Platform, platform_from_tag

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


class InvalidConfiguration(ValueError):
    """Raised when a catalog record is malformed"""


class ActionKind(Enum):
    ENV_VAR = "env"
    COMMAND = "command"


# Written for variables whose presence is what the application checks
PRESENCE_PLACEHOLDER = "1"


@dataclass(frozen=True)
class EnvValue:
    """Value of an environment variable opt-out

    Some applications only test whether a variable exists. Those values
    are marked presence-only instead of carrying a sentinel string, so
    nothing downstream has to compare against a magic literal.
    """

    literal: str = ""
    is_presence_only: bool = False

    @classmethod
    def presence_only(cls) -> "EnvValue":
        return cls(literal="", is_presence_only=True)

    @property
    def text(self) -> str:
        """The string actually written to the environment"""
        return PRESENCE_PLACEHOLDER if self.is_presence_only else self.literal

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class OptOutAction:
    """A single independent opt-out for one target application"""

    kind: ActionKind
    application: str
    platforms: frozenset[Platform] = field(default_factory=frozenset)
    # ENV_VAR fields
    name: str = ""
    value: Optional[EnvValue] = None
    # COMMAND fields
    executable: str = ""
    arguments: tuple[str, ...] = ()
    # Documentation only
    description: str = ""
    source_url: str = ""

    def __post_init__(self):
        # Frozen dataclass: normalise through object.__setattr__
        if isinstance(self.arguments, str):
            object.__setattr__(self, "arguments", tuple(shlex.split(self.arguments)))
        elif not isinstance(self.arguments, tuple):
            object.__setattr__(self, "arguments", tuple(self.arguments))
        if isinstance(self.value, str):
            object.__setattr__(self, "value", EnvValue(self.value))
        if not isinstance(self.platforms, frozenset):
            object.__setattr__(self, "platforms", frozenset(self.platforms))

        if not isinstance(self.kind, ActionKind):
            raise InvalidConfiguration(f"{self.application}: unknown action kind {self.kind!r}")
        if Platform.UNKNOWN in self.platforms:
            raise InvalidConfiguration(f"{self.application}: 'unknown' is not a valid platform filter")

        if self.kind is ActionKind.ENV_VAR:
            if not self.name or not self.name.strip():
                raise InvalidConfiguration(f"{self.application}: environment variable name is empty")
            if "=" in self.name:
                raise InvalidConfiguration(f"{self.application}: environment variable name contains '='")
            if self.value is None:
                raise InvalidConfiguration(f"{self.application}: {self.name} has no value")
            if self.executable or self.arguments:
                raise InvalidConfiguration(f"{self.application}: env action {self.name} also names a command")
        else:
            if not self.executable or not self.executable.strip():
                raise InvalidConfiguration(f"{self.application}: command executable is empty")
            if self.name or self.value is not None:
                raise InvalidConfiguration(f"{self.application}: command {self.executable} also names a variable")

    def applies_to(self, platform: Platform) -> bool:
        """True if the platform filter admits *platform* (empty filter = all)"""
        return not self.platforms or platform in self.platforms

    @property
    def log_line(self) -> str:
        """``NAME=VALUE`` for env actions, ``executable arguments`` for commands"""
        if self.kind is ActionKind.ENV_VAR:
            return format_env_assignment(self.name, self.value.text)
        return format_command_line(self.executable, self.arguments)


# ---------------------------------------------------------------------------
# Record constructors
# ---------------------------------------------------------------------------

ANY = frozenset()
UNIX = frozenset({Platform.LINUX, Platform.MACOS})
MACOS = frozenset({Platform.MACOS})
WINDOWS = frozenset({Platform.WINDOWS})


def env(
    application: str,
    name: str,
    value: Union[str, EnvValue],
    platforms: frozenset = ANY,
    description: str = "",
    source_url: str = "",
) -> OptOutAction:
    if isinstance(value, str):
        value = EnvValue(value)
    return OptOutAction(
        kind=ActionKind.ENV_VAR,
        application=application,
        platforms=platforms,
        name=name,
        value=value,
        description=description,
        source_url=source_url,
    )


def command(
    application: str,
    executable: str,
    arguments: Union[str, Iterable[str]] = (),
    platforms: frozenset = ANY,
    description: str = "",
    source_url: str = "",
) -> OptOutAction:
    return OptOutAction(
        kind=ActionKind.COMMAND,
        application=application,
        platforms=platforms,
        executable=executable,
        arguments=arguments,
        description=description,
        source_url=source_url,
    )


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------

_PRESENT = EnvValue.presence_only()

BUILTIN_CATALOG: tuple[OptOutAction, ...] = (
    # Cross-tool convention
    env(
        "Console Do Not Track",
        "DO_NOT_TRACK",
        "1",
        description="Generic opt-out honoured by a growing number of CLIs",
        source_url="https://consoledonottrack.com/",
    ),
    # Microsoft
    env(
        "PowerShell",
        "POWERSHELL_TELEMETRY_OPTOUT",
        "1",
        description="Checked once at pwsh startup",
        source_url="https://learn.microsoft.com/powershell/module/microsoft.powershell.core/about/about_telemetry",
    ),
    env(
        ".NET SDK",
        "DOTNET_CLI_TELEMETRY_OPTOUT",
        "1",
        source_url="https://learn.microsoft.com/dotnet/core/tools/telemetry",
    ),
    env(
        ".NET Interactive",
        "DOTNET_INTERACTIVE_CLI_TELEMETRY_OPTOUT",
        "1",
        source_url="https://github.com/dotnet/interactive",
    ),
    env(
        "dotnet-svcutil",
        "DOTNET_SVCUTIL_TELEMETRY_OPTOUT",
        "1",
        source_url="https://learn.microsoft.com/dotnet/core/additional-tools/dotnet-svcutil-guide",
    ),
    env(
        ".NET Upgrade Assistant",
        "DOTNET_UPGRADEASSISTANT_TELEMETRY_OPTOUT",
        "1",
        source_url="https://github.com/dotnet/upgrade-assistant",
    ),
    env(
        "ML.NET CLI",
        "MLDOTNET_CLI_TELEMETRY_OPTOUT",
        "True",
        source_url="https://learn.microsoft.com/dotnet/machine-learning/resources/ml-net-cli-telemetry",
    ),
    env(
        "mssql-cli",
        "MSSQL_CLI_TELEMETRY_OPTOUT",
        "True",
        source_url="https://github.com/dbcli/mssql-cli",
    ),
    env(
        "Azure Functions Core Tools",
        "FUNCTIONS_CORE_TOOLS_TELEMETRY_OPTOUT",
        "1",
        source_url="https://learn.microsoft.com/azure/azure-functions/functions-run-local",
    ),
    env(
        "Azure CLI",
        "AZURE_CORE_COLLECT_TELEMETRY",
        "0",
        source_url="https://learn.microsoft.com/cli/azure/azure-cli-configuration",
    ),
    command(
        "Azure CLI",
        "az",
        "config set core.collect_telemetry=false",
        description="Persists the setting in the Azure CLI config file",
        source_url="https://learn.microsoft.com/cli/azure/azure-cli-configuration",
    ),
    env(
        "Azure Developer CLI",
        "AZURE_DEV_COLLECT_TELEMETRY",
        "no",
        source_url="https://learn.microsoft.com/azure/developer/azure-developer-cli/",
    ),
    env(
        "vcpkg",
        "VCPKG_DISABLE_METRICS",
        _PRESENT,
        description="Any value disables metrics",
        source_url="https://learn.microsoft.com/vcpkg/about/privacy",
    ),
    env(
        "AutomatedLab",
        "AUTOMATEDLAB_TELEMETRY_OPTOUT",
        "1",
        platforms=WINDOWS,
        source_url="https://automatedlab.org/",
    ),
    # Cloud tooling
    env(
        "AWS SAM CLI",
        "SAM_CLI_TELEMETRY",
        "0",
        source_url="https://docs.aws.amazon.com/serverless-application-model/latest/developerguide/serverless-sam-telemetry.html",
    ),
    command(
        "Google Cloud SDK",
        "gcloud",
        "config set disable_usage_reporting true",
        source_url="https://cloud.google.com/sdk/docs/usage-statistics",
    ),
    env(
        "Salesforce CLI",
        "SF_DISABLE_TELEMETRY",
        "true",
        source_url="https://developer.salesforce.com/docs/atlas.en-us.sfdx_setup.meta/sfdx_setup/sfdx_dev_cli_telemetry.htm",
    ),
    command(
        "Salesforce CLI",
        "sf",
        "config set disable-telemetry=true --global",
        source_url="https://developer.salesforce.com/docs/atlas.en-us.sfdx_setup.meta/sfdx_setup/sfdx_dev_cli_telemetry.htm",
    ),
    env(
        "Serverless Framework",
        "SLS_TELEMETRY_DISABLED",
        "1",
        source_url="https://www.serverless.com/framework/docs/guides/telemetry",
    ),
    env(
        "Stripe CLI",
        "STRIPE_CLI_TELEMETRY_OPTOUT",
        "1",
        source_url="https://docs.stripe.com/stripe-cli/telemetry",
    ),
    # HashiCorp checkpoint service, one variable shared by several tools
    env(
        "Terraform",
        "CHECKPOINT_DISABLE",
        _PRESENT,
        description="Any value disables the checkpoint upgrade and security bulletin check",
        source_url="https://developer.hashicorp.com/terraform/cli/commands#upgrade-and-security-bulletin-checks",
    ),
    env(
        "Packer",
        "CHECKPOINT_DISABLE",
        _PRESENT,
        source_url="https://developer.hashicorp.com/packer/docs/configure#packer-s-environment-variables",
    ),
    env(
        "Consul",
        "CHECKPOINT_DISABLE",
        _PRESENT,
        source_url="https://developer.hashicorp.com/consul/docs/agent/config/config-files#disable_update_check",
    ),
    env(
        "Vagrant",
        "CHECKPOINT_DISABLE",
        _PRESENT,
        source_url="https://developer.hashicorp.com/vagrant/docs/other/environmental-variables",
    ),
    env(
        "Vagrant",
        "VAGRANT_CHECKPOINT_DISABLE",
        _PRESENT,
        source_url="https://developer.hashicorp.com/vagrant/docs/other/environmental-variables",
    ),
    # Package managers and toolchains
    env(
        "Homebrew",
        "HOMEBREW_NO_ANALYTICS",
        "1",
        platforms=UNIX,
        source_url="https://docs.brew.sh/Analytics",
    ),
    command(
        "Homebrew",
        "brew",
        "analytics off",
        platforms=UNIX,
        source_url="https://docs.brew.sh/Analytics",
    ),
    command(
        "Go toolchain",
        "go",
        "telemetry off",
        source_url="https://go.dev/doc/telemetry",
    ),
    command(
        "Yarn",
        "yarn",
        "config set --home enableTelemetry 0",
        description="Yarn 2+ only; Yarn classic rejects the flag",
        source_url="https://yarnpkg.com/advanced/telemetry",
    ),
    command(
        "Flutter",
        "flutter",
        "config --no-analytics",
        source_url="https://docs.flutter.dev/reference/crash-reporting",
    ),
    command(
        "Dart",
        "dart",
        "--disable-analytics",
        source_url="https://dart.dev/tools/dart-tool",
    ),
    command(
        "PlatformIO",
        "pio",
        "settings set enable_telemetry No",
        source_url="https://docs.platformio.org/en/latest/userguide/cmd_settings.html",
    ),
    env(
        "Fastlane",
        "FASTLANE_OPT_OUT_USAGE",
        "YES",
        platforms=MACOS,
        source_url="https://docs.fastlane.tools/#metrics",
    ),
    env(
        "CocoaPods",
        "COCOAPODS_DISABLE_STATS",
        "true",
        platforms=MACOS,
        source_url="https://blog.cocoapods.org/Stats/",
    ),
    # JavaScript frameworks
    env(
        "Gatsby",
        "GATSBY_TELEMETRY_DISABLED",
        "1",
        source_url="https://www.gatsbyjs.com/docs/telemetry/",
    ),
    command(
        "Gatsby",
        "gatsby",
        "telemetry --disable",
        source_url="https://www.gatsbyjs.com/docs/telemetry/",
    ),
    env(
        "Next.js",
        "NEXT_TELEMETRY_DISABLED",
        "1",
        source_url="https://nextjs.org/telemetry",
    ),
    command(
        "Next.js",
        "next",
        "telemetry disable",
        source_url="https://nextjs.org/telemetry",
    ),
    env(
        "Nuxt",
        "NUXT_TELEMETRY_DISABLED",
        "1",
        source_url="https://github.com/nuxt/telemetry",
    ),
    env(
        "Angular CLI",
        "NG_CLI_ANALYTICS",
        "false",
        source_url="https://angular.dev/cli/analytics",
    ),
    command(
        "Angular CLI",
        "ng",
        "analytics disable --global",
        source_url="https://angular.dev/cli/analytics",
    ),
    env(
        "Astro",
        "ASTRO_TELEMETRY_DISABLED",
        "1",
        source_url="https://astro.build/telemetry/",
    ),
    command(
        "Astro",
        "astro",
        "telemetry disable",
        source_url="https://astro.build/telemetry/",
    ),
    env(
        "Storybook",
        "STORYBOOK_DISABLE_TELEMETRY",
        "1",
        source_url="https://storybook.js.org/docs/configure/telemetry",
    ),
    env(
        "Vercel CLI",
        "VERCEL_TELEMETRY_DISABLED",
        "1",
        source_url="https://vercel.com/docs/cli/about-telemetry",
    ),
    command(
        "Vercel CLI",
        "vercel",
        "telemetry disable",
        source_url="https://vercel.com/docs/cli/about-telemetry",
    ),
    command(
        "Netlify CLI",
        "netlify",
        "--telemetry-disable",
        source_url="https://github.com/netlify/cli/blob/main/docs/README.md",
    ),
    command(
        "Ionic CLI",
        "ionic",
        "config set -g telemetry false",
        source_url="https://ionicframework.com/docs/cli/commands/config-set",
    ),
    # Data and ML tooling
    env(
        "Hugging Face Hub",
        "HF_HUB_DISABLE_TELEMETRY",
        "1",
        source_url="https://huggingface.co/docs/huggingface_hub/package_reference/environment_variables",
    ),
    env(
        "Apollo Rover",
        "APOLLO_TELEMETRY_DISABLED",
        "1",
        source_url="https://www.apollographql.com/docs/rover/privacy",
    ),
    env(
        "Meilisearch",
        "MEILI_NO_ANALYTICS",
        "true",
        source_url="https://www.meilisearch.com/docs/learn/what_is_meilisearch/telemetry",
    ),
)


def list_actions() -> tuple[OptOutAction, ...]:
    """Return the built-in catalog in insertion order"""
    return BUILTIN_CATALOG


# ---------------------------------------------------------------------------
# Extension catalogs (TOML)
# ---------------------------------------------------------------------------

_KIND_MAP = {"env": ActionKind.ENV_VAR, "command": ActionKind.COMMAND}


def _parse_platforms(raw, application: str) -> frozenset[Platform]:
    if raw is None:
        return ANY
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list) or not all(isinstance(tag, str) for tag in raw):
        raise InvalidConfiguration(f"{application}: platforms must be a string or an array of strings")
    platforms = set()
    for tag in raw:
        platform = platform_from_tag(tag)
        if platform is None:
            raise InvalidConfiguration(f"{application}: unknown platform tag {tag!r}")
        platforms.add(platform)
    return frozenset(platforms)


def action_from_dict(entry: dict) -> OptOutAction:
    """Build one action from a TOML ``[[actions]]`` table"""
    if not isinstance(entry, dict):
        raise InvalidConfiguration(f"action entries must be tables, got {entry!r}")
    for key in ("application", "kind", "name", "executable", "description", "source_url"):
        if not isinstance(entry.get(key, ""), str):
            raise InvalidConfiguration(f"{entry.get('application') or 'entry'}: {key} must be a string")

    application = entry.get("application", "")
    kind = _KIND_MAP.get(entry.get("kind", ""))
    if kind is None:
        raise InvalidConfiguration(f"{application or 'entry'}: kind must be 'env' or 'command'")

    platforms = _parse_platforms(entry.get("platforms"), application)
    description = entry.get("description", "")
    source_url = entry.get("source_url", "")

    if kind is ActionKind.ENV_VAR:
        if entry.get("presence_only", False):
            value = EnvValue.presence_only()
        elif "value" in entry:
            value = EnvValue(str(entry["value"]))
        else:
            raise InvalidConfiguration(f"{application}: {entry.get('name', '')} needs a value or presence_only")
        return env(
            application or entry.get("name", ""),
            entry.get("name", ""),
            value,
            platforms=platforms,
            description=description,
            source_url=source_url,
        )

    arguments = entry.get("arguments", ())
    if not isinstance(arguments, (str, list, tuple)) or not all(isinstance(a, str) for a in arguments):
        raise InvalidConfiguration(f"{application}: arguments must be a string or an array of strings")

    return command(
        application or entry.get("executable", ""),
        entry.get("executable", ""),
        arguments,
        platforms=platforms,
        description=description,
        source_url=source_url,
    )


def load_catalog(path: Path) -> tuple[OptOutAction, ...]:
    """Load opt-out actions from a TOML file.

    The file holds an array of ``[[actions]]`` tables. Read and decode
    errors propagate; malformed records raise InvalidConfiguration.
    """
    with path.open("rb") as f:
        data = tomllib.load(f)

    entries = data.get("actions", [])
    if not isinstance(entries, list):
        raise InvalidConfiguration(f"{path}: 'actions' must be an array of tables")

    return tuple(action_from_dict(entry) for entry in entries)
