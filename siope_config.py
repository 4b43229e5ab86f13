#!/usr/bin/env python3
"""
Run configuration for Siope

Holds the mode switches for a single pass. Nothing here is persisted:
every run is configured from its command line alone.
"""

import argparse
import pathlib
from dataclasses import asdict, dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class SiopeConfig:
    """Configuration for one opt-out pass

    ``apply_env`` and ``apply_exec`` are tri-state until resolved: None
    means the caller did not choose. If neither was chosen, both kinds
    of action are applied.
    """

    apply_env: Optional[bool] = None
    apply_exec: Optional[bool] = None
    dry_run: bool = False
    verbose: bool = False
    command_timeout: Optional[float] = None
    catalog_paths: tuple[pathlib.Path, ...] = ()
    export_shell: Optional[str] = None

    def resolved(self) -> "SiopeConfig":
        """Return a copy with both mode flags decided"""
        if not self.apply_env and not self.apply_exec:
            return replace(self, apply_env=True, apply_exec=True)
        return replace(self, apply_env=bool(self.apply_env), apply_exec=bool(self.apply_exec))

    def to_dict(self) -> dict:
        """Convert to dictionary for display"""
        data = asdict(self)
        data["catalog_paths"] = [str(p) for p in self.catalog_paths]
        return data

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SiopeConfig":
        """Create from parsed command line arguments"""
        return cls(
            apply_env=True if getattr(args, "env", False) else None,
            apply_exec=True if getattr(args, "exec", False) else None,
            dry_run=getattr(args, "dry_run", False),
            verbose=getattr(args, "verbose", False),
            command_timeout=getattr(args, "timeout", None),
            catalog_paths=tuple(getattr(args, "catalog", None) or ()),
            export_shell=getattr(args, "export", None),
        )
