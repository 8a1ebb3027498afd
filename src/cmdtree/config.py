"""Settings loading.

This module is the single entry point for reading user settings from
disk.  It only loads, type-checks and packages raw values; what a
setting means belongs to the CLI layer and to the application tree.

Lookup order: explicit path, then ``$CMDTREE_CONFIG``, then built-in
defaults.  A missing explicit path is an error; a missing file named
by the environment variable is too.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from cmdtree.exceptions import ConfigError

CONFIG_ENV_VAR: str = "CMDTREE_CONFIG"

INTERACTIVE_MODES: tuple[str, ...] = ("auto", "always", "never")


@dataclass(frozen=True, slots=True)
class Settings:
    """Parsed settings.  Also the root context of the sample tree."""

    interactive: str = "auto"
    """``auto`` prompts only when stdin is a terminal."""

    log_level: str = "WARNING"

    show_command: bool = True
    """Print the equivalent command line after an interactive walk."""

    default_network: str | None = None
    """Network selected without asking when none is named."""

    default_account: str | None = None
    """Account id used without asking when none is named."""


_EXPECTED_TYPES: dict[str, tuple[type, ...]] = {
    "interactive": (str,),
    "log_level": (str,),
    "show_command": (bool,),
    "default_network": (str, type(None)),
    "default_account": (str, type(None)),
}


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from *path*, ``$CMDTREE_CONFIG`` or defaults.

    Raises
    ------
    ConfigError
        If the file cannot be read, is not a YAML mapping, has unknown
        keys or values of the wrong type.
    """
    if path is None:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        if not env_value:
            return Settings()
        path = Path(env_value)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            f"Cannot read settings file {path}: {exc.strerror or exc}",
            hint=f"Check the path or unset ${CONFIG_ENV_VAR}.",
        ) from exc

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Settings file {path} is not valid YAML: {exc}") from exc

    return settings_from_mapping(raw if raw is not None else {}, source=str(path))


def settings_from_mapping(raw: Any, *, source: str = "<settings>") -> Settings:
    """Validate a raw mapping and build :class:`Settings` from it."""
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: top level must be a mapping.")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(str(key) for key in set(raw) - known)
    if unknown:
        raise ConfigError(
            f"{source}: unknown setting(s): {', '.join(unknown)}.",
            hint=f"Known settings: {', '.join(sorted(known))}.",
        )

    for key, value in raw.items():
        if not isinstance(value, _EXPECTED_TYPES[key]):
            raise ConfigError(
                f"{source}: {key} has the wrong type ({type(value).__name__})."
            )

    interactive = raw.get("interactive", "auto")
    if interactive not in INTERACTIVE_MODES:
        raise ConfigError(
            f"{source}: interactive must be one of {', '.join(INTERACTIVE_MODES)}."
        )

    return Settings(**raw)
