"""
Configuration system using Pydantic for type-safe settings management.

Settings come from an optional YAML file. ``SECRET_LOVER_*`` environment
variables fill in anything the file leaves unset, and defaults cover the rest.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from secret_lover.credentials.store import DEFAULT_NAMESPACE
from secret_lover.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path("~/.config/secret-lover/config.yaml")


class SecretLoverSettings(BaseSettings):
    """secret-lover settings.

    Example YAML::

        namespace: secret-lover
        gate: auto
        gate_command: ["/usr/local/bin/biometric-prompt"]
        gate_timeout: 60
    """

    model_config = SettingsConfigDict(
        env_prefix="SECRET_LOVER_",
        case_sensitive=False,
    )

    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        description="Application namespace every keyring service is derived from",
    )
    gate: Literal["auto", "none", "confirm", "command"] = Field(
        default="auto",
        description=(
            "Authentication mechanism consulted by gated reads. 'auto' runs gate_command "
            "when one is set and otherwise asks for confirmation on a terminal"
        ),
    )
    gate_command: list[str] | None = Field(
        default=None,
        description="Helper program (argv) for the 'command' gate. Unset means the gate always passes.",
    )
    gate_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for an authentication decision. Unset waits indefinitely.",
    )
    log_level: str = Field(default="WARNING", description="Minimum log level")

    @property
    def index_service(self) -> str:
        """Keyring service holding the credential index, outside the namespace tree."""
        return f"{self.namespace}.index"

    @classmethod
    def load(cls, config_path: str | None = None) -> SecretLoverSettings:
        """Load settings from ``config_path``, or the default file if it exists.

        Raises:
            ConfigurationError: If an explicit config file is missing or invalid
        """
        if config_path:
            return cls.from_yaml(config_path)

        default_path = DEFAULT_CONFIG_PATH.expanduser()
        if default_path.exists():
            return cls.from_yaml(str(default_path))
        return cls()


    @classmethod
    def from_yaml(cls, config_path: str) -> SecretLoverSettings:
        """Build settings from a YAML file after expanding ``${VAR}`` references.

        Raises:
            ConfigurationError: If the file is missing, unreadable, references an
                unset variable, or does not describe valid settings
        """
        path = Path(config_path).expanduser()
        try:
            text = path.read_text()
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e.strerror}") from e

        try:
            data = yaml.safe_load(expand_env_references(text))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: settings must be a YAML object, not {type(data).__name__}")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Failed to validate {path}: {e}") from e


_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[A-Z_][A-Z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


def expand_env_references(text: str) -> str:
    """Replace ``${NAME}`` and ``${NAME:-fallback}`` outside comment lines.

    Every unset variable without a fallback is reported at once.

    Raises:
        ConfigurationError: If a referenced variable is unset and has no fallback
    """
    unset: list[str] = []

    def lookup(match: re.Match[str]) -> str:
        value = os.environ.get(match["name"], match["fallback"])
        if value is None:
            unset.append(match["name"])
            return match[0]
        return value

    lines = [
        line if line.lstrip().startswith("#") else _ENV_REFERENCE.sub(lookup, line)
        for line in text.splitlines()
    ]
    if unset:
        names = ", ".join(sorted(set(unset)))
        raise ConfigurationError(f"Environment variable not set in configuration: {names}")
    return "\n".join(lines)
