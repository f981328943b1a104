"""Authority configuration: rule directories, suffix and admin fallbacks."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from keyrules.errors import ConfigError
from keyrules.policy.chain import DEFAULT_RULES_SUFFIX
from keyrules.policy.models import Identity, parse_identity
from keyrules.policy.parser import DEFAULT_ADMIN_GROUP

RULES_DIRS_ENV = "KEYRULES_RULES_DIRS"

DEFAULT_RULES_DIRS = [
    "/etc/polkit-1/rules.d",
    "/usr/share/polkit-1/rules.d",
]


class AuthorityConfig(BaseModel):
    """Configuration for :class:`~keyrules.authority.authority.KeyfileAuthority`."""

    rules_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RULES_DIRS),
        description="Rule directories, highest precedence first.",
    )
    rules_suffix: str = Field(
        default=DEFAULT_RULES_SUFFIX,
        description="Only files ending with this suffix are loaded.",
    )
    admin_group: str = Field(
        default=DEFAULT_ADMIN_GROUP,
        description="Group substituted for the '%wheel%' token.",
    )
    watch: bool = Field(default=True, description="Reload when rule directories change.")
    dedupe_admins: bool = Field(
        default=True,
        description="Drop repeated admin identities, keeping the first.",
    )
    default_admins: list[str] = Field(
        default_factory=lambda: ["unix-user:0"],
        description="Identities used when no admin rule names anyone.",
    )

    @field_validator("default_admins")
    @classmethod
    def _check_identities(cls, value: list[str]) -> list[str]:
        for item in value:
            parse_identity(item)
        return value

    @field_validator("rules_suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if not value:
            msg = "rules_suffix must not be empty"
            raise ValueError(msg)
        return value

    def default_admin_identities(self) -> list[Identity]:
        return [parse_identity(item) for item in self.default_admins]


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    raw = os.environ.get(RULES_DIRS_ENV)
    if raw:
        data["rules_dirs"] = [d for d in raw.split(os.pathsep) if d]
    return data


def load_config(path: Path | None = None) -> AuthorityConfig:
    """Load configuration from an optional YAML file plus the environment.

    ``KEYRULES_RULES_DIRS`` (``os.pathsep``-separated) overrides
    ``rules_dirs`` from the file.

    Raises:
        ConfigError: On read errors, YAML errors, or validation failures.
    """
    data: Any = {}
    if path is not None:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {path}: {exc}") from exc

        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Configuration YAML must be a mapping")

    try:
        return AuthorityConfig.model_validate(_apply_env(dict(data)))
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
