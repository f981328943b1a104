"""Shared error types for rule compilation and configuration."""

from __future__ import annotations

from pathlib import Path


class KeyrulesError(Exception):
    """Base error for all keyrules failures."""


class RuleParseError(KeyrulesError):
    """A rule file could not be compiled.

    Raised for the whole file: no partially built rule set survives.
    """

    def __init__(self, detail: str, path: str | Path | None = None) -> None:
        self.detail = detail
        self.path = str(path) if path is not None else None
        msg = f"{self.path}: {detail}" if self.path else detail
        super().__init__(msg)

    def with_path(self, path: str | Path) -> RuleParseError:
        """Return a copy of this error attributed to *path*."""
        return RuleParseError(self.detail, path)


class MissingRuleError(RuleParseError):
    """A section named by ``Rules``/``AdminRules`` is absent from the file."""

    def __init__(self, section: str, path: str | Path | None = None) -> None:
        self.section = section
        super().__init__(f"Missing rule: '{section}'", path)

    def with_path(self, path: str | Path) -> MissingRuleError:
        return MissingRuleError(self.section, path)


class ConfigError(KeyrulesError):
    """The authority configuration could not be read or validated."""


class UnknownSubjectError(KeyrulesError):
    """A user could not be resolved through the host identity databases."""

    def __init__(self, user: str) -> None:
        self.user = user
        super().__init__(f"Unknown user: {user}")
