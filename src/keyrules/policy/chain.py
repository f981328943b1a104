"""Policy chain loader: discover, order, and compile rule files.

Files from every configured directory are sorted by base name, so a file's
position in the chain depends on its name, not its directory.  When two
directories ship the same base name, the directory listed first in the
configuration wins (e.g. ``/etc`` overriding ``/usr/share``).

One bad file never invalidates the rest: it is logged, reported as a
:class:`Diagnostic`, and skipped.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from keyrules.errors import RuleParseError
from keyrules.policy.models import PolicyChain, RuleSet
from keyrules.policy.parser import DEFAULT_ADMIN_GROUP, parse_rule_file

logger = logging.getLogger(__name__)

DEFAULT_RULES_SUFFIX = ".keyrules"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while loading (bad directory or bad file)."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class LoadReport:
    """Outcome of one load pass."""

    chain: PolicyChain
    files: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def loaded(self) -> list[str]:
        return self.chain.paths

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def rules_file_sort_key(path: str | Path, dir_index: int = 0) -> tuple[str, int, str]:
    """Order by base name, then by directory precedence, then by full path."""
    p = Path(path)
    return (p.name, dir_index, str(p))


def discover_rule_files(
    rules_dirs: Sequence[str | Path],
    *,
    suffix: str = DEFAULT_RULES_SUFFIX,
    diagnostics: list[Diagnostic] | None = None,
) -> list[Path]:
    """Return rule files from *rules_dirs* in chain order.

    Directories that cannot be opened are logged (and appended to
    *diagnostics* when given) and contribute nothing.
    """
    found: dict[Path, int] = {}
    for index, dir_name in enumerate(rules_dirs):
        directory = Path(dir_name)
        logger.info("Loading rules from directory %s", directory)
        try:
            with os.scandir(directory) as entries:
                candidates = [e for e in entries if e.name.endswith(suffix)]
        except OSError as exc:
            logger.warning("Error opening rules directory: %s", exc)
            if diagnostics is not None:
                diagnostics.append(Diagnostic(str(directory), f"cannot open directory: {exc}"))
            continue
        names: list[str] = []
        for entry in candidates:
            try:
                if entry.is_file():
                    names.append(entry.name)
            except OSError as exc:
                logger.warning("Error reading rules file entry %s: %s", entry.path, exc)
                if diagnostics is not None:
                    diagnostics.append(Diagnostic(entry.path, f"cannot stat file: {exc}"))
        for name in names:
            found.setdefault(directory / name, index)

    return sorted(found, key=lambda p: rules_file_sort_key(p, found[p]))


def load_chain(
    rules_dirs: Sequence[str | Path],
    *,
    suffix: str = DEFAULT_RULES_SUFFIX,
    admin_group: str = DEFAULT_ADMIN_GROUP,
) -> LoadReport:
    """Build a fresh :class:`PolicyChain` from *rules_dirs*.

    The chain is assembled off to the side and only returned once the whole
    pass is complete.
    """
    diagnostics: list[Diagnostic] = []
    paths = discover_rule_files(rules_dirs, suffix=suffix, diagnostics=diagnostics)

    rule_sets: list[RuleSet] = []
    for path in paths:
        try:
            rule_sets.append(parse_rule_file(path, admin_group=admin_group))
        except RuleParseError as exc:
            logger.error("Error compiling rules %s: %s", path, exc.detail)
            diagnostics.append(Diagnostic(str(path), exc.detail))

    logger.info("Finished loading and compiling %d rule files", len(rule_sets))
    return LoadReport(
        chain=PolicyChain(tuple(rule_sets)),
        files=[str(p) for p in paths],
        diagnostics=diagnostics,
    )
