"""Rule file parser: compile one keyfile into a :class:`RuleSet`.

Typical usage::

    rule_set = parse_rule_file(Path("/etc/polkit-1/rules.d/50-default.keyrules"))

A rule file has a ``[Policy]`` section naming the sections to load::

    [Policy]
    Rules=RuleA;RuleB
    AdminRules=AdminA

    [RuleA]
    Actions=org.example.action1;org.example.action2
    InUnixGroups=%wheel%
    Result=auth_admin_keep

Compilation is all-or-nothing: any malformed value fails the whole file with
:class:`~keyrules.errors.RuleParseError`.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Any

from keyrules.errors import MissingRuleError, RuleParseError
from keyrules.policy.models import Constraint, Rule, RuleSet, Verdict

logger = logging.getLogger(__name__)

POLICY_SECTION = "Policy"
ADMIN_GROUP_TOKEN = "%wheel%"
DEFAULT_ADMIN_GROUP = "wheel"

_LIST_SEPARATOR = ";"
_ESCAPES = {"s": " ", "n": "\n", "t": "\t", "r": "\r", "\\": "\\"}
_TRUE_VALUES = ("true", "1")
_FALSE_VALUES = ("false", "0")

# Key -> (model field, constraint flag)
_LIST_KEYS: dict[str, tuple[str, Constraint]] = {
    "Actions": ("actions", Constraint.ACTIONS),
    "ActionContains": ("action_contains", Constraint.ACTION_CONTAINS),
    "InUnixGroups": ("unix_groups", Constraint.UNIX_GROUPS),
    "InNetGroups": ("net_groups", Constraint.NET_GROUPS),
    "InUserNames": ("unix_names", Constraint.UNIX_NAMES),
}
_RESULT_KEYS: dict[str, tuple[str, Constraint]] = {
    "Result": ("result", Constraint.RESULT),
    "ResultInverse": ("result_inverse", Constraint.RESULT_INVERSE),
}
_BOOL_KEYS: dict[str, tuple[str, Constraint]] = {
    "SubjectActive": ("require_active", Constraint.SUBJECT_ACTIVE),
    "SubjectLocal": ("require_local", Constraint.SUBJECT_LOCAL),
}


class _KeyFile:
    """GLib-keyfile flavoured accessors on top of :mod:`configparser`.

    Keys are case-sensitive, only ``#`` starts a comment, and there is no
    implicit ``[DEFAULT]`` section.  Leading whitespace is dropped from every
    line, so an indented line is a new key rather than a continuation.
    """

    def __init__(self, content: str) -> None:
        content = "\n".join(line.lstrip() for line in content.splitlines())
        self._parser = configparser.ConfigParser(
            delimiters=("=",),
            comment_prefixes=("#",),
            inline_comment_prefixes=None,
            strict=False,
            empty_lines_in_values=False,
            interpolation=None,
            default_section="",
        )
        self._parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            self._parser.read_string(content)
        except configparser.Error as exc:
            raise RuleParseError(f"Failed to load file: {exc}") from exc

    def has_group(self, group: str) -> bool:
        return self._parser.has_section(group)

    def has_key(self, group: str, key: str) -> bool:
        return self._parser.has_option(group, key)

    def get_raw(self, group: str, key: str) -> str:
        return self._parser.get(group, key)

    def get_string(self, group: str, key: str) -> str:
        return _unescape(self.get_raw(group, key), group, key)

    def get_string_list(self, group: str, key: str) -> list[str]:
        """Split on ``;`` (``\\;`` escapes it) and unescape each item.

        A trailing separator does not produce an empty item.
        """
        raw = self.get_raw(group, key)
        pieces: list[str] = []
        current: list[str] = []
        i = 0
        while i < len(raw):
            char = raw[i]
            if char == "\\" and i + 1 < len(raw) and raw[i + 1] == _LIST_SEPARATOR:
                current.append(_LIST_SEPARATOR)
                i += 2
                continue
            if char == "\\" and i + 1 < len(raw):
                # Keep other escapes for _unescape.
                current.append(raw[i : i + 2])
                i += 2
                continue
            if char == _LIST_SEPARATOR:
                pieces.append("".join(current))
                current = []
            else:
                current.append(char)
            i += 1
        if current:
            pieces.append("".join(current))
        return [_unescape(piece, group, key) for piece in pieces]

    def get_boolean(self, group: str, key: str) -> bool:
        value = self.get_raw(group, key).rstrip()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise RuleParseError(
            f"Value '{value}' for key '{key}' in group '{group}' cannot be "
            "interpreted as a boolean"
        )


def _unescape(value: str, group: str, key: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(value):
        char = value[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue
        if i + 1 >= len(value):
            raise RuleParseError(
                f"Key '{key}' in group '{group}' contains escape character at end of line"
            )
        nxt = value[i + 1]
        if nxt == _LIST_SEPARATOR:
            out.append(nxt)
        elif nxt in _ESCAPES:
            out.append(_ESCAPES[nxt])
        else:
            raise RuleParseError(
                f"Key '{key}' in group '{group}' contains invalid escape sequence '\\{nxt}'"
            )
        i += 2
    return "".join(out)


def _load_rule(keyfile: _KeyFile, section_id: str, admin_group: str) -> Rule:
    """Compile a single rule section."""
    if not keyfile.has_group(section_id):
        raise MissingRuleError(section_id)

    fields: dict[str, Any] = {"id": section_id}
    constraints = Constraint.NONE

    for key, (field, flag) in _LIST_KEYS.items():
        if keyfile.has_key(section_id, key):
            items = keyfile.get_string_list(section_id, key)
            if flag is Constraint.UNIX_GROUPS:
                items = [admin_group if g == ADMIN_GROUP_TOKEN else g for g in items]
            fields[field] = tuple(items)
            constraints |= flag

    for key, (field, flag) in _RESULT_KEYS.items():
        if keyfile.has_key(section_id, key):
            value = keyfile.get_string(section_id, key)
            try:
                fields[field] = Verdict.parse(value)
            except ValueError:
                raise RuleParseError(f"invalid '{key}': '{value.strip()}'") from None
            constraints |= flag

    for key, (field, flag) in _BOOL_KEYS.items():
        if keyfile.has_key(section_id, key):
            fields[field] = keyfile.get_boolean(section_id, key)
            constraints |= flag

    fields["constraints"] = constraints
    return Rule(**fields)


def _load_rule_list(keyfile: _KeyFile, list_key: str, admin_group: str) -> tuple[Rule, ...]:
    """Load every section named by ``[Policy] <list_key>``, in listed order."""
    if not keyfile.has_key(POLICY_SECTION, list_key):
        return ()
    section_ids = [s.strip() for s in keyfile.get_string_list(POLICY_SECTION, list_key)]
    logger.debug("%s: got %d sections", list_key, len(section_ids))
    return tuple(_load_rule(keyfile, sid, admin_group) for sid in section_ids)


def parse_rules(
    content: str,
    *,
    path: str | Path = "<string>",
    admin_group: str = DEFAULT_ADMIN_GROUP,
) -> RuleSet:
    """Compile rule file *content* into a :class:`RuleSet`.

    Args:
        content: The raw file contents.
        path: Originating path, kept on the rule set and in errors.
        admin_group: Group name substituted for the ``%wheel%`` token.

    Raises:
        RuleParseError: If any part of the file is malformed.
    """
    try:
        keyfile = _KeyFile(content)
        if not keyfile.has_group(POLICY_SECTION):
            raise RuleParseError(f"Missing '[{POLICY_SECTION}]' section")
        normal = _load_rule_list(keyfile, "Rules", admin_group)
        admin = _load_rule_list(keyfile, "AdminRules", admin_group)
    except RuleParseError as exc:
        raise exc.with_path(path) from exc

    return RuleSet(path=str(path), normal=normal, admin=admin)


def parse_rule_file(path: str | Path, *, admin_group: str = DEFAULT_ADMIN_GROUP) -> RuleSet:
    """Read and compile the rule file at *path*.

    Raises:
        RuleParseError: If the file cannot be read or is malformed.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RuleParseError(f"Failed to load file: {exc}", path) from exc
    return parse_rules(content, path=path, admin_group=admin_group)
