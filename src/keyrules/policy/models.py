"""Data models for compiled policy.

Every model here is frozen: a compiled :class:`RuleSet` is never edited in
place, reload always builds a fresh :class:`PolicyChain`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Iterator, Union

from pydantic import BaseModel, ConfigDict, Field

ACTION_MATCH_ALL = "*"


class Verdict(str, Enum):
    """Implicit authorization a rule can hand out."""

    NO = "no"
    YES = "yes"
    AUTH_SELF = "auth_self"
    AUTH_SELF_KEEP = "auth_self_keep"
    AUTH_ADMIN = "auth_admin"
    AUTH_ADMIN_KEEP = "auth_admin_keep"

    @classmethod
    def parse(cls, keyword: str) -> Verdict:
        """Map a ``Result=`` keyword (case-insensitive) to a verdict.

        Raises:
            ValueError: If *keyword* is not a known result.
        """
        try:
            return cls(keyword.strip().lower())
        except ValueError:
            raise ValueError(f"invalid result keyword: '{keyword}'") from None


class Constraint(IntFlag):
    """Which optional fields were present in a rule section."""

    NONE = 0
    ACTIONS = 1 << 0
    ACTION_CONTAINS = 1 << 1
    UNIX_GROUPS = 1 << 2
    NET_GROUPS = 1 << 3
    UNIX_NAMES = 1 << 4
    RESULT = 1 << 5
    RESULT_INVERSE = 1 << 6
    SUBJECT_ACTIVE = 1 << 7
    SUBJECT_LOCAL = 1 << 8


class Rule(BaseModel):
    """One ``[Section]`` of a rule file."""

    model_config = ConfigDict(frozen=True)

    id: str
    constraints: Constraint = Constraint.NONE
    actions: tuple[str, ...] = ()
    action_contains: tuple[str, ...] = ()
    unix_groups: tuple[str, ...] = ()
    unix_names: tuple[str, ...] = ()
    net_groups: tuple[str, ...] = ()
    require_active: bool | None = None
    require_local: bool | None = None
    result: Verdict | None = None
    result_inverse: Verdict | None = None

    def has(self, constraint: Constraint) -> bool:
        return bool(self.constraints & constraint)

    @property
    def is_inert(self) -> bool:
        """True when the rule can never change a verdict."""
        return self.result is None and self.result_inverse is None


class RuleSet(BaseModel):
    """One compiled rule file."""

    model_config = ConfigDict(frozen=True)

    path: str
    normal: tuple[Rule, ...] = ()
    admin: tuple[Rule, ...] = ()


@dataclass(frozen=True)
class PolicyChain:
    """Compiled rule sets in precedence order (first = highest)."""

    rule_sets: tuple[RuleSet, ...] = ()

    @classmethod
    def empty(cls) -> PolicyChain:
        return cls()

    @property
    def paths(self) -> list[str]:
        return [rs.path for rs in self.rule_sets]

    def __iter__(self) -> Iterator[RuleSet]:
        return iter(self.rule_sets)

    def __len__(self) -> int:
        return len(self.rule_sets)


class SubjectContext(BaseModel):
    """Resolved facts about the subject being authorized."""

    model_config = ConfigDict(frozen=True)

    uid: int = -1
    user_name: str
    groups: frozenset[str] = Field(default_factory=frozenset)
    net_groups: frozenset[str] = Field(default_factory=frozenset)
    is_local: bool = False
    is_active: bool = False


# ---------------------------------------------------------------------------
# Identities
# ---------------------------------------------------------------------------


class UnixUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    uid: int | None = None

    def __str__(self) -> str:
        if self.name is not None:
            return f"unix-user:{self.name}"
        return f"unix-user:{self.uid}"


class UnixGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str

    def __str__(self) -> str:
        return f"unix-group:{self.name}"


class UnixNetgroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str

    def __str__(self) -> str:
        return f"unix-netgroup:{self.name}"


Identity = Union[UnixUser, UnixGroup, UnixNetgroup]


def parse_identity(text: str) -> Identity:
    """Parse ``unix-user:``, ``unix-group:`` or ``unix-netgroup:`` strings.

    A numeric ``unix-user`` value is taken as a uid.

    Raises:
        ValueError: On an unknown prefix or an empty name.
    """
    kind, sep, value = text.partition(":")
    if not sep or not value:
        raise ValueError(f"malformed identity: '{text}'")
    if kind == "unix-user":
        if value.isdigit():
            return UnixUser(uid=int(value))
        return UnixUser(name=value)
    if kind == "unix-group":
        return UnixGroup(name=value)
    if kind == "unix-netgroup":
        return UnixNetgroup(name=value)
    raise ValueError(f"unknown identity kind: '{kind}'")
