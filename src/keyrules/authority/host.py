"""Build a :class:`SubjectContext` for a local user from pwd/grp."""

from __future__ import annotations

import grp
import os
import pwd
from typing import Iterable

from keyrules.errors import UnknownSubjectError
from keyrules.policy.models import SubjectContext


def unix_group_names(user_name: str, primary_gid: int) -> frozenset[str]:
    """Names of every group *user_name* belongs to, primary group included."""
    names: set[str] = set()
    for gid in os.getgrouplist(user_name, primary_gid):
        try:
            names.add(grp.getgrgid(gid).gr_name)
        except KeyError:
            # gid without a group entry; nothing to match on
            continue
    return frozenset(names)


def subject_for_user(
    user_name: str,
    *,
    is_local: bool = True,
    is_active: bool = True,
    net_groups: Iterable[str] = (),
) -> SubjectContext:
    """Resolve *user_name* into a subject context.

    Netgroup membership cannot be queried portably, so it is taken as given.

    Raises:
        UnknownSubjectError: If the user has no password database entry.
    """
    try:
        entry = pwd.getpwnam(user_name)
    except KeyError:
        raise UnknownSubjectError(user_name) from None

    return SubjectContext(
        uid=entry.pw_uid,
        user_name=entry.pw_name,
        groups=unix_group_names(entry.pw_name, entry.pw_gid),
        net_groups=frozenset(net_groups),
        is_local=is_local,
        is_active=is_active,
    )
