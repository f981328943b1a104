"""Tests for the host identity helper."""

from __future__ import annotations

import grp
import os
import pwd

import pytest

from keyrules.authority.host import subject_for_user, unix_group_names
from keyrules.errors import UnknownSubjectError


class TestSubjectForUser:
    def test_current_user(self) -> None:
        entry = pwd.getpwuid(os.getuid())
        ctx = subject_for_user(entry.pw_name, is_local=False, is_active=True, net_groups=["ops"])

        assert ctx.uid == entry.pw_uid
        assert ctx.user_name == entry.pw_name
        assert ctx.net_groups == frozenset({"ops"})
        assert ctx.is_local is False
        assert ctx.is_active is True

    def test_primary_group_included(self) -> None:
        entry = pwd.getpwuid(os.getuid())
        try:
            primary = grp.getgrgid(entry.pw_gid).gr_name
        except KeyError:
            pytest.skip("primary gid has no group entry")
        assert primary in subject_for_user(entry.pw_name).groups

    def test_unknown_user(self) -> None:
        with pytest.raises(UnknownSubjectError) as exc_info:
            subject_for_user("no-such-user-keyrules-test")
        assert exc_info.value.user == "no-such-user-keyrules-test"


class TestUnixGroupNames:
    def test_returns_frozenset(self) -> None:
        entry = pwd.getpwuid(os.getuid())
        assert isinstance(unix_group_names(entry.pw_name, entry.pw_gid), frozenset)
