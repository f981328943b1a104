"""Authority subsystem: chain ownership, hot reload, request entry points."""

from keyrules.authority.authority import KeyfileAuthority
from keyrules.authority.host import subject_for_user
from keyrules.authority.watcher import DirectoryWatcher, RuleFileEventHandler, is_rule_file_name

__all__ = [
    "DirectoryWatcher",
    "KeyfileAuthority",
    "RuleFileEventHandler",
    "is_rule_file_name",
    "subject_for_user",
]
