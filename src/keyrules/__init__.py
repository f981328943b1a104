"""keyrules: keyfile rule compiler and authorization engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from keyrules.authority.authority import KeyfileAuthority as KeyfileAuthority
    from keyrules.config import AuthorityConfig as AuthorityConfig

_EXPORTS = {
    "KeyfileAuthority": "keyrules.authority.authority",
    "AuthorityConfig": "keyrules.config",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'keyrules' has no attribute {name!r}")
