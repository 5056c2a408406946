"""Flag stores consulted by conditional tags.

A flag store only needs a ``get(name) -> Optional[str]`` method. ``None``
means the flag is not set; any string (even empty) means it is present.
"""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class FlagStore(Protocol):
    """Read-only lookup of run-time flags."""

    def get(self, name: str) -> Optional[str]: ...


class MappingFlagStore:
    """Flags held in a plain mapping (CLI ``--flag`` values, config files, tests)."""

    def __init__(self, flags: Optional[Mapping[str, object]] = None) -> None:
        self._flags: Dict[str, str] = {}
        for name, value in (flags or {}).items():
            self._flags[str(name)] = "" if value is None else str(value)

    def get(self, name: str) -> Optional[str]:
        return self._flags.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __repr__(self) -> str:
        return f"MappingFlagStore({self._flags!r})"


class EnvFlagStore:
    """Flags read from environment variables, optionally namespaced by *prefix*."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, prefix: str = "") -> None:
        self._environ = environ if environ is not None else os.environ
        self.prefix = prefix

    def get(self, name: str) -> Optional[str]:
        return self._environ.get(f"{self.prefix}{name}")


class ChainFlagStore:
    """Consult several stores in order; the first one that knows a flag wins."""

    def __init__(self, *stores: FlagStore) -> None:
        self.stores = list(stores)

    def get(self, name: str) -> Optional[str]:
        for store in self.stores:
            value = store.get(name)
            if value is not None:
                return value
        return None


def is_defined(flags: FlagStore, name: str) -> bool:
    """True when *name* is set to a non-empty value."""
    return bool(flags.get(name))
