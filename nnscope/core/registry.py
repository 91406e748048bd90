"""Closed, name-keyed lookup tables shared by the strategy registries."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Generic, List, Mapping, Type, TypeVar

from .errors import ConfigurationError

K = TypeVar("K", bound=Enum)
V = TypeVar("V")


class Registry(Generic[K, V]):
    """Map every member of an ``Enum`` to one behaviour.

    Names are resolved case-insensitively with ``-`` folded to ``_``. Unknown
    names raise :class:`ConfigurationError` instead of falling back.
    """

    def __init__(
        self,
        kind: str,
        members: Type[K],
        aliases: Mapping[str, K] | None = None,
    ) -> None:
        self.kind = kind
        self.members = members
        self._aliases: Dict[str, K] = dict(aliases or {})
        self._registry: Dict[K, V] = {}

    def register(self, member: K, value: V) -> None:
        self._registry[member] = value

    def resolve(self, name: K | str) -> K:
        if isinstance(name, self.members):
            return name
        if not isinstance(name, str):
            raise ConfigurationError(f"{self.kind} name must be a string, got {name!r}")
        key = name.strip().lower().replace("-", "_")
        if key in self._aliases:
            return self._aliases[key]
        try:
            return self.members(key)
        except ValueError as exc:
            available = ", ".join(self.names())
            raise ConfigurationError(
                f"Unknown {self.kind} {name!r}. Available {self.kind}s: {available}"
            ) from exc

    def get(self, name: K | str) -> V:
        return self._registry[self.resolve(name)]

    def names(self) -> List[str]:
        return [member.value for member in self.members]

    def verify(self) -> None:
        """Fail at import time if an enum member has no registered behaviour."""

        missing = [m.value for m in self.members if m not in self._registry]
        if missing:
            raise RuntimeError(f"{self.kind} registry is missing: {', '.join(missing)}")


__all__ = ["Registry"]
