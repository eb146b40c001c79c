"""Standard registry protocol and a freezable dict-backed implementation.

Registries in this project are populated during configuration and read
concurrently afterwards, so the mutable implementation can be frozen.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Protocol, TypeVar, runtime_checkable

K = TypeVar("K")
V = TypeVar("V")


@runtime_checkable
class Registry(Protocol[K, V]):
    """Protocol for registry implementations."""

    @abstractmethod
    def register(self, key: K, value: V) -> None:
        """Register a value with the given key."""

    @abstractmethod
    def get(self, key: K) -> V | None:
        """Retrieve a value by key, or None if not found."""

    @abstractmethod
    def __contains__(self, key: K) -> bool:
        """Check if key is registered."""

    @abstractmethod
    def __iter__(self) -> Iterator[K]:
        """Iterate over registered keys."""

    @abstractmethod
    def __len__(self) -> int:
        """Return count of registered items."""


class RegistryFrozenError(RuntimeError):
    """Raised when registering into a frozen registry."""


@dataclass
class MutableRegistry[K, V]:
    """Dict-backed registry that rejects duplicates and can be frozen."""

    _entries: dict[K, V] = field(default_factory=dict)
    _frozen: bool = False

    def register(self, key: K, value: V, *, overwrite: bool = False) -> None:
        """Register a value for the provided key.

        Parameters
        ----------
        key
            Registry key.
        value
            Value to store.
        overwrite
            Whether to replace an existing entry.

        Raises
        ------
        RegistryFrozenError
            Raised when the registry has been frozen.
        ValueError
            Raised when the key exists and ``overwrite`` is not set.
        """
        if self._frozen:
            msg = f"Registry is frozen; cannot register {key!r}."
            raise RegistryFrozenError(msg)
        if key in self._entries and not overwrite:
            msg = f"Key {key!r} already registered. Use overwrite=True."
            raise ValueError(msg)
        self._entries[key] = value

    def get(self, key: K) -> V | None:
        """Retrieve a value by key, or ``None`` when missing."""
        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[K]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def freeze(self) -> None:
        """Reject further registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """Return True once :meth:`freeze` has been called."""
        return self._frozen

    def snapshot(self) -> Mapping[K, V]:
        """Return a copy of the current entries.

        Returns
        -------
        Mapping[K, V]
            Snapshot of registry entries.
        """
        return dict(self._entries)


__all__ = ["MutableRegistry", "Registry", "RegistryFrozenError"]
