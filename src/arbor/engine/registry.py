"""Name-keyed registries for cleaners and presetters.

Registration is atomic per call: every name in the call is checked, against
the registry and against the other items of the same call, before anything
is stored. A collision raises ``DuplicateNameError`` and leaves the registry
untouched. There is no unregister.

Example::

    cleaners = NamedRegistry("cleaner")
    cleaners.register(db_reset, cache_flush)
    cleaners.get("db-reset")
"""

from __future__ import annotations

from collections.abc import Iterator
from threading import Lock
from typing import Generic, Protocol, TypeVar

from arbor.core.errors import DuplicateNameError
from arbor.core.logging import get_logger

logger = get_logger(__name__)


class Named(Protocol):
    @property
    def name(self) -> str: ...


T = TypeVar("T", bound=Named)


class NamedRegistry(Generic[T]):
    """In-memory mapping of name → capability with unique names."""

    def __init__(self, kind: str):
        self.kind = kind
        self._items: dict[str, T] = {}
        self._lock = Lock()

    def register(self, *items: T) -> None:
        """Register every item, or none of them.

        Raises:
            DuplicateNameError: A name is already registered or repeated in *items*
        """
        with self._lock:
            seen: set[str] = set()
            for item in items:
                if item.name in self._items or item.name in seen:
                    raise DuplicateNameError(self.kind, item.name)
                seen.add(item.name)

            for item in items:
                self._items[item.name] = item
                logger.debug("registry.registered", kind=self.kind, name=item.name)

    def get(self, name: str | None) -> T | None:
        """Exact-name lookup; ``None`` when absent."""
        if name is None:
            return None
        return self._items.get(name)

    def names(self) -> list[str]:
        return sorted(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["NamedRegistry"]
