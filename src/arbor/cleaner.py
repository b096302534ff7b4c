"""Cleaner protocol.

A cleaner tears down whatever a group created once every leaf in the
group's subtree has finished. It receives the group's baseline variables
(including those captured by the group's setup flow) and signals failure by
raising.

Example::

    @cleaner("db-reset")
    def reset_db(variables):
        requests.delete(f"{API}/namespaces/{variables['namespace']}")

    framework.register_cleaner(reset_db)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cleaner(Protocol):
    """Named teardown action."""

    @property
    def name(self) -> str: ...

    def clean(self, variables: dict[str, Any]) -> None: ...


class CallableCleaner:
    """Adapts a plain function to the ``Cleaner`` protocol."""

    def __init__(self, name: str, func: Callable[[dict[str, Any]], Any]):
        self._name = name
        self._func = func

    @property
    def name(self) -> str:
        return self._name

    def clean(self, variables: dict[str, Any]) -> None:
        self._func(variables)

    def __repr__(self) -> str:
        return f"CallableCleaner({self._name!r})"


def cleaner(name: str) -> Callable[[Callable[[dict[str, Any]], Any]], CallableCleaner]:
    """Decorator turning a function into a named cleaner."""

    def decorator(func: Callable[[dict[str, Any]], Any]) -> CallableCleaner:
        return CallableCleaner(name, func)

    return decorator


__all__ = ["CallableCleaner", "Cleaner", "cleaner"]
