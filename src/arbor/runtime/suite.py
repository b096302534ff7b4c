"""Suite tree: nested groups, leaves and per-group hooks.

This is the registration surface the tree builder produces to. A ``Group``
owns child groups, leaves and two hook lists; hooks run around *every* leaf
in the group's subtree, receiving the running ``Leaf``.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

Hook = Callable[["Leaf"], None]
LeafBody = Callable[[], None]

_ids = itertools.count(1)


@dataclass(eq=False)
class Leaf:
    """One executable test."""

    summary: str
    body: LeafBody
    parent: Group | None = None
    id: str = field(default_factory=lambda: f"leaf-{next(_ids)}")

    @property
    def path(self) -> list[str]:
        """Summaries from the outermost group down to this leaf."""
        names = [self.summary]
        group = self.parent
        while group is not None:
            names.append(group.summary)
            group = group.parent
        return list(reversed(names))

    @property
    def full_summary(self) -> str:
        return " / ".join(self.path)

    def ancestors(self) -> list[Group]:
        """Enclosing groups, outermost first."""
        groups = []
        group = self.parent
        while group is not None:
            groups.append(group)
            group = group.parent
        return list(reversed(groups))


@dataclass(eq=False)
class Group:
    """A node aggregating leaves and nested groups."""

    summary: str
    parent: Group | None = None
    groups: list[Group] = field(default_factory=list)
    leaves: list[Leaf] = field(default_factory=list)
    before_hooks: list[Hook] = field(default_factory=list)
    after_hooks: list[Hook] = field(default_factory=list)

    def add_group(self, group: Group) -> Group:
        group.parent = self
        self.groups.append(group)
        return group

    def add_leaf(self, summary: str, body: LeafBody) -> Leaf:
        leaf = Leaf(summary=summary, body=body, parent=self)
        self.leaves.append(leaf)
        return leaf

    def before_each(self, hook: Hook) -> Hook:
        self.before_hooks.append(hook)
        return hook

    def after_each(self, hook: Hook) -> Hook:
        self.after_hooks.append(hook)
        return hook

    def iter_leaves(self) -> Iterator[Leaf]:
        """Every leaf of the subtree: child groups first, then own leaves."""
        for group in self.groups:
            yield from group.iter_leaves()
        yield from self.leaves

    def leaf_count(self) -> int:
        return sum(1 for _ in self.iter_leaves())


__all__ = ["Group", "Hook", "Leaf", "LeafBody"]
