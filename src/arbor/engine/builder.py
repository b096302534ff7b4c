"""Tree Builder — compiles a loaded directory model into a suite tree.

Every directory becomes a ``Group`` and every case file a ``Leaf``. Each
group gets its own ``GroupLifecycle`` (private counter, lock and snapshots)
wired as its ``before_each`` / ``after_each`` hooks; the ``Context`` is the
only thing shared between groups, passed down the recursion by reference.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from arbor.core.logging import get_logger
from arbor.data.models import Case, DirNode
from arbor.engine.context import Context, ContextConstructor
from arbor.engine.executor import RoundTripExecutor
from arbor.engine.lifecycle import GroupLifecycle
from arbor.runtime.suite import Group, Leaf, LeafBody

if TYPE_CHECKING:
    from arbor.cleaner import Cleaner
    from arbor.engine.registry import NamedRegistry

logger = get_logger(__name__)


def gen_summary(name: str, summary: str) -> str:
    return f"{name}: {summary}"


class SuiteBuilder:
    """Builds suite fragments for one run."""

    def __init__(
        self,
        executor: RoundTripExecutor,
        constructor: ContextConstructor,
        cleaners: NamedRegistry[Cleaner],
    ):
        self.executor = executor
        self.constructor = constructor
        self.cleaners = cleaners

    def build(self, context: Context, node: DirNode, summary: str | None = None) -> Group:
        """Recursively build the group for *node*.

        Args:
            context: Context shared by the whole tree
            node: Loaded directory
            summary: Label of the group (defaults to the node's own summary)
        """
        group = Group(summary=summary or node.config.summary or node.name)

        for name, child in node.dirs.items():
            group.add_group(self.build(context, child, gen_summary(name, child.config.summary)))
        for name, case in node.files.items():
            group.add_leaf(gen_summary(name, case.description), self.leaf_body(context, case))

        lifecycle = GroupLifecycle(
            context,
            node.config,
            node.case_num,
            self.constructor,
            self.cleaners,
        )

        def before(leaf: Leaf) -> None:
            lifecycle.before_leaf(leaf.id)

        def after(leaf: Leaf) -> None:
            lifecycle.after_leaf(leaf.id)

        group.before_each(before)
        group.after_each(after)

        logger.debug(
            "builder.group",
            group=group.summary,
            groups=len(node.dirs),
            leaves=len(node.files),
            total=node.case_num,
        )
        return group

    def leaf_body(self, context: Context, case: Case) -> LeafBody:
        """The leaf's executor closure: run its flow in order."""

        def run() -> None:
            self.executor.run_flow(context, case.flow)

        return run


__all__ = ["SuiteBuilder", "gen_summary"]
