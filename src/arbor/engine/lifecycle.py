"""Context Lifecycle Manager — per-group construct / snapshot / restore / cleanup.

Manifesto:
    A group's resources must be built once and torn down once, while the
    leaves that use them may run in any order and concurrently. The group
    tracks how many leaves of its *subtree* have finished; the leaf that
    brings the count to the subtree total triggers the cleaner, under the
    same lock that serializes every count update.

ARCHITECTURE
────────────
::

    UNINITIALIZED ──before_leaf (full construct)──────▶ ACTIVE
    ACTIVE        ──before_leaf (baseline + partial)──▶ ACTIVE
    ACTIVE        ──after_leaf, count < total─────────▶ ACTIVE
    ACTIVE        ──after_leaf, count == total────────▶ DRAINED  (cleaner runs)
    DRAINED       ──before_leaf───────────────────────▶ LifecycleError

    before_leaf(leaf_id)  [lock]  (restore baseline) → construct → snapshot[leaf_id]
    after_leaf(leaf_id)           restore(snapshot[leaf_id])
                          [lock]  count += 1 → maybe clean

Full construction happens exactly once per activation: a ``constructed``
flag, set under the lock, is independent of the completion counter, so two
leaves that start before either finishes cannot both run the setup flow.

Tags:
    arbor, engine, lifecycle, concurrency, teardown
"""

from __future__ import annotations

from enum import Enum
from threading import Lock
from typing import TYPE_CHECKING, Any

from arbor.core.errors import CleanupError, LifecycleError
from arbor.core.logging import get_logger
from arbor.data.models import GroupConfig
from arbor.engine.context import Context, ContextConstructor, ContextSnapshot

if TYPE_CHECKING:
    from arbor.cleaner import Cleaner
    from arbor.engine.registry import NamedRegistry

logger = get_logger(__name__)


class GroupState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DRAINED = "drained"


class GroupLifecycle:
    """
    Pre/post-leaf hooks of one group.

    Args:
        context: Context shared with the rest of the tree (not owned)
        config: The group's configuration
        total: Number of leaves in the group's whole subtree
        constructor: Applies *config* onto *context*
        cleaners: Registry the bound cleaner is looked up in
    """

    def __init__(
        self,
        context: Context,
        config: GroupConfig,
        total: int,
        constructor: ContextConstructor,
        cleaners: NamedRegistry[Cleaner],
    ):
        self.context = context
        self.config = config
        self.total = total
        self.constructor = constructor
        self.cleaners = cleaners

        self._lock = Lock()
        self._count = 0
        self._constructed = False
        self._state = GroupState.UNINITIALIZED
        self._setup_variables: dict[str, Any] = {}
        self._snapshots: dict[str, ContextSnapshot] = {}
        self._baseline: ContextSnapshot | None = None

    @property
    def state(self) -> GroupState:
        return self._state

    @property
    def count(self) -> int:
        return self._count

    def before_leaf(self, leaf_id: str) -> None:
        """Construct the context for *leaf_id* and remember a rollback point."""
        with self._lock:
            if self._state is GroupState.DRAINED:
                raise LifecycleError(
                    f"group {self.config.summary!r} already drained; it cannot be re-activated"
                )

            fallback = self.context.snapshot()
            try:
                if not self._constructed:
                    self._setup_variables = self.constructor.construct(
                        self.context, self.config, partial=False
                    )
                    self._constructed = True
                    self._state = GroupState.ACTIVE
                    logger.debug("lifecycle.constructed", group=self.config.summary, mode="full")
                else:
                    # Later leaves start from the group baseline, not from the
                    # captures of a leaf that is still running.
                    self.context.restore(self._baseline)
                    self.constructor.construct(
                        self.context,
                        self.config,
                        partial=True,
                        setup_variables=self._setup_variables,
                    )
            except Exception:
                self._snapshots[leaf_id] = fallback
                raise

            snapshot = self.context.snapshot()
            if self._baseline is None:
                self._baseline = snapshot
            self._snapshots[leaf_id] = snapshot

    def after_leaf(self, leaf_id: str) -> None:
        """Roll back *leaf_id*'s captures; clean up if the subtree is done.

        Raises:
            CleanupError: The bound cleaner failed
        """
        with self._lock:
            snapshot = self._snapshots.pop(leaf_id, None)
            if snapshot is not None:
                self.context.restore(snapshot)

            if self._state is GroupState.DRAINED:
                logger.warning("lifecycle.after_drained", group=self.config.summary, leaf=leaf_id)
                return

            self._count += 1
            if self._count != self.total:
                return

            self._state = GroupState.DRAINED
            if self._baseline is None:
                logger.info("lifecycle.drained", group=self.config.summary, constructed=False)
                return

            # Leaves whose own pre-leaf phase never ran have no snapshot; the
            # group baseline is what the cleaner must see.
            self.context.restore(self._baseline)
            cleaner = self.cleaners.get(self.context.cleaner_name)
            logger.info(
                "lifecycle.drained",
                group=self.config.summary,
                leaves=self.total,
                cleaner=cleaner.name if cleaner else None,
            )
            if cleaner is None:
                if self.context.cleaner_name is not None:
                    logger.warning(
                        "lifecycle.unknown_cleaner",
                        group=self.config.summary,
                        cleaner=self.context.cleaner_name,
                    )
                return
            try:
                cleaner.clean(dict(self.context.variables))
            except Exception as e:
                raise CleanupError(cleaner.name, e).with_context(group=self.config.summary)


__all__ = ["GroupLifecycle", "GroupState"]
