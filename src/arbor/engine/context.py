"""
Context - shared per-group state threaded through a tree walk.

One ``Context`` instance is created per data root and shared by reference
by every group and leaf below it. Its *contents* are rebuilt, snapshotted
and restored around each leaf; the instance itself is never replaced.

Lifecycle around one leaf, for each enclosing group (outermost first)::

    construct(partial=False|True)   ← presetters, template, cleaner, setup flow
    snapshot()                      ← rollback point
      ... leaf steps capture variables into context.variables ...
    restore(snapshot)               ← drop the leaf's captures

Full vs partial construction:
    Both modes apply the group's presetters to its template, merge that
    template onto ``context.template`` and bind the group's cleaner. Only a
    full construction runs the group's setup ``flow``; a partial one starts
    from the group's baseline (restored by the lifecycle) and re-merges the
    variables that flow captured during the full construction instead of
    issuing the requests again.

Tags:
    arbor, engine, context, snapshot, shared-state
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from arbor.core.errors import ArborError, ConstructError, PresetError
from arbor.core.logging import get_logger
from arbor.data.models import GroupConfig
from arbor.roundtrip.merge import merge_round_trip
from arbor.roundtrip.models import RoundTrip

if TYPE_CHECKING:
    from arbor.engine.executor import RoundTripExecutor
    from arbor.engine.registry import NamedRegistry
    from arbor.preset import Presetter

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContextSnapshot:
    """Immutable copy of a context's mutable fields."""

    variables: dict[str, Any]
    cleaner_name: str | None
    template: RoundTrip | None


@dataclass
class Context:
    """
    Mutable state shared by a group and all of its descendants.

    Attributes:
        variables: Bound variables; captures overwrite existing keys
        cleaner_name: Cleaner invoked when the innermost group drains
        template: Round-trip template inherited by descendant leaves
    """

    variables: dict[str, Any] = field(default_factory=dict)
    cleaner_name: str | None = None
    template: RoundTrip | None = None

    def bind(self, captured: dict[str, Any]) -> None:
        """Merge captured variables, overwriting keys of the same name."""
        self.variables.update(captured)

    def snapshot(self) -> ContextSnapshot:
        return ContextSnapshot(
            variables=copy.deepcopy(self.variables),
            cleaner_name=self.cleaner_name,
            template=self.template,
        )

    def restore(self, snapshot: ContextSnapshot) -> None:
        """Reset every mutable field to *snapshot*, in place."""
        self.variables.clear()
        self.variables.update(copy.deepcopy(snapshot.variables))
        self.cleaner_name = snapshot.cleaner_name
        self.template = snapshot.template

    def __repr__(self) -> str:
        return (
            f"Context(variables={sorted(self.variables)!r}, "
            f"cleaner={self.cleaner_name!r})"
        )


class ContextConstructor:
    """Applies a group's configuration onto the shared context."""

    def __init__(
        self,
        executor: RoundTripExecutor,
        presetters: NamedRegistry[Presetter],
    ):
        self.executor = executor
        self.presetters = presetters

    def group_template(self, config: GroupConfig) -> RoundTrip | None:
        """The group's own template with every configured presetter applied."""
        template = config.round_trip_template
        for ref in config.presetters:
            presetter = self.presetters.get(ref.name)
            if presetter is None:
                available = ", ".join(self.presetters.names()) or "(none)"
                raise PresetError(f"unknown presetter {ref.name!r}. Available: {available}")
            template = presetter.preset(template, ref.args)
        return template

    def construct(
        self,
        context: Context,
        config: GroupConfig,
        *,
        partial: bool,
        setup_variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Construct *context* for one leaf of the group described by *config*.

        Args:
            context: Shared context, mutated in place
            config: The group's configuration
            partial: Skip the setup flow and re-merge *setup_variables*
            setup_variables: Captures of the earlier full construction

        Returns:
            Variables captured by the setup flow (full) or *setup_variables* (partial)

        Raises:
            PresetError: A configured presetter is unknown or rejects its args
            ConstructError: The setup flow failed
        """
        template = self.group_template(config)
        if template is not None:
            context.template = merge_round_trip(context.template, template)
        context.cleaner_name = config.cleaner

        if partial:
            captured = dict(setup_variables or {})
            context.bind(copy.deepcopy(captured))
            return captured

        try:
            captured = self.executor.run_flow(context, config.flow)
        except ArborError as e:
            raise ConstructError(
                f"setup flow of {config.summary or 'group'!r} failed: {e.message}", cause=e
            ).with_context(group=config.summary)

        if config.flow:
            logger.info(
                "context.setup_flow",
                group=config.summary,
                steps=len(config.flow),
                captured=sorted(captured),
            )
        return captured


__all__ = ["Context", "ContextConstructor", "ContextSnapshot"]
