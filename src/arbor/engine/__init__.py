"""Test-tree execution engine.

Modules:
    registry   — name-keyed cleaner / presetter registries
    context    — shared Context, snapshots and group construction
    executor   — round-trip execution with eventually polling
    lifecycle  — per-group construct / restore / cleanup hooks
    builder    — directory model → suite tree
    framework  — facade: registration and run
"""

from arbor.engine.builder import SuiteBuilder
from arbor.engine.context import Context, ContextConstructor, ContextSnapshot
from arbor.engine.executor import RoundTripExecutor, SystemClock
from arbor.engine.framework import Framework
from arbor.engine.lifecycle import GroupLifecycle, GroupState
from arbor.engine.registry import NamedRegistry

__all__ = [
    "Context",
    "ContextConstructor",
    "ContextSnapshot",
    "Framework",
    "GroupLifecycle",
    "GroupState",
    "NamedRegistry",
    "RoundTripExecutor",
    "SuiteBuilder",
    "SystemClock",
]
