"""Test runtime: suite tree registration and the leaf runner."""

from arbor.runtime.runner import LeafResult, LeafStatus, SuiteReport, SuiteRunner
from arbor.runtime.suite import Group, Leaf

__all__ = ["Group", "Leaf", "LeafResult", "LeafStatus", "SuiteReport", "SuiteRunner"]
