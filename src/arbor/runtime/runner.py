"""Suite Runner — schedules leaves, runs group hooks around them, reports.

Manifesto:
    The engine registers groups, leaves and hooks; something has to execute
    them the way a BDD-style test runtime does. For every leaf the runner
    calls the ``before_each`` hooks of its enclosing groups outermost first,
    the leaf body, then every ``after_each`` hook innermost first. After hooks always
    run, even when a before hook or the body failed, so per-group completion
    counts stay exact.

ARCHITECTURE
────────────
::

    SuiteRunner(workers, randomize, seed).run(suites)
      ├── flatten suites → [Leaf]           (definition order, or shuffled)
      ├── workers == 1 → run_leaf() in order
      │   workers  > 1 → ThreadPoolExecutor(max_workers=workers),
      │                  one lock per suite held for the whole leaf
      └── SuiteReport(results=[LeafResult])

    run_leaf(leaf)
      before hooks (outer → inner, stop at first failure)
      body (only if every before hook passed)
      after hooks (inner → outer, all of them)

Leaves of one suite share a single context, so they never overlap: worker
threads only run leaves of different suites side by side.

Tags:
    arbor, runtime, runner, parallel, report
"""

from __future__ import annotations

import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from threading import Lock
from typing import Any

from arbor.core.errors import ArborError
from arbor.core.logging import LogContext, get_logger
from arbor.runtime.suite import Group, Leaf

logger = get_logger(__name__)


class LeafStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


def describe_error(error: BaseException, phase: str) -> dict[str, Any]:
    """Serialize a failure for the report."""
    if isinstance(error, ArborError):
        detail = error.to_dict()
    else:
        detail = {"error_type": type(error).__name__, "message": str(error)}
    detail["phase"] = phase
    return detail


@dataclass
class LeafResult:
    """Outcome of one leaf."""

    leaf_id: str
    summary: str
    path: list[str]
    status: LeafStatus = LeafStatus.PASSED
    errors: list[dict[str, Any]] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status is LeafStatus.PASSED

    def fail(self, error: BaseException, phase: str) -> None:
        self.status = LeafStatus.FAILED
        self.errors.append(describe_error(error, phase))

    def to_dict(self) -> dict[str, Any]:
        return {
            "leaf_id": self.leaf_id,
            "summary": self.summary,
            "path": self.path,
            "status": self.status.value,
            "errors": self.errors,
            "duration_seconds": round(self.duration_seconds, 4),
        }


@dataclass
class SuiteReport:
    """Outcome of a whole run."""

    name: str
    results: list[LeafResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> list[LeafResult]:
        return [r for r in self.results if r.passed]

    @property
    def failed(self) -> list[LeafResult]:
        return [r for r in self.results if not r.passed]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "total": self.total,
            "passed": len(self.passed),
            "failed": len(self.failed),
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "results": [r.to_dict() for r in self.results],
        }


class SuiteRunner:
    """
    Executes registered suites.

    Args:
        workers: Threads running leaves of different suites (1 = sequential)
        randomize: Shuffle leaf order before running
        seed: Seed for the shuffle (reproducible runs)
    """

    def __init__(self, workers: int = 1, randomize: bool = False, seed: int | None = None):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.workers = workers
        self.randomize = randomize
        self.seed = seed

    def collect(self, suites: list[Group]) -> list[Leaf]:
        leaves = [leaf for suite in suites for leaf in suite.iter_leaves()]
        if self.randomize:
            random.Random(self.seed).shuffle(leaves)
        return leaves

    def run(self, suites: list[Group], name: str = "Test Suite") -> SuiteReport:
        report = SuiteReport(name=name)
        leaves = self.collect(suites)
        logger.info(
            "runner.started",
            suite=name,
            leaves=len(leaves),
            workers=self.workers,
            randomize=self.randomize,
            seed=self.seed,
        )

        if self.workers == 1:
            report.results = [self.run_leaf(leaf) for leaf in leaves]
        else:
            locks = {id(suite): Lock() for suite in suites}

            def run_serialized(leaf: Leaf) -> LeafResult:
                with locks[id(leaf.ancestors()[0])]:
                    return self.run_leaf(leaf)

            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                report.results = list(executor.map(run_serialized, leaves))

        report.completed_at = datetime.now(UTC)
        logger.info(
            "runner.completed",
            suite=name,
            passed=len(report.passed),
            failed=len(report.failed),
            duration=report.duration_seconds,
        )
        return report

    def run_leaf(self, leaf: Leaf) -> LeafResult:
        result = LeafResult(leaf_id=leaf.id, summary=leaf.summary, path=leaf.path)
        groups = leaf.ancestors()
        start = time.perf_counter()

        with LogContext(leaf=leaf.full_summary):
            ready = True
            for group in groups:
                for hook in group.before_hooks:
                    try:
                        hook(leaf)
                    except Exception as e:
                        result.fail(e, "before_each")
                        ready = False
                        break
                if not ready:
                    break

            if ready:
                try:
                    leaf.body()
                except Exception as e:
                    result.fail(e, "body")

            for group in reversed(groups):
                for hook in group.after_hooks:
                    try:
                        hook(leaf)
                    except Exception as e:
                        result.fail(e, "after_each")

            result.duration_seconds = time.perf_counter() - start
            if result.passed:
                logger.info("runner.leaf_passed", duration=round(result.duration_seconds, 4))
            else:
                logger.warning("runner.leaf_failed", errors=result.errors)
        return result


__all__ = ["LeafResult", "LeafStatus", "SuiteReport", "SuiteRunner", "describe_error"]
