"""Framework — the public entry point for running API test trees.

Example::

    from arbor import Framework, cleaner

    @cleaner("db-reset")
    def reset(variables):
        ...

    framework = Framework("http://localhost:8080", "testdata/users")
    framework.register_cleaner(reset)
    report = framework.run()
    assert report.ok
"""

from __future__ import annotations

import httpx

from arbor.cleaner import Cleaner
from arbor.core.logging import get_logger
from arbor.core.settings import ArborSettings, get_settings
from arbor.data.loader import load_tree
from arbor.data.models import DirNode
from arbor.engine.builder import SuiteBuilder
from arbor.engine.context import Context, ContextConstructor
from arbor.engine.executor import (
    DEFAULT_INTERVAL,
    DEFAULT_TIMEOUT,
    Clock,
    HTTPClient,
    RoundTripExecutor,
)
from arbor.engine.registry import NamedRegistry
from arbor.preset import HeaderPresetter, Presetter, PresetType
from arbor.roundtrip.client import RoundTripClient
from arbor.runtime.runner import SuiteReport, SuiteRunner
from arbor.runtime.suite import Group

logger = get_logger(__name__)


class Framework:
    """
    API test framework.

    Args:
        host: Base URL of the API under test
        data_dirs: Data roots; each becomes one top-level suite
        client: HTTP client override (defaults to ``RoundTripClient(host)``)
        transport: httpx transport for the default client (tests)
        runner: Suite runner (defaults to sequential)
        clock: Time source for eventually polling
        request_timeout: Per-request transport timeout (seconds)
        eventually_timeout: Default eventually window (seconds)
        eventually_interval: Default poll interval (seconds)
    """

    def __init__(
        self,
        host: str,
        *data_dirs: str,
        client: HTTPClient | None = None,
        transport: httpx.BaseTransport | None = None,
        runner: SuiteRunner | None = None,
        clock: Clock | None = None,
        request_timeout: float = 30.0,
        eventually_timeout: float = DEFAULT_TIMEOUT,
        eventually_interval: float = DEFAULT_INTERVAL,
    ):
        self.host = host
        self.data_dirs = list(data_dirs)
        self.client = client or RoundTripClient(host, timeout=request_timeout, transport=transport)
        self.runner = runner or SuiteRunner()

        self.cleaners: NamedRegistry[Cleaner] = NamedRegistry("cleaner")
        self.presetters: NamedRegistry[Presetter] = NamedRegistry("presetter")
        self.presetters.register(
            HeaderPresetter(PresetType.REQUEST),
            HeaderPresetter(PresetType.RESPONSE),
        )

        self.executor = RoundTripExecutor(
            self.client,
            clock=clock,
            default_timeout=eventually_timeout,
            default_interval=eventually_interval,
        )
        self.constructor = ContextConstructor(self.executor, self.presetters)
        self.builder = SuiteBuilder(self.executor, self.constructor, self.cleaners)

    @classmethod
    def from_settings(cls, settings: ArborSettings | None = None, **kwargs) -> Framework:
        """Build a framework from ``ArborSettings`` (environment by default)."""
        settings = settings or get_settings()
        return cls(
            settings.host,
            *settings.data_dirs,
            runner=kwargs.pop(
                "runner",
                SuiteRunner(
                    workers=settings.workers,
                    randomize=settings.randomize,
                    seed=settings.seed,
                ),
            ),
            request_timeout=settings.request_timeout,
            eventually_timeout=settings.eventually_timeout,
            eventually_interval=settings.eventually_interval,
            **kwargs,
        )

    def register_cleaner(self, *cleaners: Cleaner) -> None:
        """Register cleaners; all or none.

        Raises:
            DuplicateNameError: A cleaner name is already registered
        """
        self.cleaners.register(*cleaners)

    def register_presetter(self, *presetters: Presetter) -> None:
        """Register presetters; all or none.

        Raises:
            DuplicateNameError: A presetter name is already registered
        """
        self.presetters.register(*presetters)

    def load(self) -> list[DirNode]:
        """Load every data root. Any failure aborts before anything is built.

        Raises:
            DataLoadError: A root could not be loaded
        """
        return [load_tree(root) for root in self.data_dirs]

    def build_suites(self) -> list[Group]:
        """Load every root and assemble one suite per root, each with a fresh context."""
        suites = []
        for node in self.load():
            context = Context()
            suites.append(self.builder.build(context, node))
        return suites

    def run(self, name: str = "Test Suite") -> SuiteReport:
        """Load, assemble and execute every suite.

        Raises:
            DataLoadError: A root could not be loaded (nothing runs)
        """
        suites = self.build_suites()
        logger.info(
            "framework.run",
            host=self.host,
            suites=[s.summary for s in suites],
            leaves=sum(s.leaf_count() for s in suites),
        )
        return self.runner.run(suites, name=name)

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> Framework:
        return self

    def __exit__(self, *args) -> None:
        self.close()


__all__ = ["Framework"]
