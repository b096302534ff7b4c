"""
arbor - declarative, data-driven API integration tests.

A tree of YAML test data is compiled into nested groups and leaves, run
against a live HTTP target with inheritable round-trip templates, shared
variables and exactly-once group teardown.
"""

__version__ = "0.1.0"

from arbor.cleaner import CallableCleaner, Cleaner, cleaner
from arbor.core.errors import ArborError, DataLoadError, DuplicateNameError
from arbor.engine.framework import Framework
from arbor.preset import HeaderPresetter, Presetter, PresetType
from arbor.runtime.runner import SuiteReport

__all__ = [
    "ArborError",
    "CallableCleaner",
    "Cleaner",
    "DataLoadError",
    "DuplicateNameError",
    "Framework",
    "HeaderPresetter",
    "PresetType",
    "Presetter",
    "SuiteReport",
    "cleaner",
]
