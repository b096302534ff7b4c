"""
Structured error types for arbor.

Every failure the engine can produce is an ``ArborError`` carrying a
category, a structured context and an optional chained cause. The category
decides the *scope* of a failure:

- **Fatal** errors (config, data load, registration) abort a run before any
  suite is registered.
- **Step** errors (merge, template, matcher, dispatch, match, variable
  extraction) fail only the current leaf.
- **Group** errors (construct, preset, cleanup, lifecycle) are raised from a
  group's hooks and are attributed to the leaf whose hook raised them.

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │                        ArborError                          │
        │              (category, context, cause)                    │
        ├────────────────────────────────────────────────────────────┤
        │  ConfigError        DataLoadError       RegistrationError  │
        │                                          DuplicateNameError│
        │                                                            │
        │  StepError                              GroupError         │
        │    MergeError        DispatchError        ConstructError   │
        │    TemplateError     MatchError           PresetError      │
        │    MatcherError      EventuallyTimeout    CleanupError     │
        │    VariableError                          LifecycleError   │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> error = DispatchError("connection refused").with_context(step="login")
    >>> error.to_dict()["category"]
    'STEP'

Tags:
    error-handling, exception-hierarchy, error-context, arbor

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for reporting and failure scoping."""

    CONFIG = "CONFIG"             # Invalid settings
    LOAD = "LOAD"                 # Data root could not be loaded
    REGISTRATION = "REGISTRATION"  # Duplicate cleaner/presetter
    STEP = "STEP"                 # One round-trip step failed
    GROUP = "GROUP"               # Group construct / cleanup
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        suite: Top-level suite (data root) summary
        group: Group summary where the error occurred
        leaf: Leaf summary where the error occurred
        step: Round-trip description
        path: File system path (load errors)
        url: Request URL (dispatch errors)
        http_status: Response status code, when one was received
        metadata: Additional key-value pairs
    """

    suite: str | None = None
    group: str | None = None
    leaf: str | None = None
    step: str | None = None
    path: str | None = None
    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["suite", "group", "leaf", "step", "path", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ArborError(Exception):
    """
    Base exception for all arbor errors.

    Subclasses set ``default_category`` so callers rarely pass a category
    explicitly.

    Examples:
        >>> error = ArborError("Test error", category=ErrorCategory.CONFIG)
        >>> error.to_dict()["category"]
        'CONFIG'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ArborError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DispatchError("Failed").with_context(step="login", url=url)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# FATAL ERRORS (abort before any suite runs)
# =============================================================================


class ConfigError(ArborError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG


class DataLoadError(ArborError):
    """A data root, context file or case file could not be loaded."""

    default_category = ErrorCategory.LOAD

    def __init__(self, message: str, *, path: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if path is not None:
            self.context.path = path


class RegistrationError(ArborError):
    """Registration of a named capability failed."""

    default_category = ErrorCategory.REGISTRATION


class DuplicateNameError(RegistrationError):
    """A capability with the same name is already registered."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"can't register {kind} {name}: already exists")


# =============================================================================
# STEP ERRORS (fail the current leaf only)
# =============================================================================


class StepError(ArborError):
    """Base class for failures of a single round-trip step."""

    default_category = ErrorCategory.STEP


class MergeError(StepError):
    """Template and override could not be merged."""


class TemplateError(StepError):
    """A ``{{ name }}`` placeholder could not be rendered."""

    def __init__(self, message: str, *, variable: str | None = None, **kwargs: Any):
        self.variable = variable
        super().__init__(message, **kwargs)


class MatcherError(StepError):
    """The expected response could not be turned into a matcher."""


class DispatchError(StepError):
    """The request could not be sent or no response was received."""


class MatchError(StepError):
    """The response did not match the expectation."""


class EventuallyTimeoutError(MatchError):
    """No poll matched before the eventually window elapsed."""

    def __init__(self, message: str, *, attempts: int, elapsed: float, **kwargs: Any):
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(message, **kwargs)


class VariableError(StepError):
    """A variable selector could not be resolved against the response."""


# =============================================================================
# GROUP ERRORS (raised from group hooks)
# =============================================================================


class GroupError(ArborError):
    """Base class for failures of group construct / teardown."""

    default_category = ErrorCategory.GROUP


class ConstructError(GroupError):
    """Context construction for a group failed."""


class PresetError(GroupError):
    """A presetter is unknown or rejected its arguments."""


class CleanupError(GroupError):
    """A cleaner reported an error while tearing a group down."""

    def __init__(self, cleaner_name: str, cause: Exception):
        self.cleaner_name = cleaner_name
        super().__init__(f"cleaner {cleaner_name} failed: {cause}", cause=cause)


class LifecycleError(GroupError):
    """A group hook was invoked in a state that does not allow it."""


def is_fatal(error: Exception) -> bool:
    """Check whether an error aborts the whole run."""
    if isinstance(error, ArborError):
        return error.category in (
            ErrorCategory.CONFIG,
            ErrorCategory.LOAD,
            ErrorCategory.REGISTRATION,
        )
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ArborError",
    # Fatal
    "ConfigError",
    "DataLoadError",
    "RegistrationError",
    "DuplicateNameError",
    # Step
    "StepError",
    "MergeError",
    "TemplateError",
    "MatcherError",
    "DispatchError",
    "MatchError",
    "EventuallyTimeoutError",
    "VariableError",
    # Group
    "GroupError",
    "ConstructError",
    "PresetError",
    "CleanupError",
    "LifecycleError",
    # Utilities
    "is_fatal",
]
