"""Core primitives shared by every arbor component: errors, logging, settings."""

from arbor.core.errors import (
    ArborError,
    CleanupError,
    ConfigError,
    ConstructError,
    DataLoadError,
    DispatchError,
    DuplicateNameError,
    ErrorCategory,
    ErrorContext,
    EventuallyTimeoutError,
    LifecycleError,
    MatcherError,
    MatchError,
    MergeError,
    PresetError,
    RegistrationError,
    StepError,
    TemplateError,
    VariableError,
)
from arbor.core.logging import LogContext, configure_logging, get_logger
from arbor.core.settings import ArborSettings, get_settings

__all__ = [
    "ArborError",
    "ArborSettings",
    "CleanupError",
    "ConfigError",
    "ConstructError",
    "DataLoadError",
    "DispatchError",
    "DuplicateNameError",
    "ErrorCategory",
    "ErrorContext",
    "EventuallyTimeoutError",
    "LifecycleError",
    "LogContext",
    "MatchError",
    "MatcherError",
    "MergeError",
    "PresetError",
    "RegistrationError",
    "StepError",
    "TemplateError",
    "VariableError",
    "configure_logging",
    "get_logger",
    "get_settings",
]
