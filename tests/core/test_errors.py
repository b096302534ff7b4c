"""Tests for the arbor error hierarchy — categories, context, serialization."""

from __future__ import annotations

import pytest

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
    MatchError,
    MergeError,
    RegistrationError,
    StepError,
    TemplateError,
    is_fatal,
)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class TestCategories:
    @pytest.mark.parametrize(
        "error, category",
        [
            (ConfigError("x"), ErrorCategory.CONFIG),
            (DataLoadError("x"), ErrorCategory.LOAD),
            (DuplicateNameError("cleaner", "db"), ErrorCategory.REGISTRATION),
            (MergeError("x"), ErrorCategory.STEP),
            (DispatchError("x"), ErrorCategory.STEP),
            (ConstructError("x"), ErrorCategory.GROUP),
            (LifecycleError("x"), ErrorCategory.GROUP),
            (ArborError("x"), ErrorCategory.INTERNAL),
        ],
    )
    def test_default_category(self, error, category):
        assert error.category is category

    def test_explicit_category_wins(self):
        assert ArborError("x", category=ErrorCategory.CONFIG).category is ErrorCategory.CONFIG

    def test_eventually_timeout_is_match_error(self):
        error = EventuallyTimeoutError("late", attempts=3, elapsed=0.3)
        assert isinstance(error, MatchError)
        assert isinstance(error, StepError)
        assert error.attempts == 3
        assert error.elapsed == 0.3

    def test_fatal_scope(self):
        assert is_fatal(ConfigError("x"))
        assert is_fatal(DataLoadError("x"))
        assert is_fatal(DuplicateNameError("presetter", "p"))
        assert not is_fatal(MatchError("x"))
        assert not is_fatal(CleanupError("db", RuntimeError("boom")))
        assert not is_fatal(RuntimeError("plain"))


# ---------------------------------------------------------------------------
# Messages and context
# ---------------------------------------------------------------------------


class TestMessages:
    def test_duplicate_name_message(self):
        error = DuplicateNameError("cleaner", "db-reset")
        assert str(error) == "can't register cleaner db-reset: already exists"
        assert isinstance(error, RegistrationError)
        assert error.kind == "cleaner"
        assert error.name == "db-reset"

    def test_cleanup_error_chains_cause(self):
        cause = RuntimeError("connection lost")
        error = CleanupError("db-reset", cause)
        assert error.cleaner_name == "db-reset"
        assert error.__cause__ is cause
        assert "connection lost" in error.message

    def test_data_load_error_records_path(self):
        error = DataLoadError("bad", path="/data/x.yaml")
        assert error.context.path == "/data/x.yaml"

    def test_template_error_records_variable(self):
        assert TemplateError("undefined", variable="token").variable == "token"


class TestWithContext:
    def test_known_fields_and_metadata(self):
        error = DispatchError("refused").with_context(step="login", url="http://x/login", attempt=2)
        assert error.context.step == "login"
        assert error.context.url == "http://x/login"
        assert error.context.metadata == {"attempt": 2}

    def test_returns_same_instance(self):
        error = MatchError("x")
        assert error.with_context(step="s") is error


class TestSerialization:
    def test_to_dict(self):
        cause = ValueError("inner")
        error = MergeError("cannot merge", cause=cause).with_context(step="create", leaf="a")
        data = error.to_dict()
        assert data == {
            "error_type": "MergeError",
            "message": "cannot merge",
            "category": "STEP",
            "context": {"leaf": "a", "step": "create"},
            "cause": "inner",
        }

    def test_to_dict_omits_empty_context(self):
        assert "context" not in ArborError("x").to_dict()

    def test_context_to_dict_skips_none(self):
        ctx = ErrorContext(group="users", http_status=500, metadata={"k": "v"})
        assert ctx.to_dict() == {"group": "users", "http_status": 500, "k": "v"}

    def test_repr(self):
        assert repr(ConfigError("bad host")) == "ConfigError('bad host', category=CONFIG)"
