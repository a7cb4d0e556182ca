"""Tests for the error taxonomy and reporters."""

import logging

import pytest

from mongologpy.core.errors import (
    AuthenticationError,
    CollectingErrorReporter,
    ConfigurationError,
    ErrorCategory,
    ErrorReporter,
    LoggingErrorReporter,
    MongoLogError,
    StoreConnectionError,
    WriteFailure,
)

pytestmark = [pytest.mark.tier(0), pytest.mark.core]


class TestErrorTaxonomy:
    """Tests for MongoLogError subclasses."""

    @pytest.mark.parametrize(
        ("error_type", "category"),
        [
            (ConfigurationError, ErrorCategory.CONFIGURATION),
            (AuthenticationError, ErrorCategory.AUTHENTICATION),
            (StoreConnectionError, ErrorCategory.CONNECTION),
            (WriteFailure, ErrorCategory.WRITE_FAILURE),
        ],
    )
    def test_each_error_has_its_category(
        self, error_type: type[MongoLogError], category: ErrorCategory
    ) -> None:
        error = error_type("boom")
        assert isinstance(error, MongoLogError)
        assert error.category is category
        assert error.message == "boom"
        assert str(error) == "boom"

    def test_cause_is_chained(self) -> None:
        cause = OSError("refused")
        error = StoreConnectionError("unreachable", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause


class TestReporters:
    """Tests for the error reporters."""

    def test_reporters_satisfy_protocol(self) -> None:
        assert isinstance(LoggingErrorReporter(), ErrorReporter)
        assert isinstance(CollectingErrorReporter(), ErrorReporter)

    def test_collecting_reporter_keeps_order(self) -> None:
        reporter = CollectingErrorReporter()
        reporter.report(ConfigurationError("first"))
        reporter.report(WriteFailure("second"))

        assert [e.message for e in reporter.errors] == ["first", "second"]
        assert reporter.categories == [
            ErrorCategory.CONFIGURATION,
            ErrorCategory.WRITE_FAILURE,
        ]

        reporter.clear()
        assert reporter.errors == []

    @pytest.mark.tra("Core.Errors.LoggingReporter")
    def test_logging_reporter_logs_category_and_cause(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        cause = ValueError("duplicate key")

        with caplog.at_level(logging.ERROR, logger="mongologpy.errors"):
            LoggingErrorReporter().report(WriteFailure("insert failed", cause=cause))

        record = caplog.records[-1]
        assert record.name == "mongologpy.errors"
        assert record.getMessage() == "[write_failure] insert failed"
        assert record.exc_info is not None
        assert record.exc_info[1] is cause

    def test_logging_reporter_without_cause(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="mongologpy.errors"):
            LoggingErrorReporter().report(ConfigurationError("bad port"))

        assert caplog.records[-1].exc_info is None
