"""
Tests for shared configuration, errors, logging context and metrics.
"""

import pytest
from prometheus_client import generate_latest

from shared.config import BaseConfig, get_config
from shared.errors import (
    ConflictError, ErrorResponse, FilterServiceException, NotFoundError, ValidationError
)
from shared.logging import (
    add_correlation_context, add_service_context, clear_context, set_request_id, set_session_context
)
from shared.metrics import get_metrics_collector


class TestConfig:
    """Settings loading."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FILTERS_DEFAULT_LOGIC", raising=False)
        monkeypatch.delenv("FILTERS_MAX_FILTERS", raising=False)
        config = get_config("filters", 8014)

        assert config.service_name == "filters"
        assert config.port == 8014
        assert config.default_logic == "AND"
        assert config.max_filters is None
        assert config.max_sessions == 1000

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FILTERS_DEFAULT_LOGIC", "OR")
        monkeypatch.setenv("FILTERS_MAX_FILTERS", "4")
        monkeypatch.setenv("FILTERS_LOG_LEVEL", "debug")
        config = BaseConfig()

        assert config.default_logic == "OR"
        assert config.max_filters == 4
        assert config.log_level == "debug"

    def test_keyword_overrides(self):
        config = get_config("filters", 8014, max_sessions=5)

        assert config.max_sessions == 5


class TestErrors:
    """Canonical error types."""

    def test_to_response(self):
        error = ValidationError("Duplicate field id", details={"field": "age"})
        response = error.to_response("req-1")

        assert isinstance(response, ErrorResponse)
        assert response.code == "VALIDATION_ERROR"
        assert response.request_id == "req-1"
        assert response.details == {"field": "age"}

    @pytest.mark.parametrize("error, status_code, code", [
        (ValidationError(), 400, "VALIDATION_ERROR"),
        (NotFoundError("Session", "s-1"), 404, "NOT_FOUND"),
        (ConflictError(), 409, "CONFLICT"),
    ])
    def test_status_codes(self, error, status_code, code):
        assert isinstance(error, FilterServiceException)
        assert error.status_code == status_code
        assert error.code == code

    def test_not_found_message(self):
        assert NotFoundError("Rule", "r-9").message == "Rule 'r-9' not found"


class TestLoggingContext:
    """Structlog processors."""

    def teardown_method(self):
        clear_context()

    def test_correlation_context(self):
        request_id = set_request_id()
        set_session_context("sess-1")

        event = add_correlation_context(None, "info", {"event": "x"})

        assert event["request_id"] == request_id
        assert event["session_id"] == "sess-1"

    def test_cleared_context(self):
        set_request_id("req-2")
        clear_context()

        assert add_correlation_context(None, "info", {"event": "x"}) == {"event": "x"}

    def test_service_context(self):
        event = add_service_context(None, "info", {"logger": "filters.engine"})

        assert event["service"] == "filters"


class TestMetrics:
    """Prometheus collector."""

    def test_collectors_do_not_share_registries(self):
        first = get_metrics_collector("filters")
        second = get_metrics_collector("filters")

        first.record_filter_operation("add", "ok")

        assert first.registry is not second.registry
        assert first.registry.get_sample_value(
            "filter_operations_total", {"operation": "add", "outcome": "ok"}
        ) == 1.0
        assert second.registry.get_sample_value(
            "filter_operations_total", {"operation": "add", "outcome": "ok"}
        ) is None

    def test_unlabelled_metrics(self):
        collector = get_metrics_collector("filters")
        collector.set_gauge("filter_sessions_active", 3)
        collector.observe_histogram("filter_chain_length", 2)

        assert collector.registry.get_sample_value("filter_sessions_active") == 3.0
        assert collector.registry.get_sample_value("filter_chain_length_count") == 1.0

    def test_http_metrics_exposed(self):
        collector = get_metrics_collector("filters")
        collector.record_http_request("GET", "/", 200, 0.01)

        assert b"http_requests_total" in generate_latest(collector.registry)

    def test_unknown_metric_ignored(self):
        collector = get_metrics_collector("other")
        collector.increment_counter("filter_operations_total", operation="add", outcome="ok")

        assert collector.get_metric("filter_operations_total") is None
