"""Unit tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from mp_relay.observability.logging import (
    DEFAULT_SENSITIVE_FIELDS,
    JsonLoggerFactory,
    SensitiveFieldsFilter,
    get_logger,
)


# ---------------------------------------------------------------------------
# SensitiveFieldsFilter
# ---------------------------------------------------------------------------


class TestSensitiveFieldsFilter:
    def test_serialized_payload_fields_are_sensitive_by_default(self) -> None:
        for name in ("data", "event_data", "serialized", "current_event_serialized"):
            assert name in DEFAULT_SENSITIVE_FIELDS

    def test_redact(self) -> None:
        f = SensitiveFieldsFilter()
        out = f.redact({"event_type": "OrderPlaced", "data": '{"card": "4111"}'})
        assert out == {"event_type": "OrderPlaced", "data": SensitiveFieldsFilter.REDACTED}

    def test_redact_is_case_insensitive(self) -> None:
        out = SensitiveFieldsFilter().redact({"Password": "hunter2"})
        assert out["Password"] == SensitiveFieldsFilter.REDACTED

    def test_redact_deep(self) -> None:
        f = SensitiveFieldsFilter()
        out = f.redact_deep({"row": {"id": 1, "data": "{}"}, "token": "t"})
        assert out == {"row": {"id": 1, "data": "[REDACTED]"}, "token": "[REDACTED]"}

    def test_custom_fields(self) -> None:
        f = SensitiveFieldsFilter(frozenset({"iban"}))
        assert f.redact({"iban": "DE00", "data": "x"}) == {"iban": "[REDACTED]", "data": "x"}

    def test_processor_signature(self) -> None:
        f = SensitiveFieldsFilter()
        out = f(None, "info", {"event": "inbox.lease_acquired", "data": "{}"})
        assert out == {"event": "inbox.lease_acquired", "data": "[REDACTED]"}


# ---------------------------------------------------------------------------
# get_logger / JsonLoggerFactory
# ---------------------------------------------------------------------------


class TestGetLogger:
    def test_bound_values_are_logged(self) -> None:
        with capture_logs() as logs:
            logger = get_logger("mp_relay.test", worker="w1")
            logger.info("inbox.processor_started", idle_delay=1.0)
        assert logs == [
            {"worker": "w1", "idle_delay": 1.0, "event": "inbox.processor_started", "log_level": "info"}
        ]


class TestJsonLoggerFactory:
    @pytest.fixture(autouse=True)
    def _reset(self) -> Iterator[None]:
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        structlog.reset_defaults()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_configure_emits_redacted_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        JsonLoggerFactory.configure(logging.DEBUG, cache_logger_on_first_use=False)
        get_logger("mp_relay.test").warning("uow.rolling_back", state="STARTED", data="secret")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "uow.rolling_back"
        assert record["level"] == "warning"
        assert record["logger"] == "mp_relay.test"
        assert record["state"] == "STARTED"
        assert record["data"] == "[REDACTED]"
        assert "timestamp" in record

    def test_configure_sets_root_level(self) -> None:
        JsonLoggerFactory.configure(logging.ERROR, cache_logger_on_first_use=False)
        assert logging.getLogger().level == logging.ERROR
