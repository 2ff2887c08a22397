"""
Tests for logging filters and correlation ID context.
"""

import asyncio
import logging

import pytest

from api_client.core.logging.filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    clear_correlation_id,
    correlation_scope,
    get_correlation_id,
    set_correlation_id,
)


def _record(**extra):
    record = logging.LogRecord("api_client", logging.INFO, __file__, 1, "message", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID helpers."""

    def test_set_and_get(self):
        set_correlation_id("req-1")
        assert get_correlation_id() == "req-1"

    def test_clear(self):
        set_correlation_id("req-1")
        clear_correlation_id()
        assert get_correlation_id() is None

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self):
        """Each asyncio task sees its own correlation ID."""
        async def worker(value):
            set_correlation_id(value)
            await asyncio.sleep(0)
            return get_correlation_id()

        results = await asyncio.gather(worker("a"), worker("b"))

        assert results == ["a", "b"]
        assert get_correlation_id() is None

    def test_scope_restores_previous_value(self):
        set_correlation_id("outer")
        with correlation_scope():
            set_correlation_id("inner")
            assert get_correlation_id() == "inner"

        assert get_correlation_id() == "outer"

    def test_scope_with_explicit_id(self):
        with correlation_scope("req-7"):
            assert get_correlation_id() == "req-7"

        assert get_correlation_id() is None

    def test_scope_restores_on_exception(self):
        with pytest.raises(RuntimeError):
            with correlation_scope("req-8"):
                raise RuntimeError("boom")

        assert get_correlation_id() is None


class TestCorrelationIdFilter:
    """Tests for CorrelationIdFilter."""

    def test_adds_correlation_id(self):
        set_correlation_id("req-42")
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-42"

    def test_no_correlation_id(self):
        record = _record()
        CorrelationIdFilter().filter(record)
        assert not hasattr(record, "correlation_id")

    def test_does_not_override_explicit_value(self):
        set_correlation_id("req-42")
        record = _record(correlation_id="explicit")
        CorrelationIdFilter().filter(record)
        assert record.correlation_id == "explicit"


class TestExtraFieldsFilter:
    """Tests for ExtraFieldsFilter."""

    def test_adds_fields(self):
        record = _record()
        ExtraFieldsFilter({"service": "billing", "env": "prod"}).filter(record)

        assert record.service == "billing"
        assert record.env == "prod"

    def test_keeps_existing_fields(self):
        record = _record(service="explicit")
        ExtraFieldsFilter({"service": "billing"}).filter(record)
        assert record.service == "explicit"
