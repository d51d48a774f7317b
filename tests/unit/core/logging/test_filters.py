"""
Tests for log filters.

Tests request id storage, RequestIdFilter and ExtraFieldsFilter.
"""

import logging
import threading

from src.httprpc.core.logging.filters import (
    ExtraFieldsFilter,
    RequestIdFilter,
    clear_request_id,
    get_request_id,
    set_request_id,
)


def make_record():
    return logging.LogRecord("test", logging.INFO, "test.py", 1, "msg", (), None)


class TestRequestIdStorage:
    """Tests for thread-local request id."""

    def setup_method(self):
        clear_request_id()

    def test_set_and_get(self):
        set_request_id("req-1")
        assert get_request_id() == "req-1"

    def test_get_when_not_set(self):
        assert get_request_id() is None

    def test_clear(self):
        set_request_id("req-1")
        clear_request_id()
        clear_request_id()  # no error when not set
        assert get_request_id() is None

    def test_thread_local(self):
        """Request id of one thread is invisible to another."""
        set_request_id("main")
        seen = []

        def worker():
            seen.append(get_request_id())
            set_request_id("worker")

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen == [None]
        assert get_request_id() == "main"


class TestRequestIdFilter:
    """Tests for RequestIdFilter."""

    def teardown_method(self):
        clear_request_id()

    def test_adds_request_id_when_set(self):
        set_request_id("req-42")
        record = make_record()

        assert RequestIdFilter().filter(record) is True
        assert record.request_id == "req-42"

    def test_does_not_add_when_not_set(self):
        record = make_record()
        assert RequestIdFilter().filter(record) is True
        assert not hasattr(record, "request_id")


class TestExtraFieldsFilter:
    """Tests for ExtraFieldsFilter."""

    def test_adds_extra_fields(self):
        record = make_record()
        ExtraFieldsFilter({"service": "billing", "env": "prod"}).filter(record)

        assert record.service == "billing"
        assert record.env == "prod"

    def test_does_not_overwrite_existing_fields(self):
        record = make_record()
        record.service = "own"
        ExtraFieldsFilter({"service": "billing"}).filter(record)
        assert record.service == "own"
