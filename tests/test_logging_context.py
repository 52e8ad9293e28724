"""Tests for request-id log correlation."""

import logging

from appointment_engine.logging_context import (
    RequestIdFilter,
    get_request_id,
    get_request_logger,
    new_request_id,
    set_request_id,
)


class TestRequestId:
    def test_set_and_get(self):
        set_request_id("REQ-test")
        assert get_request_id() == "REQ-test"

    def test_new_request_id_activates(self):
        request_id = new_request_id()
        assert request_id.startswith("REQ-")
        assert get_request_id() == request_id


class TestRequestLogger:
    def test_records_carry_request_id(self, caplog):
        set_request_id("REQ-abc")
        logger = get_request_logger("appointment_engine.tests.logging")
        with caplog.at_level(logging.INFO, logger="appointment_engine.tests.logging"):
            logger.info("planning reservation")
        assert caplog.records[-1].request_id == "REQ-abc"

    def test_filter_attached_once(self):
        logger = get_request_logger("appointment_engine.tests.once")
        get_request_logger("appointment_engine.tests.once")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1
