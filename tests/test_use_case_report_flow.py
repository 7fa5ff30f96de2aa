from datetime import datetime

import pytest
import requests

from use_cases import report_flow
from use_cases.errors import ApiError, AuthorizationExpiredError
from use_cases.report_flow import ViewLoadState


def test_format_period():
    assert report_flow.format_period("202610") == "October 2026"
    assert report_flow.format_period("202601") == "January 2026"
    assert report_flow.format_period("2026-10") == "2026-10"
    assert report_flow.format_period("202613") == "202613"


def test_is_valid_period():
    assert report_flow.is_valid_period("202612")
    assert not report_flow.is_valid_period("202600")
    assert not report_flow.is_valid_period(202612)
    assert not report_flow.is_valid_period("20261")


def test_month_options_newest_first_across_year_boundary():
    options = report_flow.generate_month_options(now=datetime(2026, 2, 15), count=4)
    assert [o.value for o in options] == ["202602", "202601", "202512", "202511"]
    assert options[2].label == "December 2025"


def test_month_options_default_to_twelve():
    assert len(report_flow.generate_month_options(now=datetime(2026, 10, 19))) == 12


def test_describe_failure_messages():
    assert "expired" in report_flow.describe_failure(AuthorizationExpiredError("x"))
    assert report_flow.describe_failure(ApiError(500, "Boom")) == "Boom"
    assert "in time" in report_flow.describe_failure(requests.Timeout())
    assert "reach the server" in report_flow.describe_failure(requests.ConnectionError())


def test_load_into_applies_data_and_records_key():
    state = ViewLoadState()
    assert report_flow.load_into(state, lambda: [1, 2], key="202610") is True
    assert state.data == [1, 2]
    assert state.requested_key == "202610"
    assert not state.loading
    assert state.error is None


def test_failure_keeps_prior_data():
    state = ViewLoadState(data=["old"])

    def fail():
        raise ApiError(503, "Service unavailable")

    assert report_flow.load_into(state, fail, key="202609") is False
    assert state.data == ["old"]
    assert state.error == "Service unavailable"
    assert state.requested_key == "202609"
    assert not state.loading


def test_network_failure_is_recorded_not_raised():
    state = ViewLoadState()

    def fail():
        raise requests.ConnectionError("down")

    report_flow.load_into(state, fail)
    assert state.error.startswith("Could not reach")


def test_unexpected_exceptions_propagate():
    state = ViewLoadState()

    def broken():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        report_flow.load_into(state, broken, key="202610")

    assert state.loading is False
    assert state.requested_key == "202610"


def test_superseded_load_is_discarded():
    state = ViewLoadState()
    first = state.begin("202609")
    second = state.begin("202610")

    assert state.resolve(first, "stale") is False
    assert state.data is None
    assert state.resolve(second, "fresh") is True
    assert state.data == "fresh"


def test_torn_down_view_ignores_late_results():
    state = ViewLoadState(data="shown")
    ticket = state.begin()
    state.teardown()

    assert state.resolve(ticket, "late") is False
    assert state.fail(ticket, ApiError(500, "late")) is False
    assert state.data == "shown"
    assert state.error is None


def test_dismiss_error():
    state = ViewLoadState()
    state.fail(state.begin(), ApiError(500, "x"))
    state.dismiss_error()
    assert state.error is None
