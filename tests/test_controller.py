"""Tests for view-state transitions and the refresh-serializing controller."""

import threading
from unittest.mock import patch

import pytest

from conftest import FIXED_NOW, StaticFetcher, make_instrument
from core.controller import UNEXPECTED_FAILURE_MESSAGE, ViewController
from core.errors import ConfigError, FetchError
from core.models import ForecastResult
from core.state import (
    ERROR_KIND_CONFIG,
    ERROR_KIND_SYNC,
    begin_refresh,
    filter_instruments,
    initial_state,
    refresh_failed,
    refresh_succeeded,
    set_query,
)


class BlockingFetcher:
    """Fetcher that parks until released, for overlapping-refresh tests."""

    def __init__(self, result):
        self.result = result
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def fetch_forecast(self):
        self.calls += 1
        self.started.set()
        self.release.wait(5)
        return self.result


# =====================================================================
# PURE TRANSITIONS
# =====================================================================

class TestTransitions:
    def test_initial_state_is_loading(self):
        state = initial_state()
        assert state.loading is True
        assert state.mode == "loading"
        assert state.instruments == ()

    def test_success_replaces_data(self, sample_result):
        state = begin_refresh(initial_state(), 1)
        state = refresh_succeeded(state, 1, sample_result, FIXED_NOW)
        assert state.mode == "ready"
        assert [item.symbol for item in state.instruments] == ["PLTR", "AAPL"]
        assert state.last_updated == "10:30 AM"
        assert len(state.sources) == 1

    def test_failure_retains_last_good_data(self, sample_result):
        state = refresh_succeeded(begin_refresh(initial_state(), 1), 1, sample_result, FIXED_NOW)
        state = begin_refresh(state, 2)
        assert state.error is None
        state = refresh_failed(state, 2, "boom")
        assert state.mode == "error"
        assert state.error == "boom"
        assert state.error_kind == ERROR_KIND_SYNC
        assert len(state.instruments) == 2
        assert state.last_updated == "10:30 AM"

    def test_stale_success_is_discarded(self, sample_result):
        state = begin_refresh(initial_state(), 1)
        state = begin_refresh(state, 2)
        newer = ForecastResult(instruments=[make_instrument("MSFT")], sources=[])

        state = refresh_succeeded(state, 2, newer, FIXED_NOW)
        after_stale = refresh_succeeded(state, 1, sample_result, FIXED_NOW)

        assert after_stale is state
        assert [item.symbol for item in after_stale.instruments] == ["MSFT"]

    def test_stale_failure_is_discarded(self):
        state = begin_refresh(begin_refresh(initial_state(), 1), 2)
        assert refresh_failed(state, 1, "late error") is state

    def test_set_query(self):
        assert set_query(initial_state(), "nv").query == "nv"
        assert set_query(initial_state(), None).query == ""


class TestFilterInstruments:
    def test_case_insensitive_symbol_match(self):
        items = [make_instrument("PLTR", "Palantir"), make_instrument("AAPL", "Apple")]
        assert [item.symbol for item in filter_instruments(items, "plt")] == ["PLTR"]

    def test_name_match(self):
        items = [make_instrument("PLTR", "Palantir"), make_instrument("AAPL", "Apple")]
        assert [item.symbol for item in filter_instruments(items, "APPLE")] == ["AAPL"]

    @pytest.mark.parametrize("query", ["", None])
    def test_blank_query_keeps_all(self, query):
        items = [make_instrument("PLTR"), make_instrument("AAPL")]
        assert filter_instruments(items, query) == items

    def test_no_match(self):
        assert filter_instruments([make_instrument("PLTR", "Palantir")], "zzz") == []

    def test_whitespace_is_part_of_the_match(self):
        items = [make_instrument("PLTR", "Palantir"), make_instrument("BRK.B", "Berkshire Hathaway")]
        assert filter_instruments(items, " plt") == []
        assert [item.symbol for item in filter_instruments(items, "e h")] == ["BRK.B"]


# =====================================================================
# CONTROLLER
# =====================================================================

class TestViewController:
    def test_refreshes_on_creation(self, sample_result):
        fetcher = StaticFetcher(result=sample_result)
        controller = ViewController(fetcher, clock=lambda: FIXED_NOW)
        assert controller.wait(5)

        state = controller.snapshot()
        assert fetcher.calls == 1
        assert state.mode == "ready"
        assert state.last_updated == "10:30 AM"

    def test_no_auto_refresh_stays_loading(self, sample_result):
        fetcher = StaticFetcher(result=sample_result)
        controller = ViewController(fetcher, auto_refresh=False)
        assert controller.snapshot().mode == "loading"
        assert fetcher.calls == 0

    def test_failure_keeps_previous_instruments(self, sample_result):
        fetcher = StaticFetcher(result=sample_result)
        controller = ViewController(fetcher, auto_refresh=False)
        controller.refresh_sync()

        fetcher.error = FetchError("The AI returned an empty response.")
        controller.refresh_sync()

        state = controller.snapshot()
        assert state.error == "The AI returned an empty response."
        assert state.error_kind == ERROR_KIND_SYNC
        assert len(state.instruments) == 2

    def test_config_error_is_blocking_kind(self):
        controller = ViewController(StaticFetcher(error=ConfigError("API_KEY is missing.")), auto_refresh=False)
        controller.refresh_sync()
        state = controller.snapshot()
        assert state.error_kind == ERROR_KIND_CONFIG
        assert state.mode == "error"

    def test_unexpected_exception_is_contained(self):
        controller = ViewController(StaticFetcher(error=KeyError("candidates")), auto_refresh=False)
        controller.refresh_sync()
        assert controller.snapshot().error == UNEXPECTED_FAILURE_MESSAGE

    def test_refresh_while_in_flight_is_noop(self, sample_result):
        fetcher = BlockingFetcher(sample_result)
        controller = ViewController(fetcher, auto_refresh=False)

        assert controller.refresh() is True
        assert fetcher.started.wait(5)
        assert controller.in_flight
        assert controller.refresh() is False
        assert controller.refresh_sync() is False

        fetcher.release.set()
        assert controller.wait(5)
        assert fetcher.calls == 1
        assert controller.snapshot().mode == "ready"
        assert controller.refresh() is True
        controller.wait(5)
        assert fetcher.calls == 2

    def test_set_query_does_not_fetch(self, sample_result):
        fetcher = StaticFetcher(result=sample_result)
        controller = ViewController(fetcher, auto_refresh=False)
        controller.refresh_sync()

        controller.set_query("plt")
        assert fetcher.calls == 1
        assert [item.symbol for item in controller.visible_instruments()] == ["PLTR"]

        controller.set_query("")
        assert len(controller.visible_instruments()) == 2

    def test_query_survives_refresh(self, sample_result):
        controller = ViewController(StaticFetcher(result=sample_result), auto_refresh=False)
        controller.set_query("apple")
        controller.refresh_sync()
        assert [item.symbol for item in controller.visible_instruments()] == ["AAPL"]

    def test_stale_completion_leaves_state_untouched(self, sample_result):
        fetcher = StaticFetcher(result=sample_result)
        controller = ViewController(fetcher, auto_refresh=False)
        controller.refresh_sync()
        before = controller.snapshot()

        fetcher.result = ForecastResult(instruments=[make_instrument("MSFT")], sources=[])
        with patch("core.controller.LOGGER") as logger:
            controller._run_cycle(before.generation - 1)

        messages = [call.args[0] for call in logger.info.call_args_list]
        assert controller.snapshot() is before
        assert any(message.startswith("Discarded stale forecast") for message in messages)
        assert not any(message.startswith("Forecast refresh completed") for message in messages)
