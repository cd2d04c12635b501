"""View controller owning the dashboard state and the refresh lifecycle."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Protocol

from core.errors import ConfigError, ForecastError
from core.models import ForecastResult, Instrument, ViewState
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

LOGGER = logging.getLogger("bullseye.controller")

UNEXPECTED_FAILURE_MESSAGE = "Failed to fetch market insights. Please try again."


class Fetcher(Protocol):
    def fetch_forecast(self) -> ForecastResult: ...


class ViewController:
    """
    Serialize forecast refreshes and expose consistent state snapshots.

    At most one fetch is in flight; a refresh requested meanwhile is a no-op.
    Each dispatched fetch carries a generation id and only the latest
    generation may write its outcome.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        auto_refresh: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._clock = clock or datetime.now
        self._lock = threading.RLock()
        self._state = initial_state()
        self._generation = 0
        self._worker: threading.Thread | None = None

        if auto_refresh:
            self.refresh()

    def snapshot(self) -> ViewState:
        """Return the current immutable state."""
        with self._lock:
            return self._state

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._worker is not None and self._worker.is_alive()

    def _dispatch(self, worker: threading.Thread) -> int | None:
        """Claim the in-flight slot for worker and enter Loading; None when already busy."""
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                LOGGER.info("Refresh ignored: generation %s still in flight", self._generation)
                return None
            self._generation += 1
            self._worker = worker
            self._state = begin_refresh(self._state, self._generation)
            LOGGER.info("Dispatched forecast refresh (generation=%s)", self._generation)
            return self._generation

    def _run_cycle(self, generation: int) -> None:
        """Fetch once and apply the outcome for this generation."""
        try:
            result = self._fetcher.fetch_forecast()
        except ConfigError as exc:
            LOGGER.error("Configuration error: %s", exc)
            self._apply_failure(generation, str(exc), ERROR_KIND_CONFIG)
        except ForecastError as exc:
            LOGGER.warning("Forecast refresh failed: %s", exc)
            self._apply_failure(generation, str(exc) or UNEXPECTED_FAILURE_MESSAGE, ERROR_KIND_SYNC)
        except Exception as exc:
            LOGGER.exception("Forecast refresh crashed: %s", exc)
            self._apply_failure(generation, UNEXPECTED_FAILURE_MESSAGE, ERROR_KIND_SYNC)
        else:
            with self._lock:
                if generation != self._state.generation:
                    LOGGER.info("Discarded stale forecast (generation=%s)", generation)
                    return
                self._state = refresh_succeeded(self._state, generation, result, self._clock())
            LOGGER.info("Forecast refresh completed: %s instruments", len(result.instruments))
        finally:
            with self._lock:
                if self._worker is threading.current_thread():
                    self._worker = None

    def _apply_failure(self, generation: int, message: str, kind: str) -> None:
        with self._lock:
            self._state = refresh_failed(self._state, generation, message, kind)

    def _worker_loop(self) -> None:
        with self._lock:
            generation = self._generation
        self._run_cycle(generation)

    def refresh(self) -> bool:
        """Start a background fetch; returns False when one is already running."""
        worker = threading.Thread(target=self._worker_loop, name="bullseye-forecast-worker", daemon=True)
        with self._lock:
            if self._dispatch(worker) is None:
                return False
            worker.start()
        return True

    def refresh_sync(self) -> bool:
        """Run one fetch cycle in the calling thread; False when one is already running."""
        generation = self._dispatch(threading.current_thread())
        if generation is None:
            return False
        self._run_cycle(generation)
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until no fetch is in flight; returns True when idle."""
        with self._lock:
            worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
        return not self.in_flight

    def set_query(self, text: str | None) -> ViewState:
        """Store the live search string; never triggers a fetch."""
        with self._lock:
            self._state = set_query(self._state, text)
            return self._state

    def visible_instruments(self) -> list[Instrument]:
        """Instruments matching the current query, computed on every call."""
        state = self.snapshot()
        return filter_instruments(state.instruments, state.query)
