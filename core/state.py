"""Pure view-state transitions: (current state, event) -> new state."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable

from core.models import ForecastResult, Instrument, ViewState

ERROR_KIND_CONFIG = "config"
ERROR_KIND_SYNC = "sync"


def initial_state() -> ViewState:
    """State before the first fetch completes."""
    return ViewState(loading=True)


def format_last_updated(moment: datetime) -> str:
    """Short local clock label, e.g. 09:41 AM."""
    return moment.strftime("%I:%M %p")


def begin_refresh(state: ViewState, generation: int) -> ViewState:
    """Enter Loading for a newly dispatched fetch and clear the previous error."""
    return replace(state, loading=True, error=None, error_kind=None, generation=generation)


def refresh_succeeded(state: ViewState, generation: int, result: ForecastResult, now: datetime) -> ViewState:
    """Replace the forecast with a fresh result unless it belongs to a superseded fetch."""
    if generation != state.generation:
        return state
    return replace(
        state,
        instruments=tuple(result.instruments),
        sources=tuple(result.sources),
        loading=False,
        error=None,
        error_kind=None,
        last_updated=format_last_updated(now),
        refreshed_at=now.isoformat(timespec="seconds"),
    )


def refresh_failed(state: ViewState, generation: int, message: str, kind: str = ERROR_KIND_SYNC) -> ViewState:
    """Record a failed fetch; the last good instruments stay in place."""
    if generation != state.generation:
        return state
    return replace(state, loading=False, error=message, error_kind=kind)


def set_query(state: ViewState, text: str | None) -> ViewState:
    """Update the live search string."""
    return replace(state, query=text or "")


def filter_instruments(instruments: Iterable[Instrument], query: str | None) -> list[Instrument]:
    """Case-insensitive substring match on symbol or name; empty query keeps everything."""
    needle = (query or "").lower()
    if not needle:
        return list(instruments)
    return [item for item in instruments if needle in item.symbol.lower() or needle in item.name.lower()]
