"""Serialization helpers for Bullseye UI API routes."""

from __future__ import annotations

from typing import Any

from core.models import Instrument, Source, ViewState


def serialize_instrument(instrument: Instrument) -> dict[str, Any]:
    """Convert one instrument to the camelCase API payload."""
    return {
        "symbol": instrument.symbol,
        "name": instrument.name,
        "currentPrice": round(instrument.current_price, 2),
        "currentPriceDate": instrument.current_price_date,
        "targetPrice": round(instrument.target_price, 2),
        "targetPriceDate": instrument.target_price_date,
        "gainPercentage": round(instrument.gain_percentage, 2),
        "reason": instrument.reason,
        "sector": instrument.sector,
    }


def serialize_source(source: Source) -> dict[str, str]:
    return {"title": source.title, "uri": source.uri}


def status_payload(state: ViewState, in_flight: bool) -> dict[str, Any]:
    """Lightweight payload for UI polling."""
    return {
        "mode": state.mode,
        "loading": state.loading,
        "in_flight": in_flight,
        "error": state.error,
        "error_kind": state.error_kind,
        "last_updated": state.last_updated,
        "refreshed_at": state.refreshed_at,
        "instruments_count": len(state.instruments),
        "sources_count": len(state.sources),
    }


def forecast_payload(state: ViewState, visible: list[Instrument], query: str, in_flight: bool) -> dict[str, Any]:
    """Full dashboard payload: meta, filtered instruments and citations."""
    meta = status_payload(state, in_flight)
    meta.update({"query": query, "visible_count": len(visible)})
    return {
        "meta": meta,
        "instruments": [serialize_instrument(item) for item in visible],
        "sources": [serialize_source(item) for item in state.sources],
    }
