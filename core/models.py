"""Record shapes shared by the fetcher, the controller and the UI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Instrument:
    """One forecasted stock with a locally derived gain percentage."""

    symbol: str
    name: str
    current_price: float
    current_price_date: str
    target_price: float
    target_price_date: str
    gain_percentage: float
    reason: str
    sector: str


@dataclass(frozen=True)
class Source:
    """A web citation attached to the model answer by search grounding."""

    title: str
    uri: str


@dataclass(frozen=True)
class ForecastResult:
    """Normalized output of one fetch cycle."""

    instruments: list[Instrument]
    sources: list[Source]


@dataclass(frozen=True)
class ViewState:
    """Dashboard state, replaced wholesale on every transition."""

    instruments: tuple[Instrument, ...] = ()
    loading: bool = True
    error: str | None = None
    error_kind: str | None = None
    last_updated: str | None = None
    sources: tuple[Source, ...] = ()
    query: str = ""
    generation: int = 0
    refreshed_at: str | None = None

    @property
    def mode(self) -> str:
        """Active rendering mode: loading, error or ready."""
        if self.loading:
            return "loading"
        if self.error is not None:
            return "error"
        return "ready"
