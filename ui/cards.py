"""Presentational mapping from forecast records to dashboard cards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlparse

from config.settings import SOURCE_DISPLAY_LIMIT
from core.models import Instrument, Source
from core.normalizer import DEFAULT_SOURCE_URI

NAME_MAX_CHARS = 28
SOURCE_TITLE_MAX_CHARS = 60


@dataclass(frozen=True)
class StockCard:
    """Display-ready summary of one instrument."""

    rank_label: str
    symbol: str
    name: str
    search_name: str
    sector: str
    gain_text: str
    tone: str
    current_price_text: str
    current_price_date: str
    target_price_text: str
    target_price_date: str
    reason: str


@dataclass(frozen=True)
class SourceLink:
    title: str
    uri: str


def truncate(text: str, max_chars: int) -> str:
    """Shorten text to max_chars, ending with an ellipsis when cut."""
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1].rstrip() + "…"


def safe_link(uri: str) -> str:
    """Only http(s) citations become links; anything else points at the default source."""
    if urlparse(uri.strip()).scheme.lower() in ("http", "https"):
        return uri.strip()
    return DEFAULT_SOURCE_URI


def format_price(value: float) -> str:
    return f"${value:,.2f}"


def render_card(instrument: Instrument, rank: int) -> StockCard:
    """Build the card for a zero-based list position."""
    positive = instrument.gain_percentage > 0
    sign = "+" if positive else ""
    return StockCard(
        rank_label=f"#{rank + 1}",
        symbol=instrument.symbol,
        name=truncate(instrument.name, NAME_MAX_CHARS),
        search_name=instrument.name.lower(),
        sector=instrument.sector,
        gain_text=f"{sign}{instrument.gain_percentage:.2f}%",
        tone="positive" if positive else "negative",
        current_price_text=format_price(instrument.current_price),
        current_price_date=instrument.current_price_date,
        target_price_text=format_price(instrument.target_price),
        target_price_date=instrument.target_price_date,
        reason=instrument.reason,
    )


def render_cards(instruments: Iterable[Instrument]) -> list[StockCard]:
    return [render_card(item, idx) for idx, item in enumerate(instruments)]


def render_sources(sources: Iterable[Source], limit: int = SOURCE_DISPLAY_LIMIT) -> list[SourceLink]:
    """Citation links shown under the card list."""
    links: list[SourceLink] = []
    for source in sources:
        if len(links) >= limit:
            break
        links.append(SourceLink(title=truncate(source.title, SOURCE_TITLE_MAX_CHARS), uri=safe_link(source.uri)))
    return links
