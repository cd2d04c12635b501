"""Turn untrusted model text into validated Instrument and Source records."""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Iterable, Mapping

import pandas as pd

from config.settings import MAX_INSTRUMENTS
from core.errors import ParseError
from core.models import Instrument, Source

LOGGER = logging.getLogger("bullseye.normalizer")

UNKNOWN_SYMBOL = "???"
UNKNOWN_NAME = "Unknown Asset"
DEFAULT_TARGET_DATE = "7 days out"
DEFAULT_REASON = "Trending market momentum."
DEFAULT_SECTOR = "Uncategorized"
DEFAULT_SOURCE_TITLE = "Market Verification"
DEFAULT_SOURCE_URI = "https://google.com/finance"

_ARRAY_PATTERN = re.compile(r"\[\s*\{[\s\S]*\}\s*\]")

# Accepted spellings for each Instrument field in the model output.
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "symbol": ("symbol", "ticker"),
    "name": ("name", "company", "companyName"),
    "current_price": ("currentPrice", "current_price"),
    "current_price_date": ("currentPriceDate", "current_price_date"),
    "target_price": ("targetPrice", "target_price"),
    "target_price_date": ("targetPriceDate", "target_price_date"),
    "reason": ("reason", "rationale"),
    "sector": ("sector", "industry"),
}


def extract_json_array(text: str) -> list[Any]:
    """
    Parse the model text as a JSON array.

    The direct parse covers structured-output mode. When the model wraps the
    array in prose or code fences, the first `[{...}]` literal is extracted
    and parsed instead.

    Raises:
        ParseError: When neither attempt yields a list.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list):
        return parsed

    match = _ARRAY_PATTERN.search(text)
    if match:
        LOGGER.info("Direct JSON parse failed; using extracted array literal")
        try:
            extracted = json.loads(match.group(0))
        except json.JSONDecodeError:
            extracted = None
        if isinstance(extracted, list):
            return extracted

    raise ParseError("Failed to parse stock data JSON.")


def _lookup(raw: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_KEYS[field]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _clean_text(value: Any, default: str) -> str:
    """Return stripped text, or the default for blank and non-scalar values."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        if pd.isna(value):
            return default
        value = str(value)
    if not isinstance(value, str):
        return default
    cleaned = value.strip()
    return cleaned or default


def _safe_price(value: Any) -> float:
    """Coerce a model-reported price to a finite non-negative float, else 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.replace("$", "").replace(",", "").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def gain_percentage(current_price: float, target_price: float) -> float:
    """Expected move in percent; zero when there is no usable current price."""
    if current_price > 0:
        return (target_price - current_price) / current_price * 100
    return 0.0


def normalize_instrument(raw: Any, price_date_default: str) -> Instrument:
    """Repair one untrusted record with field defaults. Never raises."""
    if not isinstance(raw, Mapping):
        raw = {}

    current_price = _safe_price(_lookup(raw, "current_price"))
    target_price = _safe_price(_lookup(raw, "target_price"))

    return Instrument(
        symbol=_clean_text(_lookup(raw, "symbol"), UNKNOWN_SYMBOL).upper(),
        name=_clean_text(_lookup(raw, "name"), UNKNOWN_NAME),
        current_price=current_price,
        current_price_date=_clean_text(_lookup(raw, "current_price_date"), price_date_default),
        target_price=target_price,
        target_price_date=_clean_text(_lookup(raw, "target_price_date"), DEFAULT_TARGET_DATE),
        gain_percentage=gain_percentage(current_price, target_price),
        reason=_clean_text(_lookup(raw, "reason"), DEFAULT_REASON),
        sector=_clean_text(_lookup(raw, "sector"), DEFAULT_SECTOR),
    )


def normalize_instruments(
    raw_records: Iterable[Any],
    price_date_default: str,
    limit: int = MAX_INSTRUMENTS,
) -> list[Instrument]:
    """Normalize, deduplicate by symbol (last seen wins) and cap the list."""
    unique: dict[str, Instrument] = {}
    for raw in raw_records:
        instrument = normalize_instrument(raw, price_date_default)
        unique[instrument.symbol] = instrument
    return list(unique.values())[:limit]


def extract_sources(response: Any) -> list[Source]:
    """Read web citations from the first candidate's grounding metadata."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources: list[Source] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        sources.append(
            Source(
                title=_clean_text(getattr(web, "title", None), DEFAULT_SOURCE_TITLE),
                uri=_clean_text(getattr(web, "uri", None), DEFAULT_SOURCE_URI),
            )
        )
    return sources
