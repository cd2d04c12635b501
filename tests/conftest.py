"""Shared fixtures for Bullseye tests."""

import json
import sys
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from core.models import ForecastResult, Instrument, Source


FIXED_NOW = datetime(2025, 2, 24, 10, 30)


def make_response(text, chunks=None):
    """Shape-compatible stand-in for a google-genai GenerateContentResponse."""
    metadata = None if chunks is None else SimpleNamespace(grounding_chunks=chunks)
    candidate = SimpleNamespace(grounding_metadata=metadata)
    return SimpleNamespace(text=text, candidates=[candidate])


def make_instrument(symbol, name="Test Corp", current=100.0, target=110.0):
    gain = (target - current) / current * 100 if current > 0 else 0.0
    return Instrument(
        symbol=symbol,
        name=name,
        current_price=current,
        current_price_date="Feb 24, 2025",
        target_price=target,
        target_price_date="Mar 03, 2025",
        gain_percentage=gain,
        reason="Catalyst.",
        sector="Software",
    )


class FakeClient:
    """Records generate_content calls and replays a response or raises an error."""

    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response
        self._error = error
        self.models = SimpleNamespace(generate_content=self._generate_content)

    def _generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response


class StaticFetcher:
    """Fetcher returning a fixed result or raising a fixed error."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def fetch_forecast(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def raw_records():
    return [
        {
            "symbol": "PLTR",
            "name": "Palantir Technologies",
            "currentPrice": 147.17,
            "currentPriceDate": "Feb 24, 2025",
            "targetPrice": 165.0,
            "targetPriceDate": "Mar 03, 2025",
            "reason": "AIP platform acceleration.",
            "sector": "Software",
        },
        {
            "symbol": "NVDA",
            "name": "NVIDIA Corporation",
            "currentPrice": 130.0,
            "currentPriceDate": "Feb 24, 2025",
            "targetPrice": 143.0,
            "targetPriceDate": "Mar 03, 2025",
            "reason": "Earnings momentum.",
            "sector": "Semiconductors",
        },
        {
            "symbol": "AAPL",
            "name": "Apple Inc.",
            "currentPrice": 240.0,
            "currentPriceDate": "Feb 24, 2025",
            "targetPrice": 232.8,
            "targetPriceDate": "Mar 03, 2025",
            "reason": "Services strength.",
            "sector": "Hardware",
        },
    ]


@pytest.fixture
def raw_json(raw_records):
    return json.dumps(raw_records)


@pytest.fixture
def sample_result():
    return ForecastResult(
        instruments=[
            make_instrument("PLTR", "Palantir", 100.0, 120.0),
            make_instrument("AAPL", "Apple", 200.0, 190.0),
        ],
        sources=[Source(title="Yahoo Finance", uri="https://finance.yahoo.com")],
    )
