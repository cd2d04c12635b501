"""Compose the natural-language forecast request sent to Gemini."""

from __future__ import annotations

from datetime import datetime

from config.settings import FORECAST_HORIZON_DAYS, MAX_INSTRUMENTS

EXAMPLE_RECORD = (
    '{"symbol":"PLTR","name":"Palantir Technologies","currentPrice":147.17,'
    '"currentPriceDate":"Feb 24, 2025","targetPrice":165.00,"targetPriceDate":"Mar 03, 2025",'
    '"reason":"AIP platform acceleration.","sector":"Software"}'
)

OUTPUT_FIELDS = [
    ("symbol", 'Ticker (e.g., "PLTR")'),
    ("name", "Company name"),
    ("currentPrice", "The real-time price found via search (number)"),
    ("currentPriceDate", "String timestamp of the quote"),
    ("targetPrice", f"Predicted {FORECAST_HORIZON_DAYS}-day target (number)"),
    ("targetPriceDate", f"Date {FORECAST_HORIZON_DAYS} days from now"),
    ("reason", "One clear bullish catalyst in a single sentence"),
    ("sector", "Industry sector"),
]


def timestamp_label(now: datetime) -> str:
    """Short date/time label used to ground the model in the present."""
    label = now.strftime("%b %d, %I:%M %p")
    zone = now.strftime("%Z")
    return f"{label} {zone}" if zone else label


def build_forecast_prompt(now: datetime, strict: bool = False) -> str:
    """Build the request for up to MAX_INSTRUMENTS tickers over the forecast horizon."""
    field_lines = "\n".join(f"    - {key}: {description}" for key, description in OUTPUT_FIELDS)

    if strict:
        output_rules = (
            "    OUTPUT RULES:\n"
            "    - Respond with a single JSON array and nothing else.\n"
            "    - Do not wrap the array in markdown code fences.\n"
            "    - Do not add commentary before or after the array.\n"
            "    - Numbers must be plain JSON numbers without currency symbols."
        )
    else:
        output_rules = f"    OUTPUT: Return ONLY a valid JSON array of {MAX_INSTRUMENTS} objects. No prose, no code fences."

    return f"""
    Today's Date/Time: {timestamp_label(now)}.

    TASK: Identify {MAX_INSTRUMENTS} stocks (S&P 500, Nasdaq, and high-growth tickers) with significant
    gain potential over the next {FORECAST_HORIZON_DAYS} days.

    SEARCH REQUIREMENT:
    Use Google Search to find the ACTUAL current market prices. Do not rely on memorized prices;
    verify current quotes for all major AI and tech tickers (NVDA, TSLA, PLTR, MSFT, etc.).

    For each stock, return:
{field_lines}

{output_rules}
    Example: [{EXAMPLE_RECORD}]
    """
