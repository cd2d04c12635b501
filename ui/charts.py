"""Chart helpers for the Bullseye dashboard."""

from __future__ import annotations

from typing import Iterable

import pandas as pd
import plotly.graph_objects as go
from plotly.offline import plot

from core.models import Instrument

POSITIVE_COLOR = "#10b981"
NEGATIVE_COLOR = "#f43f5e"


def gain_frame(instruments: Iterable[Instrument]) -> pd.DataFrame:
    """Tabulate symbol/gain pairs sorted from smallest to largest expected move."""
    frame = pd.DataFrame(
        [
            {
                "Symbol": item.symbol,
                "Name": item.name,
                "Gain": item.gain_percentage,
                "Current": item.current_price,
                "Target": item.target_price,
            }
            for item in instruments
        ],
        columns=["Symbol", "Name", "Gain", "Current", "Target"],
    )
    return frame.sort_values("Gain", kind="stable").reset_index(drop=True)


def build_gain_chart(instruments: Iterable[Instrument]) -> str | None:
    """Build a horizontal Plotly bar chart of 7-day expected gains, or None when empty."""
    frame = gain_frame(instruments)
    if frame.empty:
        return None

    colors = [POSITIVE_COLOR if value > 0 else NEGATIVE_COLOR for value in frame["Gain"]]
    figure = go.Figure(
        go.Bar(
            x=frame["Gain"],
            y=frame["Symbol"],
            orientation="h",
            marker={"color": colors},
            customdata=frame[["Name", "Current", "Target"]].to_numpy(),
            hovertemplate=(
                "%{y} · %{customdata[0]}<br>"
                "Current: $%{customdata[1]:,.2f}<br>"
                "Target: $%{customdata[2]:,.2f}<br>"
                "Expected: %{x:+.2f}%<extra></extra>"
            ),
        )
    )
    figure.update_layout(
        title="7D Expected Move",
        template="plotly_dark",
        height=max(260, 22 * len(frame) + 80),
        margin={"l": 60, "r": 20, "t": 50, "b": 30},
        xaxis={"title": "Gain %", "ticksuffix": "%"},
        yaxis={"automargin": True},
    )

    return plot(
        figure,
        output_type="div",
        include_plotlyjs=False,
        config={"displaylogo": False, "responsive": True},
    )
