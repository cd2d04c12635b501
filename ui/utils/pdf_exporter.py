"""PDF export helpers for the Bullseye forecast list."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from config.settings import BASE_DIR
from core.models import Instrument, Source
from ui.cards import render_card, truncate

PDF_DIR = Path(BASE_DIR) / "reports" / "pdf"

DISCLAIMER = "Financial data is AI-retrieved via Google Search. Verify all figures before making trades."


def build_forecast_pdf(
    *,
    instruments: Sequence[Instrument],
    sources: Sequence[Source],
    last_updated: str | None,
    output_dir: Path | None = None,
) -> Path:
    """Generate a local PDF snapshot of the current forecast cards."""
    target_dir = output_dir or PDF_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime("%Y%m%d")
    output_path = target_dir / f"bullseye_forecast_{stamp}.pdf"

    pdf = canvas.Canvas(str(output_path), pagesize=A4)
    _, height = A4
    left_margin = 0.75 * inch
    top = height - 0.75 * inch
    y = top

    def draw_title(text: str, size: int = 16) -> None:
        nonlocal y
        pdf.setFont("Helvetica-Bold", size)
        pdf.drawString(left_margin, y, text)
        y -= 0.28 * inch

    def draw_line(text: str, bold: bool = False, color: tuple[float, float, float] | None = None) -> None:
        nonlocal y
        if y < 0.8 * inch:
            pdf.showPage()
            y = top

        pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 10)
        if color is not None:
            pdf.setFillColorRGB(*color)
        else:
            pdf.setFillColor(colors.black)

        pdf.drawString(left_margin, y, text)
        y -= 0.2 * inch
        pdf.setFillColor(colors.black)

    draw_title("Bullseye AI 7-Day Forecast")
    draw_line(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    draw_line(f"Last sync: {last_updated or 'n/a'}")

    for idx, instrument in enumerate(instruments):
        card = render_card(instrument, idx)
        y -= 0.08 * inch
        tone_color = (0.06, 0.55, 0.35) if card.tone == "positive" else (0.80, 0.18, 0.30)
        draw_line(f"{card.rank_label} {card.symbol}  {card.name}  ({card.sector})", bold=True)
        draw_line(f"Expected 7D: {card.gain_text}", color=tone_color)
        draw_line(
            f"Market {card.current_price_text} ({card.current_price_date})  ->  "
            f"Target {card.target_price_text} ({card.target_price_date})"
        )
        draw_line(truncate(card.reason, 110))

    if sources:
        y -= 0.08 * inch
        draw_line("Search data points:", bold=True)
        for source in sources:
            draw_line(f"- {truncate(source.title, 60)}: {truncate(source.uri, 70)}")

    y -= 0.05 * inch
    draw_line(DISCLAIMER, bold=True)

    pdf.save()
    return output_path
