"""Local read-only Flask UI for Bullseye AI forecasts."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import sys
from typing import Any

from flask import Flask, abort, got_request_exception, jsonify, redirect, render_template, request, send_file, url_for
from plotly.offline import get_plotlyjs

# Make `python ui/app.py` work without external PYTHONPATH setup.
THIS_DIR = Path(__file__).resolve().parent
PROJECT_DIR = THIS_DIR.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from config.settings import BASE_DIR, GEMINI_MODEL, LOGS_DIR, MAX_INSTRUMENTS
from core.controller import ViewController
from core.forecaster import ForecastFetcher
from ui.api import forecast_payload, status_payload
from ui.cards import render_cards, render_sources
from ui.charts import build_gain_chart
from ui.utils.pdf_exporter import DISCLAIMER, PDF_DIR, build_forecast_pdf


BASE_PATH = Path(BASE_DIR)
UI_DIR = BASE_PATH / "ui"
STATIC_DIR = UI_DIR / "static"

STATUS_POLL_SECONDS = 3

PLOTLY_VENDOR_RELATIVE_PATH = "vendor/plotly.min.js"
PLOTLY_VENDOR_PATH = STATIC_DIR / PLOTLY_VENDOR_RELATIVE_PATH

logging.getLogger("google_genai").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)


def _configure_ui_logger() -> logging.Logger:
    """Configure file logger shared by the UI, the controller and the fetcher."""
    logs_dir = Path(LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / "bullseye.log"

    logger = logging.getLogger("bullseye")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    existing = None
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            existing = handler
            break

    if existing is None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    return logging.getLogger("bullseye.ui")


def _warn_if_multi_worker(logger: logging.Logger) -> None:
    """Log warning when likely deployed with multiple workers/processes."""
    for key in ("WEB_CONCURRENCY", "GUNICORN_WORKERS", "WORKERS"):
        raw_value = os.getenv(key)
        if raw_value is None:
            continue
        try:
            workers = int(raw_value)
        except ValueError:
            continue
        if workers > 1:
            logger.warning(
                "Detected %s=%s. Run UI with a single worker so every page sees the same forecast state.",
                key,
                raw_value,
            )
            return


def create_app(controller: ViewController | None = None) -> Flask:
    """Create the Flask application; builds a Gemini-backed controller when none is given."""
    app = Flask(
        __name__,
        template_folder=str(UI_DIR / "templates"),
        static_folder=str(STATIC_DIR),
    )
    app.config["TEMPLATES_AUTO_RELOAD"] = True

    logger = _configure_ui_logger()
    _warn_if_multi_worker(logger)

    if not PLOTLY_VENDOR_PATH.exists():
        try:
            PLOTLY_VENDOR_PATH.parent.mkdir(parents=True, exist_ok=True)
            PLOTLY_VENDOR_PATH.write_text(get_plotlyjs(), encoding="utf-8")
            logger.info("Wrote local Plotly bundle: %s", PLOTLY_VENDOR_PATH)
        except OSError as exc:
            logger.warning("Failed to write local Plotly bundle: %s", exc)

    if controller is None:
        controller = ViewController(ForecastFetcher())
    app.extensions["bullseye_controller"] = controller
    logger.info("UI app initialized (model=%s)", GEMINI_MODEL)

    def _apply_query_arg() -> str:
        """Push ?q= into the controller when present and return the active query."""
        raw_query = request.args.get("q")
        if raw_query is not None:
            return controller.set_query(raw_query.strip()).query
        return controller.snapshot().query

    @app.route("/")
    def index() -> str:
        """Forecast dashboard: loading, error or card list with search and sources."""
        query = _apply_query_arg()
        state = controller.snapshot()
        visible = controller.visible_instruments()

        return render_template(
            "index.html",
            state=state,
            mode=state.mode,
            query=query,
            cards=render_cards(visible),
            total_count=len(state.instruments),
            max_instruments=MAX_INSTRUMENTS,
            sources=render_sources(state.sources),
            gain_chart=build_gain_chart(state.instruments) if state.instruments else None,
            plotly_js_url=url_for("static", filename=PLOTLY_VENDOR_RELATIVE_PATH),
            in_flight=controller.in_flight,
            poll_seconds=STATUS_POLL_SECONDS,
            disclaimer=DISCLAIMER,
        )

    @app.route("/refresh", methods=["POST"])
    def refresh_page():
        """Manual retry/refresh from the dashboard form."""
        dispatched = controller.refresh()
        logger.info("Manual refresh requested (dispatched=%s)", dispatched)
        return redirect(url_for("index"))

    @app.route("/api/refresh", methods=["POST"])
    def refresh_api():
        dispatched = controller.refresh()
        payload = status_payload(controller.snapshot(), controller.in_flight)
        payload["dispatched"] = dispatched
        return jsonify(payload), 202 if dispatched else 200

    @app.route("/api/status")
    def status_api():
        """Expose fetch status for lightweight UI polling."""
        return jsonify(status_payload(controller.snapshot(), controller.in_flight))

    @app.route("/api/forecast")
    def forecast_api():
        """Headless API endpoint for the dashboard."""
        query = _apply_query_arg()
        state = controller.snapshot()
        visible = controller.visible_instruments()
        return jsonify(forecast_payload(state, visible, query, controller.in_flight))

    @app.route("/export/pdf")
    def export_pdf():
        state = controller.snapshot()
        if not state.instruments:
            abort(404, description="No forecast loaded yet.")

        pdf_path = build_forecast_pdf(
            instruments=state.instruments,
            sources=state.sources,
            last_updated=state.last_updated,
            output_dir=PDF_DIR,
        )
        return send_file(
            pdf_path,
            as_attachment=True,
            download_name=pdf_path.name,
            mimetype="application/pdf",
        )

    def _log_unhandled_exception(sender: Flask, exception: Exception, **_: Any) -> None:
        logger.exception("Unhandled UI exception: %s", exception)

    got_request_exception.connect(_log_unhandled_exception, app)

    return app


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5000, debug=False)
