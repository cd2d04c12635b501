import argparse
import datetime
import logging
import os
import sys

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from core.controller import ViewController
from core.forecaster import ForecastFetcher
from core.state import ERROR_KIND_CONFIG
from ui.cards import render_card, render_sources


def _configure_logging():
    """Configure file logging for local and cron execution."""
    logs_dir = os.path.join(BASE_DIR, "logs")
    os.makedirs(logs_dir, exist_ok=True)

    log_file = os.path.join(logs_dir, "bullseye.log")
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)

    # Keep logs focused on the forecast cycle; the HTTP stack can be noisy.
    logging.getLogger("google_genai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _print_card(card):
    print(f"\n{card.rank_label:>4} {card.symbol:<6} {card.gain_text:>9}  {card.name} [{card.sector}]")
    print(f"      Market {card.current_price_text} ({card.current_price_date})")
    print(f"      Target {card.target_price_text} ({card.target_price_date})")
    print(f"      {card.reason}")


def main(argv=None):
    _configure_logging()
    logger = logging.getLogger("bullseye.runner")

    parser = argparse.ArgumentParser(description="Run one Bullseye forecast sync and print the cards")
    parser.add_argument("--query", default="", help="Only show tickers whose symbol or name contains this text")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of cards to print")
    parser.add_argument("--strict", action="store_true", help="Use the stricter JSON-only prompt wording")
    args = parser.parse_args(argv)

    start_time = datetime.datetime.now(datetime.timezone.utc)
    logger.info("Run started at %s", start_time.isoformat())

    controller = ViewController(ForecastFetcher(strict_prompt=args.strict), auto_refresh=False)
    controller.set_query(args.query)
    controller.refresh_sync()
    state = controller.snapshot()

    if state.error is not None:
        print(f"✗ {state.error}")
        logger.error("Run failed (%s): %s", state.error_kind, state.error)
        return 2 if state.error_kind == ERROR_KIND_CONFIG else 1

    visible = controller.visible_instruments()
    if args.limit is not None:
        visible = visible[: max(0, args.limit)]

    print(f"Bullseye AI forecast | sync {state.last_updated} | {len(state.instruments)} tickers")
    if not visible:
        print(f'No results found for "{state.query}"')
    for idx, instrument in enumerate(visible):
        _print_card(render_card(instrument, idx))

    links = render_sources(state.sources)
    if links:
        print("\nSearch data points:")
        for link in links:
            print(f"  - {link.title}: {link.uri}")

    end_time = datetime.datetime.now(datetime.timezone.utc)
    logger.info("Run ended at %s", end_time.isoformat())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
