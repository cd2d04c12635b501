import argparse
import sys

from config import settings
from ui.app import create_app


def main(argv=None):
    """
    Bullseye Entry Point.
    Starts the local forecast dashboard; the first sync begins immediately.
    """
    parser = argparse.ArgumentParser(description="Run the Bullseye AI forecast dashboard")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port to listen on (default: 5000)")
    args = parser.parse_args(argv)

    print("🎯 Bullseye AI - 7-Day Forecast Dashboard Initializing...")
    print(f"🤖 Model: {settings.GEMINI_MODEL}")
    if not settings.get_api_key():
        print("⚠ GEMINI_API_KEY is not set; the dashboard will show a configuration error.")

    app = create_app()
    app.run(host=args.host, port=args.port, debug=False)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n🛑 Execution interrupted by user.")
        sys.exit(0)
    except Exception as e:
        print(f"\n🔥 Fatal System Error: {e}")
        sys.exit(1)
