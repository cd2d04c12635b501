import os

from dotenv import load_dotenv

# Project root directory (bullseye/)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Pick up GEMINI_API_KEY and BULLSEYE_* overrides from a local .env file
load_dotenv(os.path.join(BASE_DIR, ".env"))

LOGS_DIR = os.path.join(BASE_DIR, "logs")

# Generative model used for the forecast request
GEMINI_MODEL = os.getenv("BULLSEYE_MODEL", "gemini-3-flash-preview")

# Low temperature keeps the model close to the search results
TEMPERATURE = float(os.getenv("BULLSEYE_TEMPERATURE", "0.1"))

# Upper bound for one outbound generate_content call
REQUEST_TIMEOUT_SECONDS = float(os.getenv("BULLSEYE_TIMEOUT", "30"))

# Ask for application/json output alongside the search tool
STRUCTURED_OUTPUT = os.getenv("BULLSEYE_STRUCTURED_OUTPUT", "1").strip().lower() not in {"0", "false", "no", "off"}

FORECAST_HORIZON_DAYS = 7
MAX_INSTRUMENTS = 50
SOURCE_DISPLAY_LIMIT = 5

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY")


def get_api_key() -> str | None:
    """Return the first non-empty Gemini credential found in the environment."""
    for name in API_KEY_ENV_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None
