"""Bullseye analysis fetcher: Gemini + Google Search grounded 7-day forecasts."""

from __future__ import annotations

import concurrent.futures as futures
import logging
from datetime import datetime
from typing import Any, Callable

from google import genai
from google.genai import types

from config import settings
from core.errors import ConfigError, EmptyResponseError, FetchError, FetchTimeoutError
from core.models import ForecastResult
from core.normalizer import extract_json_array, extract_sources, normalize_instruments
from core.prompt import build_forecast_prompt, timestamp_label

LOGGER = logging.getLogger("bullseye.forecaster")

MISSING_KEY_MESSAGE = "API_KEY is missing. Please ensure your environment is configured correctly."
GENERIC_FAILURE_MESSAGE = "Internal Server Error during market sync."
TRANSIENT_FAILURE_MESSAGE = "The search engine encountered a temporary glitch. Please try refreshing in a moment."


def friendly_error_message(error: BaseException) -> str:
    """Map a provider exception to the message shown to the user."""
    message = str(error).strip() or GENERIC_FAILURE_MESSAGE
    if "INTERNAL" in message:
        return TRANSIENT_FAILURE_MESSAGE
    return message


class ForecastFetcher:
    """Request, parse and normalize one batch of AI stock forecasts."""

    def __init__(
        self,
        client: Any | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
        strict_prompt: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._model = model or settings.GEMINI_MODEL
        self._timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.REQUEST_TIMEOUT_SECONDS
        self._strict_prompt = strict_prompt
        self._clock = clock or (lambda: datetime.now().astimezone())

    def _get_client(self) -> Any:
        """Return the injected client or build one from the environment credential."""
        if self._client is not None:
            return self._client

        api_key = self._api_key or settings.get_api_key()
        if not api_key:
            raise ConfigError(MISSING_KEY_MESSAGE)

        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(self._timeout_seconds * 1000)),
        )
        return self._client

    def _request_config(self) -> types.GenerateContentConfig:
        options: dict[str, Any] = {
            "tools": [types.Tool(google_search=types.GoogleSearch())],
            "temperature": settings.TEMPERATURE,
        }
        if settings.STRUCTURED_OUTPUT:
            options["response_mime_type"] = "application/json"
        return types.GenerateContentConfig(**options)

    def _generate(self, client: Any, prompt: str) -> Any:
        """Run generate_content on a helper thread bounded by the request timeout."""
        executor = futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="bullseye-genai")
        try:
            future = executor.submit(
                client.models.generate_content,
                model=self._model,
                contents=prompt,
                config=self._request_config(),
            )
            try:
                return future.result(timeout=self._timeout_seconds)
            except futures.TimeoutError as exc:
                future.cancel()
                raise FetchTimeoutError(
                    f"Market sync timed out after {self._timeout_seconds:g} seconds. Please try again."
                ) from exc
        finally:
            executor.shutdown(wait=False)

    def fetch_forecast(self) -> ForecastResult:
        """
        Run one fetch cycle and return normalized instruments plus citations.

        Raises:
            ConfigError: When no API credential is configured.
            FetchError: On provider failure, blank text, unparseable text or timeout.
        """
        client = self._get_client()
        now = self._clock()
        prompt = build_forecast_prompt(now, strict=self._strict_prompt)

        LOGGER.info("Requesting forecast from %s (timeout=%ss)", self._model, self._timeout_seconds)
        try:
            response = self._generate(client, prompt)
        except FetchTimeoutError:
            LOGGER.warning("Forecast request timed out after %ss", self._timeout_seconds)
            raise
        except Exception as exc:
            LOGGER.exception("Forecast request failed: %s", exc)
            raise FetchError(friendly_error_message(exc)) from exc

        text = getattr(response, "text", None)
        if not text or not text.strip():
            raise EmptyResponseError("The AI returned an empty response.")

        raw_records = extract_json_array(text)
        instruments = normalize_instruments(raw_records, price_date_default=timestamp_label(now))
        sources = extract_sources(response)

        LOGGER.info(
            "Forecast parsed: %s raw records, %s instruments, %s sources",
            len(raw_records),
            len(instruments),
            len(sources),
        )
        return ForecastResult(instruments=instruments, sources=sources)
