"""Failure taxonomy for the forecast fetch cycle."""

from __future__ import annotations


class ForecastError(Exception):
    """Base class for every error raised while producing a forecast."""


class ConfigError(ForecastError):
    """The Gemini credential is missing; no request was attempted."""


class FetchError(ForecastError):
    """The provider call failed or returned nothing usable."""


class EmptyResponseError(FetchError):
    """The model answered with blank text."""


class ParseError(FetchError):
    """No JSON array could be recovered from the model text."""


class FetchTimeoutError(FetchError, TimeoutError):
    """The outbound call exceeded its time budget."""
