"""
Error taxonomy for the catalog sync layer, plus HTTP helpers for routes.

Repositories decide on cache fallback by error class:
- NetworkError and its subclasses allow falling back to cached data
- CredentialsMissingError always propagates from page fetches
- PersistenceError is swallowed on read paths and timestamp writes
"""

from typing import TypeVar

from fastapi import HTTPException

T = TypeVar("T")


class BrixieError(Exception):
    """Base class for all catalog sync errors."""

    status_code: int = 500
    recovery_suggestion: str = "Please try again later"


class NetworkError(BrixieError):
    """Transport, timeout or DNS failure talking to the remote catalog."""

    status_code = 502
    recovery_suggestion = "Check your internet connection and try again"


class RateLimitError(NetworkError):
    """Remote catalog refused the request because of rate limiting."""

    status_code = 429
    recovery_suggestion = "Wait a few minutes before making more requests"


class ServerError(NetworkError):
    """Remote catalog answered with a 5xx status."""

    def __init__(self, status: int, message: str | None = None):
        self.status = status
        super().__init__(message or f"Server error (status: {status})")


class ParsingError(NetworkError):
    """Remote catalog answered with a payload that could not be decoded."""


class CredentialsMissingError(BrixieError):
    """No API key is available for the remote catalog."""

    status_code = 401
    recovery_suggestion = "Set REBRICKABLE_API_KEY to a valid Rebrickable API key"

    def __init__(self, message: str = "API key is required to fetch data"):
        super().__init__(message)


class InvalidCredentialsError(CredentialsMissingError):
    """The configured API key was rejected by the remote catalog."""

    def __init__(self, message: str = "Unauthorized. Please check your API key"):
        super().__init__(message)


class PersistenceError(BrixieError):
    """Local store operation failed."""

    recovery_suggestion = "Try clearing the local cache"


def require_resource(resource: T | None, detail: str = "Resource not found") -> T:
    """
    Raise 404 if resource is None, otherwise return the resource.

    Usage:
        theme = require_resource(await repo.get_theme_details(id), "Theme not found")
    """
    if resource is None:
        raise HTTPException(status_code=404, detail=detail)
    return resource


def require_set(lego_set: T | None) -> T:
    """Raise 404 if set is None."""
    return require_resource(lego_set, "Set not found")


def require_theme(theme: T | None) -> T:
    """Raise 404 if theme is None."""
    return require_resource(theme, "Theme not found")
