"""Centralized exception hierarchy for PlantManager.

All domain and service exceptions inherit from :class:`PlantManagerError` so
that callers can catch a single base class when they need a broad safety net,
yet still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``plantmanager/utils/http.safe_route``)
maps these to HTTP status codes automatically.

Hierarchy
---------
::

    PlantManagerError (base, 500)
    ├── ValidationError            (400, bad input from caller)
    │   └── InvalidRecordError     (400, also a PersistenceError)
    ├── NotFoundError              (404, plant is not in the store)
    ├── ServiceError               (500, business-logic failure)
    │   ├── PersistenceError       (500, durable write failed)
    │   │   └── InvalidRecordError
    │   └── NotificationError      (502, reminder saved, alarm not armed)
    ├── CorruptStoreError          (409, persisted content unreadable)
    └── ConfigurationError         (500, missing / invalid config)
"""

from __future__ import annotations


class PlantManagerError(Exception):
    """Base exception for all PlantManager errors.

    Parameters
    ----------
    message:
        Human-readable description.
    detail:
        Optional machine-readable context dict attached to the error.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(PlantManagerError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class NotFoundError(PlantManagerError):
    """Requested plant does not exist (HTTP 404)."""

    http_status: int = 404


class CorruptStoreError(PlantManagerError):
    """Persisted reminders exist but cannot be parsed (HTTP 409).

    Never resolved by discarding the file; the caller decides whether to
    surface the problem or reset the store.
    """

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(PlantManagerError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class PersistenceError(ServiceError):
    """Durable storage could not be written (HTTP 500).

    The previous stored state is left untouched.
    """

    http_status: int = 500


class NotificationError(ServiceError):
    """The notification collaborator failed after the store was updated (HTTP 502)."""

    http_status: int = 502


class InvalidRecordError(ValidationError, PersistenceError):
    """A record was rejected before any write was attempted (HTTP 400)."""

    http_status: int = 400


class ConfigurationError(PlantManagerError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
