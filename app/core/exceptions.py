"""Error taxonomy shared by services, repositories and routers.

Routers never build error responses for these by hand: ``app.main`` registers
one handler per class that turns them into ``{"error": ...}`` JSON bodies.
"""

from typing import Any, Dict, List, Optional


class RealEstError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RealEstError):
    """Malformed caller input. Always raised before any write."""

    status_code = 400

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.details = details or []


class UnsupportedFilterError(ValidationError):
    """A search filter the query builder knows about but cannot apply."""


class AuthError(RealEstError):
    """Missing or insufficient identity."""


class Unauthorized(AuthError):
    status_code = 401


class Forbidden(AuthError):
    status_code = 403


class NotFoundError(RealEstError):
    """Referenced entity does not exist."""

    status_code = 404


class InvalidTransitionError(RealEstError):
    """Lifecycle state-machine violation; the record is left unchanged."""

    status_code = 409


class StorageError(RealEstError):
    """The underlying persistence call failed."""

    status_code = 500
