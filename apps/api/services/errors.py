"""Domain error taxonomy shared by models, services and routers."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors the API layer translates into HTTP responses."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConstraintViolation(DomainError, ValueError):
    """Empty/oversized text, malformed email or URL, negative counters."""

    status_code = 422


class PermissionDenied(DomainError):
    """A write predicate evaluated false for a row the caller can see."""

    status_code = 403


class NotFound(DomainError):
    """Row missing or hidden by a read predicate."""

    status_code = 404


class UniquenessViolation(DomainError):
    """Duplicate profile id/email or duplicate metric key+date."""

    status_code = 409
