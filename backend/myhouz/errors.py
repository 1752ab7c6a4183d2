# Overview: Domain error taxonomy shared by services and routes.

"""
Domain errors

Services raise these; routes render them with error_response() in
myhouz.responses. Each class carries the HTTP status it maps to, so a route
never has to decide a status code for a business-rule failure.

Anything that is NOT a DomainError is unexpected: routes log it and answer
with a generic 500.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for business-rule failures surfaced to the client."""

    status_code = 400

    def __init__(self, message: str, *, errors: dict | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(DomainError):
    """400-level input problem. `errors` holds field-level detail when known."""


class NotFoundError(DomainError):
    """Record absent, or not visible to the acting user."""

    status_code = 404


class ConflictError(DomainError):
    """Duplicate customer, review, ideabook item, collaborator or account."""


class InvalidStateError(DomainError):
    """Operation not allowed in the record's current lifecycle state."""


class InsufficientPointsError(DomainError):
    """Spend request larger than the loyalty balance."""

    def __init__(self, balance: int):
        super().__init__(f"Insufficient points. Current balance: {balance}")
        self.balance = balance


class ForbiddenError(DomainError):
    """Authenticated, but not allowed to perform this action."""

    status_code = 403
