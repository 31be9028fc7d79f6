"""
Domain exceptions - Semantic error types for the registration workflow.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each type to an HTTP status code.
"""


class WorkflowError(Exception):
    """Base class for registration workflow domain errors."""

    pass


class ValidationError(WorkflowError):
    """Missing or malformed input."""

    pass


class NotFoundError(WorkflowError):
    """Unknown registration, payment or admin."""

    pass


class ConflictError(WorkflowError):
    """Disallowed state transition or duplicate record."""

    pass


class DependencyError(WorkflowError):
    """Store, mail or renderer failure."""

    pass


class AuthError(WorkflowError):
    """Base class for authentication failures."""

    pass


class InvalidCredentials(AuthError):
    """Unknown username or password mismatch."""

    pass


class MissingToken(AuthError):
    """No bearer token supplied."""

    pass


class InvalidToken(AuthError):
    """Malformed, tampered or expired token."""

    pass
