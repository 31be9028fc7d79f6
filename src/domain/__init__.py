"""
Domain layer - Pure business logic with zero framework imports.

This package contains the approval workflow state machine for event
registrations and admin authentication. It defines its own port
interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .auth import AdminAuthService, AdminIdentity
from .exceptions import (
    AuthError,
    ConflictError,
    DependencyError,
    InvalidCredentials,
    InvalidToken,
    MissingToken,
    NotFoundError,
    ValidationError,
    WorkflowError,
)
from .ports import (
    AdminRepository,
    ConfirmationRenderer,
    DeliveryStatus,
    EmailSender,
    RegistrationRepository,
    RegistrationState,
)
from .registration import RegistrationWorkflow, WorkflowPolicy

__all__ = [
    "AdminAuthService",
    "AdminIdentity",
    "AdminRepository",
    "AuthError",
    "ConfirmationRenderer",
    "ConflictError",
    "DeliveryStatus",
    "DependencyError",
    "EmailSender",
    "InvalidCredentials",
    "InvalidToken",
    "MissingToken",
    "NotFoundError",
    "RegistrationRepository",
    "RegistrationState",
    "RegistrationWorkflow",
    "ValidationError",
    "WorkflowError",
    "WorkflowPolicy",
]
