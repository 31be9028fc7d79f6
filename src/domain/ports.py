"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the records the workflow operates on and the
interfaces (ports) that the domain requires from infrastructure.
Adapters implement these protocols.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol


class RegistrationState(str, Enum):
    """
    Approval workflow states, derived from the is_approved/is_rejected flags.

    State Transitions:
    - PENDING -> APPROVED (approve, payment proof required)
    - PENDING -> REJECTED (reject, no payment required)
    - REJECTED -> APPROVED (approve, only when policy allows it)

    APPROVED accepts no further transitions.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def flags(self) -> tuple[bool, bool]:
        """Return the (is_approved, is_rejected) pair stored for this state."""
        return (self is RegistrationState.APPROVED, self is RegistrationState.REJECTED)


class DeliveryStatus(str, Enum):
    """Outcome of the last confirmation email attempt."""

    NOT_SENT = "not_sent"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class Registration:
    """A student's registration for an event."""

    id: str
    student_name: str
    college: str
    email: str
    event: str
    amount: int
    registration_date: datetime
    is_approved: bool = False
    is_rejected: bool = False
    delivery_status: DeliveryStatus = DeliveryStatus.NOT_SENT

    @property
    def state(self) -> RegistrationState:
        if self.is_approved:
            return RegistrationState.APPROVED
        if self.is_rejected:
            return RegistrationState.REJECTED
        return RegistrationState.PENDING


@dataclass
class Payment:
    """Payment proof metadata. Screenshot bytes are loaded separately."""

    id: str
    registration_id: str
    utr_number: str
    payment_date: datetime
    screenshot_content_type: str = "application/octet-stream"


@dataclass
class Screenshot:
    """Binary payment screenshot stored inline with its payment."""

    content: bytes
    content_type: str


@dataclass
class RegistrationView:
    """A registration joined with its payment, if any."""

    registration: Registration
    payment: Payment | None = None


@dataclass
class Admin:
    """An administrator account."""

    id: str
    username: str
    password_hash: str


@dataclass
class ConfirmationPayload:
    """Fields printed on, and encoded into, the confirmation document."""

    registration_id: str
    student_name: str
    college: str
    event: str
    amount: int
    utr_number: str
    registration_date: datetime

    def to_qr_data(self) -> str:
        """Serialize the payload as the compact JSON embedded in the QR code."""
        return json.dumps(
            {
                "registrationId": self.registration_id,
                "studentName": self.student_name,
                "college": self.college,
                "event": self.event,
                "amount": self.amount,
                "utrNumber": self.utr_number,
                "registrationDate": self.registration_date.isoformat(),
            },
            separators=(",", ":"),
        )


@dataclass
class RenderedDocument:
    """An in-memory rendered document ready to be attached to an email."""

    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass
class ApprovalResult:
    """Outcome of approve/resend: the state change and delivery are reported separately."""

    registration: Registration
    delivered: bool
    error: str | None = field(default=None)


class RegistrationRepository(Protocol):
    """Port interface for registration and payment persistence."""

    async def add_registration(self, registration: Registration) -> None:
        """Persist a new registration."""
        ...

    async def get_registration(self, registration_id: str) -> Registration | None:
        """Fetch a registration by id, or None if unknown."""
        ...

    async def list_registrations(self) -> list[Registration]:
        """Return all registrations, newest registration_date first."""
        ...

    async def transition(
        self,
        registration_id: str,
        from_state: RegistrationState,
        to_state: RegistrationState,
    ) -> bool:
        """
        Atomically move a registration between states.

        The update only applies if the stored flags still match from_state.

        Returns:
            True if the row was updated, False if its state had changed
        """
        ...

    async def set_delivery_status(self, registration_id: str, status: DeliveryStatus) -> None:
        """Record the outcome of a confirmation email attempt."""
        ...

    async def add_payment(self, payment: Payment, screenshot: Screenshot) -> bool:
        """
        Persist payment proof for a registration.

        Returns:
            True if stored, False if the registration already has a payment
        """
        ...

    async def get_payment_for_registration(self, registration_id: str) -> Payment | None:
        """Find the payment whose registration_id matches, or None."""
        ...

    async def list_payments(self, registration_ids: list[str]) -> list[Payment]:
        """Return payments belonging to any of the given registrations."""
        ...

    async def get_screenshot(self, payment_id: str) -> Screenshot | None:
        """Fetch the stored screenshot for a payment, or None if unknown."""
        ...


class AdminRepository(Protocol):
    """Port interface for admin account persistence."""

    async def add_admin(self, admin: Admin) -> bool:
        """
        Persist a new admin.

        Returns:
            True if created, False if the username is already taken
        """
        ...

    async def get_admin_by_username(self, username: str) -> Admin | None:
        """Fetch an admin by username, or None if unknown."""
        ...


class ConfirmationRenderer(Protocol):
    """Port interface for confirmation document generation."""

    async def render(self, payload: ConfirmationPayload) -> RenderedDocument:
        """Render a printable document embedding a scannable code of the payload."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    async def send_confirmation(
        self,
        recipient: str,
        subject: str,
        body: str,
        attachment: RenderedDocument,
    ) -> None:
        """
        Send an email with the rendered confirmation attached.

        Raises:
            DependencyError: If the mail provider rejects or fails the delivery
        """
        ...
