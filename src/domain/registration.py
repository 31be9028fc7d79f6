"""
Registration workflow domain service - Approval state machine implementation.

This module contains the core business logic for event registrations:
student submission, payment proof, and administrator review.

Approval State Machine
======================

States (derived from the is_approved / is_rejected flags):
- PENDING:  Initial state after submission (False, False)
- APPROVED: Administrator accepted the registration (True, False)
- REJECTED: Administrator declined the registration (False, True)

Valid Transitions:
    PENDING  -> APPROVED  (approve, requires a payment)
    PENDING  -> REJECTED  (reject)
    REJECTED -> APPROVED  (approve, only if policy.allow_approve_rejected)

Invalid Transitions (ConflictError):
    APPROVED -> any       (approve twice, reject after approval)
    REJECTED -> REJECTED  (reject twice)

Side effects of approval (render confirmation, send email) happen after
the state change is persisted. Delivery outcome is recorded separately in
delivery_status, so a failed email never rolls back an approval and can be
retried with resend_confirmation().

Note: Each transition is persisted with a state-guarded update, so a row
that changed between read and write is reported as a conflict.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .exceptions import ConflictError, DependencyError, NotFoundError, ValidationError
from .ports import (
    ApprovalResult,
    ConfirmationPayload,
    ConfirmationRenderer,
    DeliveryStatus,
    EmailSender,
    Payment,
    Registration,
    RegistrationRepository,
    RegistrationState,
    RegistrationView,
    Screenshot,
)

logger = logging.getLogger(__name__)


@dataclass
class WorkflowPolicy:
    """Tunable workflow rules, built once from application settings."""

    default_amount: int = 500
    currency_symbol: str = "Rs."
    allow_approve_rejected: bool = True  # Re-approving a rejected registration
    mail_timeout_seconds: float = 30.0
    max_screenshot_bytes: int = 5 * 1024 * 1024


@dataclass
class RegistrationWorkflow:
    """
    Domain service for the registration approval workflow.

    Orchestrates submission, payment proof, review transitions and the
    confirmation pipeline (render -> send -> record delivery status).
    """

    repository: RegistrationRepository
    renderer: ConfirmationRenderer
    email_sender: EmailSender
    policy: WorkflowPolicy = field(default_factory=WorkflowPolicy)

    async def submit(self, student_name: str, college: str, email: str, event: str) -> Registration:
        """
        Create a new PENDING registration.

        Raises:
            ValidationError: If any required field is missing or blank
        """
        fields = {
            "studentName": student_name,
            "college": college,
            "email": email,
            "event": event,
        }
        missing = [name for name, value in fields.items() if not value or not value.strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        registration = Registration(
            id=self._new_id(),
            student_name=student_name.strip(),
            college=college.strip(),
            email=self._normalize_email(email),
            event=event.strip(),
            amount=self.policy.default_amount,
            registration_date=self._now(),
        )
        await self.repository.add_registration(registration)
        logger.info("Registration %s submitted for event %s", registration.id, registration.event)
        return registration

    async def attach_payment(
        self,
        registration_id: str,
        utr_number: str,
        screenshot: bytes | None,
        content_type: str | None = None,
    ) -> Payment:
        """
        Attach payment proof to an existing registration.

        Raises:
            ValidationError: If the screenshot is missing/empty/too large or UTR is blank
            NotFoundError: If the registration does not exist
            ConflictError: If the registration already has a payment
        """
        if not screenshot:
            raise ValidationError("Payment screenshot is required")
        if len(screenshot) > self.policy.max_screenshot_bytes:
            raise ValidationError("Payment screenshot is too large")
        if not utr_number or not utr_number.strip():
            raise ValidationError("UTR number is required")

        registration = await self.repository.get_registration(registration_id)
        if registration is None:
            raise NotFoundError("Registration not found")

        content_type = content_type or "application/octet-stream"
        payment = Payment(
            id=self._new_id(),
            registration_id=registration.id,
            utr_number=utr_number.strip(),
            payment_date=self._now(),
            screenshot_content_type=content_type,
        )
        stored = await self.repository.add_payment(
            payment, Screenshot(content=screenshot, content_type=content_type)
        )
        if not stored:
            raise ConflictError("Payment already submitted for this registration")

        logger.info("Payment %s attached to registration %s", payment.id, registration.id)
        return payment

    async def approve(self, registration_id: str) -> ApprovalResult:
        """
        Approve a registration and send its confirmation.

        The approval is persisted before the confirmation is rendered and
        mailed. A delivery failure is reported in the result (delivered=False)
        and recorded as DeliveryStatus.FAILED; it does not undo the approval.

        Raises:
            NotFoundError: If the registration or its payment does not exist
            ConflictError: If already approved, or rejected and policy forbids re-approval
        """
        registration = await self._get_registration(registration_id)
        current = registration.state

        if current is RegistrationState.APPROVED:
            raise ConflictError("Registration already approved")
        if current is RegistrationState.REJECTED and not self.policy.allow_approve_rejected:
            raise ConflictError("Registration already rejected")

        payment = await self.repository.get_payment_for_registration(registration.id)
        if payment is None:
            raise NotFoundError("Payment not found for this registration")

        await self._transition(registration, current, RegistrationState.APPROVED)
        logger.info("Registration %s approved (was %s)", registration.id, current.value)

        return await self._deliver_confirmation(registration, payment)

    async def resend_confirmation(self, registration_id: str) -> ApprovalResult:
        """
        Retry the confirmation email for an approved registration.

        Raises:
            NotFoundError: If the registration or its payment does not exist
            ConflictError: If the registration is not approved
        """
        registration = await self._get_registration(registration_id)
        if registration.state is not RegistrationState.APPROVED:
            raise ConflictError("Registration is not approved")

        payment = await self.repository.get_payment_for_registration(registration.id)
        if payment is None:
            raise NotFoundError("Payment not found for this registration")

        return await self._deliver_confirmation(registration, payment)

    async def reject(self, registration_id: str) -> Registration:
        """
        Reject a pending registration. No payment is required.

        Raises:
            NotFoundError: If the registration does not exist
            ConflictError: If already approved or already rejected
        """
        registration = await self._get_registration(registration_id)
        current = registration.state

        if current is RegistrationState.APPROVED:
            raise ConflictError("Registration already approved")
        if current is RegistrationState.REJECTED:
            raise ConflictError("Registration already rejected")

        await self._transition(registration, current, RegistrationState.REJECTED)
        logger.info("Registration %s rejected", registration.id)
        return registration

    async def list_registrations(self) -> list[RegistrationView]:
        """Return every registration joined with its payment, newest first."""
        registrations = await self.repository.list_registrations()
        payments = await self.repository.list_payments([r.id for r in registrations])
        by_registration = {p.registration_id: p for p in payments}

        return [RegistrationView(r, by_registration.get(r.id)) for r in registrations]

    async def get_screenshot(self, payment_id: str) -> Screenshot:
        """
        Fetch a payment's screenshot.

        Raises:
            NotFoundError: If no payment has this id
        """
        screenshot = await self.repository.get_screenshot(payment_id)
        if screenshot is None:
            raise NotFoundError("Payment not found")
        return screenshot

    async def _get_registration(self, registration_id: str) -> Registration:
        registration = await self.repository.get_registration(registration_id)
        if registration is None:
            raise NotFoundError("Registration not found")
        return registration

    async def _transition(
        self,
        registration: Registration,
        from_state: RegistrationState,
        to_state: RegistrationState,
    ) -> None:
        """Persist a state change and mirror it on the in-memory record."""
        updated = await self.repository.transition(registration.id, from_state, to_state)
        if not updated:
            # Someone else reviewed the registration between our read and write
            raise ConflictError("Registration was modified concurrently")
        registration.is_approved, registration.is_rejected = to_state.flags

    async def _deliver_confirmation(
        self, registration: Registration, payment: Payment
    ) -> ApprovalResult:
        """
        Render the confirmation and email it, recording the delivery status.

        Sequential pipeline: render -> await -> send (bounded) -> await.
        """
        payload = ConfirmationPayload(
            registration_id=registration.id,
            student_name=registration.student_name,
            college=registration.college,
            event=registration.event,
            amount=registration.amount,
            utr_number=payment.utr_number,
            registration_date=registration.registration_date,
        )

        try:
            document = await self.renderer.render(payload)
            await asyncio.wait_for(
                self.email_sender.send_confirmation(
                    recipient=registration.email,
                    subject=self.confirmation_subject(registration.event),
                    body=self._confirmation_body(registration),
                    attachment=document,
                ),
                timeout=self.policy.mail_timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = "Timed out sending confirmation email"
        except DependencyError as e:
            error = str(e) or "Failed to send confirmation email"
        except Exception:
            # Approval is already persisted; record the failure
            logger.exception("Unexpected error delivering confirmation for %s", registration.id)
            error = "Failed to send confirmation email"
        else:
            error = None

        status = DeliveryStatus.FAILED if error else DeliveryStatus.SENT
        await self.repository.set_delivery_status(registration.id, status)
        registration.delivery_status = status

        if error:
            logger.warning(
                "Confirmation for registration %s not delivered: %s", registration.id, error
            )
            return ApprovalResult(registration=registration, delivered=False, error=error)

        logger.info("Confirmation for registration %s sent to %s", registration.id, registration.email)
        return ApprovalResult(registration=registration, delivered=True)

    @staticmethod
    def confirmation_subject(event: str) -> str:
        return f"Registration Confirmed - {event}"

    def _confirmation_body(self, registration: Registration) -> str:
        return (
            f"Dear {registration.student_name},\n\n"
            f"Your registration for {registration.event} has been approved.\n"
            f"Amount paid: {self.policy.currency_symbol} {registration.amount}\n"
            f"Registration ID: {registration.id}\n\n"
            "Please find your confirmation attached. Present the QR code at the venue.\n"
        )

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
