"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory implementations of the domain ports
- A RegistrationWorkflow / AdminAuthService wired to those fakes
- The AnyIO backend used by async tests
"""

from dataclasses import replace

import pytest

from src.domain.auth import AdminAuthService
from src.domain.exceptions import DependencyError
from src.domain.ports import (
    Admin,
    ConfirmationPayload,
    DeliveryStatus,
    Payment,
    Registration,
    RegistrationState,
    RenderedDocument,
    Screenshot,
)
from src.domain.registration import RegistrationWorkflow, WorkflowPolicy

TEST_SECRET = "test-secret-key-that-is-at-least-32-chars"


class InMemoryRegistrationRepository:
    """Dict-backed RegistrationRepository. Returns copies, like a real store."""

    def __init__(self) -> None:
        self.registrations: dict[str, Registration] = {}
        self.payments: dict[str, Payment] = {}
        self.screenshots: dict[str, Screenshot] = {}

    async def add_registration(self, registration: Registration) -> None:
        self.registrations[registration.id] = replace(registration)

    async def get_registration(self, registration_id: str) -> Registration | None:
        registration = self.registrations.get(registration_id)
        return replace(registration) if registration else None

    async def list_registrations(self) -> list[Registration]:
        ordered = sorted(
            self.registrations.values(), key=lambda r: r.registration_date, reverse=True
        )
        return [replace(r) for r in ordered]

    async def transition(
        self,
        registration_id: str,
        from_state: RegistrationState,
        to_state: RegistrationState,
    ) -> bool:
        registration = self.registrations.get(registration_id)
        if registration is None or registration.state is not from_state:
            return False
        registration.is_approved, registration.is_rejected = to_state.flags
        return True

    async def set_delivery_status(self, registration_id: str, status: DeliveryStatus) -> None:
        self.registrations[registration_id].delivery_status = status

    async def add_payment(self, payment: Payment, screenshot: Screenshot) -> bool:
        if any(p.registration_id == payment.registration_id for p in self.payments.values()):
            return False
        self.payments[payment.id] = replace(payment)
        self.screenshots[payment.id] = screenshot
        return True

    async def get_payment_for_registration(self, registration_id: str) -> Payment | None:
        for payment in self.payments.values():
            if payment.registration_id == registration_id:
                return replace(payment)
        return None

    async def list_payments(self, registration_ids: list[str]) -> list[Payment]:
        wanted = set(registration_ids)
        return [replace(p) for p in self.payments.values() if p.registration_id in wanted]

    async def get_screenshot(self, payment_id: str) -> Screenshot | None:
        return self.screenshots.get(payment_id)


class InMemoryAdminRepository:
    """Dict-backed AdminRepository keyed by username."""

    def __init__(self) -> None:
        self.admins: dict[str, Admin] = {}

    async def add_admin(self, admin: Admin) -> bool:
        if admin.username in self.admins:
            return False
        self.admins[admin.username] = admin
        return True

    async def get_admin_by_username(self, username: str) -> Admin | None:
        return self.admins.get(username)


class StubRenderer:
    """Records payloads and returns a tiny fake PDF."""

    def __init__(self) -> None:
        self.payloads: list[ConfirmationPayload] = []

    async def render(self, payload: ConfirmationPayload) -> RenderedDocument:
        self.payloads.append(payload)
        return RenderedDocument(
            filename=f"confirmation-{payload.registration_id}.pdf",
            content=b"%PDF-1.4 stub",
        )


class RecordingEmailSender:
    """Records sent emails; set fail=True to simulate a provider outage."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    async def send_confirmation(
        self,
        recipient: str,
        subject: str,
        body: str,
        attachment: RenderedDocument,
    ) -> None:
        if self.fail:
            raise DependencyError("SMTP server unavailable")
        self.sent.append(
            {"recipient": recipient, "subject": subject, "body": body, "attachment": attachment}
        )


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def repository() -> InMemoryRegistrationRepository:
    return InMemoryRegistrationRepository()


@pytest.fixture
def renderer() -> StubRenderer:
    return StubRenderer()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def workflow(
    repository: InMemoryRegistrationRepository,
    renderer: StubRenderer,
    email_sender: RecordingEmailSender,
) -> RegistrationWorkflow:
    return RegistrationWorkflow(
        repository=repository,
        renderer=renderer,
        email_sender=email_sender,
        policy=WorkflowPolicy(mail_timeout_seconds=1.0),
    )


@pytest.fixture
def admin_repository() -> InMemoryAdminRepository:
    return InMemoryAdminRepository()


@pytest.fixture
def auth_service(admin_repository: InMemoryAdminRepository) -> AdminAuthService:
    # Minimum bcrypt cost keeps the suite fast
    return AdminAuthService(
        repository=admin_repository,
        secret_key=TEST_SECRET,
        token_ttl_seconds=3600,
        bcrypt_cost=4,
    )
