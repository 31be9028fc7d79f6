"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase (studentName, registrationId, ...); Python
code uses the snake_case attribute names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from src.domain.ports import DeliveryStatus, Payment, RegistrationState, RegistrationView


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Request model for student registration."""

    student_name: str = Field(..., min_length=1, description="Student's full name")
    college: str = Field(..., min_length=1)
    email: EmailStr
    event: str = Field(..., min_length=1, description="Event being registered for")


class RegisterResponse(CamelModel):
    """Response model for successful registration."""

    message: str
    registration_id: str


class PaymentResponse(CamelModel):
    """Response model for uploaded payment proof."""

    message: str
    payment_id: str


class LoginRequest(CamelModel):
    """Request model for admin login."""

    username: str
    password: str


class LoginResponse(CamelModel):
    """Response model for successful admin login."""

    message: str
    token: str


class AdminRegisterRequest(CamelModel):
    """Request model for admin account creation."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, description="Admin password (min 8 characters)")


class AdminRegisterResponse(CamelModel):
    """Response model for admin account creation."""

    message: str
    admin_id: str


class PaymentOut(CamelModel):
    """Payment metadata as shown in the admin listing."""

    id: str
    registration_id: str
    utr_number: str
    payment_date: datetime
    screenshot_url: str

    @classmethod
    def from_domain(cls, payment: Payment) -> "PaymentOut":
        return cls(
            id=payment.id,
            registration_id=payment.registration_id,
            utr_number=payment.utr_number,
            payment_date=payment.payment_date,
            screenshot_url=f"/payment/{payment.id}/screenshot",
        )


class RegistrationOut(CamelModel):
    """A registration joined with its payment (or null)."""

    id: str
    student_name: str
    college: str
    email: str
    event: str
    amount: int
    registration_date: datetime
    is_approved: bool
    is_rejected: bool
    status: RegistrationState
    delivery_status: DeliveryStatus
    payment: PaymentOut | None = None

    @classmethod
    def from_domain(cls, view: RegistrationView) -> "RegistrationOut":
        registration = view.registration
        return cls(
            id=registration.id,
            student_name=registration.student_name,
            college=registration.college,
            email=registration.email,
            event=registration.event,
            amount=registration.amount,
            registration_date=registration.registration_date,
            is_approved=registration.is_approved,
            is_rejected=registration.is_rejected,
            status=registration.state,
            delivery_status=registration.delivery_status,
            payment=PaymentOut.from_domain(view.payment) if view.payment else None,
        )


class ApprovalResponse(CamelModel):
    """Response model for approve/resend: delivery is reported separately."""

    message: str
    delivery_status: DeliveryStatus


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    message: str
