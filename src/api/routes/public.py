"""
Public routes - Student registration and payment proof.

This module defines the unauthenticated HTTP endpoints:
- POST /register - Submit a registration
- POST /payment - Upload payment proof (multipart)
- GET /payment/{payment_id}/screenshot - Download a payment screenshot
"""

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from src.api.dependencies import get_workflow
from src.api.models import ErrorResponse, PaymentResponse, RegisterRequest, RegisterResponse
from src.domain.exceptions import ValidationError
from src.domain.registration import RegistrationWorkflow

router = APIRouter(tags=["registration"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
    summary="Register for an event",
    description="Submit student details. The registration starts in the pending state "
    "until an administrator reviews it.",
)
async def register(
    request_data: RegisterRequest,
    workflow: RegistrationWorkflow = Depends(get_workflow),
) -> RegisterResponse:
    """
    Submit a registration.

    - **studentName**, **college**, **email**, **event**: all required
    """
    registration = await workflow.submit(
        student_name=request_data.student_name,
        college=request_data.college,
        email=request_data.email,
        event=request_data.event,
    )
    return RegisterResponse(
        message="Registration successful",
        registration_id=registration.id,
    )


@router.post(
    "/payment",
    response_model=PaymentResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No file uploaded, invalid input or duplicate payment"},
        404: {"model": ErrorResponse, "description": "Registration not found"},
    },
    summary="Upload payment proof",
    description="Multipart upload of the payment transaction reference (UTR) and a screenshot.",
)
async def upload_payment(
    registration_id: str = Form(..., alias="registrationId"),
    utr_number: str = Form(..., alias="utrNumber"),
    screenshot: UploadFile | None = File(None),
    workflow: RegistrationWorkflow = Depends(get_workflow),
) -> PaymentResponse:
    """Attach payment proof to an existing registration."""
    if screenshot is None:
        raise ValidationError("No file uploaded")

    # Over-limit uploads are read only one byte past the limit
    content = await screenshot.read(workflow.policy.max_screenshot_bytes + 1)
    payment = await workflow.attach_payment(
        registration_id=registration_id,
        utr_number=utr_number,
        screenshot=content,
        content_type=screenshot.content_type,
    )
    return PaymentResponse(message="Payment details submitted", payment_id=payment.id)


@router.get(
    "/payment/{payment_id}/screenshot",
    response_class=Response,
    responses={
        200: {"content": {"image/*": {}}, "description": "Screenshot bytes"},
        404: {"model": ErrorResponse, "description": "Payment not found"},
    },
    summary="Download payment screenshot",
)
async def get_payment_screenshot(
    payment_id: str,
    workflow: RegistrationWorkflow = Depends(get_workflow),
) -> Response:
    """Return the stored screenshot with its original content type."""
    screenshot = await workflow.get_screenshot(payment_id)
    return Response(content=screenshot.content, media_type=screenshot.content_type)
