"""
Admin routes - Login and registration review.

This module defines the admin HTTP endpoints under /api/admin:
- POST /login - Exchange credentials for a bearer token
- POST /register - Create an admin (only when ADMIN_SIGNUP_ENABLED)
- GET /registrations - List registrations with payments (token required)
- POST /approve/{id}, /reject/{id}, /resend/{id} - Review actions (token required)
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import get_app_settings, get_auth_service, get_workflow, require_admin
from src.api.models import (
    AdminRegisterRequest,
    AdminRegisterResponse,
    ApprovalResponse,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegistrationOut,
)
from src.config.settings import Settings
from src.domain.auth import AdminAuthService, AdminIdentity
from src.domain.ports import ApprovalResult
from src.domain.registration import RegistrationWorkflow

router = APIRouter(prefix="/api/admin", tags=["admin"])

_AUTH_RESPONSES = {
    401: {"model": ErrorResponse, "description": "No token"},
    403: {"model": ErrorResponse, "description": "Invalid or expired token"},
}


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Admin login",
)
async def login(
    request_data: LoginRequest,
    auth: AdminAuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Verify admin credentials and return a signed token (TOKEN_TTL_SECONDS, default one hour)."""
    token = await auth.login(request_data.username, request_data.password)
    return LoginResponse(message="Login successful", token=token)


@router.post(
    "/register",
    response_model=AdminRegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or username taken"},
        403: {"model": ErrorResponse, "description": "Admin registration disabled"},
    },
    summary="Create an admin account",
)
async def register_admin(
    request_data: AdminRegisterRequest,
    settings: Settings = Depends(get_app_settings),
    auth: AdminAuthService = Depends(get_auth_service),
) -> AdminRegisterResponse:
    if not settings.admin_signup_enabled:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin registration is disabled")

    admin = await auth.register_admin(request_data.username, request_data.password)
    return AdminRegisterResponse(message="Admin registered", admin_id=admin.id)


@router.get(
    "/registrations",
    response_model=list[RegistrationOut],
    responses=_AUTH_RESPONSES,
    summary="List registrations",
    description="All registrations with their payment (or null), newest first.",
)
async def list_registrations(
    admin: AdminIdentity = Depends(require_admin),
    workflow: RegistrationWorkflow = Depends(get_workflow),
) -> list[RegistrationOut]:
    views = await workflow.list_registrations()
    return [RegistrationOut.from_domain(view) for view in views]


def _approval_response(
    result: ApprovalResult, response: Response, success_message: str, failure_message: str
) -> ApprovalResponse:
    if result.delivered:
        return ApprovalResponse(
            message=success_message,
            delivery_status=result.registration.delivery_status,
        )

    # Approval is persisted; only the email failed
    response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return ApprovalResponse(
        message=f"{failure_message}: {result.error}",
        delivery_status=result.registration.delivery_status,
    )


@router.post(
    "/approve/{registration_id}",
    response_model=ApprovalResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"model": ErrorResponse, "description": "Already approved"},
        404: {"model": ErrorResponse, "description": "Registration or payment not found"},
        500: {"model": ApprovalResponse, "description": "Approved, but email delivery failed"},
    },
    summary="Approve a registration",
    description="Approves the registration, then emails a PDF confirmation with a QR code.",
)
async def approve(
    registration_id: str,
    response: Response,
    admin: AdminIdentity = Depends(require_admin),
    workflow: RegistrationWorkflow = Depends(get_workflow),
) -> ApprovalResponse:
    result = await workflow.approve(registration_id)
    return _approval_response(
        result,
        response,
        "Registration approved and email sent",
        "Registration approved but confirmation email failed",
    )


@router.post(
    "/reject/{registration_id}",
    response_model=MessageResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"model": ErrorResponse, "description": "Already approved or rejected"},
        404: {"model": ErrorResponse, "description": "Registration not found"},
    },
    summary="Reject a registration",
)
async def reject(
    registration_id: str,
    admin: AdminIdentity = Depends(require_admin),
    workflow: RegistrationWorkflow = Depends(get_workflow),
) -> MessageResponse:
    await workflow.reject(registration_id)
    return MessageResponse(message="Registration rejected")


@router.post(
    "/resend/{registration_id}",
    response_model=ApprovalResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"model": ErrorResponse, "description": "Registration not approved"},
        404: {"model": ErrorResponse, "description": "Registration or payment not found"},
        500: {"model": ApprovalResponse, "description": "Email delivery failed again"},
    },
    summary="Resend a confirmation email",
    description="Retries delivery for an approved registration without changing its state.",
)
async def resend(
    registration_id: str,
    response: Response,
    admin: AdminIdentity = Depends(require_admin),
    workflow: RegistrationWorkflow = Depends(get_workflow),
) -> ApprovalResponse:
    result = await workflow.resend_confirmation(registration_id)
    return _approval_response(
        result, response, "Confirmation email sent", "Confirmation email failed"
    )
