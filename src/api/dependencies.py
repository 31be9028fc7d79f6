"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Everything is built from the Settings object and connection pool that
the lifespan stores on app.state.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import AsyncConnectionPool

from src.adapters.render.pdf import PdfConfirmationRenderer
from src.adapters.repository.postgres import PostgresAdminRepository, PostgresRegistrationRepository
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.config.settings import Settings
from src.domain.auth import AdminAuthService, AdminIdentity
from src.domain.ports import EmailSender
from src.domain.registration import RegistrationWorkflow


def build_email_sender(settings: Settings) -> EmailSender:
    """Select the mail adapter configured by MAIL_BACKEND."""
    if settings.mail_backend == "console":
        return ConsoleEmailSender()
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        sender=settings.mail_from,
        use_tls=settings.smtp_use_tls,
        timeout=settings.mail_timeout_seconds,
    )


def get_app_settings(request: Request) -> Settings:
    """Get the settings instance constructed at startup."""
    return request.app.state.settings


def get_pool(request: Request) -> AsyncConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_workflow(request: Request) -> RegistrationWorkflow:
    """
    Create the registration workflow with injected dependencies.

    Wires together the repository, renderer and email sender.
    """
    settings = get_app_settings(request)
    return RegistrationWorkflow(
        repository=PostgresRegistrationRepository(get_pool(request)),
        renderer=PdfConfirmationRenderer(currency_symbol=settings.currency_symbol),
        email_sender=request.app.state.email_sender,
        policy=settings.workflow_policy(),
    )


def get_auth_service(request: Request) -> AdminAuthService:
    """Create the admin auth service with the admin repository and signing secret."""
    settings = get_app_settings(request)
    return AdminAuthService(
        repository=PostgresAdminRepository(get_pool(request)),
        secret_key=settings.secret_key,
        token_ttl_seconds=settings.token_ttl_seconds,
        bcrypt_cost=settings.bcrypt_cost,
    )


# Bearer token security scheme for OpenAPI documentation.
# auto_error=False so a missing header reaches the domain as MissingToken.
bearer_scheme = HTTPBearer(auto_error=False)


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AdminAuthService = Depends(get_auth_service),
) -> AdminIdentity:
    """
    Guard for admin routes: verify the bearer token.

    Raises:
        MissingToken: No Authorization: Bearer header (-> 401)
        InvalidToken: Bad signature, malformed or expired (-> 403)
    """
    token = credentials.credentials if credentials else None
    return auth.authenticate(token)
