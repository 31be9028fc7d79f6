"""Repository adapters - Database implementations."""

from .postgres import PostgresAdminRepository, PostgresRegistrationRepository, run_migrations

__all__ = ["PostgresAdminRepository", "PostgresRegistrationRepository", "run_migrations"]
