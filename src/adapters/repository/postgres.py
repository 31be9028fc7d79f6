"""
PostgreSQL repository adapters - Implement the domain's store protocols.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 (async pool) with raw SQL.

State Guard Design:
-------------------
Registrations store their review state as two booleans (is_approved,
is_rejected), with a CHECK constraint forbidding both being true.
transition() updates the flags with a WHERE clause that also matches the
expected current flags, so a stale read can never overwrite a newer
review decision. rowcount tells the domain whether the guard matched.

Payment screenshots are stored inline (BYTEA) on the payments row and are
only selected by get_screenshot(); listing queries never load them.
"""

import logging
from pathlib import Path

from psycopg.errors import UniqueViolation
from psycopg_pool import AsyncConnectionPool

from src.domain.ports import (
    Admin,
    DeliveryStatus,
    Payment,
    Registration,
    RegistrationState,
    Screenshot,
)

logger = logging.getLogger(__name__)

_REGISTRATION_COLUMNS = """
    id, student_name, college, email, event, amount, registration_date,
    is_approved, is_rejected, delivery_status
"""

_PAYMENT_COLUMNS = "id, registration_id, utr_number, payment_date, screenshot_content_type"


def _row_to_registration(row: tuple) -> Registration:
    return Registration(
        id=row[0],
        student_name=row[1],
        college=row[2],
        email=row[3],
        event=row[4],
        amount=row[5],
        registration_date=row[6],
        is_approved=row[7],
        is_rejected=row[8],
        delivery_status=DeliveryStatus(row[9]),
    )


def _row_to_payment(row: tuple) -> Payment:
    return Payment(
        id=row[0],
        registration_id=row[1],
        utr_number=row[2],
        payment_date=row[3],
        screenshot_content_type=row[4],
    )


class PostgresRegistrationRepository:
    """
    Implements RegistrationRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    async def add_registration(self, registration: Registration) -> None:
        sql = f"""
            INSERT INTO registrations ({_REGISTRATION_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        params = (
            registration.id,
            registration.student_name,
            registration.college,
            registration.email,
            registration.event,
            registration.amount,
            registration.registration_date,
            registration.is_approved,
            registration.is_rejected,
            registration.delivery_status.value,
        )
        async with self._pool.connection() as conn:
            await conn.execute(sql, params)

    async def get_registration(self, registration_id: str) -> Registration | None:
        sql = f"SELECT {_REGISTRATION_COLUMNS} FROM registrations WHERE id = %s"
        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(sql, (registration_id,))
            row = await cursor.fetchone()
        return _row_to_registration(row) if row is not None else None

    async def list_registrations(self) -> list[Registration]:
        sql = f"""
            SELECT {_REGISTRATION_COLUMNS}
            FROM registrations
            ORDER BY registration_date DESC
        """
        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(sql)
            rows = await cursor.fetchall()
        return [_row_to_registration(row) for row in rows]

    async def transition(
        self,
        registration_id: str,
        from_state: RegistrationState,
        to_state: RegistrationState,
    ) -> bool:
        """
        Move a registration between review states.

        The WHERE clause matches the expected current flags, making the
        read-modify-write atomic at the row level.

        Returns:
            True if the row was updated, False if its state had changed
        """
        sql = """
            UPDATE registrations
            SET is_approved = %s, is_rejected = %s
            WHERE id = %s AND is_approved = %s AND is_rejected = %s
        """
        new_approved, new_rejected = to_state.flags
        old_approved, old_rejected = from_state.flags

        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(
                sql, (new_approved, new_rejected, registration_id, old_approved, old_rejected)
            )
            return cursor.rowcount == 1

    async def set_delivery_status(self, registration_id: str, status: DeliveryStatus) -> None:
        sql = "UPDATE registrations SET delivery_status = %s WHERE id = %s"
        async with self._pool.connection() as conn:
            await conn.execute(sql, (status.value, registration_id))

    async def add_payment(self, payment: Payment, screenshot: Screenshot) -> bool:
        """
        Insert payment proof with its inline screenshot.

        The UNIQUE constraint on registration_id enforces one payment per
        registration; a violation is reported as False, not an exception.
        """
        sql = """
            INSERT INTO payments
                (id, registration_id, utr_number, payment_date, screenshot, screenshot_content_type)
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (registration_id) DO NOTHING
        """
        params = (
            payment.id,
            payment.registration_id,
            payment.utr_number,
            payment.payment_date,
            screenshot.content,
            screenshot.content_type,
        )
        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(sql, params)
            return cursor.rowcount == 1

    async def get_payment_for_registration(self, registration_id: str) -> Payment | None:
        sql = f"SELECT {_PAYMENT_COLUMNS} FROM payments WHERE registration_id = %s"
        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(sql, (registration_id,))
            row = await cursor.fetchone()
        return _row_to_payment(row) if row is not None else None

    async def list_payments(self, registration_ids: list[str]) -> list[Payment]:
        if not registration_ids:
            return []
        sql = f"SELECT {_PAYMENT_COLUMNS} FROM payments WHERE registration_id = ANY(%s)"
        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(sql, (registration_ids,))
            rows = await cursor.fetchall()
        return [_row_to_payment(row) for row in rows]

    async def get_screenshot(self, payment_id: str) -> Screenshot | None:
        sql = "SELECT screenshot, screenshot_content_type FROM payments WHERE id = %s"
        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(sql, (payment_id,))
            row = await cursor.fetchone()
        if row is None:
            return None
        return Screenshot(content=bytes(row[0]), content_type=row[1])


class PostgresAdminRepository:
    """Implements AdminRepository protocol via psycopg3."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def add_admin(self, admin: Admin) -> bool:
        sql = "INSERT INTO admins (id, username, password_hash) VALUES (%s, %s, %s)"
        try:
            async with self._pool.connection() as conn:
                await conn.execute(sql, (admin.id, admin.username, admin.password_hash))
        except UniqueViolation:
            return False
        return True

    async def get_admin_by_username(self, username: str) -> Admin | None:
        sql = "SELECT id, username, password_hash FROM admins WHERE username = %s"
        async with self._pool.connection() as conn, conn.cursor() as cursor:
            await cursor.execute(sql, (username,))
            row = await cursor.fetchone()
        if row is None:
            return None
        return Admin(id=row[0], username=row[1], password_hash=row[2])


async def run_migrations(pool: AsyncConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
