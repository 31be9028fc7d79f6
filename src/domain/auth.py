"""
Admin authentication domain service.

Handles admin account creation, password login and bearer-token
verification for the admin workflow endpoints.

Security Design:
- Passwords are stored as bcrypt hashes (cost factor from settings).
- Login always runs bcrypt.checkpw(), against a dummy hash when the
  username is unknown, so response time does not reveal which admins exist.
- Tokens are itsdangerous URLSafeTimedSerializer payloads: HMAC-signed
  with the application secret, carrying the admin id and username, and
  rejected once older than token_ttl_seconds.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .exceptions import (
    ConflictError,
    InvalidCredentials,
    InvalidToken,
    MissingToken,
    ValidationError,
)
from .ports import Admin, AdminRepository

logger = logging.getLogger(__name__)

# Pre-computed bcrypt hash for timing oracle prevention.
# Used when the username doesn't exist to ensure constant-time password comparison.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))

_TOKEN_SALT = "admin-auth"
MIN_PASSWORD_LENGTH = 8


@dataclass
class AdminIdentity:
    """Verified identity carried by an admin token."""

    id: str
    username: str


@dataclass
class AdminAuthService:
    """Domain service for admin registration, login and token verification."""

    repository: AdminRepository
    secret_key: str
    token_ttl_seconds: int = 3600
    bcrypt_cost: int = 10

    @property
    def _serializer(self) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(self.secret_key, salt=_TOKEN_SALT)

    async def register_admin(self, username: str, password: str) -> Admin:
        """
        Create a new admin account.

        Raises:
            ValidationError: If username is blank or password too short
            ConflictError: If the username is already taken
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        password_hash = await asyncio.to_thread(self._hash_password, password)
        admin = Admin(id=uuid.uuid4().hex, username=username, password_hash=password_hash)

        if not await self.repository.add_admin(admin):
            raise ConflictError("Username already taken")

        logger.info("Admin %s registered", username)
        return admin

    async def login(self, username: str, password: str) -> str:
        """
        Verify credentials and issue a signed token.

        Raises:
            InvalidCredentials: Unknown username or wrong password (same message for both)
        """
        admin = await self.repository.get_admin_by_username((username or "").strip())

        # CRITICAL: Always run bcrypt so unknown usernames take as long as wrong passwords
        stored_hash = admin.password_hash.encode() if admin else _DUMMY_BCRYPT_HASH
        password_valid = await asyncio.to_thread(
            bcrypt.checkpw, (password or "").encode(), stored_hash
        )

        if admin is None or not password_valid:
            logger.info("Failed admin login for %r", username)
            raise InvalidCredentials("Invalid credentials")

        logger.info("Admin %s logged in", admin.username)
        return self.issue_token(admin)

    def issue_token(self, admin: Admin) -> str:
        """Sign a token carrying the admin's id and username."""
        return self._serializer.dumps({"id": admin.id, "username": admin.username})

    def authenticate(self, token: str | None) -> AdminIdentity:
        """
        Verify a bearer token.

        Raises:
            MissingToken: If no token was supplied
            InvalidToken: If the token is malformed, tampered with or expired
        """
        if not token:
            raise MissingToken("No token provided")

        try:
            data = self._serializer.loads(token, max_age=self.token_ttl_seconds)
        except SignatureExpired:
            raise InvalidToken("Token expired") from None
        except BadSignature:
            raise InvalidToken("Invalid token") from None

        if not isinstance(data, dict) or "id" not in data or "username" not in data:
            raise InvalidToken("Invalid token")

        return AdminIdentity(id=data["id"], username=data["username"])

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
