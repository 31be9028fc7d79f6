"""
API routes package.

Contains the public student-facing routes and the token-protected
admin review routes.
"""

from src.api.routes.admin import router as admin_router
from src.api.routes.public import router as public_router

__all__ = ["admin_router", "public_router"]
