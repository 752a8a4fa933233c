"""SQLAlchemy Models for ReviewFlow"""

from .base import Base
from .user import User
from .admin import Admin
from .document import Document

__all__ = [
    "Base",
    "User",
    "Admin",
    "Document",
]
