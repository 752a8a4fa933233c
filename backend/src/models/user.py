"""User SQLAlchemy model"""

from sqlalchemy import Column, Integer, Text, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.orm import validates
import re

from .base import Base, UTCDateTime, utcnow


class User(Base):
    """User model representing people taking part in the document workflow.

    The role decides which workflow transitions a user may perform.
    Passwords are hashed using Argon2id.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    username = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    password = Column(Text, nullable=False)  # Argon2id hash, never plaintext
    phone = Column(Text, nullable=True)
    role = Column(Text, nullable=False, server_default="UPLOADER")
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "role IN ('UPLOADER', 'APPROVER', 'REVIEWER', 'ADMIN')",
            name='ck_users_role'
        ),
        UniqueConstraint('username', name='uq_users_username'),
        UniqueConstraint('email', name='uq_users_email'),
        Index('ix_users_role', 'role'),
    )

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()
