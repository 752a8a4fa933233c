"""Admin SQLAlchemy model"""

from sqlalchemy import Column, Text

from .base import Base


class Admin(Base):
    """Back-office administrator credentials.

    Kept separate from `users` to match the existing admin login surface.
    The password column holds an Argon2id hash.
    """
    __tablename__ = "admins"

    username = Column(Text, primary_key=True)
    password = Column(Text, nullable=False)
