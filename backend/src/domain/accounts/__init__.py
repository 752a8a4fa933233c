"""Accounts domain module - user directory port"""

from .ports import UserDirectoryPort, UserRecord

__all__ = ["UserDirectoryPort", "UserRecord"]
