"""User directory port - who a username is, and who holds a role.

The workflow engine only needs to resolve actors and notification
recipients; account creation and credentials live in the auth module.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol

from auth.roles import UserRole


class UserRecord(Protocol):
    """Read shape of a persisted user."""
    username: str
    email: str
    role: str


class UserDirectoryPort(ABC):
    """Lookup operations over users."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[UserRecord]:
        pass

    def email_for(self, username: str) -> Optional[str]:
        """Email of a user, or None when the username does not resolve."""
        user = self.get_by_username(username)
        return user.email if user else None

    @abstractmethod
    def emails_for_role(self, role: UserRole) -> List[str]:
        """Emails of every user holding the role."""
        pass
