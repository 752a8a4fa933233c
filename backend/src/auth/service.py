"""Account operations: signup, login, admin login, password reset."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from domain.errors import AuthError, ConflictError, NotFoundError, ValidationError
from infrastructure.repositories.user_repository import SqlAlchemyUserRepository
from models.user import User
from observability import metrics
from .password import hash_password, needs_rehash, verify_password
from .roles import UserRole

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT_MESSAGE = "Username already exists or error occurred."


class AccountService:
    """Manages user accounts and checks credentials."""

    def __init__(self, users: SqlAlchemyUserRepository):
        self.users = users

    def signup(
        self,
        username: str,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None,
        role: UserRole = UserRole.UPLOADER,
    ) -> User:
        """Create an account.

        Raises:
            ValidationError: Missing username or password, or malformed email
            ConflictError: Username or email already taken
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()
        if not username:
            raise ValidationError("Username is required")
        if not password:
            raise ValidationError("Password is required")

        if self.users.exists(username, email):
            raise ConflictError(DUPLICATE_ACCOUNT_MESSAGE)

        try:
            user = User(
                first_name=first_name,
                last_name=last_name,
                username=username,
                email=email,
                password=hash_password(password),
                phone=phone,
                role=role.value,
            )
        except ValueError as e:
            raise ValidationError(str(e))

        try:
            self.users.add(user)
        except IntegrityError:
            # Lost a race with a concurrent signup
            raise ConflictError(DUPLICATE_ACCOUNT_MESSAGE)

        logger.info(f"Account created for {username}", extra={"role": role.value})
        return user

    def login(self, username: str, password: str) -> User:
        """Check user credentials.

        Raises:
            AuthError: Unknown username or wrong password
        """
        user = self.users.get_by_username((username or "").strip())
        if user is None or not verify_password(password, user.password):
            metrics.login_attempts_total.labels(surface="user", outcome="failure").inc()
            raise AuthError("Invalid username or password")

        if needs_rehash(user.password):
            self.users.update_password(user, hash_password(password))

        metrics.login_attempts_total.labels(surface="user", outcome="success").inc()
        return user

    def admin_login(self, username: str, password: str) -> None:
        """Check admin credentials against the hashed admins table.

        Raises:
            AuthError: Unknown admin or wrong password
        """
        admin = self.users.get_admin((username or "").strip())
        if admin is None or not verify_password(password, admin.password):
            metrics.login_attempts_total.labels(surface="admin", outcome="failure").inc()
            raise AuthError("Invalid admin credentials")

        metrics.login_attempts_total.labels(surface="admin", outcome="success").inc()

    def reset_password(self, username: str, email: str, new_password: str) -> None:
        """Set a new password for a user identified by username and email.

        Raises:
            ValidationError: Empty new password
            NotFoundError: No user with that username and email
        """
        if not new_password:
            raise ValidationError("New password is required")

        user = self.users.get_by_username((username or "").strip())
        if user is None or user.email != (email or "").strip().lower():
            raise NotFoundError("User not found or email does not match")

        self.users.update_password(user, hash_password(new_password))
        logger.info(f"Password reset for {user.username}")
