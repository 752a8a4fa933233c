"""User and admin repository for database operations"""

from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from auth.roles import UserRole
from domain.accounts import UserDirectoryPort
from models.admin import Admin
from models.user import User


class SqlAlchemyUserRepository(UserDirectoryPort):
    """Repository for users and admins tables.

    Backs both the workflow's user directory and account management.
    Emails are stored lower-cased, so lookups compare lower-cased values.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()

    def emails_for_role(self, role: UserRole) -> List[str]:
        query = select(User.email).where(User.role == role.value).order_by(User.id)
        return list(self.db.execute(query).scalars().all())

    def exists(self, username: str, email: str) -> bool:
        """True if the username or the email is already taken."""
        query = select(func.count(User.id)).where(
            or_(User.username == username, User.email == email.strip().lower())
        )
        return self.db.execute(query).scalar_one() > 0

    def add(self, user: User) -> User:
        """Insert a user.

        Raises:
            IntegrityError: If the username or email is already taken
        """
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def update_password(self, user: User, password_hash: str) -> None:
        user.password = password_hash
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def get_admin(self, username: str) -> Optional[Admin]:
        return self.db.get(Admin, username)
