#!/usr/bin/env python
"""Seed script to create the admin login and workflow role accounts.

Run once during initial setup. Signup through the API only creates
uploaders, so approvers and reviewers are created here.

Usage:
    python backend/scripts/seed_admin.py admin
    python backend/scripts/seed_admin.py user --username bob --email bob@example.com --role APPROVER

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    PASSWORD_PEPPER: Password hashing pepper (required)
    ADMIN_USERNAME: Username for the admin login (default: admin)
    ADMIN_PASSWORD: Password for the admin login (required for `admin`)
    SEED_PASSWORD: Password for `user` when --password is not given
"""

import argparse
import os
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from auth.password import hash_password  # noqa: E402
from auth.roles import UserRole  # noqa: E402
from auth.service import AccountService  # noqa: E402
from database import get_db_session  # noqa: E402
from domain.errors import WorkflowError  # noqa: E402
from infrastructure.repositories import SqlAlchemyUserRepository  # noqa: E402
from models.admin import Admin  # noqa: E402


def create_admin(session) -> None:
    username = os.getenv("ADMIN_USERNAME", "admin")
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        print("ERROR: ADMIN_PASSWORD environment variable is required")
        sys.exit(1)

    if session.get(Admin, username):
        print(f"ERROR: Admin {username} already exists")
        sys.exit(1)

    session.add(Admin(username=username, password=hash_password(password)))
    session.commit()

    print("SUCCESS: Admin created")
    print(f"  Username: {username}")


def create_user(session, args) -> None:
    password = args.password or os.getenv("SEED_PASSWORD")
    if not password:
        print("ERROR: --password or SEED_PASSWORD is required")
        sys.exit(1)

    accounts = AccountService(SqlAlchemyUserRepository(session))
    try:
        user = accounts.signup(
            username=args.username,
            email=args.email,
            password=password,
            first_name=args.first_name,
            last_name=args.last_name,
            role=UserRole(args.role),
        )
    except WorkflowError as e:
        print(f"ERROR: {e.message}")
        sys.exit(1)

    print("SUCCESS: User created")
    print(f"  ID:       {user.id}")
    print(f"  Username: {user.username}")
    print(f"  Email:    {user.email}")
    print(f"  Role:     {user.role}")


def main():
    parser = argparse.ArgumentParser(description="Seed ReviewFlow accounts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("admin", help="Create the admin login")

    user_parser = subparsers.add_parser("user", help="Create a workflow user")
    user_parser.add_argument("--username", required=True)
    user_parser.add_argument("--email", required=True)
    user_parser.add_argument("--password")
    user_parser.add_argument("--first-name", dest="first_name")
    user_parser.add_argument("--last-name", dest="last_name")
    user_parser.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.UPLOADER.value,
    )

    args = parser.parse_args()

    try:
        with get_db_session() as session:
            if args.command == "admin":
                create_admin(session)
            else:
                create_user(session, args)
    except SQLAlchemyError as e:
        print(f"ERROR: Database error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
