"""Password hashing and verification using Argon2id

Both user and admin credentials are hashed with Argon2id using OWASP-recommended
parameters and a global PASSWORD_PEPPER for additional security.

OWASP Parameters:
- Memory cost: 65536 KB (64 MB)
- Time cost: 3 iterations
- Parallelism: 4 threads
"""

from argon2 import PasswordHasher, Type
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from config import get_settings


_hasher = PasswordHasher(
    memory_cost=65536,  # 64 MB
    time_cost=3,
    parallelism=4,
    hash_len=32,
    salt_len=16,
    type=Type.ID  # Argon2id variant
)


def _get_pepper() -> str:
    """Get PASSWORD_PEPPER from settings (environment or .env file).

    Raises:
        ValueError: If PASSWORD_PEPPER is empty
    """
    pepper = get_settings().PASSWORD_PEPPER
    if not pepper:
        raise ValueError("PASSWORD_PEPPER is not set")
    return pepper


def hash_password(password: str) -> str:
    """Hash a password using Argon2id with global pepper.

    The pepper is server-side only and never stored in the database, so a
    leaked users or admins table alone is not enough to mount an offline attack.

    Args:
        password: Plain text password to hash

    Returns:
        str: Argon2id hash string (format: $argon2id$v=19$m=65536,t=3,p=4$...$...)

    Raises:
        ValueError: If PASSWORD_PEPPER is not set or password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")

    return _hasher.hash(password + _get_pepper())


def verify_password(password: str, hash: str) -> bool:
    """Verify a password against an Argon2id hash.

    A stored value that is not an Argon2 hash (e.g. a legacy plaintext
    admin password) never verifies.

    Raises:
        ValueError: If PASSWORD_PEPPER is not set
    """
    if not password or not hash:
        return False

    try:
        _hasher.verify(hash, password + _get_pepper())
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(hash: str) -> bool:
    """True if the hash was made with weaker parameters than the current ones."""
    try:
        return _hasher.check_needs_rehash(hash)
    except InvalidHashError:
        return True
