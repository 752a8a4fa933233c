"""One-time passcodes sent by email.

A code is stored per normalized email with an explicit expiry. Requesting
a new code replaces the previous one (last writer wins). A code verifies
at most once: a successful check deletes it in the same step.

Two stores are provided:
- RedisOTPStore: SET with EX, compare-and-delete under WATCH/MULTI
- InMemoryOTPStore: dict guarded by a lock, used when Redis is unavailable
"""

import hmac
import logging
import secrets
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from redis import Redis
from redis.exceptions import RedisError, WatchError

from domain.accounts import UserDirectoryPort
from domain.errors import (
    InvalidCodeError,
    MismatchError,
    OTPDeliveryError,
    ValidationError,
)
from domain.notifications import NotificationPort, templates
from observability import metrics

logger = logging.getLogger(__name__)

OTP_KEY_PREFIX = "otp:"

# Attempts at a compare-and-delete before treating concurrent writers as a miss
_MAX_WATCH_RETRIES = 3


def _codes_match(code: str, candidate: str) -> bool:
    # compare_digest only accepts ASCII str; compare UTF-8 bytes instead
    return hmac.compare_digest(code.encode("utf-8"), candidate.encode("utf-8"))


def generate_code() -> str:
    """Six-digit code in the range 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class OTPStore(ABC):
    """Keyed storage for codes with expiry."""

    @abstractmethod
    def put(self, key: str, code: str, ttl_seconds: int) -> None:
        """Store a code, replacing any earlier one for the key."""
        pass

    @abstractmethod
    def consume(self, key: str, candidate: str) -> bool:
        """Delete and return True if a live code for the key equals candidate."""
        pass

    @abstractmethod
    def discard(self, key: str, code: str) -> None:
        """Delete the key only while it still holds this code."""
        pass


class InMemoryOTPStore(OTPStore):
    """Process-local store. Codes do not survive restarts or span instances."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._codes: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def put(self, key: str, code: str, ttl_seconds: int) -> None:
        with self._lock:
            self._purge_expired()
            self._codes[key] = (code, self._clock() + ttl_seconds)

    def consume(self, key: str, candidate: str) -> bool:
        with self._lock:
            entry = self._codes.get(key)
            if entry is None:
                return False
            code, expires_at = entry
            if expires_at <= self._clock():
                del self._codes[key]
                return False
            if not _codes_match(code, candidate):
                return False
            del self._codes[key]
            return True

    def discard(self, key: str, code: str) -> None:
        with self._lock:
            entry = self._codes.get(key)
            if entry is not None and entry[0] == code:
                del self._codes[key]

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._codes.items() if expires_at <= now]
        for key in expired:
            del self._codes[key]


class RedisOTPStore(OTPStore):
    """Redis-backed store shared by every API instance."""

    def __init__(self, redis: Redis):
        self.redis = redis

    def put(self, key: str, code: str, ttl_seconds: int) -> None:
        self.redis.set(OTP_KEY_PREFIX + key, code, ex=ttl_seconds)

    def consume(self, key: str, candidate: str) -> bool:
        return self._compare_and_delete(OTP_KEY_PREFIX + key, candidate, constant_time=True)

    def discard(self, key: str, code: str) -> None:
        self._compare_and_delete(OTP_KEY_PREFIX + key, code, constant_time=False)

    def _compare_and_delete(self, redis_key: str, expected: str, constant_time: bool) -> bool:
        with self.redis.pipeline() as pipe:
            for _ in range(_MAX_WATCH_RETRIES):
                try:
                    pipe.watch(redis_key)
                    stored = pipe.get(redis_key)
                    if stored is None:
                        pipe.unwatch()
                        return False
                    matches = (
                        _codes_match(stored, expected) if constant_time else stored == expected
                    )
                    if not matches:
                        pipe.unwatch()
                        return False
                    pipe.multi()
                    pipe.delete(redis_key)
                    pipe.execute()
                    return True
                except WatchError:
                    # Key replaced between GET and DELETE; re-read it
                    continue
        return False


def build_otp_store(redis: Optional[Redis]) -> OTPStore:
    if redis is None:
        logger.warning("Redis unavailable; one-time passcodes kept in process memory")
        return InMemoryOTPStore()
    return RedisOTPStore(redis)


class OTPService:
    """Issues and verifies one-time passcodes.

    Args:
        store: Where codes live until used or expired
        users: Used to check a username matches the email
        notifier: Sends the code to the user
        ttl_seconds: Lifetime of a code
    """

    def __init__(
        self,
        store: OTPStore,
        users: UserDirectoryPort,
        notifier: NotificationPort,
        ttl_seconds: int = 300,
    ):
        self.store = store
        self.users = users
        self.notifier = notifier
        self.ttl_seconds = ttl_seconds

    def request(self, email: str, username: Optional[str] = None) -> None:
        """Generate, store and send a code for the email.

        Raises:
            ValidationError: Email missing
            MismatchError: Username given but does not belong to the email
            OTPDeliveryError: Code could not be handed to the mail relay
        """
        key = normalize_email(email)
        if not key:
            raise ValidationError("Email is required")

        username = (username or "").strip()
        if username:
            user = self.users.get_by_username(username)
            if user is None or normalize_email(user.email) != key:
                metrics.otp_events_total.labels(event="request", outcome="mismatch").inc()
                raise MismatchError("Username and email do not match")

        code = generate_code()
        try:
            self.store.put(key, code, self.ttl_seconds)
        except RedisError as e:
            metrics.otp_events_total.labels(event="request", outcome="store_error").inc()
            logger.error(f"Failed to store OTP: {e}")
            raise OTPDeliveryError(f"Failed to store OTP: {e}")

        try:
            self.notifier.send(templates.otp_code(key, code, self.ttl_seconds))
        except Exception as e:
            # An undelivered code must not stay valid
            self._withdraw(key, code)
            metrics.otp_events_total.labels(event="request", outcome="send_failed").inc()
            logger.error(f"Failed to send OTP: {e}")
            raise OTPDeliveryError(f"Failed to send OTP: {e}")

        metrics.otp_events_total.labels(event="request", outcome="sent").inc()
        logger.info("OTP issued", extra={"ttl_seconds": self.ttl_seconds})

    def verify(self, email: str, candidate: str) -> None:
        """Check a code and consume it.

        Raises:
            InvalidCodeError: No live code for the email, or it does not match
        """
        key = normalize_email(email)
        candidate = (candidate or "").strip()
        if not key or not candidate:
            metrics.otp_events_total.labels(event="verify", outcome="invalid").inc()
            raise InvalidCodeError("Invalid OTP")

        try:
            verified = self.store.consume(key, candidate)
        except RedisError as e:
            logger.error(f"Failed to verify OTP: {e}")
            verified = False

        if not verified:
            metrics.otp_events_total.labels(event="verify", outcome="invalid").inc()
            raise InvalidCodeError("Invalid OTP")

        metrics.otp_events_total.labels(event="verify", outcome="verified").inc()

    def _withdraw(self, key: str, code: str) -> None:
        try:
            self.store.discard(key, code)
        except RedisError as e:
            logger.error(f"Failed to withdraw undelivered OTP: {e}")
