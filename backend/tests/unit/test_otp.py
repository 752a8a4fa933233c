"""Unit tests for one-time passcodes

Tests cover:
- Code format
- In-memory store expiry, replacement and single use
- Redis store commands (mocked client)
- OTPService request/verify flows, including undelivered codes
"""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from auth.otp import (
    InMemoryOTPStore,
    OTPService,
    RedisOTPStore,
    build_otp_store,
    generate_code,
    normalize_email,
)
from auth.roles import UserRole
from domain.errors import InvalidCodeError, MismatchError, OTPDeliveryError, ValidationError
from domain.notifications import RecordingNotifier


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FailingNotifier(RecordingNotifier):
    def send(self, message):
        raise RuntimeError("relay down")


class TestGenerateCode:

    def test_code_is_six_digits(self):
        for _ in range(50):
            code = generate_code()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999

    def test_normalize_email(self):
        assert normalize_email("  Alice@Example.COM ") == "alice@example.com"
        assert normalize_email(None) == ""


class TestInMemoryOTPStore:
    """Test the process-local store"""

    def test_consume_matching_code(self):
        store = InMemoryOTPStore()
        store.put("a@example.com", "123456", 300)

        assert store.consume("a@example.com", "123456") is True

    def test_code_is_single_use(self):
        store = InMemoryOTPStore()
        store.put("a@example.com", "123456", 300)

        assert store.consume("a@example.com", "123456") is True
        assert store.consume("a@example.com", "123456") is False

    def test_wrong_code_keeps_live_code(self):
        store = InMemoryOTPStore()
        store.put("a@example.com", "123456", 300)

        assert store.consume("a@example.com", "654321") is False
        assert store.consume("a@example.com", "123456") is True

    def test_expired_code_rejected(self):
        clock = FakeClock()
        store = InMemoryOTPStore(clock=clock)
        store.put("a@example.com", "123456", 300)

        clock.now += 300
        assert store.consume("a@example.com", "123456") is False

    def test_newer_code_replaces_older(self):
        store = InMemoryOTPStore()
        store.put("a@example.com", "111111", 300)
        store.put("a@example.com", "222222", 300)

        assert store.consume("a@example.com", "111111") is False
        assert store.consume("a@example.com", "222222") is True

    def test_discard_only_removes_matching_code(self):
        store = InMemoryOTPStore()
        store.put("a@example.com", "222222", 300)

        store.discard("a@example.com", "111111")
        assert store.consume("a@example.com", "222222") is True

    def test_non_ascii_candidate_is_a_mismatch(self):
        store = InMemoryOTPStore()
        store.put("a@example.com", "123456", 300)

        assert store.consume("a@example.com", "12345\u00e9") is False
        assert store.consume("a@example.com", "123456") is True


class TestRedisOTPStore:
    """Test Redis commands issued by the shared store"""

    def test_put_sets_key_with_expiry(self):
        redis = MagicMock()
        RedisOTPStore(redis).put("a@example.com", "123456", 300)

        redis.set.assert_called_once_with("otp:a@example.com", "123456", ex=300)

    def test_consume_deletes_matching_code(self):
        redis = MagicMock()
        pipe = redis.pipeline.return_value.__enter__.return_value
        pipe.get.return_value = "123456"

        assert RedisOTPStore(redis).consume("a@example.com", "123456") is True
        pipe.watch.assert_called_once_with("otp:a@example.com")
        pipe.delete.assert_called_once_with("otp:a@example.com")
        pipe.execute.assert_called_once()

    def test_consume_missing_code(self):
        redis = MagicMock()
        pipe = redis.pipeline.return_value.__enter__.return_value
        pipe.get.return_value = None

        assert RedisOTPStore(redis).consume("a@example.com", "123456") is False
        pipe.delete.assert_not_called()

    def test_consume_wrong_code_does_not_delete(self):
        redis = MagicMock()
        pipe = redis.pipeline.return_value.__enter__.return_value
        pipe.get.return_value = "999999"

        assert RedisOTPStore(redis).consume("a@example.com", "123456") is False
        pipe.delete.assert_not_called()

    def test_consume_non_ascii_code_does_not_delete(self):
        redis = MagicMock()
        pipe = redis.pipeline.return_value.__enter__.return_value
        pipe.get.return_value = "123456"

        assert RedisOTPStore(redis).consume("a@example.com", "12345\u00e9") is False
        pipe.delete.assert_not_called()

    def test_build_otp_store_falls_back_to_memory(self):
        assert isinstance(build_otp_store(None), InMemoryOTPStore)
        assert isinstance(build_otp_store(MagicMock()), RedisOTPStore)


class TestOTPService:
    """Test issuing and verifying codes"""

    @pytest.fixture
    def service(self, user_repo, notifier):
        return OTPService(InMemoryOTPStore(), user_repo, notifier, ttl_seconds=300)

    def _sent_code(self, notifier) -> str:
        message = notifier.sent[-1]
        return message.text.split("Your OTP is: ")[1].split("\n")[0]

    def test_request_sends_code_to_normalized_email(self, service, notifier):
        service.request("  Dave@Example.com ")

        assert len(notifier.sent) == 1
        assert notifier.sent[0].recipients == ["dave@example.com"]
        assert notifier.sent[0].template == "otp_code"

    def test_verify_sent_code(self, service, notifier):
        service.request("dave@example.com")
        code = self._sent_code(notifier)

        service.verify("DAVE@example.com", code)

    def test_verify_twice_fails(self, service, notifier):
        service.request("dave@example.com")
        code = self._sent_code(notifier)
        service.verify("dave@example.com", code)

        with pytest.raises(InvalidCodeError, match="Invalid OTP"):
            service.verify("dave@example.com", code)

    def test_verify_without_request(self, service):
        with pytest.raises(InvalidCodeError):
            service.verify("dave@example.com", "123456")

    def test_verify_non_digit_code(self, service, notifier):
        service.request("dave@example.com")

        with pytest.raises(InvalidCodeError):
            service.verify("dave@example.com", "12345\u00e9")

    def test_request_requires_email(self, service):
        with pytest.raises(ValidationError, match="Email is required"):
            service.request("   ")

    def test_request_with_matching_username(self, service, notifier, make_user):
        make_user("dave", UserRole.UPLOADER, email="dave@example.com")

        service.request("Dave@example.com", username="dave")
        assert len(notifier.sent) == 1

    def test_request_with_mismatched_username(self, service, notifier, make_user):
        make_user("dave", UserRole.UPLOADER, email="dave@example.com")

        with pytest.raises(MismatchError, match="do not match"):
            service.request("someone@example.com", username="dave")
        assert notifier.sent == []

    def test_request_with_unknown_username(self, service):
        with pytest.raises(MismatchError):
            service.request("dave@example.com", username="ghost")

    def test_undelivered_code_is_withdrawn(self, user_repo):
        store = InMemoryOTPStore()
        service = OTPService(store, user_repo, FailingNotifier())

        with pytest.raises(OTPDeliveryError):
            service.request("dave@example.com")
        assert store._codes == {}

    def test_store_outage_reported_as_delivery_failure(self, user_repo, notifier):
        store = MagicMock()
        store.put.side_effect = RedisConnectionError("down")
        service = OTPService(store, user_repo, notifier)

        with pytest.raises(OTPDeliveryError):
            service.request("dave@example.com")
        assert notifier.sent == []
