"""Tests for one-time password issuance, verification and SMS delivery."""

import asyncio
import re
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

from story_contest.core.config import OtpConfig
from story_contest.core.errors import (
    InvalidArgumentError,
    InvalidPhoneError,
    OtpExpiredError,
    OtpMismatchError,
    OtpNotFoundError,
)
from story_contest.services.otp import (
    FakeSmsSender,
    OtpService,
    TwilioSmsSender,
    create_sms_sender,
    generate_code,
    normalize_phone,
)


class Clock:
    """Settable clock for expiry tests."""

    def __init__(self) -> None:
        self.now = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def sent_code(sender: FakeSmsSender) -> str:
    match = re.search(r"code is: (\d+)", sender.sent[-1].body)
    assert match is not None
    return match.group(1)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def sender():
    return FakeSmsSender()


@pytest.fixture
def service(store, sender, clock):
    return OtpService(OtpConfig(), store.otp_codes, sender, clock=clock)


class TestNormalizePhone:
    """Tests for phone normalization."""

    @pytest.mark.parametrize(
        "raw",
        ["9876543210", "+91 98765 43210", "(987) 654-3210", "0091-9876543210"],
    )
    def test_last_ten_digits(self, raw):
        """Formatting and prefixes are stripped."""
        assert normalize_phone(raw) == "9876543210"

    @pytest.mark.parametrize("raw", ["", "12345", "abc", None])
    def test_too_short(self, raw):
        """Fewer than ten digits is invalid."""
        with pytest.raises(InvalidPhoneError):
            normalize_phone(raw)

    def test_is_invalid_argument(self):
        """Phone errors are argument errors."""
        with pytest.raises(InvalidArgumentError):
            normalize_phone("123")


class TestGenerateCode:
    """Tests for code generation."""

    def test_length(self):
        """Codes have the requested number of digits and no leading zero."""
        for length in (4, 6, 8):
            code = generate_code(length)
            assert len(code) == length
            assert code.isdigit()
            assert code[0] != "0"


class TestOtpService:
    """Tests for OtpService."""

    async def test_request_sends_code(self, service, sender):
        """A request stores a code and texts it with the country prefix."""
        dispatch = await service.request_code("98765 43210")
        assert dispatch.delivered
        assert dispatch.phone == "9876543210"
        assert sender.sent[0].to == "+919876543210"
        assert "Story Seed Studio" in sender.sent[0].body
        assert len(sent_code(sender)) == 6

    async def test_expiry_time(self, service, clock):
        """Codes expire five minutes after issue by default."""
        dispatch = await service.request_code("9876543210")
        assert dispatch.expires_at == clock.now + timedelta(minutes=5)

    async def test_verify_success_consumes(self, service, sender):
        """A correct code verifies once."""
        await service.request_code("9876543210")
        code = sent_code(sender)
        await service.verify_code("+91 9876543210", code)
        with pytest.raises(OtpNotFoundError):
            await service.verify_code("9876543210", code)

    async def test_mismatch_keeps_code(self, service, sender):
        """A wrong code leaves the outstanding code valid."""
        await service.request_code("9876543210")
        code = sent_code(sender)
        wrong = "1" * 6 if code != "1" * 6 else "2" * 6
        with pytest.raises(OtpMismatchError):
            await service.verify_code("9876543210", wrong)
        await service.verify_code("9876543210", code)

    async def test_expired(self, service, sender, clock):
        """Codes past expiry are rejected and removed."""
        await service.request_code("9876543210")
        code = sent_code(sender)
        clock.advance(minutes=5, seconds=1)
        with pytest.raises(OtpExpiredError):
            await service.verify_code("9876543210", code)
        with pytest.raises(OtpNotFoundError):
            await service.verify_code("9876543210", code)

    async def test_valid_at_boundary(self, service, sender, clock):
        """A code is still accepted exactly at its expiry instant."""
        await service.request_code("9876543210")
        clock.advance(minutes=5)
        await service.verify_code("9876543210", sent_code(sender))

    async def test_new_request_replaces_old(self, service, sender):
        """Only the newest code is outstanding."""
        await service.request_code("9876543210")
        first = sent_code(sender)
        await service.request_code("9876543210")
        second = sent_code(sender)

        record = await service.repository.latest_code("9876543210")
        assert record.code == second

        await service.verify_code("9876543210", second)
        with pytest.raises(OtpNotFoundError):
            await service.verify_code("9876543210", first)

    async def test_concurrent_verification_single_use(self, service, sender):
        """Two overlapping verifications of one code succeed only once."""
        await service.request_code("9876543210")
        code = sent_code(sender)

        results = await asyncio.gather(
            service.verify_code("9876543210", code),
            service.verify_code("9876543210", code),
            return_exceptions=True,
        )

        assert results.count(None) == 1
        assert sum(isinstance(r, OtpNotFoundError) for r in results) == 1

    async def test_delete_reports_missing(self, service, store):
        """Deleting an already consumed code reports False."""
        await service.request_code("9876543210")
        record = await store.otp_codes.latest_code("9876543210")
        assert await store.otp_codes.delete_code(record.id)
        assert not await store.otp_codes.delete_code(record.id)

    async def test_not_requested(self, service):
        """Verifying without a request fails."""
        with pytest.raises(OtpNotFoundError):
            await service.verify_code("9876543210", "123456")

    async def test_delivery_failure_reported(self, store, clock):
        """A failed SMS still stores the code but reports delivered=False."""
        service = OtpService(OtpConfig(), store.otp_codes, FakeSmsSender(fail=True), clock=clock)
        dispatch = await service.request_code("9876543210")
        assert not dispatch.delivered
        assert await store.otp_codes.latest_code("9876543210") is not None

    async def test_invalid_phone(self, service, sender):
        """Malformed phone numbers are rejected before sending."""
        with pytest.raises(InvalidPhoneError):
            await service.request_code("12345")
        assert sender.sent == []


class TestTwilioSmsSender:
    """Tests for the Twilio client against a mock transport."""

    async def test_success(self):
        """Accepted messages return True with auth and form fields."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"sid": "SM1", "status": "queued"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sender = TwilioSmsSender("AC1", "secret", "+15550001", client=client)
        assert await sender.send("+919876543210", "hello")
        await sender.close()

        request = seen[0]
        assert request.url.path == "/2010-04-01/Accounts/AC1/Messages.json"
        assert request.headers["authorization"].startswith("Basic ")
        body = request.content.decode()
        assert "To=%2B919876543210" in body
        assert "Body=hello" in body

    async def test_client_error(self):
        """A 4xx response is not retried and reports False."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"message": "bad number"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sender = TwilioSmsSender("AC1", "secret", "+15550001", client=client)
        assert not await sender.send("+910000000000", "hello")
        assert len(calls) == 1
        await sender.close()

    async def test_error_code_in_body(self):
        """An error code in a 2xx body reports False."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error_code": 21211, "error_message": "invalid"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sender = TwilioSmsSender("AC1", "secret", "+15550001", client=client)
        assert not await sender.send("+919876543210", "hello")
        await sender.close()


class TestTwilioRetry:
    """Tests for Twilio retry behavior."""

    async def test_retries_transport_error_then_succeeds(self, monkeypatch: pytest.MonkeyPatch):
        """A transient transport error is retried."""
        sender = TwilioSmsSender("AC1", "secret", "+15550001")
        request = httpx.Request("POST", sender.BASE_URL.format(sid="AC1"))
        response_ok = httpx.Response(201, request=request, json={"sid": "SM1"})
        post_mock = AsyncMock(
            side_effect=[httpx.ConnectTimeout("timeout", request=request), response_ok]
        )
        monkeypatch.setattr(sender.client, "post", post_mock)

        try:
            assert await sender.send("+919876543210", "hello")
            assert post_mock.await_count == 2
        finally:
            await sender.close()

    async def test_exhausted_retries_report_false(self, monkeypatch: pytest.MonkeyPatch):
        """Persistent server errors give up after three attempts."""
        sender = TwilioSmsSender("AC1", "secret", "+15550001")
        request = httpx.Request("POST", sender.BASE_URL.format(sid="AC1"))
        response_500 = httpx.Response(500, request=request, json={"message": "down"})
        post_mock = AsyncMock(return_value=response_500)
        monkeypatch.setattr(sender.client, "post", post_mock)

        try:
            assert not await sender.send("+919876543210", "hello")
            assert post_mock.await_count == 3
        finally:
            await sender.close()


class TestCreateSmsSender:
    """Tests for create_sms_sender."""

    def test_dry_run(self):
        """Dry runs use the fake sender."""
        assert isinstance(create_sms_sender(OtpConfig(), dry_run=True), FakeSmsSender)

    def test_configured(self):
        """Configured credentials build a Twilio sender."""
        config = OtpConfig(
            twilio_account_sid="AC1",
            twilio_auth_token="t",
            twilio_phone_number="+1555",
        )
        assert isinstance(create_sms_sender(config), TwilioSmsSender)
