import asyncio

import pytest

from app.core.exceptions import (
    CooldownActiveError,
    InvalidFormatError,
    MessageTooLongError,
    MissingParameterError,
    ProviderErrorKind,
    ProviderRejectedError,
    ProviderUnavailableError,
    SenderTooLongError,
)
from app.schemas.sms import SendRequest
from app.services.sms_service import SmsService, classify_provider_error
from app.services.twilio_service import ProviderResult
from conftest import StubGateway


def make_service(gateway, cooldowns, **kwargs):
    return SmsService(gateway=gateway, cooldowns=cooldowns, from_number="+15005550006", **kwargs)


def send(service, phone="09171234567", sender="TEST", text="Hello"):
    return asyncio.run(service.send(SendRequest(destination=phone, sender_label=sender, body=text)))


def test_successful_send_commits_reservation(gateway, cooldowns):
    service = make_service(gateway, cooldowns)

    result = send(service)

    assert result.success
    assert result.messageId == "SM123"
    assert result.recipient == "+639171234567"
    assert result.sender == "TEST"
    assert result.timestamp
    assert "+639171234567" in cooldowns

    outbound = gateway.sent[0]
    assert outbound.to == "+639171234567"
    assert outbound.from_ == "+15005550006"
    assert outbound.body == "Hello"


@pytest.mark.parametrize("phone,sender,text", [
    (None, "TEST", "Hello"),
    ("09171234567", None, "Hello"),
    ("09171234567", "TEST", None),
    ("   ", "TEST", "Hello"),
    ("09171234567", "", "Hello"),
])
def test_missing_parameters_rejected_before_reservation(gateway, cooldowns, phone, sender, text):
    service = make_service(gateway, cooldowns)

    with pytest.raises(MissingParameterError):
        send(service, phone, sender, text)

    assert gateway.sent == []
    assert len(cooldowns) == 0


@pytest.mark.parametrize("phone,sender,text,error", [
    ("12345", "TEST", "Hello", InvalidFormatError),
    ("09171234567", "TEST", "x" * 161, MessageTooLongError),
    ("09171234567", "TWELVE_CHARS", "Hello", SenderTooLongError),
])
def test_validation_errors_leave_no_state(gateway, cooldowns, phone, sender, text, error):
    service = make_service(gateway, cooldowns)

    with pytest.raises(error):
        send(service, phone, sender, text)

    assert gateway.sent == []
    assert len(cooldowns) == 0


def test_generic_mode_skips_sender_length_check(gateway, cooldowns):
    service = make_service(gateway, cooldowns, validation_mode="generic")

    result = send(service, phone="+14155552671", sender="A_LONG_SENDER_NAME")

    assert result.recipient == "+14155552671"


def test_second_send_within_cooldown_is_denied(gateway, cooldowns, clock):
    service = make_service(gateway, cooldowns)
    send(service)

    clock.advance(4)
    with pytest.raises(CooldownActiveError) as exc_info:
        send(service, phone="0917-123-4567")

    assert exc_info.value.remaining_seconds == 6
    assert exc_info.value.status_code == 429
    assert len(gateway.sent) == 1


def test_provider_rejection_rolls_back_reservation(cooldowns):
    gateway = StubGateway(ProviderResult(success=False, error_code=21610, http_status=400, error="unsubscribed"))
    service = make_service(gateway, cooldowns)

    with pytest.raises(ProviderRejectedError) as exc_info:
        send(service)

    assert exc_info.value.kind == ProviderErrorKind.BLACKLISTED
    assert "unsubscribed" not in exc_info.value.message
    assert "+639171234567" not in cooldowns


def test_provider_outage_rolls_back_reservation(cooldowns):
    gateway = StubGateway(ProviderResult(success=False, http_status=503, error="down", unavailable=True))
    service = make_service(gateway, cooldowns)

    with pytest.raises(ProviderUnavailableError):
        send(service)

    assert len(cooldowns) == 0


def test_gateway_exception_rolls_back_reservation(cooldowns):
    gateway = StubGateway(error=RuntimeError("socket closed"))
    service = make_service(gateway, cooldowns)

    with pytest.raises(ProviderUnavailableError) as exc_info:
        send(service)

    assert "socket closed" not in exc_info.value.message
    assert len(cooldowns) == 0


def test_retry_after_failure_is_allowed_immediately(cooldowns):
    gateway = StubGateway(ProviderResult(success=False, error_code=30001, http_status=400, error="queue overflow"))
    service = make_service(gateway, cooldowns)

    with pytest.raises(ProviderRejectedError):
        send(service)

    gateway.result = ProviderResult(success=True, message_id="SM999")
    assert send(service).messageId == "SM999"


def test_reservation_is_held_while_provider_call_is_pending(cooldowns):
    class SlowGateway(StubGateway):
        async def send(self, message):
            await asyncio.sleep(0.05)
            return await super().send(message)

    gateway = SlowGateway()
    service = make_service(gateway, cooldowns)

    async def send_twice():
        request = SendRequest(destination="09171234567", sender_label="TEST", body="Hello")
        return await asyncio.gather(service.send(request), service.send(request), return_exceptions=True)

    results = asyncio.run(send_twice())

    assert sum(1 for r in results if isinstance(r, CooldownActiveError)) == 1
    assert len(gateway.sent) == 1


@pytest.mark.parametrize("result,kind", [
    (ProviderResult(success=False, error_code=21211), ProviderErrorKind.INVALID_NUMBER),
    (ProviderResult(success=False, error_code=21408), ProviderErrorKind.REGION_UNSUPPORTED),
    (ProviderResult(success=False, error_code=21610), ProviderErrorKind.BLACKLISTED),
    (ProviderResult(success=False, error_code=21614), ProviderErrorKind.NOT_SMS_CAPABLE),
    (ProviderResult(success=False, error_code=20003), ProviderErrorKind.AUTH_CONFIG_ERROR),
    (ProviderResult(success=False, http_status=401), ProviderErrorKind.AUTH_CONFIG_ERROR),
    (ProviderResult(success=False, error_code=12345, http_status=400), ProviderErrorKind.UNKNOWN),
    (ProviderResult(success=False), ProviderErrorKind.UNKNOWN),
])
def test_classify_provider_error(result, kind):
    assert classify_provider_error(result) == kind
