"""
app/services/sms_service.py

Purpose: SMS send workflow

- Validates the request (presence, phone format, lengths)
- Reserves the destination's cooldown slot before calling the provider
- Keeps the reservation on success, rolls it back on failure
- Classifies provider errors into safe, user-facing messages

A send attempt moves through:
    Received -> Validated -> Reserved -> ProviderCalled -> Committed | RolledBack
Failed sends are never retried here.
"""

from typing import Optional

from app.core.exceptions import (
    CooldownActiveError,
    MissingParameterError,
    ProviderErrorKind,
    ProviderRejectedError,
    ProviderUnavailableError,
)
from app.core.logging import get_logger
from app.schemas.sms import SendRequest, SmsSendResult
from app.services.cooldown_service import CooldownStore
from app.services.twilio_service import OutboundMessage, ProviderResult, SmsGateway
from utils.constants import (
    AUTH_FAILURE_STATUSES,
    LOG_BODY_PREVIEW_LENGTH,
    PROVIDER_ERROR_MESSAGES,
    PROVIDER_UNAVAILABLE_MESSAGE,
    SMS_SENT_MESSAGE,
    TWILIO_ERROR_KINDS,
)
from utils.time_utils import utc_timestamp
from utils.validation_utils import (
    PhoneValidationMode,
    normalize_phone_number,
    validate_message_body,
    validate_sender_label,
)

logger = get_logger(__name__)


def classify_provider_error(result: ProviderResult) -> ProviderErrorKind:
    """
    Maps a failed provider result to a ProviderErrorKind.

    Twilio error codes take precedence; 401/403 without a known code
    still point at our own credentials.
    """
    if result.error_code is not None and result.error_code in TWILIO_ERROR_KINDS:
        return TWILIO_ERROR_KINDS[result.error_code]
    if result.http_status in AUTH_FAILURE_STATUSES:
        return ProviderErrorKind.AUTH_CONFIG_ERROR
    return ProviderErrorKind.UNKNOWN


def preview(text: str, length: int = LOG_BODY_PREVIEW_LENGTH) -> str:
    return text if len(text) <= length else text[:length] + "…"


class SmsService:
    """
    Orchestrates a single SMS send attempt.
    """

    def __init__(
        self,
        gateway: SmsGateway,
        cooldowns: CooldownStore,
        from_number: Optional[str],
        validation_mode: PhoneValidationMode = "regional",
        country_code: str = "63",
        mobile_prefix: str = "9",
        max_message_length: int = 160,
        max_sender_length: int = 11
    ):
        self.gateway = gateway
        self.cooldowns = cooldowns
        self.from_number = from_number
        self.validation_mode = validation_mode
        self.country_code = country_code
        self.mobile_prefix = mobile_prefix
        self.max_message_length = max_message_length
        self.max_sender_length = max_sender_length

    def validate(self, request: SendRequest) -> str:
        """
        Checks presence and format of every field.

        Returns:
            Normalized destination number
        """
        if not (request.destination or "").strip() or not (request.sender_label or "").strip() or not request.body:
            raise MissingParameterError()

        destination = normalize_phone_number(
            request.destination,
            mode=self.validation_mode,
            country_code=self.country_code,
            mobile_prefix=self.mobile_prefix
        )
        validate_message_body(request.body, self.max_message_length)
        if self.validation_mode == "regional":
            validate_sender_label(request.sender_label, self.max_sender_length)

        return destination

    async def send(self, request: SendRequest) -> SmsSendResult:
        """
        Validates, reserves the cooldown slot, and hands the message to the provider.

        Raises:
            MissingParameterError, InvalidFormatError, MessageTooLongError,
            SenderTooLongError: request rejected before any state change
            CooldownActiveError: destination is still cooling down
            ProviderRejectedError, ProviderUnavailableError: send failed,
                reservation rolled back
        """
        destination = self.validate(request)

        decision = self.cooldowns.check_and_reserve(destination)
        if not decision.allowed:
            logger.info(
                f"Cooldown active, {decision.remaining_seconds}s remaining",
                extra={"phone": destination}
            )
            raise CooldownActiveError(decision.remaining_seconds)

        # Slot is reserved from here on; every failure path must roll it back.
        message = OutboundMessage(
            body=request.body,
            from_=self.from_number or request.sender_label,
            to=destination
        )

        try:
            result = await self.gateway.send(message)
        except Exception as e:
            self.cooldowns.rollback(destination)
            logger.error(
                f"SMS gateway failed: {e}",
                extra={"phone": destination},
                exc_info=True
            )
            raise ProviderUnavailableError(PROVIDER_UNAVAILABLE_MESSAGE) from e

        timestamp = utc_timestamp()

        if not result.success:
            self.cooldowns.rollback(destination)
            self._raise_provider_failure(result, destination, request.body, timestamp)

        logger.info(
            f"SMS sent: {preview(request.body)!r}",
            extra={
                "phone": destination,
                "sender": request.sender_label,
                "message_id": result.message_id,
                "timestamp": timestamp
            }
        )

        return SmsSendResult(
            success=True,
            message=SMS_SENT_MESSAGE,
            messageId=result.message_id or "",
            recipient=destination,
            sender=request.sender_label,
            timestamp=timestamp
        )

    def _raise_provider_failure(self, result: ProviderResult, destination: str, body: str, timestamp: str):
        if result.unavailable:
            logger.error(
                f"SMS provider unavailable: {result.error}",
                extra={"phone": destination, "error_code": result.error_code, "timestamp": timestamp}
            )
            raise ProviderUnavailableError(PROVIDER_UNAVAILABLE_MESSAGE)

        kind = classify_provider_error(result)
        logger.error(
            f"SMS rejected ({kind.value}): {result.error} - {preview(body)!r}",
            extra={"phone": destination, "error_code": result.error_code, "timestamp": timestamp}
        )
        raise ProviderRejectedError(kind, PROVIDER_ERROR_MESSAGES[kind])
