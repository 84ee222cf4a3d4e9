from enum import Enum
from typing import Optional, Any, Dict


class ProviderErrorKind(str, Enum):
    """
    Classification of a provider-side rejection.
    """
    INVALID_NUMBER = "INVALID_NUMBER"
    REGION_UNSUPPORTED = "REGION_UNSUPPORTED"
    BLACKLISTED = "BLACKLISTED"
    NOT_SMS_CAPABLE = "NOT_SMS_CAPABLE"
    AUTH_CONFIG_ERROR = "AUTH_CONFIG_ERROR"
    UNKNOWN = "UNKNOWN"


class SmsGatewayError(Exception):
    """
    Base exception for the SMS gateway application.
    """
    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.headers = headers
        super().__init__(self.message)


class MissingParameterError(SmsGatewayError):
    """
    Raised when phone, sender or text is absent.
    """
    def __init__(self, message: str = "Missing required parameters: phone, sender, text", details: Optional[Any] = None):
        super().__init__(message, code="MISSING_PARAMETER", status_code=400, details=details)


class InvalidFormatError(SmsGatewayError):
    """
    Raised when the destination number does not match the numbering rule.
    """
    def __init__(self, message: str = "Invalid phone number format", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_FORMAT", status_code=400, details=details)


class MessageTooLongError(SmsGatewayError):
    def __init__(self, max_length: int = 160):
        super().__init__(
            f"Message too long (max {max_length} characters)",
            code="MESSAGE_TOO_LONG",
            status_code=400,
            details={"max_length": max_length},
        )


class SenderTooLongError(SmsGatewayError):
    def __init__(self, max_length: int = 11):
        super().__init__(
            f"Sender name too long (max {max_length} characters)",
            code="SENDER_TOO_LONG",
            status_code=400,
            details={"max_length": max_length},
        )


class CooldownActiveError(SmsGatewayError):
    """
    Raised when the destination received an accepted send inside the cooldown window.
    """
    def __init__(self, remaining_seconds: int):
        self.remaining_seconds = remaining_seconds
        super().__init__(
            f"Please wait {remaining_seconds} seconds before sending another SMS to this number",
            code="COOLDOWN_ACTIVE",
            status_code=429,
            details={"remaining_seconds": remaining_seconds},
            headers={"Retry-After": str(remaining_seconds)},
        )


class RateLimitedError(SmsGatewayError):
    """
    Raised when a client address exceeded its send attempts for the current window.
    """
    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(
            f"Too many SMS requests. Please try again in {retry_after} seconds",
            code="RATE_LIMITED",
            status_code=429,
            details={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


class ProviderRejectedError(SmsGatewayError):
    """
    Raised when the SMS provider refused the message.
    The message is a safe, user-facing text; raw provider output is only logged.
    """
    def __init__(self, kind: ProviderErrorKind, message: str):
        self.kind = kind
        super().__init__(message, code="PROVIDER_REJECTED", status_code=500, details={"reason": kind.value})


class ProviderUnavailableError(SmsGatewayError):
    """
    Raised when the SMS provider could not be reached or failed internally.
    """
    def __init__(self, message: str = "SMS service is temporarily unavailable. Please try again later."):
        super().__init__(message, code="PROVIDER_UNAVAILABLE", status_code=500)
