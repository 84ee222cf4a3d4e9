"""
utils/constants.py

Purpose: Centralized static content

- User-facing response messages
- Twilio error code classification
- Safe provider error messages

(Prevents hardcoding across the codebase)
"""

from app.core.exceptions import ProviderErrorKind

# ============================================================
# RESPONSES
# ============================================================

SMS_SENT_MESSAGE = "SMS sent successfully"

# Characters of the message body kept in send logs
LOG_BODY_PREVIEW_LENGTH = 40

APP_NAME = "SMS Gateway"
APP_VERSION = "1.0.0"

# ============================================================
# PROVIDER ERRORS
# ============================================================

# https://www.twilio.com/docs/api/errors
TWILIO_ERROR_KINDS = {
    21211: ProviderErrorKind.INVALID_NUMBER,       # Invalid 'To' Phone Number
    21265: ProviderErrorKind.INVALID_NUMBER,       # 'To' number cannot be a Short Code
    21408: ProviderErrorKind.REGION_UNSUPPORTED,   # Permission to send an SMS has not been enabled for the region
    21610: ProviderErrorKind.BLACKLISTED,          # Attempt to send to unsubscribed recipient
    21614: ProviderErrorKind.NOT_SMS_CAPABLE,      # 'To' number is not a valid mobile number
    21612: ProviderErrorKind.NOT_SMS_CAPABLE,      # 'To' number is not currently reachable via SMS
    21407: ProviderErrorKind.NOT_SMS_CAPABLE,      # This Phone Number type does not support SMS
    20003: ProviderErrorKind.AUTH_CONFIG_ERROR,    # Authentication Error
    20404: ProviderErrorKind.AUTH_CONFIG_ERROR,    # Resource not found (wrong account SID)
    21212: ProviderErrorKind.AUTH_CONFIG_ERROR,    # Invalid 'From' Phone Number
    21606: ProviderErrorKind.AUTH_CONFIG_ERROR,    # 'From' number is not a valid message-capable number
    21659: ProviderErrorKind.AUTH_CONFIG_ERROR,    # 'From' is not a Twilio phone number
    21660: ProviderErrorKind.AUTH_CONFIG_ERROR,    # Mismatch between 'From' number and the account
}

# HTTP statuses that point at our credentials rather than the recipient
AUTH_FAILURE_STATUSES = {401, 403}

PROVIDER_ERROR_MESSAGES = {
    ProviderErrorKind.INVALID_NUMBER: "Invalid phone number. Please check the number and try again.",
    ProviderErrorKind.REGION_UNSUPPORTED: "Sending SMS to this region is not supported.",
    ProviderErrorKind.BLACKLISTED: "This number has opted out of receiving messages.",
    ProviderErrorKind.NOT_SMS_CAPABLE: "This number cannot receive SMS messages.",
    ProviderErrorKind.AUTH_CONFIG_ERROR: "SMS service is not configured correctly. Please contact support.",
    ProviderErrorKind.UNKNOWN: "Failed to send SMS. Please try again later.",
}

PROVIDER_UNAVAILABLE_MESSAGE = "SMS service is temporarily unavailable. Please try again later."
