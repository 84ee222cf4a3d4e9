"""
app/api/sms.py

Purpose: SMS send endpoint

- Applies the per-address rate limit before anything else
- Maps query parameters onto a SendRequest
- Hands control to the SMS send workflow
"""

from fastapi import APIRouter, Depends, Query, Request
from typing import Optional

from app.core.exceptions import RateLimitedError
from app.core.logging import get_logger
from app.schemas.response import ErrorResponse
from app.schemas.sms import SendRequest, SmsSendResult
from app.services.sms_service import SmsService

logger = get_logger(__name__)
router = APIRouter()


def get_client_address(request: Request) -> str:
    """
    Client address used as the rate-limit key.
    Honors X-Forwarded-For only when the app sits behind a trusted proxy.
    """
    if request.app.state.settings.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request) -> str:
    """
    Counts this attempt against the caller's window.

    Raises:
        RateLimitedError: when the window is exhausted
    """
    client = get_client_address(request)
    decision = request.app.state.rate_limiter.hit(client)
    if not decision.allowed:
        raise RateLimitedError(decision.retry_after_seconds)
    return client


def get_sms_service(request: Request) -> SmsService:
    return request.app.state.sms_service


@router.get(
    "/sms",
    response_model=SmsSendResult,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def send_sms(
    phone: Optional[str] = Query(None, description="Destination number (09171234567 or +639171234567)"),
    sender: Optional[str] = Query(None, description="Sender label"),
    text: Optional[str] = Query(None, description="Message body, max 160 characters"),
    client: str = Depends(enforce_rate_limit),
    sms_service: SmsService = Depends(get_sms_service),
):
    """
    Sends a single SMS.

    Query params:
        phone: Destination number
        sender: Sender label shown in the response
        text: Message body

    Returns:
        SmsSendResult with the provider message id
    """
    logger.info(f"📨 SMS request for {phone}", extra={"client": client})

    return await sms_service.send(
        SendRequest(destination=phone, sender_label=sender, body=text)
    )
