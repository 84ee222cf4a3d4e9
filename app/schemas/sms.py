"""
app/schemas/sms.py

Purpose: SMS request and response schemas
"""

from pydantic import BaseModel
from typing import Optional


class SendRequest(BaseModel):
    """
    Inbound send request. Fields stay optional so that absent parameters
    are reported by the send workflow as MISSING_PARAMETER.
    """
    destination: Optional[str] = None
    sender_label: Optional[str] = None
    body: Optional[str] = None


class SmsSendResult(BaseModel):
    """
    Success payload returned by GET /api/sms.
    """
    success: bool = True
    message: str
    messageId: str
    recipient: str
    sender: str
    timestamp: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str
    provider: str
    provider_configured: bool
    cooldown_entries: int
