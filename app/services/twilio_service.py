"""
app/services/twilio_service.py

Purpose: SMS provider gateways

- Sends SMS messages via the Twilio REST API
- Simulated gateway for local development without credentials
- Narrow SmsGateway interface so the send workflow never sees an HTTP client
"""

import asyncio
import secrets
import string
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from app.core.config import Settings
from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OutboundMessage:
    body: str
    from_: str
    to: str


@dataclass(frozen=True)
class ProviderResult:
    """
    Outcome of a provider call.

    success=True carries message_id; otherwise error_code/error describe the
    rejection, and unavailable=True marks transport or provider-side outages.
    """
    success: bool
    message_id: Optional[str] = None
    status: Optional[str] = None
    error_code: Optional[int] = None
    http_status: Optional[int] = None
    error: Optional[str] = None
    unavailable: bool = False


class SmsGateway(Protocol):
    name: str

    async def send(self, message: OutboundMessage) -> ProviderResult:
        ...

    def is_configured(self) -> bool:
        ...


class TwilioSmsGateway:
    """Gateway for sending SMS messages via Twilio"""

    name = "twilio"

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        api_base_url: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.base_url = f"{api_base_url.rstrip('/')}/Accounts/{account_sid}"
        self.timeout = timeout
        self._transport = transport

    async def send(self, message: OutboundMessage) -> ProviderResult:
        """
        Sends an SMS via Twilio

        Args:
            message: Body, originating number and normalized recipient

        Returns:
            ProviderResult with the Twilio message SID on success
        """
        url = f"{self.base_url}/Messages.json"

        data = {
            "From": message.from_,
            "To": message.to,
            "Body": message.body
        }

        logger.info(f"📤 Sending Twilio SMS to {message.to}")

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    data=data,
                    auth=(self.account_sid or "", self.auth_token or "")
                )
        except httpx.TimeoutException:
            logger.error("Twilio API timeout", extra={"phone": message.to})
            return ProviderResult(success=False, error="Twilio API timeout", unavailable=True)
        except httpx.HTTPError as e:
            logger.error(f"Twilio API unreachable: {e}", extra={"phone": message.to})
            return ProviderResult(success=False, error=str(e), unavailable=True)

        if response.is_success:
            # Any 2xx means Twilio accepted the message, readable body or not
            result = _parse_json_body(response)
            logger.info(f"✅ SMS accepted: SID={result.get('sid')}")

            return ProviderResult(
                success=True,
                message_id=result.get("sid"),
                status=result.get("status")
            )

        error_code, error_text = _parse_twilio_error(response)
        logger.error(
            f"❌ Twilio API error: {response.status_code} - {error_text}",
            extra={"phone": message.to, "error_code": error_code}
        )

        return ProviderResult(
            success=False,
            error_code=error_code,
            http_status=response.status_code,
            error=error_text,
            unavailable=response.status_code >= 500
        )

    def is_configured(self) -> bool:
        """Check if Twilio credentials are present"""
        return bool(
            self.account_sid
            and self.auth_token
            and self.account_sid != "your_twilio_sid"
        )


def _parse_json_body(response: httpx.Response) -> dict:
    """Decodes a JSON object body; anything else yields an empty dict."""
    try:
        payload = response.json()
    except ValueError:
        logger.warning(f"Unreadable Twilio response body (HTTP {response.status_code})")
        return {}

    return payload if isinstance(payload, dict) else {}


def _parse_twilio_error(response: httpx.Response):
    """Extracts (code, message) from a Twilio error body; tolerates non-JSON bodies."""
    try:
        payload = response.json()
    except ValueError:
        return None, response.text

    if not isinstance(payload, dict):
        return None, response.text

    code = payload.get("code")
    try:
        code = int(code) if code is not None else None
    except (TypeError, ValueError):
        code = None

    return code, payload.get("message") or response.text


class SimulatedSmsGateway:
    """
    Stand-in gateway used when no provider credentials are configured.
    Always succeeds after an artificial delay.
    """

    name = "simulated"

    def __init__(self, delay_seconds: float = 1.0):
        self.delay_seconds = delay_seconds

    async def send(self, message: OutboundMessage) -> ProviderResult:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        message_id = "msg_" + "".join(
            secrets.choice(string.ascii_lowercase + string.digits) for _ in range(9)
        )
        logger.info(f"📤 Simulated SMS to {message.to}: {message_id}")

        return ProviderResult(success=True, message_id=message_id, status="simulated")

    def is_configured(self) -> bool:
        return True


def build_gateway(config: Settings) -> SmsGateway:
    """
    Picks Twilio when credentials are configured, the simulated gateway otherwise.
    """
    if config.twilio_configured:
        return TwilioSmsGateway(
            account_sid=config.TWILIO_ACCOUNT_SID,
            auth_token=config.TWILIO_AUTH_TOKEN,
            api_base_url=config.TWILIO_API_BASE_URL,
            timeout=config.TWILIO_TIMEOUT_SECONDS
        )

    logger.warning("⚠️ Twilio is not configured, SMS sends will be simulated")
    return SimulatedSmsGateway(delay_seconds=config.SIMULATED_SEND_DELAY_SECONDS)
