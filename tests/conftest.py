import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.services.cooldown_service import CooldownStore
from app.services.twilio_service import OutboundMessage, ProviderResult


class FakeClock:
    """Manually advanced clock for deterministic window tests."""

    def __init__(self, start: float = 1000.0):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class StubGateway:
    """Records outbound messages and replies with a canned result."""

    name = "stub"

    def __init__(self, result: ProviderResult = None, error: Exception = None):
        self.result = result or ProviderResult(success=True, message_id="SM123", status="queued")
        self.error = error
        self.sent = []

    async def send(self, message: OutboundMessage) -> ProviderResult:
        self.sent.append(message)
        if self.error is not None:
            raise self.error
        return self.result

    def is_configured(self) -> bool:
        return True


def make_settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "development",
        "TWILIO_FROM_NUMBER": "+15005550006",
        "RATE_LIMIT_MAX_REQUESTS": 100,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def cooldowns(clock):
    return CooldownStore(cooldown_seconds=10, retention_seconds=3600, clock=clock)


@pytest.fixture
def client(gateway, clock):
    app = create_app(settings=make_settings(), gateway=gateway, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
