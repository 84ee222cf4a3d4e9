import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import CooldownActiveError, ProviderUnavailableError
from app.main import create_app
from conftest import StubGateway, make_settings


@pytest.fixture
def error_app():
    return create_app(settings=make_settings(), gateway=StubGateway())


def test_404_not_found(error_app):
    with TestClient(error_app) as client:
        response = client.get("/non-existent-route")

    assert response.status_code == 404
    data = response.json()
    assert "error" in data
    assert "code" in data
    assert data["code"] == "HTTP_ERROR"


def test_validation_error_structure(error_app):
    from pydantic import BaseModel

    class Item(BaseModel):
        name: str
        price: int

    @error_app.post("/test-validation")
    def create_item(item: Item):
        return item

    with TestClient(error_app) as client:
        response = client.post("/test-validation", json={"name": "foo", "price": "invalid"})

    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert "details" in data
    assert len(data["details"]) > 0


def test_custom_exception_carries_headers(error_app):
    @error_app.get("/test-cooldown-error")
    def trigger_cooldown_error():
        raise CooldownActiveError(remaining_seconds=4)

    with TestClient(error_app) as client:
        response = client.get("/test-cooldown-error")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "4"
    data = response.json()
    assert data["code"] == "COOLDOWN_ACTIVE"
    assert data["details"] == {"remaining_seconds": 4}


def test_provider_unavailable_maps_to_500(error_app):
    @error_app.get("/test-provider-error")
    def trigger_provider_error():
        raise ProviderUnavailableError()

    with TestClient(error_app) as client:
        response = client.get("/test-provider-error")

    assert response.status_code == 500
    assert response.json()["code"] == "PROVIDER_UNAVAILABLE"


def test_unhandled_exception_hidden_in_production():
    production_app = create_app(settings=make_settings(
        ENVIRONMENT="production",
        TWILIO_ACCOUNT_SID="AC123",
        TWILIO_AUTH_TOKEN="secret"
    ), gateway=StubGateway())

    @production_app.get("/test-crash")
    def crash():
        raise RuntimeError("database password is hunter2")

    with TestClient(production_app, raise_server_exceptions=False) as client:
        response = client.get("/test-crash")

    assert response.status_code == 500
    data = response.json()
    assert data["code"] == "INTERNAL_ERROR"
    assert "hunter2" not in data["error"]
