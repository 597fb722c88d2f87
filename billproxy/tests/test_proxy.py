"""
Unit Tests for Proxy Routes
============================

Tests for billproxy/proxy/routes.py

Test Coverage:
--------------
1. Successful lookup returns exactly the whitelisted fields
2. Missing last_payment renders as null
3. Provider error status and body are forwarded
4. Timeouts, network errors and unexpected errors become a generic 500
5. Client headers are not forwarded to the provider
6. Blank phone numbers are rejected with a 400
7. Lifespan opens and closes the shared provider client

Run tests:
----------
    pytest billproxy/tests/test_proxy.py -v
"""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from fastapi import status
from fastapi.testclient import TestClient
from httpx import ConnectError, Response, TimeoutException

from billproxy.main import create_application
from billproxy.provider import create_async_client


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mock_provider_client():
    """Create mock provider HTTP client"""
    return AsyncMock()


@pytest.fixture
def app(mock_provider_client):
    """Create test FastAPI application"""
    app = create_application()

    mock_app_state = Mock()
    mock_app_state.provider_client = mock_provider_client
    app.state.app_state = mock_app_state

    return app


@pytest.fixture
def client(app):
    """Create test client"""
    return TestClient(app)


def make_response(status_code, body=None, text=""):
    """Build a mock provider response"""
    response = Mock(spec=Response)
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("No JSON body")
    else:
        response.json.return_value = body
    response.text = text
    return response


# ============================================================================
# Success Tests
# ============================================================================

def test_bill_returns_only_whitelisted_fields(client, mock_provider_client, provider_bill):
    """Test that extra provider fields are dropped"""
    mock_provider_client.get = AsyncMock(return_value=make_response(200, provider_bill))

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "phone": "5551234567",
        "total_due": 42.5,
        "due_date": "2024-07-01",
        "last_payment": "2024-06-01",
    }


def test_bill_calls_provider_bill_path(client, mock_provider_client, provider_bill):
    """Test that the provider is called with the bill path for the phone"""
    mock_provider_client.get = AsyncMock(return_value=make_response(200, provider_bill))

    client.get("/bill/5551234567")

    call_args = mock_provider_client.get.call_args
    assert call_args.args[0] == "/bills/5551234567"


def test_bill_encodes_phone_in_provider_path(client, mock_provider_client, provider_bill):
    """Test that a leading + is encoded rather than passed raw"""
    mock_provider_client.get = AsyncMock(return_value=make_response(200, provider_bill))

    client.get("/bill/+15551234567")

    assert mock_provider_client.get.call_args.args[0] == "/bills/%2B15551234567"


def test_bill_missing_last_payment_is_null(client, mock_provider_client, provider_bill):
    """Test that a missing last_payment renders as null"""
    del provider_bill["last_payment"]
    mock_provider_client.get = AsyncMock(return_value=make_response(200, provider_bill))

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["last_payment"] is None
    assert set(response.json()) == {"phone", "total_due", "due_date", "last_payment"}


def test_bill_missing_phone_falls_back_to_requested(client, mock_provider_client):
    """Test that the requested phone is used when the provider omits it"""
    mock_provider_client.get = AsyncMock(return_value=make_response(200, {
        "total_due": 10,
        "due_date": "2024-07-01",
    }))

    response = client.get("/bill/5550000000")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["phone"] == "5550000000"


def test_client_headers_not_forwarded(client, mock_provider_client, provider_bill):
    """Test that inbound headers never reach the provider call"""
    mock_provider_client.get = AsyncMock(return_value=make_response(200, provider_bill))

    client.get("/bill/5551234567", headers={"Authorization": "Bearer caller-token"})

    call_args = mock_provider_client.get.call_args
    assert "headers" not in call_args.kwargs


# ============================================================================
# Provider Error Tests
# ============================================================================

def test_provider_404_forwarded(client, mock_provider_client):
    """Test that provider status code and JSON error body are forwarded"""
    error_body = {"code": "SUBSCRIBER_NOT_FOUND", "message": "Unknown phone number"}
    mock_provider_client.get = AsyncMock(return_value=make_response(404, error_body))

    response = client.get("/bill/5550000000")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {
        "error": "Provider request failed",
        "details": error_body,
    }


def test_provider_401_forwarded(client, mock_provider_client):
    """Test that provider auth failures are forwarded, not remapped"""
    mock_provider_client.get = AsyncMock(
        return_value=make_response(401, {"message": "Invalid API key"})
    )

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["details"] == {"message": "Invalid API key"}


def test_provider_503_text_body_forwarded(client, mock_provider_client):
    """Test that a non-JSON error body is forwarded as text"""
    mock_provider_client.get = AsyncMock(
        return_value=make_response(503, text="Service Unavailable")
    )

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {
        "error": "Provider request failed",
        "details": "Service Unavailable",
    }


def test_provider_error_not_retried(client, mock_provider_client):
    """Test that a provider 5xx is not retried"""
    mock_provider_client.get = AsyncMock(return_value=make_response(500, {"message": "boom"}))

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert mock_provider_client.get.call_count == 1


# ============================================================================
# Generic Failure Tests
# ============================================================================

def test_provider_timeout_is_generic_500(client, mock_provider_client):
    """Test handling of provider timeout"""
    mock_provider_client.get = AsyncMock(side_effect=TimeoutException("Timeout"))

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert set(response.json()) == {"error"}


def test_provider_connection_refused_is_generic_500(client, mock_provider_client):
    """Test handling of provider connection failure"""
    mock_provider_client.get = AsyncMock(side_effect=ConnectError("Connection refused"))

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert set(response.json()) == {"error"}


def test_unexpected_error_is_generic_500(client, mock_provider_client):
    """Test that an unexpected exception is not leaked to the caller"""
    mock_provider_client.get = AsyncMock(side_effect=RuntimeError("secret internals"))

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error"}


def test_non_object_success_body_is_generic_500(client, mock_provider_client):
    """Test that a 200 with a list body is treated as an unexpected failure"""
    mock_provider_client.get = AsyncMock(return_value=make_response(200, ["not", "a", "bill"]))

    response = client.get("/bill/5551234567")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error"}


def test_uninitialised_provider_client_is_500():
    """Test that a missing provider client answers 500 instead of crashing"""
    app = create_application()
    mock_app_state = Mock()
    mock_app_state.provider_client = None
    app.state.app_state = mock_app_state

    response = TestClient(app).get("/bill/5551234567")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error"}


# ============================================================================
# Phone Validation Tests
# ============================================================================

def test_blank_phone_rejected_without_provider_call(client, mock_provider_client):
    """Test that a whitespace-only phone is a 400 and never reaches the provider"""
    mock_provider_client.get = AsyncMock()

    response = client.get("/bill/%20")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Phone number cannot be empty"}
    mock_provider_client.get.assert_not_called()


def test_phone_whitespace_stripped(client, mock_provider_client, provider_bill):
    """Test that surrounding whitespace is stripped before the provider call"""
    mock_provider_client.get = AsyncMock(return_value=make_response(200, provider_bill))

    client.get("/bill/%205551234567%20")

    assert mock_provider_client.get.call_args.args[0] == "/bills/5551234567"


# ============================================================================
# System Endpoint Tests
# ============================================================================

def test_health_check(client):
    """Test health endpoint"""
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"
    assert response.json()["service"] == "bill-proxy"


def test_root_lists_bill_endpoint(client):
    """Test root endpoint metadata"""
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["endpoints"]["bill"] == "/bill/{phone}"


# ============================================================================
# Lifespan and Real Client Tests
# ============================================================================

def test_lifespan_opens_and_closes_provider_client():
    """Test that startup creates the shared client and shutdown releases it"""
    app = create_application()

    with TestClient(app) as test_client:
        provider_client = app.state.app_state.provider_client
        assert isinstance(provider_client, httpx.AsyncClient)
        assert str(provider_client.base_url) == "https://provider.test/v1/"
        assert test_client.get("/health").status_code == status.HTTP_200_OK

    assert app.state.app_state.provider_client is None
    assert provider_client.is_closed


def test_bill_through_real_provider_client(mock_settings, provider_bill):
    """Test the full path through an httpx client backed by a mock transport"""
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=provider_bill)

    app = create_application()
    app.state.app_state.provider_client = create_async_client(
        mock_settings, httpx.MockTransport(handler)
    )

    response = TestClient(app).get("/bill/5551234567")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "phone": "5551234567",
        "total_due": 42.5,
        "due_date": "2024-07-01",
        "last_payment": "2024-06-01",
    }
    assert seen["url"] == "https://provider.test/v1/bills/5551234567"
    assert seen["auth"] == "Bearer test-api-key"


def test_unusual_field_types_pass_through(mock_settings):
    """Test that provider field types are forwarded rather than rejected"""
    def handler(request):
        return httpx.Response(200, json={
            "phone": "5551234567",
            "total_due": {"amount": 5, "currency": "USD"},
            "due_date": 20240701,
        })

    app = create_application()
    app.state.app_state.provider_client = create_async_client(
        mock_settings, httpx.MockTransport(handler)
    )

    response = TestClient(app).get("/bill/5551234567")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["total_due"] == {"amount": 5, "currency": "USD"}
    assert response.json()["due_date"] == 20240701
