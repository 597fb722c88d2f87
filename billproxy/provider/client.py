"""
Provider Client - Billing API Access
====================================

Performs the single outbound call this service exists for:

    GET {PROVIDER_BASE_URL}/bills/{phone}
    Authorization: Bearer {PROVIDER_API_KEY}

and projects the provider's JSON body down to the whitelisted bill fields.

Both an async flavour (used by the HTTP service) and a sync flavour (used by
the check_bill CLI) are provided. They share header building, response
handling and field projection.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..errors import BillProxyError, InvalidPhoneError, ProviderError, ProviderUnavailableError
from ..models import BillRecord

logger = logging.getLogger(__name__)

BILL_FIELDS = ("phone", "total_due", "due_date", "last_payment")


# ============================================================================
# Request Building
# ============================================================================

def build_provider_headers(api_key: str) -> Dict[str, str]:
    """
    Build headers for provider requests.

    Args:
        api_key: Provider API key

    Returns:
        Headers dict with Bearer authorization
    """
    return {
        "Authorization": f"Bearer {api_key}",
        "Accept": "application/json",
    }


def normalize_phone(phone: str) -> str:
    """
    Strip surrounding whitespace from a phone number.

    Raises:
        InvalidPhoneError: If nothing is left
    """
    phone = phone.strip()
    if not phone:
        raise InvalidPhoneError()
    return phone


def bill_path(phone: str) -> str:
    """Provider path for a phone's bill, phone encoded as one path segment"""
    return f"/bills/{quote(phone, safe='')}"


def _client_kwargs(settings) -> Dict[str, Any]:
    return {
        "base_url": settings.provider_base_url_str,
        "headers": build_provider_headers(settings.PROVIDER_API_KEY),
        "timeout": httpx.Timeout(settings.PROVIDER_TIMEOUT_SECONDS),
    }


def create_async_client(settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the shared async client used by the HTTP service"""
    return httpx.AsyncClient(transport=transport, **_client_kwargs(settings))


def create_sync_client(settings, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """Create a blocking client for one-shot use (CLI)"""
    return httpx.Client(transport=transport, **_client_kwargs(settings))


# ============================================================================
# Response Handling
# ============================================================================

def parse_error_body(response: httpx.Response) -> Any:
    """
    Extract the provider's error body.

    Returns parsed JSON when the body is JSON, the raw text otherwise,
    or None for an empty body.
    """
    try:
        return response.json()
    except ValueError:
        return response.text or None


def project_bill(payload: Dict[str, Any], phone: str) -> BillRecord:
    """
    Select the whitelisted bill fields from a provider payload.

    Args:
        payload: Provider JSON body
        phone: Phone number that was requested, used when the
               provider omits it

    Returns:
        BillRecord with exactly the whitelisted fields
    """
    selected = {field: payload.get(field) for field in BILL_FIELDS}
    if selected["phone"] is None:
        selected["phone"] = phone
    else:
        selected["phone"] = str(selected["phone"])
    return BillRecord(**selected)


def read_bill_response(response: httpx.Response, phone: str) -> BillRecord:
    """
    Turn a provider response into a BillRecord.

    Args:
        response: Provider HTTP response
        phone: Phone number that was requested

    Returns:
        Projected bill record

    Raises:
        ProviderError: Provider answered with a non-2xx status
        BillProxyError: Provider answered 2xx with an unusable body
    """
    if not 200 <= response.status_code < 300:
        logger.warning(
            f"Provider returned error status: {response.status_code}",
            extra={"status_code": response.status_code},
        )
        raise ProviderError(response.status_code, parse_error_body(response))

    try:
        payload = response.json()
    except ValueError:
        logger.error("Provider returned a non-JSON success body")
        raise BillProxyError()

    if not isinstance(payload, dict):
        logger.error(f"Provider returned unexpected body type: {type(payload).__name__}")
        raise BillProxyError()

    return project_bill(payload, phone)


# ============================================================================
# Fetching
# ============================================================================

async def fetch_bill(client: httpx.AsyncClient, phone: str) -> BillRecord:
    """
    Fetch a bill from the provider (async).

    Args:
        client: Provider client (see create_async_client)
        phone: Phone number to look up

    Returns:
        Projected bill record

    Raises:
        ProviderError: Provider answered with a non-2xx status
        ProviderUnavailableError: Timeout or network failure
    """
    try:
        response = await client.get(bill_path(phone))
    except httpx.TimeoutException:
        logger.error("Provider request timeout")
        raise ProviderUnavailableError()
    except httpx.TransportError as e:
        logger.error(f"Provider network error: {e}")
        raise ProviderUnavailableError()

    return read_bill_response(response, phone)


def fetch_bill_sync(client: httpx.Client, phone: str) -> BillRecord:
    """Blocking counterpart of fetch_bill"""
    try:
        response = client.get(bill_path(phone))
    except httpx.TimeoutException:
        logger.error("Provider request timeout")
        raise ProviderUnavailableError()
    except httpx.TransportError as e:
        logger.error(f"Provider network error: {e}")
        raise ProviderUnavailableError()

    return read_bill_response(response, phone)
