"""
Proxy Routes - Bill Lookup Forwarding
=====================================

This module implements the bill lookup endpoint that forwards a phone
number to the billing provider and returns a whitelisted subset of the
provider's response.

Request Model:
--------------
1. Client calls GET /bill/{phone}
2. Proxy calls the provider with its own API key (client headers are
   not forwarded)
3. Provider body is projected to {phone, total_due, due_date, last_payment}

Error Model:
------------
- Provider non-2xx: provider status code, {"error", "details"} body
- Timeout / network / anything else: 500, {"error"} body

Endpoints:
----------
- GET /bill/{phone}: Look up the current bill for a phone number
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Request

from ..errors import BillProxyError
from ..models import BillRecord, ErrorResponse
from ..provider import fetch_bill, normalize_phone

logger = logging.getLogger(__name__)

# Create router
proxy_router = APIRouter()


# ============================================================================
# Dependencies
# ============================================================================

def get_provider_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency to get the provider HTTP client from app state.

    Args:
        request: FastAPI request object

    Returns:
        Configured httpx.AsyncClient for provider communication

    Raises:
        BillProxyError: If the client has not been initialised
    """
    app_state = getattr(request.app.state, "app_state", None)
    client = getattr(app_state, "provider_client", None)
    if client is None:
        logger.error("Provider client not initialised")
        raise BillProxyError()

    return client


# ============================================================================
# Proxy Endpoints
# ============================================================================

@proxy_router.get(
    "/bill/{phone}",
    response_model=BillRecord,
    responses={
        500: {"model": ErrorResponse},
        "4XX": {"model": ErrorResponse},
    },
)
async def get_bill(
    phone: str,
    provider_client: httpx.AsyncClient = Depends(get_provider_client),
):
    """
    Look up the current bill for a phone number.

    Args:
        phone: Phone number path parameter
        provider_client: HTTP client for provider communication

    Returns:
        BillRecord with exactly phone, total_due, due_date, last_payment

    Raises:
        ProviderError: Provider answered non-2xx (status forwarded)
        InvalidPhoneError: Phone is blank (400)
        BillProxyError: Network or unexpected failure (500)
    """
    try:
        phone = normalize_phone(phone)
        logger.info("Fetching bill from provider", extra={"phone_length": len(phone)})
        bill = await fetch_bill(provider_client, phone)

    except BillProxyError:
        # Already mapped to a status and body
        raise

    except Exception as e:
        logger.error(f"Unexpected error in get_bill: {e}", exc_info=True)
        raise BillProxyError()

    return bill
