"""
Provider Package
================

Access to the external telecom billing API.

Main Components:
----------------
- client.py: header building, the outbound GET, field projection

Usage:
------
    from billproxy.provider import create_async_client, fetch_bill
    async with create_async_client(settings) as client:
        bill = await fetch_bill(client, "5551234567")
"""

from .client import (
    BILL_FIELDS,
    create_async_client,
    create_sync_client,
    fetch_bill,
    fetch_bill_sync,
    normalize_phone,
    project_bill,
    read_bill_response,
)

__all__ = [
    "BILL_FIELDS",
    "create_async_client",
    "create_sync_client",
    "fetch_bill",
    "fetch_bill_sync",
    "normalize_phone",
    "project_bill",
    "read_bill_response",
]
