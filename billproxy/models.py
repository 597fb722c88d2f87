"""
Data Models Module

Pydantic models for the bill lookup responses served by the proxy
and printed by the command-line client.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Bill Models
# ============================================================================

class BillRecord(BaseModel):
    """
    Subset of the provider's billing response surfaced to callers.

    Only these four fields are ever returned; anything else the provider
    sends is dropped.
    """
    phone: str = Field(..., description="Phone number the bill belongs to")
    total_due: Optional[Any] = Field(None, description="Amount currently due, as the provider sends it")
    due_date: Optional[Any] = Field(None, description="Payment due date, as the provider sends it")
    last_payment: Optional[Any] = Field(None, description="Most recent payment, if any")


# ============================================================================
# Health Check Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Error body returned by the proxy."""
    error: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(None, description="Raw provider error body")
