"""
Errors raised while looking up a bill.

Each error knows the HTTP status and JSON body the proxy answers with;
the CLI maps all of them to a non-zero exit.
"""

from typing import Any, Dict


class BillProxyError(Exception):
    """Unexpected local failure. Answered with a generic 500."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ProviderError(BillProxyError):
    """
    The provider answered with a non-2xx status.

    Attributes:
        status_code: Provider's HTTP status, forwarded unchanged
        details: Raw provider error body (parsed JSON or text)
    """

    message = "Provider request failed"

    def __init__(self, status_code: int, details: Any = None):
        super().__init__()
        self.status_code = status_code
        self.details = details

    def __str__(self) -> str:
        return f"{self.message} (HTTP {self.status_code})"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}


class ProviderUnavailableError(BillProxyError):
    """The provider could not be reached (timeout, connection refused)."""

    message = "Failed to reach billing provider"


class InvalidPhoneError(BillProxyError):
    """The phone number is blank."""

    status_code = 400
    message = "Phone number cannot be empty"
