"""
Bill Proxy

Proxies mobile bill lookups to a telecom billing provider.

Modules:
- config: environment configuration
- provider: outbound provider calls and field projection
- proxy: GET /bill/{phone} endpoint
- main: FastAPI application factory
- check_bill: command-line client
"""

__version__ = "1.0.0"
