"""
Proxy Package
=============

This package implements the bill lookup endpoint that forwards requests
to the external billing provider.

Main Components:
----------------
- routes.py: FastAPI router with the GET /bill/{phone} endpoint

Usage:
------
    from billproxy.proxy import proxy_router
    app.include_router(proxy_router)
"""

from .routes import proxy_router

__all__ = ["proxy_router"]
