"""
API module - FastAPI routers for the payment relay.

Usage:
    from gigconnect.api import api_router
    app.include_router(api_router)
"""

from gigconnect.api.routes import api_router

__all__ = ["api_router"]
